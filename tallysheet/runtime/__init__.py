"""Runtime infrastructure for tallysheet.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Settings via get_settings(), load_settings(), Settings

The HTTP app (``runtime.server``) and store construction
(``runtime.storage``) are imported explicitly by their callers.

Usage:
    from tallysheet.runtime import get_logger, get_settings

    logger = get_logger(__name__)
    settings = get_settings()
    print(settings.backend, settings.data_dir)
"""

from tallysheet.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from tallysheet.runtime.settings import (
    Settings,
    get_settings,
    load_settings,
    reset_settings,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Settings
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
]
