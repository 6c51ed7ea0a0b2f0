"""Process-wide logging for tallysheet.

Every module logs through a child of the ``tallysheet`` logger:

    from tallysheet.runtime import get_logger
    logger = get_logger(__name__)

A single stderr handler is attached to the namespace logger the first time a
logger is requested. ``TALLYSHEET_LOG_LEVEL`` (DEBUG, INFO, WARNING, ERROR)
picks the starting level; ``tally --verbose`` switches to DEBUG at runtime.
"""

import logging
import os
import sys
from collections.abc import Mapping

NAMESPACE = "tallysheet"
LEVEL_ENV_VAR = "TALLYSHEET_LOG_LEVEL"
DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"

_ACCEPTED_LEVELS = ("DEBUG", "INFO", "WARNING", "WARN", "ERROR")

_handler: logging.Handler | None = None


def level_from_env(environ: Mapping[str, str] | None = None) -> int:
    """Return the level named by TALLYSHEET_LOG_LEVEL, or DEFAULT_LOG_LEVEL."""
    environ = os.environ if environ is None else environ
    name = environ.get(LEVEL_ENV_VAR, "").strip().upper()
    if name not in _ACCEPTED_LEVELS:
        return DEFAULT_LOG_LEVEL
    return logging.getLevelNamesMapping()[name]


def _formatter(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | None = None) -> None:
    """Attach the stderr handler to the namespace logger once per process."""
    global _handler

    if _handler is not None:
        return
    if level is None:
        level = level_from_env()

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(_formatter(level))
    package_logger = logging.getLogger(NAMESPACE)
    package_logger.addHandler(_handler)
    package_logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; names outside the namespace are nested under it."""
    configure_logging()
    if name != NAMESPACE and not name.startswith(NAMESPACE + "."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)


def set_log_level(level: int) -> None:
    """Change the namespace level, switching to the debug format at DEBUG."""
    configure_logging(level)
    logging.getLogger(NAMESPACE).setLevel(level)
    if _handler is not None:
        _handler.setFormatter(_formatter(level))
