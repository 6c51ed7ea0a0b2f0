"""Centralized settings for tallysheet.

Values come from (lowest to highest precedence) built-in defaults, an
optional TOML file and ``TALLYSHEET_*`` environment variables.

Example ``tallysheet.toml``::

    [ledger]
    backend = "xlsx"
    data_dir = "/srv/receipts"
    total_policy = "text"
    trace = true
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from tallysheet.domain.duplicates import TotalPolicy

BACKENDS = ("csv", "xlsx", "memory")
DEFAULT_CONFIG_NAME = "tallysheet.toml"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Runtime configuration for the ledger service."""

    backend: str = "csv"
    data_dir: Path = field(default_factory=lambda: Path("ledger"))
    total_policy: TotalPolicy = TotalPolicy.TEXT
    trace: bool = False

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown ledger backend {self.backend!r}; expected one of {', '.join(BACKENDS)}")
        self.data_dir = Path(self.data_dir).expanduser()

    # --- Storage paths ---
    @property
    def receipts_csv(self) -> Path:
        """Main ledger table for the csv backend."""
        return self.data_dir / "receipts.csv"

    @property
    def debug_log_csv(self) -> Path:
        """Diagnostic decision table for the csv backend."""
        return self.data_dir / "debug_log.csv"

    @property
    def workbook(self) -> Path:
        """Workbook holding both tables for the xlsx backend."""
        return self.data_dir / "receipts.xlsx"


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _load_toml(config_path: Path) -> dict[str, Any]:
    """Read the ``[ledger]`` table from a TOML file, or {} if the file is absent."""
    if not config_path.exists():
        return {}
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return dict(data.get("ledger", {}))


def load_settings(config_path: Path | str | None = None, environ: dict[str, str] | None = None) -> Settings:
    """
    Build settings from the TOML file and environment.

    Args:
        config_path: TOML path override. Defaults to $TALLYSHEET_CONFIG or ./tallysheet.toml.
        environ: Environment mapping, defaults to os.environ.

    Returns:
        A validated Settings instance.
    """
    env = os.environ if environ is None else environ
    if config_path is None:
        config_path = env.get("TALLYSHEET_CONFIG", DEFAULT_CONFIG_NAME)

    values = _load_toml(Path(config_path))

    overrides = {
        "backend": env.get("TALLYSHEET_BACKEND"),
        "data_dir": env.get("TALLYSHEET_DATA_DIR"),
        "total_policy": env.get("TALLYSHEET_TOTAL_POLICY"),
        "trace": env.get("TALLYSHEET_TRACE"),
    }
    values.update({key: value for key, value in overrides.items() if value})

    settings = Settings()
    if "backend" in values:
        settings = replace(settings, backend=str(values["backend"]).lower())
    if "data_dir" in values:
        settings = replace(settings, data_dir=Path(values["data_dir"]))
    if "total_policy" in values:
        settings = replace(settings, total_policy=TotalPolicy(str(values["total_policy"]).lower()))
    if "trace" in values:
        settings = replace(settings, trace=_parse_bool(values["trace"]))
    return settings


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide Settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
