"""envbind's own settings, read from the environment with ``bind``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .bind import bind
from .errors import EnvbindError
from .fields import var
from .sources import ChainSource, DotenvSource, EnvironSource

logger = logging.getLogger("envbind.settings")

LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}
LOG_FORMATS = {"console", "json"}


class SettingsError(EnvbindError):
    """Raised when settings fail validation."""


@dataclass
class Settings:
    log_level: str = var("ENVBIND_LOG_LEVEL", default="warning")
    log_format: str = var("ENVBIND_LOG_FORMAT", default="console")

    def validate(self) -> None:
        self.log_level = self.log_level.strip().lower()
        self.log_format = self.log_format.strip().lower()
        if self.log_level not in LOG_LEVELS:
            raise SettingsError(f"ENVBIND_LOG_LEVEL must be one of {sorted(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            raise SettingsError(f"ENVBIND_LOG_FORMAT must be one of {sorted(LOG_FORMATS)}")


def load_settings(dotenv_path: Path | str | None = None, source: Optional[Any] = None) -> Settings:
    """Read settings from ``source`` (default: the environment) and validate them.

    When ``dotenv_path`` is given, the ``.env`` file fills in variables the
    primary source does not set.
    """
    primary = source if source is not None else EnvironSource()
    if dotenv_path is not None:
        primary = ChainSource(primary, DotenvSource(dotenv_path))

    settings = bind(Settings(), primary)
    settings.validate()
    logger.debug(f"Settings loaded: level={settings.log_level} format={settings.log_format}")
    return settings


__all__ = ["LOG_FORMATS", "LOG_LEVELS", "Settings", "SettingsError", "load_settings"]
