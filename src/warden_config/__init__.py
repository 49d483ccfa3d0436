"""Shared application configuration package."""

from .durations import DURATION_UNITS, parse_duration
from .logging_setup import configure_logging
from .settings import (
    Settings,
    clear_settings_cache,
    get_config_dir,
    get_settings,
)

__all__ = [
    "DURATION_UNITS",
    "Settings",
    "clear_settings_cache",
    "configure_logging",
    "get_config_dir",
    "get_settings",
    "parse_duration",
]
