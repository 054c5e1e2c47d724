"""Core utilities package."""

from .config import settings, get_settings, Settings
from .logging import get_logger, setup_logging
from .time import (
    ISO8601,
    TimestampParser,
    java_to_strptime,
    format_time_of_day,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "get_logger",
    "setup_logging",
    "ISO8601",
    "TimestampParser",
    "java_to_strptime",
    "format_time_of_day",
]
