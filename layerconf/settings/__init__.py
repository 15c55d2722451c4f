"""Engine and logging settings loading."""

from .engine import (
    EngineSettings,
    LoggingSettings,
    get_engine_settings,
    get_logging_settings,
)


__all__ = [
    "EngineSettings",
    "LoggingSettings",
    "get_engine_settings",
    "get_logging_settings",
]
