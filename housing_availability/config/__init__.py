"""Configuration package."""

from housing_availability.config.logging import (
    configure_library_defaults,
    configure_logging,
    get_logger,
)
from housing_availability.config.settings import (
    AvailabilitySettings,
    LoggingSettings,
    Settings,
    settings,
)

__all__ = [
    "settings",
    "Settings",
    "AvailabilitySettings",
    "LoggingSettings",
    "configure_library_defaults",
    "configure_logging",
    "get_logger",
]
