"""Multi-granularity housing availability engine."""

from housing_availability.config.logging import configure_library_defaults

__version__ = "0.1.0"

configure_library_defaults()
