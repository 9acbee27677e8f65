"""Application settings and configuration management."""
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from housing_availability.models.claim_status import (
    DEFAULT_ACTIVE_STATUSES,
    DEFAULT_PENDING_STATUSES,
)
from housing_availability.models.policy import AvailabilityPolicy


def _split_csv(value: object) -> object:
    """Allow comma-separated env values for status sets."""
    if isinstance(value, str):
        return [item.strip().lower() for item in value.split(",") if item.strip()]
    return value


class AvailabilitySettings(BaseSettings):
    """Availability engine configuration."""

    # Statuses that currently block a target
    active_statuses: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: sorted(DEFAULT_ACTIVE_STATUSES),
        min_length=1,
    )
    # Statuses treated as in-progress holds for conflict warnings
    pending_statuses: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: sorted(DEFAULT_PENDING_STATUSES),
    )
    unit_claims_lock_sub_room: bool = False
    batch_max_workers: int = Field(default=1, ge=1)

    model_config = SettingsConfigDict(env_prefix="AVAILABILITY_")

    @field_validator("active_statuses", "pending_statuses", mode="before")
    @classmethod
    def _split_statuses(cls, value: object) -> object:
        return _split_csv(value)

    def to_policy(self) -> AvailabilityPolicy:
        """Build the immutable policy consumed by the engine."""
        return AvailabilityPolicy(
            active_statuses=frozenset(self.active_statuses),
            pending_statuses=frozenset(self.pending_statuses),
            unit_claims_lock_sub_room=self.unit_claims_lock_sub_room,
        )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    # Sub-settings
    availability: AvailabilitySettings = AvailabilitySettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def default_policy(self) -> AvailabilityPolicy:
        """Policy built from the configured availability settings."""
        return self.availability.to_policy()


# Global settings instance
settings = Settings()
