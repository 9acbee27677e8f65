"""Immutable engine policy."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from housing_availability.models.claim_status import (
    DEFAULT_ACTIVE_STATUSES,
    DEFAULT_PENDING_STATUSES,
)


class AvailabilityPolicy(BaseModel):
    """Rules the availability engine applies to a claim set.

    Built from AvailabilitySettings in deployments; constructed directly in
    tests and by callers that redefine what counts as blocking.
    """

    active_statuses: frozenset[str] = Field(
        default=DEFAULT_ACTIVE_STATUSES,
        description="Claim statuses that currently block their target",
    )
    pending_statuses: frozenset[str] = Field(
        default=DEFAULT_PENDING_STATUSES,
        description="Claim statuses reported as in-progress holds",
    )
    unit_claims_lock_sub_room: bool = Field(
        default=False,
        description="Whether a claimed unit also blocks reserving its sub-room as a whole",
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("active_statuses", "pending_statuses", mode="before")
    @classmethod
    def _normalize_statuses(cls, value: object) -> object:
        """Store statuses lowercased so matching is case-insensitive."""
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(item).strip().lower() for item in value)
        return value

    def is_active(self, status: str | None) -> bool:
        """Check whether a claim status blocks availability (case-insensitive)."""
        if not status:
            return False
        return status.strip().lower() in self.active_statuses

    def is_pending(self, status: str | None) -> bool:
        """Check whether a claim status is an in-progress hold."""
        if not status:
            return False
        return status.strip().lower() in self.pending_statuses
