"""Pydantic model for pending-hold conflict warnings."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConflictInfo(BaseModel):
    """Whether another user currently holds a target in a pending state."""

    has_conflict: bool = Field(alias="hasConflict")
    conflict_type: str = Field(
        default="none",
        alias="conflictType",
        description="Status of the conflicting hold (e.g. 'pending_payment'), or 'none'",
    )
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")
    time_remaining: Optional[str] = Field(None, alias="timeRemaining")
    message: str = ""
    claim_id: Optional[str] = Field(None, alias="claimId")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def none(cls) -> "ConflictInfo":
        """No conflicting hold."""
        return cls(has_conflict=False)
