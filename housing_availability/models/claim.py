"""Pydantic model for a claim (reservation) against one property granularity."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from housing_availability.models.claim_level import ClaimLevel, ClaimLevelMapper


class Claim(BaseModel):
    """Active or historical hold on exactly one granularity of one property.

    Exactly one of property_id / sub_room_id / unit_id is expected to be
    populated, matching ``level``. Records that break this rule still load;
    ``target_id`` resolves to None for them and the engine never matches
    them against anything.
    """

    id: str = Field(description="Claim identifier")
    level: ClaimLevel = Field(description="Granularity the claim is pinned to")
    property_id: Optional[str] = Field(None, alias="propertyId")
    sub_room_id: Optional[str] = Field(None, alias="subRoomId")
    unit_id: Optional[str] = Field(None, alias="unitId")
    status: str = Field(description="Reservation status, e.g. 'confirmed' or 'cancelled'")
    expires_at: Optional[datetime] = Field(
        None,
        alias="expiresAt",
        description="Expiry of a pending hold, if any",
    )
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @field_validator("level", mode="before")
    @classmethod
    def parse_level(cls, v):
        """Accept storage level names such as 'bed' or 'apartment'."""
        level = ClaimLevelMapper.map_level(v)
        if level is None:
            raise ValueError(f"Unknown reservation level: {v!r}")
        return level

    @field_validator("property_id", "sub_room_id", "unit_id", mode="before")
    @classmethod
    def blank_id_to_none(cls, v):
        """Treat empty strings from storage as absent ids."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def populated_ids(self) -> dict[ClaimLevel, str]:
        ids = {
            ClaimLevel.PROPERTY: self.property_id,
            ClaimLevel.SUBROOM: self.sub_room_id,
            ClaimLevel.UNIT: self.unit_id,
        }
        return {level: value for level, value in ids.items() if value is not None}

    @property
    def target_id(self) -> Optional[str]:
        """Id of the claimed target, or None when the record is ambiguous."""
        populated = self.populated_ids
        if len(populated) != 1:
            return None
        return populated.get(self.level)

    @property
    def is_well_formed(self) -> bool:
        return self.target_id is not None

    def is_expired(self, as_of: Optional[datetime]) -> bool:
        """Check whether the hold has lapsed at ``as_of``.

        Without an evaluation instant, or without an expiry, a claim never
        counts as expired.
        """
        if as_of is None or self.expires_at is None:
            return False
        return as_utc(self.expires_at) <= as_utc(as_of)


def as_utc(value: datetime) -> datetime:
    # Naive timestamps from storage are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
