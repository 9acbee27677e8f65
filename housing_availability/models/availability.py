"""Pydantic models for computed availability results."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AvailabilityState(BaseModel):
    """Point-in-time snapshot of what can currently be newly reserved.

    Never persisted; recomputed on demand from a hierarchy and claim set.
    Every sub-room and unit of the property appears as a key.
    """

    property_id: str = Field(alias="propertyId")
    can_reserve_whole_property: bool = Field(alias="canReserveWholeProperty")
    can_reserve_sub_room: dict[str, bool] = Field(
        default_factory=dict,
        alias="canReserveSubRoom",
    )
    can_reserve_unit: dict[str, bool] = Field(
        default_factory=dict,
        alias="canReserveUnit",
    )
    reason: Optional[str] = Field(
        None,
        description="Why the whole property is locked, when it is",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_dict(self) -> dict:
        """Convert to camelCase keys for API consumers."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AvailabilityCounts(BaseModel):
    """Aggregate counts folded from an AvailabilityState."""

    available_sub_rooms: int = Field(alias="availableSubRooms")
    available_units: int = Field(alias="availableUnits")
    total_sub_rooms: int = Field(default=0, alias="totalSubRooms")
    total_units: int = Field(default=0, alias="totalUnits")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class AvailabilitySummary(BaseModel):
    """Display summary for listing cards ("3 of 5 beds available")."""

    counts: AvailabilityCounts
    can_reserve_whole_property: bool = Field(alias="canReserveWholeProperty")
    is_fully_available: bool = Field(alias="isFullyAvailable")
    is_partially_available: bool = Field(alias="isPartiallyAvailable")
    is_fully_booked: bool = Field(alias="isFullyBooked")
    status_text: str = Field(alias="statusText")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ClaimDecision(BaseModel):
    """Result of the write-time guard for one proposed claim."""

    allowed: bool
    reason: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def __bool__(self) -> bool:
        return self.allowed
