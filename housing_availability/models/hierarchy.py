"""Pydantic models for the reservable unit hierarchy of one property."""

from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field


class Unit(BaseModel):
    """Smallest reservable thing: one sleeping slot (bed)."""

    id: str = Field(description="Unit identifier")
    sub_room_id: Optional[str] = Field(
        None,
        alias="subRoomId",
        description="Owning sub-room identifier (back-reference only)",
    )
    available: bool = Field(
        default=True,
        description="Operator availability flag, independent of reservation state",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class SubRoom(BaseModel):
    """Addressable group of units inside a property (bedroom)."""

    id: str = Field(description="Sub-room identifier")
    property_id: Optional[str] = Field(
        None,
        alias="propertyId",
        description="Owning property identifier (back-reference only)",
    )
    units: list[Unit] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class Property(BaseModel):
    """Top-level reservable entity and its granularity switches."""

    id: str = Field(description="Property identifier")
    whole_property_reservable: bool = Field(
        default=False,
        alias="wholePropertyReservable",
        description="Whether the property may be reserved as a whole",
    )
    sub_room_reservable: bool = Field(
        default=False,
        alias="subRoomReservable",
        description="Whether individual sub-rooms may be reserved",
    )
    unit_reservable: bool = Field(
        default=False,
        alias="unitReservable",
        description="Whether individual units may be reserved",
    )
    sub_rooms: list[SubRoom] = Field(default_factory=list, alias="subRooms")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    def iter_units(self) -> Iterator[tuple[SubRoom, Unit]]:
        """Yield every (sub_room, unit) pair in hierarchy order."""
        for sub_room in self.sub_rooms:
            for unit in sub_room.units:
                yield sub_room, unit

    @property
    def sub_room_ids(self) -> set[str]:
        return {sub_room.id for sub_room in self.sub_rooms}

    @property
    def unit_ids(self) -> set[str]:
        return {unit.id for _, unit in self.iter_units()}

    def unit_owner(self) -> dict[str, str]:
        """Map each unit id to the id of the sub-room containing it."""
        return {unit.id: sub_room.id for sub_room, unit in self.iter_units()}

    @property
    def total_units(self) -> int:
        return sum(len(sub_room.units) for sub_room in self.sub_rooms)

    @property
    def any_granularity_enabled(self) -> bool:
        return (
            self.whole_property_reservable
            or self.sub_room_reservable
            or self.unit_reservable
        )
