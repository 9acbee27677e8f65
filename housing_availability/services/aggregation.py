"""Fold an AvailabilityState into counts and display summaries."""

from housing_availability.models.availability import (
    AvailabilityCounts,
    AvailabilityState,
    AvailabilitySummary,
)
from housing_availability.models.hierarchy import Property


def count_available(property: Property, state: AvailabilityState) -> AvailabilityCounts:
    """Count reservable sub-rooms and units.

    A unit is counted only when its state entry is True and its own
    ``available`` flag is True. The engine already folds the flag in; this
    is a cross-check against a state built elsewhere.
    """
    available_sub_rooms = sum(
        1 for sub_room in property.sub_rooms if state.can_reserve_sub_room.get(sub_room.id, False)
    )
    available_units = sum(
        1
        for _, unit in property.iter_units()
        if state.can_reserve_unit.get(unit.id, False) and unit.available
    )
    return AvailabilityCounts(
        available_sub_rooms=available_sub_rooms,
        available_units=available_units,
        total_sub_rooms=len(property.sub_rooms),
        total_units=property.total_units,
    )


def summarize_availability(property: Property, state: AvailabilityState) -> AvailabilitySummary:
    """Build the listing-card summary for one property.

    Fully available: every enabled granularity has all of its targets free
    (units disabled by an operator do not count against this). Fully booked:
    nothing at all can be reserved. Anything else is partial.
    """
    counts = count_available(property, state)
    operable_units = sum(1 for _, unit in property.iter_units() if unit.available)

    is_fully_booked = (
        not state.can_reserve_whole_property
        and counts.available_sub_rooms == 0
        and counts.available_units == 0
    )
    is_fully_available = (
        not is_fully_booked
        and (not property.whole_property_reservable or state.can_reserve_whole_property)
        and (not property.sub_room_reservable or counts.available_sub_rooms == counts.total_sub_rooms)
        and (not property.unit_reservable or counts.available_units == operable_units)
    )

    if is_fully_booked:
        status_text = "Fully booked"
    elif is_fully_available:
        status_text = "Fully available"
    elif property.unit_reservable and counts.total_units:
        status_text = f"{counts.available_units} of {counts.total_units} beds available"
    elif property.sub_room_reservable and counts.total_sub_rooms:
        status_text = f"{counts.available_sub_rooms} of {counts.total_sub_rooms} rooms available"
    else:
        status_text = "Partially available"

    return AvailabilitySummary(
        counts=counts,
        can_reserve_whole_property=state.can_reserve_whole_property,
        is_fully_available=is_fully_available,
        is_partially_available=not is_fully_booked and not is_fully_available,
        is_fully_booked=is_fully_booked,
        status_text=status_text,
    )
