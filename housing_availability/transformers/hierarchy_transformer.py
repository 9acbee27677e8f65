"""Transformer for loading stored property rows into the unit hierarchy model."""

from typing import Any

from pydantic import ValidationError
from structlog import get_logger

from housing_availability.models.hierarchy import Property

logger = get_logger(__name__)

# Storage field names → hierarchy model field names
PROPERTY_FIELD_MAPPING = {
    "enableFullApartmentReservation": "whole_property_reservable",
    "enable_full_apartment_reservation": "whole_property_reservable",
    "enableBedroomReservation": "sub_room_reservable",
    "enable_bedroom_reservation": "sub_room_reservable",
    "enableBedReservation": "unit_reservable",
    "enable_bed_reservation": "unit_reservable",
    "bedrooms": "sub_rooms",
}

SUB_ROOM_FIELD_MAPPING = {
    "apartmentId": "property_id",
    "apartment_id": "property_id",
    "beds": "units",
}

UNIT_FIELD_MAPPING = {
    "bedroomId": "sub_room_id",
    "bedroom_id": "sub_room_id",
}


class HierarchyLoadError(ValueError):
    """Raised when a stored property row cannot form a valid hierarchy."""

    pass


def _rename_keys(row: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    return {mapping.get(key, key): value for key, value in row.items()}


class HierarchyTransformer:
    """Builds Property hierarchies from stored rows."""

    @staticmethod
    def _normalize_unit(unit: Any, sub_room_id: Any) -> Any:
        if not isinstance(unit, dict):
            return unit
        normalized = _rename_keys(unit, UNIT_FIELD_MAPPING)
        if normalized.get("sub_room_id") is None and normalized.get("subRoomId") is None:
            normalized["sub_room_id"] = sub_room_id
        return normalized

    @staticmethod
    def _normalize_sub_room(sub_room: Any, property_id: Any) -> Any:
        if not isinstance(sub_room, dict):
            return sub_room
        normalized = _rename_keys(sub_room, SUB_ROOM_FIELD_MAPPING)
        if normalized.get("property_id") is None and normalized.get("propertyId") is None:
            normalized["property_id"] = property_id
        units = normalized.get("units") or []
        if isinstance(units, list):
            normalized["units"] = [
                HierarchyTransformer._normalize_unit(unit, normalized.get("id")) for unit in units
            ]
        return normalized

    @staticmethod
    def transform(row: dict[str, Any] | Property) -> Property:
        """Transform a stored property row into a Property hierarchy.

        Accepts snake_case, camelCase and the storage names used by listing
        rows (``enableBedReservation``, ``bedrooms``, ``beds``). Missing
        back-references are filled in from the parent.

        Args:
            row: Property row with nested sub-rooms and units (or a Property)

        Returns:
            Validated Property

        Raises:
            HierarchyLoadError: If the row cannot form a valid hierarchy
        """
        if isinstance(row, Property):
            return row
        if not isinstance(row, dict):
            logger.error("Property row is not a mapping", row_type=type(row).__name__)
            raise HierarchyLoadError(
                f"Invalid property hierarchy: expected a mapping, got {type(row).__name__}"
            )

        normalized = _rename_keys(row, PROPERTY_FIELD_MAPPING)
        if "subRooms" in normalized and "sub_rooms" not in normalized:
            normalized["sub_rooms"] = normalized.pop("subRooms")
        sub_rooms = normalized.get("sub_rooms") or []
        if isinstance(sub_rooms, list):
            normalized["sub_rooms"] = [
                HierarchyTransformer._normalize_sub_room(sub_room, normalized.get("id"))
                for sub_room in sub_rooms
            ]

        try:
            prop = Property.model_validate(normalized)
        except ValidationError as e:
            logger.error(
                "Failed to parse property hierarchy",
                property_id=row.get("id"),
                error=str(e),
            )
            raise HierarchyLoadError(
                f"Invalid property hierarchy for {row.get('id')!r}: {str(e)}"
            ) from e

        if not prop.any_granularity_enabled:
            logger.warning(
                "Property has no reservable granularity",
                property_id=prop.id,
            )

        return prop

    @staticmethod
    def transform_batch(rows: list[dict[str, Any] | Property]) -> list[Property]:
        """Transform many property rows, skipping the ones that fail.

        Args:
            rows: Stored property rows

        Returns:
            Successfully loaded properties, in input order
        """
        logger.info("Loading property hierarchies", total_rows=len(rows))

        properties = []
        failed_count = 0
        for row in rows:
            try:
                properties.append(HierarchyTransformer.transform(row))
            except HierarchyLoadError:
                failed_count += 1
                continue

        logger.info(
            "Property hierarchy loading complete",
            total_rows=len(rows),
            loaded=len(properties),
            failed=failed_count,
        )
        return properties
