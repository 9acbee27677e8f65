"""Transformer for loading stored reservation rows into claims."""

from typing import Any

from pydantic import ValidationError
from structlog import get_logger

from housing_availability.models.claim import Claim
from housing_availability.models.claim_level import ClaimLevel, ClaimLevelMapper

logger = get_logger(__name__)

# Storage field names → claim model field names
CLAIM_FIELD_MAPPING = {
    "reservationLevel": "level",
    "reservation_level": "level",
    "apartmentId": "property_id",
    "apartment_id": "property_id",
    "bedroomId": "sub_room_id",
    "bedroom_id": "sub_room_id",
    "bedId": "unit_id",
    "bed_id": "unit_id",
    "subRoomId": "sub_room_id",
    "unitId": "unit_id",
    "propertyId": "property_id",
}

OWN_ID_FIELD = {
    ClaimLevel.SUBROOM: "sub_room_id",
    ClaimLevel.UNIT: "unit_id",
}

# Ancestor ids that storage copies onto a claim row next to its own id
ANCESTOR_ID_FIELDS = {
    ClaimLevel.SUBROOM: ("property_id",),
    ClaimLevel.UNIT: ("property_id", "sub_room_id"),
}


class ClaimTransformer:
    """Builds claims from stored reservation rows.

    A bad row never aborts the load: it is logged as a data-quality warning
    and skipped.
    """

    @staticmethod
    def _normalize_row(row: dict[str, Any]) -> dict[str, Any]:
        """Rename storage fields and drop denormalized ancestor ids.

        Reservation rows keep the property id (and for beds, the bedroom id)
        next to the id they actually claim. Ancestor ids are dropped whenever
        the level's own id is present, so the claim carries exactly one
        target.
        """
        normalized = {CLAIM_FIELD_MAPPING.get(key, key): value for key, value in row.items()}

        level = ClaimLevelMapper.map_level(normalized.get("level"))
        if level is None or not normalized.get(OWN_ID_FIELD.get(level, "")):
            return normalized

        for ancestor_field in ANCESTOR_ID_FIELDS[level]:
            normalized.pop(ancestor_field, None)

        return normalized

    @staticmethod
    def transform_one(row: dict[str, Any] | Claim) -> Claim:
        """Transform one reservation row.

        Raises:
            ValueError: If the row is not a valid, unambiguous claim
        """
        if isinstance(row, Claim):
            claim = row
        elif not isinstance(row, dict):
            raise ValueError(f"Invalid reservation row: expected a mapping, got {type(row).__name__}")
        else:
            try:
                claim = Claim.model_validate(ClaimTransformer._normalize_row(row))
            except ValidationError as e:
                raise ValueError(f"Invalid reservation row: {str(e)}") from e

        if not claim.is_well_formed:
            raise ValueError(
                f"Ambiguous reservation {claim.id!r}: level {claim.level.value!r} "
                f"with ids {sorted(level.value for level in claim.populated_ids)}"
            )
        return claim

    @staticmethod
    def transform(rows: list[dict[str, Any] | Claim]) -> list[Claim]:
        """Transform reservation rows into claims.

        Args:
            rows: Reservation rows from storage (dicts or Claims)

        Returns:
            Valid claims, in input order
        """
        logger.info("Transforming reservations", total_rows=len(rows))

        claims = []
        skipped_count = 0
        for row in rows:
            try:
                claims.append(ClaimTransformer.transform_one(row))
            except ValueError as e:
                if isinstance(row, Claim):
                    row_id = row.id
                else:
                    row_id = row.get("id") if isinstance(row, dict) else None
                logger.warning(
                    "Skipping malformed reservation",
                    reservation_id=row_id,
                    error=str(e),
                )
                skipped_count += 1
                continue

        logger.info(
            "Reservation transformation complete",
            total_rows=len(rows),
            transformed=len(claims),
            skipped=skipped_count,
        )
        return claims
