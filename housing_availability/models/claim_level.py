"""Claim granularity levels and mapping from storage level names."""

from enum import Enum
from typing import Optional


class ClaimLevel(str, Enum):
    """Granularity a claim is pinned to.

    - PROPERTY: the whole property
    - SUBROOM: one sub-room (bedroom) and every unit inside it
    - UNIT: a single sleeping unit (bed)
    """
    PROPERTY = "property"
    SUBROOM = "subroom"
    UNIT = "unit"


class ClaimLevelMapper:
    """Maps reservation level names found in storage rows to ClaimLevel."""

    LEVEL_MAPPING = {
        "property": ClaimLevel.PROPERTY,
        "apartment": ClaimLevel.PROPERTY,
        "whole": ClaimLevel.PROPERTY,
        "subroom": ClaimLevel.SUBROOM,
        "sub_room": ClaimLevel.SUBROOM,
        "bedroom": ClaimLevel.SUBROOM,
        "room": ClaimLevel.SUBROOM,
        "unit": ClaimLevel.UNIT,
        "bed": ClaimLevel.UNIT,
    }

    @staticmethod
    def map_level(raw_level: object) -> Optional[ClaimLevel]:
        """Map a raw level value to a ClaimLevel.

        Mapping logic:
        - "apartment" / "whole" / "property" → PROPERTY
        - "bedroom" / "room" / "sub_room" / "subroom" → SUBROOM
        - "bed" / "unit" → UNIT

        Unlike status codes there is no safe default here: an unknown level
        cannot be pinned to any target, so None is returned.

        Args:
            raw_level: Level value from a reservation row (str or ClaimLevel)

        Returns:
            Matching ClaimLevel, or None if unknown
        """
        if isinstance(raw_level, ClaimLevel):
            return raw_level
        if not isinstance(raw_level, str):
            return None
        normalized = raw_level.strip().lower().replace("-", "_")
        return ClaimLevelMapper.LEVEL_MAPPING.get(normalized)
