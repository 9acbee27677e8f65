"""Hierarchy, claim and availability models."""

from housing_availability.models.availability import (
    AvailabilityCounts,
    AvailabilityState,
    AvailabilitySummary,
    ClaimDecision,
)
from housing_availability.models.claim import Claim
from housing_availability.models.claim_level import ClaimLevel, ClaimLevelMapper
from housing_availability.models.claim_status import (
    DEFAULT_ACTIVE_STATUSES,
    DEFAULT_PENDING_STATUSES,
    ClaimStatus,
)
from housing_availability.models.conflict import ConflictInfo
from housing_availability.models.hierarchy import Property, SubRoom, Unit
from housing_availability.models.policy import AvailabilityPolicy

__all__ = [
    "Property",
    "SubRoom",
    "Unit",
    "Claim",
    "ClaimLevel",
    "ClaimLevelMapper",
    "ClaimStatus",
    "DEFAULT_ACTIVE_STATUSES",
    "DEFAULT_PENDING_STATUSES",
    "AvailabilityPolicy",
    "AvailabilityState",
    "AvailabilityCounts",
    "AvailabilitySummary",
    "ClaimDecision",
    "ConflictInfo",
]
