"""Availability services."""

from housing_availability.services.aggregation import count_available, summarize_availability
from housing_availability.services.availability_engine import (
    can_create_claim,
    check_claim,
    compute_availability,
    compute_availability_for_all,
    partition_claims_by_property,
)
from housing_availability.services.conflicts import find_pending_conflict

__all__ = [
    "compute_availability",
    "compute_availability_for_all",
    "partition_claims_by_property",
    "can_create_claim",
    "check_claim",
    "count_available",
    "summarize_availability",
    "find_pending_conflict",
]
