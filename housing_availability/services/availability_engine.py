"""Multi-granularity availability engine.

A property can be claimed as a whole, per sub-room, or per unit. Claims at
one level lock the space they cover at every other level:

- a whole-property claim locks every sub-room and unit
- a sub-room claim locks its own units and the whole property
- a unit claim locks only that unit (and the whole property); siblings stay free

Everything here is pure: no I/O, no state kept between calls, output
independent of claim ordering. Callers load the hierarchy and claims, and
must still rely on storage-level exclusion to stop two concurrent writers
from both passing ``check_claim``.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from structlog import get_logger

from housing_availability.config.settings import settings
from housing_availability.models.availability import AvailabilityState, ClaimDecision
from housing_availability.models.claim import Claim
from housing_availability.models.claim_level import ClaimLevel, ClaimLevelMapper
from housing_availability.models.hierarchy import Property
from housing_availability.models.policy import AvailabilityPolicy

logger = get_logger(__name__)

REASON_PROPERTY_RESERVED = "Property is fully reserved"
REASON_PARTIALLY_RESERVED = "Part of the property is already reserved"
REASON_PROPERTY_DISABLED = "Whole-property reservation is not enabled"

LEVEL_LABELS = {
    ClaimLevel.PROPERTY: "property",
    ClaimLevel.SUBROOM: "sub-room",
    ClaimLevel.UNIT: "unit",
}


@dataclass
class ActiveClaims:
    """Currently blocking claims, bucketed by level and reduced to target ids."""

    property_claim_ids: set[str] = field(default_factory=set)
    sub_room_ids: set[str] = field(default_factory=set)
    unit_ids: set[str] = field(default_factory=set)
    ignored: int = 0

    @property
    def has_property_claim(self) -> bool:
        return bool(self.property_claim_ids)


def _resolve_policy(policy: Optional[AvailabilityPolicy]) -> AvailabilityPolicy:
    return policy if policy is not None else settings.default_policy()


def bucket_active_claims(
    claims: Iterable[Claim],
    policy: AvailabilityPolicy,
    as_of: Optional[datetime] = None,
) -> ActiveClaims:
    """Partition claims by level, keeping only those that currently block.

    Dropped: statuses outside the active set, holds expired at ``as_of``,
    and ambiguous records without a resolvable target. Several claims on the
    same target collapse into one entry.

    Args:
        claims: Claims relevant to one property
        policy: Active-status policy
        as_of: Optional evaluation instant for pending-hold expiry

    Returns:
        ActiveClaims with target ids per level
    """
    active = ActiveClaims()
    for claim in claims:
        if not policy.is_active(claim.status) or claim.is_expired(as_of):
            continue

        target_id = claim.target_id
        if target_id is None:
            active.ignored += 1
            continue

        if claim.level is ClaimLevel.PROPERTY:
            active.property_claim_ids.add(claim.id)
        elif claim.level is ClaimLevel.SUBROOM:
            active.sub_room_ids.add(target_id)
        else:
            active.unit_ids.add(target_id)

    return active


def compute_availability(
    property: Property,
    claims: Iterable[Claim],
    policy: Optional[AvailabilityPolicy] = None,
    as_of: Optional[datetime] = None,
) -> AvailabilityState:
    """Compute what can currently be newly reserved in one property.

    ``claims`` must already be filtered to this property. Claims pointing at
    sub-rooms or units absent from the hierarchy are ignored. A disabled
    granularity forces every entry at that level to False.

    Args:
        property: Fully populated unit hierarchy
        claims: Claims against this property, any status
        policy: Engine policy; defaults to the configured one
        as_of: Optional evaluation instant; holds expired by then do not block

    Returns:
        AvailabilityState with an entry for every sub-room and unit
    """
    policy = _resolve_policy(policy)
    active = bucket_active_claims(claims, policy, as_of)

    unit_owner = property.unit_owner()
    claimed_sub_rooms = active.sub_room_ids & property.sub_room_ids
    claimed_units = active.unit_ids & unit_owner.keys()
    property_locked = active.has_property_claim

    can_reserve_whole = (
        property.whole_property_reservable
        and not property_locked
        and not claimed_sub_rooms
        and not claimed_units
    )
    if property_locked:
        reason = REASON_PROPERTY_RESERVED
    elif claimed_sub_rooms or claimed_units:
        reason = REASON_PARTIALLY_RESERVED
    elif not property.whole_property_reservable:
        reason = REASON_PROPERTY_DISABLED
    else:
        reason = None

    sub_rooms_with_claimed_units = {unit_owner[unit_id] for unit_id in claimed_units}

    can_reserve_sub_room: dict[str, bool] = {}
    can_reserve_unit: dict[str, bool] = {}
    for sub_room in property.sub_rooms:
        sub_room_claimed = sub_room.id in claimed_sub_rooms
        sub_room_free = (
            property.sub_room_reservable
            and not property_locked
            and not sub_room_claimed
        )
        if policy.unit_claims_lock_sub_room and sub_room.id in sub_rooms_with_claimed_units:
            sub_room_free = False
        can_reserve_sub_room[sub_room.id] = sub_room_free

        for unit in sub_room.units:
            can_reserve_unit[unit.id] = (
                property.unit_reservable
                and not property_locked
                and not sub_room_claimed
                and unit.id not in claimed_units
                and unit.available
            )

    logger.debug(
        "Computed availability",
        property_id=property.id,
        property_locked=property_locked,
        claimed_sub_rooms=len(claimed_sub_rooms),
        claimed_units=len(claimed_units),
        ignored_claims=active.ignored,
    )

    return AvailabilityState(
        property_id=property.id,
        can_reserve_whole_property=can_reserve_whole,
        can_reserve_sub_room=can_reserve_sub_room,
        can_reserve_unit=can_reserve_unit,
        reason=reason,
    )


def check_claim(
    property: Property,
    existing_active_claims: Iterable[Claim],
    proposed_level: ClaimLevel | str,
    proposed_target_id: Optional[str] = None,
    policy: Optional[AvailabilityPolicy] = None,
    as_of: Optional[datetime] = None,
) -> ClaimDecision:
    """Decide whether a new claim may be written, with a refusal reason.

    Re-derives availability from the freshest claim set; run it as close to
    the insert as possible. It writes nothing.

    Args:
        property: Hierarchy of the property being claimed
        existing_active_claims: Current claims against the property
        proposed_level: Granularity of the new claim (ClaimLevel or level name)
        proposed_target_id: Sub-room or unit id; optional for property claims
        policy: Engine policy; defaults to the configured one
        as_of: Optional evaluation instant for pending-hold expiry

    Returns:
        ClaimDecision, truthy when allowed
    """
    level = ClaimLevelMapper.map_level(proposed_level)
    if level is None:
        return _refuse(property, proposed_level, proposed_target_id, "Invalid reservation level")

    label = LEVEL_LABELS[level]

    if level is ClaimLevel.PROPERTY:
        if proposed_target_id is not None and proposed_target_id != property.id:
            return _refuse(property, level, proposed_target_id, "Claim targets a different property")
    elif proposed_target_id is None:
        return _refuse(property, level, None, f"{label.capitalize()} ID required")

    state = compute_availability(property, existing_active_claims, policy=policy, as_of=as_of)

    if level is ClaimLevel.PROPERTY:
        allowed = state.can_reserve_whole_property
    elif level is ClaimLevel.SUBROOM:
        if proposed_target_id not in state.can_reserve_sub_room:
            return _refuse(property, level, proposed_target_id, "Sub-room not found in this property")
        allowed = state.can_reserve_sub_room[proposed_target_id]
    else:
        if proposed_target_id not in state.can_reserve_unit:
            return _refuse(property, level, proposed_target_id, "Unit not found in this property")
        allowed = state.can_reserve_unit[proposed_target_id]

    if not allowed:
        if level is ClaimLevel.PROPERTY:
            message = state.reason or "Full property reservation is not available"
        else:
            message = f"This {label} is not available for reservation"
        return _refuse(property, level, proposed_target_id, message)

    logger.debug(
        "Claim allowed",
        property_id=property.id,
        level=level.value,
        target_id=proposed_target_id,
    )
    return ClaimDecision(allowed=True)


def _refuse(
    property: Property,
    level: object,
    target_id: Optional[str],
    reason: str,
) -> ClaimDecision:
    logger.info(
        "Claim refused",
        property_id=property.id,
        level=getattr(level, "value", level),
        target_id=target_id,
        reason=reason,
    )
    return ClaimDecision(allowed=False, reason=reason)


def can_create_claim(
    property: Property,
    existing_active_claims: Iterable[Claim],
    proposed_level: ClaimLevel | str,
    proposed_target_id: Optional[str] = None,
    policy: Optional[AvailabilityPolicy] = None,
    as_of: Optional[datetime] = None,
) -> bool:
    """Write-time guard: True only if the proposed target is still free."""
    return check_claim(
        property,
        existing_active_claims,
        proposed_level,
        proposed_target_id,
        policy=policy,
        as_of=as_of,
    ).allowed


def partition_claims_by_property(
    properties: Iterable[Property],
    claims: Iterable[Claim],
) -> dict[str, list[Claim]]:
    """Group claims by the property they belong to.

    Property-level claims are matched on their property id; sub-room and
    unit claims through the hierarchy that contains their target. Ambiguous
    claims and claims matching no supplied property are dropped.

    Args:
        properties: Hierarchies to partition against
        claims: Full claim set, any status

    Returns:
        Mapping of property id to its claims (every property present)
    """
    properties = list(properties)
    partitions: dict[str, list[Claim]] = {prop.id: [] for prop in properties}
    sub_room_index: dict[str, str] = {}
    unit_index: dict[str, str] = {}
    for prop in properties:
        for sub_room in prop.sub_rooms:
            sub_room_index[sub_room.id] = prop.id
            for unit in sub_room.units:
                unit_index[unit.id] = prop.id

    dropped = 0
    for claim in claims:
        target_id = claim.target_id
        if target_id is None:
            dropped += 1
            continue

        if claim.level is ClaimLevel.PROPERTY:
            property_id = target_id if target_id in partitions else None
        elif claim.level is ClaimLevel.SUBROOM:
            property_id = sub_room_index.get(target_id)
        else:
            property_id = unit_index.get(target_id)

        if property_id is None:
            dropped += 1
            continue
        partitions[property_id].append(claim)

    logger.debug(
        "Partitioned claims by property",
        property_count=len(partitions),
        dropped_claims=dropped,
    )
    return partitions


def compute_availability_for_all(
    properties: Iterable[Property],
    claims: Iterable[Claim],
    policy: Optional[AvailabilityPolicy] = None,
    as_of: Optional[datetime] = None,
    max_workers: Optional[int] = None,
) -> dict[str, AvailabilityState]:
    """Compute availability independently for each property.

    Each entry depends only on its own hierarchy and claims, so with
    ``max_workers`` > 1 entries are computed on a thread pool; the result is
    the same as the sequential path.

    Args:
        properties: Hierarchies to evaluate
        claims: Full claim set across all properties
        policy: Engine policy; defaults to the configured one
        as_of: Optional evaluation instant for pending-hold expiry
        max_workers: Thread count; defaults to the configured batch size

    Returns:
        Mapping of property id to AvailabilityState
    """
    properties = list(properties)
    policy = _resolve_policy(policy)
    workers = max_workers if max_workers is not None else settings.availability.batch_max_workers
    partitions = partition_claims_by_property(properties, claims)

    def _compute(prop: Property) -> AvailabilityState:
        return compute_availability(prop, partitions[prop.id], policy=policy, as_of=as_of)

    if workers > 1 and len(properties) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            states = list(executor.map(_compute, properties))
    else:
        states = [_compute(prop) for prop in properties]

    logger.info(
        "Computed availability for properties",
        property_count=len(properties),
        workers=workers,
    )
    return {state.property_id: state for state in states}
