"""Pending-hold conflict warnings.

While one user is in checkout, their claim sits in a pending status with an
expiry. Another user looking at the same target gets a warning with the time
left on that hold instead of a silent refusal.
"""

from datetime import datetime
from typing import Iterable, Optional

from structlog import get_logger

from housing_availability.config.settings import settings
from housing_availability.models.claim import Claim, as_utc
from housing_availability.models.claim_level import ClaimLevel, ClaimLevelMapper
from housing_availability.models.conflict import ConflictInfo
from housing_availability.models.policy import AvailabilityPolicy

logger = get_logger(__name__)

CONFLICT_LABELS = {
    ClaimLevel.PROPERTY: "property",
    ClaimLevel.SUBROOM: "room",
    ClaimLevel.UNIT: "bed",
}


def format_time_remaining(expires_at: datetime, now: datetime) -> str:
    """Render the time left on a hold, e.g. '4 min 10 sec' or '12 sec'."""
    remaining = (as_utc(expires_at) - as_utc(now)).total_seconds()
    if remaining <= 0:
        return "expired"

    minutes, seconds = divmod(int(remaining), 60)
    if minutes > 0:
        return f"{minutes} min {seconds} sec"
    return f"{seconds} sec"


def conflict_message(level: ClaimLevel, time_remaining: Optional[str]) -> str:
    label = CONFLICT_LABELS[level]
    if time_remaining == "expired":
        return f"A previous reservation has expired. This {label} may now be available."
    if time_remaining is None:
        return f"Another user is currently reserving this {label}."
    return (
        f"Another user is currently reserving this {label}. "
        f"Their session expires in {time_remaining}."
    )


def _created_sort_key(claim: Claim) -> tuple[bool, datetime]:
    # Claims without a creation time sort oldest
    if claim.created_at is None:
        return (False, datetime.min)
    return (True, as_utc(claim.created_at).replace(tzinfo=None))


def find_pending_conflict(
    claims: Iterable[Claim],
    level: ClaimLevel | str,
    target_id: str,
    now: datetime,
    policy: Optional[AvailabilityPolicy] = None,
) -> ConflictInfo:
    """Find the most recent unexpired pending hold on exactly one target.

    Only claims at ``level`` on ``target_id`` are considered; holds on an
    ancestor or descendant are reported by the availability state instead.

    Args:
        claims: Claims to scan, any status
        level: Granularity of the target (ClaimLevel or level name)
        target_id: Target identifier
        now: Current instant
        policy: Engine policy; defaults to the configured one

    Returns:
        ConflictInfo describing the hold, or ConflictInfo.none()
    """
    resolved_level = ClaimLevelMapper.map_level(level)
    if resolved_level is None:
        raise ValueError(f"Unknown reservation level: {level!r}")
    policy = policy if policy is not None else settings.default_policy()

    holds = [
        claim
        for claim in claims
        if claim.level is resolved_level
        and claim.target_id == target_id
        and policy.is_pending(claim.status)
        and not claim.is_expired(now)
    ]
    if not holds:
        return ConflictInfo.none()

    hold = max(holds, key=_created_sort_key)
    time_remaining = (
        format_time_remaining(hold.expires_at, now) if hold.expires_at is not None else None
    )

    logger.debug(
        "Pending hold found",
        level=resolved_level.value,
        target_id=target_id,
        claim_id=hold.id,
        time_remaining=time_remaining,
    )

    return ConflictInfo(
        has_conflict=True,
        conflict_type=hold.status.strip().lower(),
        expires_at=hold.expires_at,
        time_remaining=time_remaining,
        message=conflict_message(resolved_level, time_remaining),
        claim_id=hold.id,
    )
