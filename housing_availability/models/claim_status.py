"""Reservation status values seen on claims."""

from enum import Enum


class ClaimStatus(str, Enum):
    """Known reservation statuses.

    Claims carry their status as a free string; which statuses block
    availability is decided by AvailabilityPolicy.active_statuses, not by
    this enum. Lifecycle: pending → pending_payment → confirmed → paid →
    completed, or → cancelled / declined / expired at any point.
    """
    ACTIVE = "active"
    PENDING = "pending"
    PENDING_PAYMENT = "pending_payment"
    CONFIRMED = "confirmed"
    PAID = "paid"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DECLINED = "declined"
    EXPIRED = "expired"


DEFAULT_ACTIVE_STATUSES = frozenset(
    {
        ClaimStatus.ACTIVE.value,
        ClaimStatus.CONFIRMED.value,
        ClaimStatus.PENDING.value,
        ClaimStatus.PENDING_PAYMENT.value,
    }
)

DEFAULT_PENDING_STATUSES = frozenset(
    {
        ClaimStatus.PENDING.value,
        ClaimStatus.PENDING_PAYMENT.value,
    }
)
