"""Refund eligibility for cancelled, paid reservations."""

from datetime import datetime, timedelta

from domain.enums import RefundPolicy
from domain.models import PricingPolicy


def is_refund_eligible(
    policy: PricingPolicy,
    reservation_time: datetime,
    cancellation_time: datetime,
) -> bool:
    """
    Decide whether a cancellation gets its deposit back.

    Conditional policies refund only when the cancellation lands at least
    ``refund_hours_before`` hours ahead of the reservation (inclusive).

    Args:
        policy: Restaurant pricing policy
        reservation_time: When the party was booked for
        cancellation_time: When the guest cancelled; both must be naive or
            both timezone-aware
    """
    if policy.refund_policy == RefundPolicy.REFUNDABLE:
        return True
    if policy.refund_policy == RefundPolicy.NON_REFUNDABLE:
        return False
    notice = reservation_time - cancellation_time
    return notice >= timedelta(hours=policy.refund_hours_before)


def describe_refund_policy(policy: PricingPolicy) -> str:
    """Guest-facing summary shown next to the payment form."""
    if policy.refund_policy == RefundPolicy.REFUNDABLE:
        return "This reservation is fully refundable."
    if policy.refund_policy == RefundPolicy.NON_REFUNDABLE:
        return "This reservation is non-refundable."
    return (
        "This reservation is refundable if cancelled at least "
        f"{policy.refund_hours_before} hours before the reservation time."
    )
