"""
Deposit pricing.

A matching party-size tier replaces the flat base amount; peak-hour and
weekend premiums are then added on top of whichever applies.
"""

import logging
from typing import Optional

from core.errors import SettingsValidationError
from domain.enums import PaymentType
from domain.models import (
    ComputedDeposit,
    DepositBreakdown,
    Party,
    PaymentSettings,
    PricingPolicy,
    ReservationSettings,
)


logger = logging.getLogger(__name__)


def find_tier_amount(policy: PricingPolicy, party_size: int) -> Optional[float]:
    """Amount of the first tier covering the party size, in list order."""
    for tier in policy.party_size_tiers:
        if tier.matches(party_size):
            return tier.amount
    return None


def is_peak_time(policy: PricingPolicy, party: Party) -> bool:
    """Whether the requested time-of-day falls in [peak_start, peak_end)."""
    if party.requested_time is None:
        return False
    time_of_day = party.requested_time.time().replace(second=0, microsecond=0)
    return policy.peak_start <= time_of_day < policy.peak_end


def compute_deposit(policy: PricingPolicy, party: Party) -> ComputedDeposit:
    """
    Compute the deposit a guest must pre-pay.

    The caller decides whether payment is required at all; this function
    prices the party regardless of ``policy.require_payment``.

    Args:
        policy: Restaurant pricing policy
        party: Party size and requested reservation time

    Returns:
        ComputedDeposit with the total and its itemized breakdown
    """
    base = policy.base_amount
    tier_amount = find_tier_amount(policy, party.party_size)
    tier_adjustment = tier_amount - base if tier_amount is not None else 0.0

    peak_adjustment = policy.peak_premium if is_peak_time(policy, party) else 0.0
    weekend_adjustment = policy.weekend_premium if party.is_weekend else 0.0

    breakdown = DepositBreakdown(
        base=base,
        tier_adjustment=tier_adjustment,
        peak_adjustment=peak_adjustment,
        weekend_adjustment=weekend_adjustment,
    )
    amount = max(0.0, base + tier_adjustment + peak_adjustment + weekend_adjustment)

    logger.debug("Deposit for party of %s: %s (%s)", party.party_size, amount, breakdown)
    return ComputedDeposit(amount=amount, breakdown=breakdown)


def quote_reservation(settings: ReservationSettings, party: Party) -> Optional[ComputedDeposit]:
    """Deposit quote for display, or None when the restaurant takes no payment."""
    if not settings.require_payment:
        return None
    return compute_deposit(settings.pricing_policy, party)


def validate_custom_amount(payment: PaymentSettings, amount: float) -> float:
    """
    Check a guest-entered amount against the custom payment bounds.

    Fixed-type restaurants only require a positive amount. A max of 0
    means no upper bound.

    Raises:
        SettingsValidationError: If the amount is outside the bounds
    """
    if amount is None or amount <= 0:
        raise SettingsValidationError.single("payment_amount", "Please enter a valid payment amount")

    if payment.payment_type != PaymentType.CUSTOM:
        return amount

    if amount < payment.min_payment_amount:
        raise SettingsValidationError.single(
            "payment_amount",
            f"Payment amount must be at least ${payment.min_payment_amount:.2f}",
        )
    if payment.max_payment_amount > 0 and amount > payment.max_payment_amount:
        raise SettingsValidationError.single(
            "payment_amount",
            f"Payment amount cannot exceed ${payment.max_payment_amount:.2f}",
        )
    return amount
