"""Unit tests for refund eligibility."""
import pytest
from datetime import datetime, timedelta

import pytz

from domain.enums import RefundPolicy
from domain.models import PricingPolicy
from services.refund_policy import describe_refund_policy, is_refund_eligible


RESERVATION_TIME = datetime(2024, 3, 16, 19, 0)


@pytest.mark.unit
class TestConditionalRefund:
    """Test the notice-period boundary."""

    def test_exactly_at_boundary_is_eligible(self, conditional_policy):
        cancelled = RESERVATION_TIME - timedelta(hours=24)
        assert is_refund_eligible(conditional_policy, RESERVATION_TIME, cancelled) is True

    def test_one_minute_short_is_ineligible(self, conditional_policy):
        cancelled = RESERVATION_TIME - timedelta(hours=23, minutes=59)
        assert is_refund_eligible(conditional_policy, RESERVATION_TIME, cancelled) is False

    def test_well_ahead_is_eligible(self, conditional_policy):
        cancelled = RESERVATION_TIME - timedelta(days=3)
        assert is_refund_eligible(conditional_policy, RESERVATION_TIME, cancelled) is True

    def test_after_reservation_is_ineligible(self, conditional_policy):
        cancelled = RESERVATION_TIME + timedelta(minutes=5)
        assert is_refund_eligible(conditional_policy, RESERVATION_TIME, cancelled) is False

    def test_aware_datetimes_across_zones(self, conditional_policy):
        la = pytz.timezone("America/Los_Angeles")
        reservation = la.localize(RESERVATION_TIME)
        cancelled = (reservation - timedelta(hours=24)).astimezone(pytz.utc)

        assert is_refund_eligible(conditional_policy, reservation, cancelled) is True


@pytest.mark.unit
class TestFixedPolicies:

    def test_refundable_always_eligible(self):
        policy = PricingPolicy(refund_policy=RefundPolicy.REFUNDABLE)
        assert is_refund_eligible(policy, RESERVATION_TIME, RESERVATION_TIME) is True

    def test_non_refundable_never_eligible(self):
        policy = PricingPolicy(refund_policy=RefundPolicy.NON_REFUNDABLE)
        cancelled = RESERVATION_TIME - timedelta(days=30)
        assert is_refund_eligible(policy, RESERVATION_TIME, cancelled) is False


@pytest.mark.unit
class TestDescriptions:

    def test_conditional_mentions_hours(self, conditional_policy):
        assert "24 hours" in describe_refund_policy(conditional_policy)

    def test_non_refundable(self):
        policy = PricingPolicy(refund_policy=RefundPolicy.NON_REFUNDABLE)
        assert describe_refund_policy(policy) == "This reservation is non-refundable."
