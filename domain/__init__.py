"""Domain layer for the front-of-house dashboard."""

from .enums import (
    TableStatus,
    WaitlistStatus,
    ReservationStatus,
    RefundPolicy,
    PaymentType,
    NoShowChargeType,
    MessageStatus,
)
from .models import (
    TimeSlot,
    PartySizeTier,
    PricingPolicy,
    Party,
    DepositBreakdown,
    ComputedDeposit,
    PaymentSettings,
    ReservationSettings,
    ManagerSettings,
    RestaurantSettings,
    Table,
    WaitlistEntry,
    WaitlistCreate,
    Reservation,
    ReservationCreate,
    MessageHistory,
    MessageCreate,
    InsightRequest,
    InsightResponse,
    DashboardMetrics,
)

__all__ = [
    # Enums
    "TableStatus",
    "WaitlistStatus",
    "ReservationStatus",
    "RefundPolicy",
    "PaymentType",
    "NoShowChargeType",
    "MessageStatus",
    # Models
    "TimeSlot",
    "PartySizeTier",
    "PricingPolicy",
    "Party",
    "DepositBreakdown",
    "ComputedDeposit",
    "PaymentSettings",
    "ReservationSettings",
    "ManagerSettings",
    "RestaurantSettings",
    "Table",
    "WaitlistEntry",
    "WaitlistCreate",
    "Reservation",
    "ReservationCreate",
    "MessageHistory",
    "MessageCreate",
    "InsightRequest",
    "InsightResponse",
    "DashboardMetrics",
]
