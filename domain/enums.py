"""Domain enums for the front-of-house dashboard."""

from enum import Enum


class TableStatus(str, Enum):
    """Dining table status."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"


class WaitlistStatus(str, Enum):
    """Waitlist entry status."""

    WAITING = "waiting"
    NOTIFIED = "notified"
    SEATED = "seated"
    CANCELLED = "cancelled"


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""

    DRAFT = "draft"
    CONFIRMED = "confirmed"
    NOTIFIED = "notified"
    SEATED = "seated"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class RefundPolicy(str, Enum):
    """How a paid deposit is treated on cancellation."""

    REFUNDABLE = "refundable"
    NON_REFUNDABLE = "non-refundable"
    CONDITIONAL = "conditional"


class PaymentType(str, Enum):
    """Whether the guest pays the computed deposit or enters an amount."""

    FIXED = "fixed"
    CUSTOM = "custom"


class NoShowChargeType(str, Enum):
    """No-show charge unit (stored, not enforced)."""

    AMOUNT = "amount"
    PERCENTAGE = "percentage"


class MessageStatus(str, Enum):
    """Delivery outcome recorded for a guest message."""

    SENT = "sent"
    FAILED = "failed"
    PENDING = "pending"
