"""Domain models using Pydantic v2 for the front-of-house dashboard."""

from datetime import date, time, datetime
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from core.utils_datetime import format_hhmm, is_weekend, parse_hhmm
from .enums import (
    MessageStatus,
    NoShowChargeType,
    PaymentType,
    RefundPolicy,
    ReservationStatus,
    TableStatus,
    WaitlistStatus,
)


def _parse_time(v: Any) -> Any:
    if isinstance(v, (str, time)):
        return parse_hhmm(v)
    return v


# ============================================================================
# Scheduling
# ============================================================================

class TimeSlot(BaseModel):
    """Recurring weekly booking window."""

    id: Optional[str] = None
    weekday: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: time
    end_time: time
    max_covers: int = Field(default=4, gt=0, description="Reservations accepted in this slot")
    is_default: bool = True
    specific_date: Optional[date] = None
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_times(cls, v: Any) -> Any:
        return _parse_time(v)

    @model_validator(mode="after")
    def check_range(self) -> "TimeSlot":
        if self.start_time >= self.end_time:
            raise ValueError("end_time must be after start_time")
        return self

    @field_serializer("start_time", "end_time")
    def serialize_times(self, v: time) -> str:
        return format_hhmm(v)


# ============================================================================
# Pricing
# ============================================================================

class PartySizeTier(BaseModel):
    """Flat deposit for parties within [min_party, max_party]."""

    min_party: int = Field(..., ge=1, alias="minParty")
    max_party: int = Field(..., ge=1, alias="maxParty")
    amount: float = Field(..., ge=0)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_bounds(self) -> "PartySizeTier":
        if self.max_party < self.min_party:
            raise ValueError("maxParty must be greater than or equal to minParty")
        return self

    def matches(self, party_size: int) -> bool:
        return self.min_party <= party_size <= self.max_party


class PricingPolicy(BaseModel):
    """Rule-facing view of the restaurant's deposit configuration."""

    require_payment: bool = False
    base_amount: float = Field(default=0.0, ge=0)
    party_size_tiers: List[PartySizeTier] = Field(default_factory=list)
    peak_premium: float = Field(default=0.0, ge=0)
    peak_start: time = time(19, 0)
    peak_end: time = time(21, 0)
    weekend_premium: float = Field(default=0.0, ge=0)
    refund_policy: RefundPolicy = RefundPolicy.REFUNDABLE
    refund_hours_before: int = Field(default=24, gt=0)

    @field_validator("peak_start", "peak_end", mode="before")
    @classmethod
    def parse_times(cls, v: Any) -> Any:
        return _parse_time(v)

    @model_validator(mode="after")
    def check_peak_window(self) -> "PricingPolicy":
        if self.peak_start >= self.peak_end:
            raise ValueError("peak_end must be after peak_start")
        return self


class Party(BaseModel):
    """The slice of a waitlist entry or reservation the rules look at."""

    party_size: int = Field(..., gt=0)
    requested_time: Optional[datetime] = None

    @property
    def is_weekend(self) -> bool:
        return self.requested_time is not None and is_weekend(self.requested_time)


class DepositBreakdown(BaseModel):
    """Itemized deposit; the four parts sum to the total before flooring."""

    base: float
    tier_adjustment: float = 0.0
    peak_adjustment: float = 0.0
    weekend_adjustment: float = 0.0

    @property
    def base_component(self) -> float:
        """The flat base or the matching tier amount, whichever applies."""
        return self.base + self.tier_adjustment


class ComputedDeposit(BaseModel):
    amount: float = Field(..., ge=0)
    breakdown: DepositBreakdown


# ============================================================================
# Persisted settings
# ============================================================================

class PaymentSettings(BaseModel):
    """reservation_settings.payment_settings"""

    payment_type: PaymentType = PaymentType.FIXED
    base_payment_amount: float = Field(default=0.0, ge=0)
    min_payment_amount: float = Field(default=0.0, ge=0)
    max_payment_amount: float = Field(default=0.0, ge=0)
    party_size_pricing: List[PartySizeTier] = Field(default_factory=list)
    peak_hours_premium: float = Field(default=0.0, ge=0)
    weekend_premium: float = Field(default=0.0, ge=0)
    peak_hours_start: time = time(19, 0)
    peak_hours_end: time = time(21, 0)
    refund_policy: RefundPolicy = RefundPolicy.REFUNDABLE
    refund_hours_before: int = Field(default=24, gt=0)
    # Stored for the settings screen; nothing charges no-shows yet.
    charge_no_show: bool = False
    no_show_charge_type: NoShowChargeType = NoShowChargeType.AMOUNT
    no_show_charge_value: float = Field(default=0.0, ge=0)

    @field_validator("peak_hours_start", "peak_hours_end", mode="before")
    @classmethod
    def parse_times(cls, v: Any) -> Any:
        return _parse_time(v)

    @model_validator(mode="after")
    def check_peak_window(self) -> "PaymentSettings":
        if self.peak_hours_start >= self.peak_hours_end:
            raise ValueError("peak_hours_end must be after peak_hours_start")
        return self

    @field_serializer("peak_hours_start", "peak_hours_end")
    def serialize_times(self, v: time) -> str:
        return format_hhmm(v)

    def to_policy(self, require_payment: bool) -> PricingPolicy:
        return PricingPolicy(
            require_payment=require_payment,
            base_amount=self.base_payment_amount,
            party_size_tiers=self.party_size_pricing,
            peak_premium=self.peak_hours_premium,
            peak_start=self.peak_hours_start,
            peak_end=self.peak_hours_end,
            weekend_premium=self.weekend_premium,
            refund_policy=self.refund_policy,
            refund_hours_before=self.refund_hours_before,
        )


class ReservationSettings(BaseModel):
    """settings.reservation_settings"""

    lead_time_hours: int = Field(default=2, ge=0)
    cutoff_time: time = time(21, 0)
    auto_confirm: bool = True
    allow_special_notes: bool = False
    special_occasions: List[str] = Field(default_factory=list)
    require_payment: bool = False
    payment_settings: PaymentSettings = Field(default_factory=PaymentSettings)

    @field_validator("cutoff_time", mode="before")
    @classmethod
    def parse_cutoff(cls, v: Any) -> Any:
        return _parse_time(v)

    @field_serializer("cutoff_time")
    def serialize_cutoff(self, v: time) -> str:
        return format_hhmm(v)

    @property
    def pricing_policy(self) -> PricingPolicy:
        return self.payment_settings.to_policy(self.require_payment)


class ManagerSettings(BaseModel):
    """settings.manager_settings"""

    timezone: str = "America/Los_Angeles"
    show_avg_party_size: bool = False
    show_peak_hour: bool = False
    show_cancellation_rate: bool = False
    show_this_week: bool = False


class RestaurantSettings(BaseModel):
    """Composite settings object persisted on the restaurant record."""

    reservation_settings: ReservationSettings = Field(default_factory=ReservationSettings)
    manager_settings: ManagerSettings = Field(default_factory=ManagerSettings)
    # Slot edits validated alongside the settings; stored in their own table.
    time_slots: List[TimeSlot] = Field(default_factory=list, exclude=True)

    def to_persisted(self) -> Dict[str, Any]:
        """JSON-ready dict in the stored key layout."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Floor
# ============================================================================

class Table(BaseModel):
    """Dining table as the rules see it."""

    id: str
    name: str
    seats: int = Field(..., gt=0)
    status: TableStatus = TableStatus.AVAILABLE
    location: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WaitlistEntry(BaseModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    party_size: int = Field(..., gt=0)
    check_in_time: datetime
    status: WaitlistStatus = WaitlistStatus.WAITING
    table_id: Optional[str] = None
    seated_at: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WaitlistCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    party_size: int = Field(..., gt=0)

    model_config = ConfigDict(str_strip_whitespace=True)


class Reservation(BaseModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    party_size: int = Field(..., gt=0)
    date_time: datetime
    status: ReservationStatus = ReservationStatus.CONFIRMED
    table_id: Optional[str] = None
    special_requests: Optional[str] = None
    special_occasion_type: Optional[str] = None
    slot_start_time: Optional[time] = None
    slot_end_time: Optional[time] = None
    payment_amount: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ReservationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    party_size: int = Field(..., gt=0)
    date_time: datetime
    status: ReservationStatus = ReservationStatus.CONFIRMED
    special_requests: Optional[str] = Field(None, max_length=500)
    special_occasion_type: Optional[str] = Field(None, max_length=100)
    slot_start_time: Optional[time] = None
    slot_end_time: Optional[time] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("slot_start_time", "slot_end_time", mode="before")
    @classmethod
    def parse_times(cls, v: Any) -> Any:
        return _parse_time(v)


class MessageHistory(BaseModel):
    id: str
    reservation_id: str
    phone_number: str
    message: str
    status: MessageStatus = MessageStatus.SENT
    sent_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageCreate(BaseModel):
    """Record of a message the caller already tried to deliver."""

    message: str = Field(..., min_length=1, max_length=1600)
    status: MessageStatus = MessageStatus.SENT
    # Defaults to the reservation's phone when omitted
    phone_number: Optional[str] = Field(None, min_length=1, max_length=30)

    model_config = ConfigDict(str_strip_whitespace=True)


# ============================================================================
# Dashboard
# ============================================================================

class InsightRequest(BaseModel):
    today_reservations: int = Field(..., ge=0)
    upcoming_week_reservations: int = Field(..., ge=0)
    avg_party_size: float = Field(..., ge=0)
    cancellation_rate_pct: float = Field(..., ge=0)
    avg_wait_time: Optional[float] = None


class InsightResponse(BaseModel):
    insight: str
    suggestion: str


class DashboardMetrics(BaseModel):
    total_reservations: int
    today_reservations: int
    upcoming_week_reservations: int
    avg_party_size: float
    peak_hour: Optional[int] = None
    cancellation_rate_pct: float
    avg_wait_minutes: Optional[float] = None

    def to_insight_request(self) -> InsightRequest:
        return InsightRequest(
            today_reservations=self.today_reservations,
            upcoming_week_reservations=self.upcoming_week_reservations,
            avg_party_size=self.avg_party_size,
            cancellation_rate_pct=self.cancellation_rate_pct,
            avg_wait_time=self.avg_wait_minutes,
        )
