"""Request and response bodies for the dashboard API."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.enums import ReservationStatus, TableStatus, WaitlistStatus
from domain.models import ComputedDeposit, ManagerSettings, ReservationSettings


class SettingsUpdateRequest(BaseModel):
    """Raw form payload; coercion happens in the settings aggregator."""

    reservation_settings: Dict[str, Any] = Field(default_factory=dict)
    payment_settings: Optional[Dict[str, Any]] = None
    manager_settings: Dict[str, Any] = Field(default_factory=dict)
    time_slots: List[Dict[str, Any]] = Field(default_factory=list)


class SettingsResponse(BaseModel):
    reservation_settings: ReservationSettings
    manager_settings: ManagerSettings
    waitlist_paused: bool = False


class TableCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    seats: int = Field(..., gt=0)
    location: Optional[str] = Field(None, max_length=100)

    model_config = ConfigDict(str_strip_whitespace=True)


class TableStatusRequest(BaseModel):
    status: TableStatus


class AssignTableRequest(BaseModel):
    table_id: str = Field(..., min_length=1)


class WaitlistStatusRequest(BaseModel):
    status: WaitlistStatus


class WaitlistPauseRequest(BaseModel):
    paused: bool


class ReservationStatusRequest(BaseModel):
    status: ReservationStatus


class CancelReservationRequest(BaseModel):
    cancellation_time: Optional[datetime] = None


class CancelReservationResponse(BaseModel):
    reservation_id: str
    status: ReservationStatus
    paid: bool
    refund_eligible: bool
    refund_policy: str


class DepositQuoteResponse(BaseModel):
    payment_required: bool
    deposit: Optional[ComputedDeposit] = None
    refund_policy: Optional[str] = None


class AvailableSlotsResponse(BaseModel):
    date: date
    slots: List[str]
