"""Reservation endpoints: booking, deposit quotes, cancellation, seating and guest messages."""

import logging
from typing import List

from fastapi import APIRouter, Depends

from apps.api.deps import get_store
from apps.api.schemas import (
    AssignTableRequest,
    CancelReservationRequest,
    CancelReservationResponse,
    DepositQuoteResponse,
    ReservationStatusRequest,
)
from core.logging import log_context
from core.utils_datetime import get_current_datetime, to_restaurant_time
from domain.enums import ReservationStatus
from domain.models import MessageCreate, MessageHistory, Party, Reservation, ReservationCreate
from services.front_of_house_store import FrontOfHouseStore
from services.pricing import quote_reservation
from services.refund_policy import describe_refund_policy, is_refund_eligible


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/restaurants/{restaurant_id}/reservations", tags=["reservations"])


@router.get("", response_model=List[Reservation])
def list_reservations(store: FrontOfHouseStore = Depends(get_store)):
    return store.list_reservations()


@router.post("", response_model=Reservation, status_code=201)
def add_reservation(payload: ReservationCreate, store: FrontOfHouseStore = Depends(get_store)):
    """Book a reservation, recording the deposit owed when payment is required."""
    current = store.get_settings()
    tz_name = current.manager_settings.timezone
    party = Party(
        party_size=payload.party_size,
        requested_time=to_restaurant_time(payload.date_time, tz_name),
    )
    quote = quote_reservation(current.reservation_settings, party)
    return store.add_reservation(payload, payment_amount=quote.amount if quote else None)


@router.get("/{reservation_id}/deposit", response_model=DepositQuoteResponse)
def deposit_quote(reservation_id: str, store: FrontOfHouseStore = Depends(get_store)):
    """Itemized deposit for display before charging."""
    current = store.get_settings()
    reservation = store.get_reservation(reservation_id)
    party = Party(
        party_size=reservation.party_size,
        requested_time=to_restaurant_time(reservation.date_time, current.manager_settings.timezone),
    )
    quote = quote_reservation(current.reservation_settings, party)
    if quote is None:
        return DepositQuoteResponse(payment_required=False)
    return DepositQuoteResponse(
        payment_required=True,
        deposit=quote,
        refund_policy=describe_refund_policy(current.reservation_settings.pricing_policy),
    )


@router.put("/{reservation_id}/status", response_model=Reservation)
def update_status(
    reservation_id: str,
    payload: ReservationStatusRequest,
    store: FrontOfHouseStore = Depends(get_store),
):
    return store.update_reservation_status(reservation_id, payload.status)


@router.post("/{reservation_id}/cancel", response_model=CancelReservationResponse)
def cancel_reservation(
    reservation_id: str,
    payload: CancelReservationRequest,
    store: FrontOfHouseStore = Depends(get_store),
):
    """Cancel and report whether a paid deposit is refundable."""
    current = store.get_settings()
    tz_name = current.manager_settings.timezone
    policy = current.reservation_settings.pricing_policy

    reservation = store.get_reservation(reservation_id)
    cancelled_at = to_restaurant_time(payload.cancellation_time or get_current_datetime(tz_name), tz_name)
    paid = bool(reservation.payment_amount)
    eligible = paid and is_refund_eligible(
        policy,
        to_restaurant_time(reservation.date_time, tz_name),
        cancelled_at,
    )

    updated = store.update_reservation_status(reservation_id, ReservationStatus.CANCELLED)
    logger.info(
        f"Cancelled reservation {reservation_id} (refund eligible: {eligible})",
        extra=log_context(store.restaurant_id, "cancel_reservation"),
    )
    return CancelReservationResponse(
        reservation_id=updated.id,
        status=updated.status,
        paid=paid,
        refund_eligible=eligible,
        refund_policy=describe_refund_policy(policy),
    )


@router.post("/{reservation_id}/seat", response_model=Reservation)
def seat_reservation(
    reservation_id: str,
    payload: AssignTableRequest,
    store: FrontOfHouseStore = Depends(get_store),
):
    return store.seat_reservation(reservation_id, payload.table_id)


@router.get("/{reservation_id}/messages", response_model=List[MessageHistory])
def list_messages(reservation_id: str, store: FrontOfHouseStore = Depends(get_store)):
    return store.list_message_history(reservation_id)


@router.post("/{reservation_id}/messages", response_model=MessageHistory, status_code=201)
def record_message(
    reservation_id: str,
    payload: MessageCreate,
    store: FrontOfHouseStore = Depends(get_store),
):
    """Record the outcome of a text the dashboard sent to the guest."""
    return store.save_message_history(reservation_id, payload)
