"""Reservation settings and time slot endpoints."""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from apps.api.deps import get_store
from apps.api.schemas import AvailableSlotsResponse, SettingsResponse, SettingsUpdateRequest
from domain.models import TimeSlot
from services.front_of_house_store import FrontOfHouseStore
from services.settings_aggregator import parse_time_slot, validate_and_build


router = APIRouter(prefix="/restaurants/{restaurant_id}", tags=["settings"])


def _settings_response(store: FrontOfHouseStore) -> SettingsResponse:
    current = store.get_settings()
    return SettingsResponse(
        reservation_settings=current.reservation_settings,
        manager_settings=current.manager_settings,
        waitlist_paused=store.is_waitlist_paused(),
    )


@router.get("/settings", response_model=SettingsResponse)
def get_settings(store: FrontOfHouseStore = Depends(get_store)):
    """Current settings, with defaults filled in for anything never saved."""
    return _settings_response(store)


@router.put("/settings", response_model=SettingsResponse)
def update_settings(
    payload: SettingsUpdateRequest,
    store: FrontOfHouseStore = Depends(get_store),
):
    """
    Validate and save the settings screen.

    Blank numeric fields fall back to defaults; rule violations come back
    as 422 with one issue per field, duplicate slots as 409.
    """
    built = validate_and_build(
        payload.reservation_settings,
        payload.payment_settings,
        payload.manager_settings,
        slot_edits=payload.time_slots,
        existing_slots=store.all_time_slots(),
    )
    store.save_settings(built)
    return _settings_response(store)


@router.get("/time-slots", response_model=List[TimeSlot])
def list_time_slots(
    weekday: Optional[int] = Query(None, ge=0, le=6, description="0 = Sunday"),
    specific_date: Optional[date] = Query(None),
    store: FrontOfHouseStore = Depends(get_store),
):
    return store.list_time_slots(weekday=weekday, specific_date=specific_date)


@router.post("/time-slots", response_model=TimeSlot, status_code=201)
def create_time_slot(
    payload: Dict[str, Any] = Body(...),
    store: FrontOfHouseStore = Depends(get_store),
):
    return store.create_time_slot(parse_time_slot(payload))


@router.put("/time-slots/{slot_id}", response_model=TimeSlot)
def update_time_slot(
    slot_id: str,
    payload: Dict[str, Any] = Body(...),
    store: FrontOfHouseStore = Depends(get_store),
):
    return store.update_time_slot(slot_id, parse_time_slot(payload))


@router.delete("/time-slots/{slot_id}", status_code=204)
def delete_time_slot(slot_id: str, store: FrontOfHouseStore = Depends(get_store)):
    store.delete_time_slot(slot_id)
    return Response(status_code=204)


@router.get("/available-slots", response_model=AvailableSlotsResponse)
def available_slots(
    day: date = Query(..., alias="date"),
    store: FrontOfHouseStore = Depends(get_store),
):
    """Start times guests can still book on a given date."""
    return AvailableSlotsResponse(date=day, slots=store.available_slots(day))
