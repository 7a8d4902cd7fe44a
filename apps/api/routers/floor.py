"""Tables and waitlist endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query

from apps.api.deps import get_store
from apps.api.schemas import (
    AssignTableRequest,
    TableCreateRequest,
    TableStatusRequest,
    WaitlistPauseRequest,
    WaitlistStatusRequest,
)
from domain.models import Table, WaitlistCreate, WaitlistEntry
from services.front_of_house_store import FrontOfHouseStore


router = APIRouter(prefix="/restaurants/{restaurant_id}", tags=["floor"])


@router.get("/tables", response_model=List[Table])
def list_tables(store: FrontOfHouseStore = Depends(get_store)):
    return store.list_tables()


@router.post("/tables", response_model=Table, status_code=201)
def add_table(payload: TableCreateRequest, store: FrontOfHouseStore = Depends(get_store)):
    return store.add_table(payload.name, payload.seats, payload.location)


@router.post("/tables/{table_id}/free", response_model=Table)
def free_table(table_id: str, store: FrontOfHouseStore = Depends(get_store)):
    """Mark a table available again once the party has left."""
    return store.free_table(table_id)


@router.put("/tables/{table_id}/status", response_model=Table)
def set_table_status(
    table_id: str,
    payload: TableStatusRequest,
    store: FrontOfHouseStore = Depends(get_store),
):
    return store.set_table_status(table_id, payload.status)


@router.get("/waitlist", response_model=List[WaitlistEntry])
def list_waitlist(
    active_only: bool = Query(True, description="Only waiting and notified parties"),
    store: FrontOfHouseStore = Depends(get_store),
):
    return store.list_waitlist(active_only=active_only)


@router.post("/waitlist", response_model=WaitlistEntry, status_code=201)
def add_to_waitlist(payload: WaitlistCreate, store: FrontOfHouseStore = Depends(get_store)):
    return store.add_to_waitlist(payload)


@router.put("/waitlist/pause")
def pause_waitlist(payload: WaitlistPauseRequest, store: FrontOfHouseStore = Depends(get_store)):
    store.set_waitlist_paused(payload.paused)
    return {"waitlist_paused": store.is_waitlist_paused()}


@router.put("/waitlist/{entry_id}/status", response_model=WaitlistEntry)
def update_waitlist_status(
    entry_id: str,
    payload: WaitlistStatusRequest,
    store: FrontOfHouseStore = Depends(get_store),
):
    return store.update_waitlist_status(entry_id, payload.status)


@router.get("/waitlist/{entry_id}/eligible-tables", response_model=List[Table])
def eligible_tables(entry_id: str, store: FrontOfHouseStore = Depends(get_store)):
    """Available tables large enough for the party; empty list if none."""
    return store.eligible_tables_for_entry(entry_id)


@router.post("/waitlist/{entry_id}/assign", response_model=WaitlistEntry)
def assign_table(
    entry_id: str,
    payload: AssignTableRequest,
    store: FrontOfHouseStore = Depends(get_store),
):
    """
    Seat a waiting party.

    Returns 409 when the table was taken or changed since it was offered.
    """
    return store.assign_table(entry_id, payload.table_id)
