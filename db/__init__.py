"""Database layer for the front-of-house dashboard."""

from .base import Base, IdMixin, TimestampMixin
from .models_sqlalchemy import (
    Restaurant,
    DiningTable,
    TimeSlotRecord,
    WaitlistEntryRecord,
    ReservationRecord,
    MessageHistoryRecord,
)
from .session import (
    engine,
    SessionLocal,
    init_db,
    close_db,
)

__all__ = [
    # Base
    "Base",
    "IdMixin",
    "TimestampMixin",
    # Models
    "Restaurant",
    "DiningTable",
    "TimeSlotRecord",
    "WaitlistEntryRecord",
    "ReservationRecord",
    "MessageHistoryRecord",
    # Session
    "engine",
    "SessionLocal",
    "init_db",
    "close_db",
]
