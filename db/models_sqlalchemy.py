"""SQLAlchemy models for the front-of-house dashboard tables."""

from datetime import datetime, date, time
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IdMixin, TimestampMixin
from domain.enums import MessageStatus, ReservationStatus, TableStatus, WaitlistStatus


class Restaurant(Base, IdMixin, TimestampMixin):
    """Restaurant record; settings live in one JSON blob."""

    __tablename__ = "restaurants"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, slug='{self.slug}')>"


class DiningTable(Base, IdMixin, TimestampMixin):
    """Physical table on the floor plan."""

    __tablename__ = "dining_tables"

    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    seats: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TableStatus.AVAILABLE.value,
    )
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        Index("ix_dining_tables_restaurant_status", "restaurant_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<DiningTable(id={self.id}, name='{self.name}', "
            f"seats={self.seats}, status='{self.status}')>"
        )


class TimeSlotRecord(Base, IdMixin, TimestampMixin):
    """Recurring weekly booking window (weekday 0 = Sunday)."""

    __tablename__ = "time_slots"

    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    max_covers: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    specific_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_time_slots_restaurant_weekday", "restaurant_id", "weekday"),
    )

    def __repr__(self) -> str:
        return (
            f"<TimeSlotRecord(id={self.id}, weekday={self.weekday}, "
            f"start={self.start_time}, end={self.end_time})>"
        )


class WaitlistEntryRecord(Base, IdMixin, TimestampMixin):
    """Walk-in party waiting for a table."""

    __tablename__ = "waitlist_entries"

    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    check_in_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WaitlistStatus.WAITING.value,
    )
    table_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("dining_tables.id", ondelete="SET NULL"),
        nullable=True,
    )
    seated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_waitlist_entries_restaurant_status", "restaurant_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<WaitlistEntryRecord(id={self.id}, name='{self.name}', "
            f"party_size={self.party_size}, status='{self.status}')>"
        )


class ReservationRecord(Base, IdMixin, TimestampMixin):
    """Booked reservation."""

    __tablename__ = "reservations"

    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    # Restaurant wall-clock time, stored naive
    date_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReservationStatus.CONFIRMED.value,
    )
    table_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("dining_tables.id", ondelete="SET NULL"),
        nullable=True,
    )
    special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    special_occasion_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    slot_start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    slot_end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    payment_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("ix_reservations_restaurant_date_time", "restaurant_id", "date_time"),
        Index("ix_reservations_restaurant_status", "restaurant_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<ReservationRecord(id={self.id}, name='{self.name}', "
            f"date_time={self.date_time}, party_size={self.party_size}, "
            f"status='{self.status}')>"
        )


class MessageHistoryRecord(Base, IdMixin, TimestampMixin):
    """Text message sent to a guest about a reservation."""

    __tablename__ = "message_history"

    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reservation_id: Mapped[str] = mapped_column(
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
    )
    phone_number: Mapped[str] = mapped_column(String(30), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MessageStatus.SENT.value,
    )
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_message_history_reservation_sent_at", "reservation_id", "sent_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<MessageHistoryRecord(id={self.id}, reservation_id={self.reservation_id}, "
            f"status='{self.status}', sent_at={self.sent_at})>"
        )
