"""
Store access for one restaurant: settings, time slots, tables, waitlist,
reservations and the guest message history.

Reads and writes are scoped by restaurant id. Database failures surface as
CollaboratorUnavailableError after a rollback so callers can offer a retry.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import (
    AssignmentConflictError,
    CollaboratorUnavailableError,
    FrontDeskError,
    RecordNotFoundError,
)
from core.logging import log_context
from core.utils_datetime import format_12h, store_weekday, to_restaurant_time
from db.models_sqlalchemy import (
    DiningTable,
    MessageHistoryRecord,
    ReservationRecord,
    Restaurant,
    TimeSlotRecord,
    WaitlistEntryRecord,
)
from domain.enums import ReservationStatus, TableStatus, WaitlistStatus
from domain.models import (
    MessageCreate,
    MessageHistory,
    Reservation,
    ReservationCreate,
    RestaurantSettings,
    Table,
    TimeSlot,
    WaitlistCreate,
    WaitlistEntry,
)
from services.settings_aggregator import deep_merge, parse_stored_settings
from services.table_matcher import eligible_tables, ensure_table_eligible
from services.time_slot_validator import remaining_covers, validate_time_slot


logger = logging.getLogger(__name__)


ACTIVE_WAITLIST_STATUSES = (WaitlistStatus.WAITING.value, WaitlistStatus.NOTIFIED.value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FrontOfHouseStore:
    """Data-store collaborator for a single restaurant."""

    def __init__(self, db_session: Session, restaurant_id: str):
        """
        Args:
            db_session: SQLAlchemy session, owned by the caller
            restaurant_id: Restaurant every query is scoped to
        """
        self.db = db_session
        self.restaurant_id = restaurant_id
        self._settings_cache: Optional[RestaurantSettings] = None

    # ------------------------------------------------------------------
    # Transaction helpers
    # ------------------------------------------------------------------

    def _log_extra(self, operation: str, **fields: Any) -> Dict[str, Any]:
        return log_context(self.restaurant_id, operation, **fields)

    @contextmanager
    def _read(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{operation} failed: {e}", extra=self._log_extra(operation))
            raise CollaboratorUnavailableError(operation, str(e)) from e

    @contextmanager
    def _write(self, operation: str) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except FrontDeskError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{operation} failed: {e}", extra=self._log_extra(operation))
            raise CollaboratorUnavailableError(operation, str(e)) from e

    def _scoped(self, model: Any, record_id: str, kind: str) -> Any:
        record = self.db.scalar(
            select(model).where(model.id == record_id, model.restaurant_id == self.restaurant_id)
        )
        if record is None:
            raise RecordNotFoundError(kind, record_id)
        return record

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _restaurant(self) -> Restaurant:
        restaurant = self.db.get(Restaurant, self.restaurant_id)
        if restaurant is None:
            raise RecordNotFoundError("Restaurant", self.restaurant_id)
        return restaurant

    def get_settings(self) -> RestaurantSettings:
        """Typed settings of the restaurant, cached until the next save."""
        if self._settings_cache is None:
            with self._read("get_settings"):
                stored = self._restaurant().settings
            self._settings_cache = parse_stored_settings(stored)
        return self._settings_cache

    def invalidate_settings_cache(self) -> None:
        self._settings_cache = None

    def save_settings(self, built: RestaurantSettings) -> RestaurantSettings:
        """
        Persist a settings object produced by validate_and_build.

        The stored blob is deep-merged so keys the settings screen does not
        own (such as waitlist_paused) survive. Bundled slot edits are
        written in the same transaction.
        """
        with self._write("save_settings"):
            restaurant = self._restaurant()
            restaurant.settings = deep_merge(restaurant.settings or {}, built.to_persisted())
            for slot in built.time_slots:
                self._upsert_slot(slot)
        self.invalidate_settings_cache()
        logger.info(
            f"Saved settings for restaurant {self.restaurant_id} "
            f"({len(built.time_slots)} slot edit(s))",
            extra=self._log_extra("save_settings"),
        )
        return self.get_settings()

    def _merge_raw_settings(self, patch: Dict[str, Any], operation: str) -> None:
        with self._write(operation):
            restaurant = self._restaurant()
            restaurant.settings = deep_merge(restaurant.settings or {}, patch)
        self.invalidate_settings_cache()

    def is_waitlist_paused(self) -> bool:
        with self._read("is_waitlist_paused"):
            return bool((self._restaurant().settings or {}).get("waitlist_paused", False))

    def set_waitlist_paused(self, paused: bool) -> None:
        self._merge_raw_settings({"waitlist_paused": paused}, "set_waitlist_paused")

    # ------------------------------------------------------------------
    # Time slots
    # ------------------------------------------------------------------

    def all_time_slots(self) -> List[TimeSlot]:
        """Every stored slot, active or not; used for duplicate checks."""
        with self._read("all_time_slots"):
            records = self.db.scalars(
                select(TimeSlotRecord).where(TimeSlotRecord.restaurant_id == self.restaurant_id)
            ).all()
            return [TimeSlot.model_validate(r) for r in records]

    def list_time_slots(
        self,
        weekday: Optional[int] = None,
        specific_date: Optional[date] = None,
    ) -> List[TimeSlot]:
        """
        Active slots ordered by start time.

        A specific date wins over a weekday; with neither, only recurring
        slots (no specific date) are returned.
        """
        query = select(TimeSlotRecord).where(
            TimeSlotRecord.restaurant_id == self.restaurant_id,
            TimeSlotRecord.is_active.is_(True),
        )
        if specific_date is not None:
            query = query.where(TimeSlotRecord.specific_date == specific_date)
        elif weekday is not None:
            query = query.where(TimeSlotRecord.weekday == weekday)
        else:
            query = query.where(TimeSlotRecord.specific_date.is_(None))

        with self._read("list_time_slots"):
            records = self.db.scalars(query.order_by(TimeSlotRecord.start_time)).all()
            return [TimeSlot.model_validate(r) for r in records]

    def _upsert_slot(self, slot: TimeSlot) -> TimeSlotRecord:
        fields = slot.model_dump(exclude={"id"}, mode="python")
        fields["start_time"] = slot.start_time
        fields["end_time"] = slot.end_time
        if slot.id:
            record = self._scoped(TimeSlotRecord, slot.id, "Time slot")
            for key, value in fields.items():
                setattr(record, key, value)
        else:
            record = TimeSlotRecord(restaurant_id=self.restaurant_id, **fields)
            self.db.add(record)
        self.db.flush()
        return record

    def create_time_slot(self, slot: TimeSlot) -> TimeSlot:
        """
        Raises:
            DuplicateSlotError: If the window already exists on that weekday
        """
        validate_time_slot(slot, self.all_time_slots())
        with self._write("create_time_slot"):
            record = self._upsert_slot(slot.model_copy(update={"id": None}))
        logger.info(
            f"Created time slot {record.id} on weekday {record.weekday}",
            extra=self._log_extra("create_time_slot"),
        )
        return TimeSlot.model_validate(record)

    def update_time_slot(self, slot_id: str, slot: TimeSlot) -> TimeSlot:
        """
        Raises:
            DuplicateSlotError: If the edit collides with another slot
            RecordNotFoundError: If the slot does not exist
        """
        validate_time_slot(slot, self.all_time_slots(), exclude_id=slot_id)
        with self._write("update_time_slot"):
            record = self._upsert_slot(slot.model_copy(update={"id": slot_id}))
        return TimeSlot.model_validate(record)

    def delete_time_slot(self, slot_id: str) -> None:
        with self._write("delete_time_slot"):
            self.db.delete(self._scoped(TimeSlotRecord, slot_id, "Time slot"))
        logger.info(f"Deleted time slot {slot_id}", extra=self._log_extra("delete_time_slot"))

    def available_slot_count(self, start_time: time, end_time: time, day: date) -> int:
        """Covers left in the day's slot with this window; 0 if no such slot."""
        with self._read("available_slot_count"):
            slot = self.db.scalars(
                select(TimeSlotRecord)
                .where(
                    TimeSlotRecord.restaurant_id == self.restaurant_id,
                    TimeSlotRecord.weekday == store_weekday(day),
                    TimeSlotRecord.start_time == start_time,
                    TimeSlotRecord.end_time == end_time,
                    TimeSlotRecord.is_active.is_(True),
                )
                .limit(1)
            ).first()
            if slot is None:
                return 0

            day_start = datetime.combine(day, time.min)
            booked = self.db.scalar(
                select(func.count(ReservationRecord.id)).where(
                    ReservationRecord.restaurant_id == self.restaurant_id,
                    ReservationRecord.status == ReservationStatus.CONFIRMED.value,
                    ReservationRecord.slot_start_time == start_time,
                    ReservationRecord.slot_end_time == end_time,
                    ReservationRecord.date_time >= day_start,
                    ReservationRecord.date_time < day_start + timedelta(days=1),
                )
            )
        return remaining_covers(TimeSlot.model_validate(slot), booked or 0)

    def available_slots(self, day: date) -> List[str]:
        """Guest-facing start labels ("6:30 PM") of slots with covers left."""
        labels = []
        for slot in self.list_time_slots(weekday=store_weekday(day)):
            if self.available_slot_count(slot.start_time, slot.end_time, day) > 0:
                labels.append(format_12h(slot.start_time))
        return labels

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def add_table(self, name: str, seats: int, location: Optional[str] = None) -> Table:
        with self._write("add_table"):
            record = DiningTable(
                restaurant_id=self.restaurant_id,
                name=name,
                seats=seats,
                location=location,
                status=TableStatus.AVAILABLE.value,
            )
            self.db.add(record)
            self.db.flush()
        return Table.model_validate(record)

    def list_tables(self) -> List[Table]:
        with self._read("list_tables"):
            records = self.db.scalars(
                select(DiningTable)
                .where(DiningTable.restaurant_id == self.restaurant_id)
                .order_by(DiningTable.name)
            ).all()
            return [Table.model_validate(r) for r in records]

    def free_table(self, table_id: str) -> Table:
        """Put a table straight back to available."""
        with self._write("free_table"):
            record = self._scoped(DiningTable, table_id, "Table")
            record.status = TableStatus.AVAILABLE.value
        return Table.model_validate(record)

    def set_table_status(self, table_id: str, status: TableStatus) -> Table:
        with self._write("set_table_status"):
            record = self._scoped(DiningTable, table_id, "Table")
            record.status = status.value
        return Table.model_validate(record)

    def eligible_tables_for_entry(self, entry_id: str) -> List[Table]:
        entry = self.get_waitlist_entry(entry_id)
        return eligible_tables(self.list_tables(), entry.party_size)

    def _claim_table(self, table_id: str, party_size: int, entry_id: str) -> None:
        """
        Flip a table to occupied only if it is still available and big enough.

        The conditional UPDATE is what keeps two managers from seating
        different parties at the same table.
        """
        ensure_table_eligible(self.list_tables(), table_id, party_size, entry_id)
        result = self.db.execute(
            update(DiningTable)
            .where(
                DiningTable.id == table_id,
                DiningTable.restaurant_id == self.restaurant_id,
                DiningTable.status == TableStatus.AVAILABLE.value,
                DiningTable.seats >= party_size,
            )
            .values(status=TableStatus.OCCUPIED.value)
        )
        if result.rowcount != 1:
            raise AssignmentConflictError(table_id, entry_id)

    # ------------------------------------------------------------------
    # Waitlist
    # ------------------------------------------------------------------

    def add_to_waitlist(self, data: WaitlistCreate) -> WaitlistEntry:
        with self._write("add_to_waitlist"):
            record = WaitlistEntryRecord(
                restaurant_id=self.restaurant_id,
                status=WaitlistStatus.WAITING.value,
                check_in_time=_utcnow(),
                **data.model_dump(),
            )
            self.db.add(record)
            self.db.flush()
        logger.info(
            f"Added waitlist entry {record.id} (party of {record.party_size})",
            extra=self._log_extra("add_to_waitlist"),
        )
        return WaitlistEntry.model_validate(record)

    def get_waitlist_entry(self, entry_id: str) -> WaitlistEntry:
        with self._read("get_waitlist_entry"):
            return WaitlistEntry.model_validate(
                self._scoped(WaitlistEntryRecord, entry_id, "Waitlist entry")
            )

    def list_waitlist(self, active_only: bool = True) -> List[WaitlistEntry]:
        """Entries ordered by check-in; by default only waiting/notified ones."""
        query = select(WaitlistEntryRecord).where(
            WaitlistEntryRecord.restaurant_id == self.restaurant_id
        )
        if active_only:
            query = query.where(WaitlistEntryRecord.status.in_(ACTIVE_WAITLIST_STATUSES))
        with self._read("list_waitlist"):
            records = self.db.scalars(query.order_by(WaitlistEntryRecord.check_in_time)).all()
            return [WaitlistEntry.model_validate(r) for r in records]

    def update_waitlist_status(self, entry_id: str, status: WaitlistStatus) -> WaitlistEntry:
        with self._write("update_waitlist_status"):
            record = self._scoped(WaitlistEntryRecord, entry_id, "Waitlist entry")
            record.status = status.value
        return WaitlistEntry.model_validate(record)

    def assign_table(self, entry_id: str, table_id: str) -> WaitlistEntry:
        """
        Seat a waiting party at a table.

        The table update and the entry update commit together; if the
        table was taken (or never fit) in the meantime, nothing changes.

        Raises:
            AssignmentConflictError: If the table is no longer eligible or
                the party is not waiting anymore
            RecordNotFoundError: If the entry does not exist
        """
        with self._write("assign_table"):
            record = self._scoped(WaitlistEntryRecord, entry_id, "Waitlist entry")
            if record.status not in ACTIVE_WAITLIST_STATUSES:
                raise AssignmentConflictError(table_id, entry_id, "party is no longer waiting")
            self._claim_table(table_id, record.party_size, entry_id)
            record.status = WaitlistStatus.SEATED.value
            record.table_id = table_id
            record.seated_at = _utcnow()
        logger.info(
            f"Seated waitlist entry {entry_id} at table {table_id}",
            extra=self._log_extra("assign_table", table_id=table_id),
        )
        return WaitlistEntry.model_validate(record)

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    def add_reservation(
        self,
        data: ReservationCreate,
        payment_amount: Optional[float] = None,
    ) -> Reservation:
        """
        Book a reservation.

        An offset-aware booking time is converted to the restaurant's
        timezone and stored as naive wall-clock time.
        """
        tz_name = self.get_settings().manager_settings.timezone
        local_time = to_restaurant_time(data.date_time, tz_name).replace(tzinfo=None)
        with self._write("add_reservation"):
            record = ReservationRecord(
                restaurant_id=self.restaurant_id,
                status=data.status.value,
                payment_amount=payment_amount,
                date_time=local_time,
                **data.model_dump(exclude={"status", "date_time"}),
            )
            self.db.add(record)
            self.db.flush()
        logger.info(
            f"Added reservation {record.id} for {record.date_time}",
            extra=self._log_extra("add_reservation"),
        )
        return Reservation.model_validate(record)

    def get_reservation(self, reservation_id: str) -> Reservation:
        with self._read("get_reservation"):
            return Reservation.model_validate(
                self._scoped(ReservationRecord, reservation_id, "Reservation")
            )

    def list_reservations(self) -> List[Reservation]:
        """All reservations, newest booking time first."""
        with self._read("list_reservations"):
            records = self.db.scalars(
                select(ReservationRecord)
                .where(ReservationRecord.restaurant_id == self.restaurant_id)
                .order_by(ReservationRecord.date_time.desc())
            ).all()
            return [Reservation.model_validate(r) for r in records]

    def update_reservation_status(
        self,
        reservation_id: str,
        status: ReservationStatus,
    ) -> Reservation:
        with self._write("update_reservation_status"):
            record = self._scoped(ReservationRecord, reservation_id, "Reservation")
            record.status = status.value
        return Reservation.model_validate(record)

    def seat_reservation(self, reservation_id: str, table_id: str) -> Reservation:
        """
        Seat a reservation at a table, with the same guard as assign_table.

        Raises:
            AssignmentConflictError: If the table is no longer eligible or
                the reservation is already seated, cancelled or completed
        """
        with self._write("seat_reservation"):
            record = self._scoped(ReservationRecord, reservation_id, "Reservation")
            if record.status in (
                ReservationStatus.SEATED.value,
                ReservationStatus.CANCELLED.value,
                ReservationStatus.COMPLETED.value,
            ):
                raise AssignmentConflictError(
                    table_id, reservation_id, f"reservation is {record.status}"
                )
            self._claim_table(table_id, record.party_size, reservation_id)
            record.status = ReservationStatus.SEATED.value
            record.table_id = table_id
        logger.info(
            f"Seated reservation {reservation_id} at table {table_id}",
            extra=self._log_extra("seat_reservation", table_id=table_id),
        )
        return Reservation.model_validate(record)

    # ------------------------------------------------------------------
    # Message history
    # ------------------------------------------------------------------

    def save_message_history(self, reservation_id: str, data: MessageCreate) -> MessageHistory:
        """
        Record a message sent (or attempted) to the guest of a reservation.

        Delivery happens elsewhere; only the outcome is stored here.

        Raises:
            RecordNotFoundError: If the reservation does not exist
        """
        with self._write("save_message_history"):
            reservation = self._scoped(ReservationRecord, reservation_id, "Reservation")
            record = MessageHistoryRecord(
                restaurant_id=self.restaurant_id,
                reservation_id=reservation.id,
                phone_number=data.phone_number or reservation.phone,
                message=data.message,
                status=data.status.value,
                sent_at=_utcnow(),
            )
            self.db.add(record)
            self.db.flush()
        logger.info(
            f"Recorded {record.status} message for reservation {reservation_id}",
            extra=self._log_extra("save_message_history"),
        )
        return MessageHistory.model_validate(record)

    def list_message_history(self, reservation_id: str) -> List[MessageHistory]:
        """Messages of a reservation, most recent first."""
        with self._read("list_message_history"):
            self._scoped(ReservationRecord, reservation_id, "Reservation")
            records = self.db.scalars(
                select(MessageHistoryRecord)
                .where(
                    MessageHistoryRecord.restaurant_id == self.restaurant_id,
                    MessageHistoryRecord.reservation_id == reservation_id,
                )
                .order_by(MessageHistoryRecord.sent_at.desc())
            ).all()
            return [MessageHistory.model_validate(r) for r in records]
