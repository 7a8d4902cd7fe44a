"""
Duplicate checking for recurring weekly time slots.

Only exact (start_time, end_time) matches on the same weekday conflict.
Overlapping but different windows, e.g. 18:00-19:00 and 18:30-19:30, are
both accepted.
"""

import logging
from typing import Iterable, Optional

from core.errors import DuplicateSlotError
from domain.models import TimeSlot


logger = logging.getLogger(__name__)


def find_duplicate_slot(
    candidate: TimeSlot,
    existing: Iterable[TimeSlot],
    exclude_id: Optional[str] = None,
) -> Optional[TimeSlot]:
    """
    Find an active slot that duplicates the candidate's window.

    Args:
        candidate: Slot about to be created or updated
        existing: Slots already stored for the restaurant
        exclude_id: Id of the slot being edited, ignored in the comparison

    Returns:
        The first conflicting slot, or None
    """
    for slot in existing:
        if slot.weekday != candidate.weekday or not slot.is_active:
            continue
        if exclude_id is not None and slot.id == exclude_id:
            continue
        if slot.start_time == candidate.start_time and slot.end_time == candidate.end_time:
            return slot
    return None


def validate_time_slot(
    candidate: TimeSlot,
    existing: Iterable[TimeSlot],
    exclude_id: Optional[str] = None,
) -> None:
    """
    Ensure the candidate does not repeat an existing active slot.

    Raises:
        DuplicateSlotError: If an identical window exists on the same weekday
    """
    duplicate = find_duplicate_slot(candidate, existing, exclude_id)
    if duplicate is not None:
        logger.debug(
            "Slot %s-%s on weekday %s duplicates slot %s",
            candidate.start_time, candidate.end_time, candidate.weekday, duplicate.id,
        )
        raise DuplicateSlotError(candidate.weekday, candidate.start_time, candidate.end_time)


def remaining_covers(slot: TimeSlot, confirmed_count: int) -> int:
    """Covers still bookable in a slot on a given day."""
    return max(0, slot.max_covers - confirmed_count)
