"""
DateTime utilities for slot times, weekdays and restaurant timezones.
Times of day travel as "HH:MM" strings in the stored settings; the store
itself hands back "HH:MM:SS".
"""
from datetime import datetime, time
from typing import Optional, Union
import re

import pytz

from core.config import settings


TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})(?::(\d{2}))?$')


def parse_hhmm(value: Union[str, time]) -> time:
    """
    Parse a 24h "HH:MM" (or "HH:MM:SS") string into a time object.

    Args:
        value: String from a settings payload or a time instance

    Returns:
        time object with seconds dropped

    Raises:
        ValueError: If the value is not a valid 24h time
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    match = TIME_PATTERN.match((value or '').strip())
    if not match:
        raise ValueError(f"Invalid time {value!r}: expected HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time {value!r}: out of range")
    return time(hour, minute)


def format_hhmm(value: time) -> str:
    """Render a time as a 24h HH:MM string."""
    return value.strftime('%H:%M')


def format_12h(value: time) -> str:
    """Render a time as "h:mm AM/PM" for guest-facing slot labels."""
    display_hour = value.hour % 12 or 12
    suffix = 'PM' if value.hour >= 12 else 'AM'
    return f"{display_hour}:{value.minute:02d} {suffix}"


def store_weekday(value: datetime) -> int:
    """Convert a date/datetime to the store weekday (0 = Sunday)."""
    return (value.weekday() + 1) % 7


def is_weekend(value: datetime) -> bool:
    """Saturday or Sunday."""
    return value.weekday() >= 5


def get_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Resolve a timezone name, falling back to the configured default.

    Raises:
        pytz.UnknownTimeZoneError: If the name is not a known zone
    """
    return pytz.timezone(tz_name or settings.default_timezone)


def is_valid_timezone(tz_name: str) -> bool:
    return tz_name in pytz.all_timezones_set


def get_current_datetime(tz_name: Optional[str] = None) -> datetime:
    """Get the current datetime in the restaurant timezone."""
    return datetime.now(get_timezone(tz_name))


def to_restaurant_time(value: datetime, tz_name: Optional[str] = None) -> datetime:
    """
    Express a datetime in the restaurant's wall-clock time.

    Naive datetimes are assumed to already be restaurant-local and are
    localized rather than converted.
    """
    tz = get_timezone(tz_name)
    if value.tzinfo is None:
        return tz.localize(value)
    return value.astimezone(tz)
