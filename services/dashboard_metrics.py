"""KPI figures for the reservations dashboard and the insights prompt."""

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from domain.enums import ReservationStatus, WaitlistStatus
from domain.models import DashboardMetrics, Reservation, WaitlistEntry


UPCOMING_WINDOW_DAYS = 7


def _local(value: datetime, now: datetime) -> datetime:
    """Express ``value`` in ``now``'s timezone so calendar dates line up."""
    if value.tzinfo is None or now.tzinfo is None:
        return value
    return value.astimezone(now.tzinfo)


def average_wait_minutes(entries: Iterable[WaitlistEntry]) -> Optional[float]:
    """Mean check-in to seating time of seated entries, rounded to 0.1 min."""
    waits = [
        (entry.seated_at - entry.check_in_time).total_seconds() / 60
        for entry in entries
        if entry.status == WaitlistStatus.SEATED and entry.seated_at is not None
    ]
    if not waits:
        return None
    return round(sum(waits) / len(waits), 1)


def compute_metrics(
    reservations: Iterable[Reservation],
    waitlist: Iterable[WaitlistEntry],
    now: datetime,
) -> DashboardMetrics:
    """
    Compute dashboard KPIs.

    Args:
        reservations: Every reservation of the restaurant, any status
        waitlist: Waitlist entries, used for the average wait
        now: Current time in the restaurant timezone

    Returns:
        DashboardMetrics
    """
    reservations: List[Reservation] = list(reservations)
    today = now.date()
    week_end = today + timedelta(days=UPCOMING_WINDOW_DAYS)

    local_times = [_local(r.date_time, now) for r in reservations]
    today_count = sum(1 for t in local_times if t.date() == today)
    week_count = sum(1 for t in local_times if today <= t.date() <= week_end)

    total = len(reservations)
    if total:
        avg_party = round(sum(r.party_size for r in reservations) / total, 1)
        cancelled = sum(1 for r in reservations if r.status == ReservationStatus.CANCELLED)
        cancellation_rate = round(cancelled / total * 100, 1)
        peak_hour = Counter(t.hour for t in local_times).most_common(1)[0][0]
    else:
        avg_party = 0.0
        cancellation_rate = 0.0
        peak_hour = None

    return DashboardMetrics(
        total_reservations=total,
        today_reservations=today_count,
        upcoming_week_reservations=week_count,
        avg_party_size=avg_party,
        peak_hour=peak_hour,
        cancellation_rate_pct=cancellation_rate,
        avg_wait_minutes=average_wait_minutes(waitlist),
    )
