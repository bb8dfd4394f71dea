"""Weekday / weekend attribution of elapsed time.

A window is cut at every local midnight; each piece is attributed wholly to
the calendar day it lies in.  An hour that straddles midnight is therefore
split proportionally between the two days rather than assigned to either.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from decimal import Decimal

from rental_billing.engine.money import MICROS_PER_HOUR, elapsed, micros


def _next_midnight(moment: datetime) -> datetime:
    return datetime.combine(moment.date() + timedelta(days=1), time.min, tzinfo=moment.tzinfo)


def weekend_micros(start: datetime, end: datetime, weekend_days: list[int]) -> int:
    """Microseconds of [start, end) that fall on a weekend calendar day."""
    total = 0
    cursor = start
    while cursor < end:
        boundary = min(_next_midnight(cursor), end)
        if cursor.weekday() in weekend_days:
            total += micros(elapsed(cursor, boundary))
        cursor = boundary
    return total


def split_hours(start: datetime, end: datetime, weekend_days: list[int]) -> tuple[Decimal, Decimal]:
    """Return ``(weekday_hours, weekend_hours)`` for [start, end).

    The two parts always sum exactly to the window length.
    """
    total_hours = Decimal(micros(elapsed(start, end))) / MICROS_PER_HOUR
    weekend_hours = Decimal(weekend_micros(start, end, weekend_days)) / MICROS_PER_HOUR
    return total_hours - weekend_hours, weekend_hours


def touches_weekend(start: datetime, end: datetime, weekend_days: list[int]) -> bool:
    """True if any instant of [start, end) lies on a weekend day."""
    return weekend_micros(start, end, weekend_days) > 0
