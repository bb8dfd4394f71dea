"""Decimal helpers shared by every calculator.

All currency is rounded to the cent with ROUND_HALF_UP at each named stage,
so sums of rounded stages are exact and every surface sees the same digits.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MICROS_PER_HOUR = Decimal(3_600_000_000)


def round_money(value: Decimal) -> Decimal:
    """Quantize to 0.01, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def ceil_whole(value: Decimal) -> Decimal:
    """Round up to the next whole unit (3.0 → 3, 3.01 → 4)."""
    return Decimal(value).to_integral_value(rounding=ROUND_CEILING)


def micros(delta: timedelta) -> int:
    """Exact length of a timedelta in microseconds."""
    return (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds


def elapsed(start: datetime, end: datetime) -> timedelta:
    """Real time from start to end.

    Aware values are compared in UTC, so a DST jump inside the span counts as
    the hour it really is rather than the wall-clock difference.
    """
    if start.tzinfo is not None and end.tzinfo is not None:
        return end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return end - start


def shift(start: datetime, delta: timedelta) -> datetime:
    """``start`` plus ``delta`` of real time, kept in start's timezone."""
    if start.tzinfo is None:
        return start + delta
    return (start.astimezone(timezone.utc) + delta).astimezone(start.tzinfo)


def hours_between(start: datetime, end: datetime) -> Decimal:
    """Elapsed hours from start to end, exact to the microsecond (negative if end < start)."""
    return Decimal(micros(elapsed(start, end))) / MICROS_PER_HOUR


def plain(value: Decimal) -> str:
    """Render a quantity without exponent or trailing zeros: 12.50 → '12.5', 1E+2 → '100'."""
    return format(Decimal(value).normalize(), "f")


def amount(value: Decimal) -> str:
    """Render a currency value with exactly two decimals."""
    return format(round_money(value), "f")


def positive(value: Decimal | None) -> Decimal | None:
    """The value if it is a usable rate (> 0), else None.  Zero counts as unset."""
    return value if value is not None and value > 0 else None
