"""Quote calculator — resolved schedule + rental window → Quote.

Pure function of its arguments; safe to call repeatedly while a user drags a
date picker.  Every model shares the same tail:

  subtotal = base_price + weekend_surcharge_amount
  gst      = round(subtotal × gst_percentage / 100)
  total    = subtotal + gst

Entry point: ``quote(schedule, window, settings=None, slab=None)``
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal

from rental_billing.config.settings import EngineSettings
from rental_billing.config.window import RentalWindow
from rental_billing.engine.calendar import split_hours, touches_weekend
from rental_billing.engine.money import amount, ceil_whole, hours_between, plain, round_money, shift
from rental_billing.errors import IncompleteTariff, InvalidWindow, SlabDurationOutOfRange
from rental_billing.models.results import Quote
from rental_billing.models.schedule import (
    FlatHourlyModel,
    ResolvedSchedule,
    SimpleModel,
    SlabModel,
)

logger = logging.getLogger(__name__)

SLAB_UNIT_HOURS = {"hourly": 1, "daily": 24, "weekly": 168}
SLAB_UNIT_LABELS = {"hourly": "hrs", "daily": "days", "weekly": "weeks"}

# Auto-selection checks the longest slab first.
SLAB_SELECTION_ORDER = ("weekly", "daily", "hourly")


# ═══════════════════════════════════════════════════════════════════════════
# Public entry point
# ═══════════════════════════════════════════════════════════════════════════

def quote(
    schedule: ResolvedSchedule,
    window: RentalWindow,
    settings: EngineSettings | None = None,
    slab: str | None = None,
) -> Quote:
    """Price ``window`` under ``schedule``.

    ``slab`` names the legacy slab the user picked; it is only consulted for
    slab-model schedules.

    Raises ``InvalidWindow`` for a non-positive window and ``IncompleteTariff``
    when the model lacks a rate this window needs.
    """
    settings = settings or EngineSettings()
    duration = window_hours(window)

    if isinstance(schedule, SimpleModel):
        return _quote_simple(schedule, window, duration, settings)
    if isinstance(schedule, SlabModel):
        return _quote_slab(schedule, window, duration, settings, slab)
    if isinstance(schedule, FlatHourlyModel):
        return _quote_flat(schedule, duration)
    raise TypeError(f"unknown schedule type {type(schedule).__name__}")


def window_hours(window: RentalWindow) -> Decimal:
    """Validated duration of the window in hours."""
    if (window.pickup.tzinfo is None) != (window.dropoff.tzinfo is None):
        raise InvalidWindow(
            "pickup and dropoff must both be timezone-aware or both naive",
            details={"pickup": window.pickup.isoformat(), "dropoff": window.dropoff.isoformat()},
        )
    duration = hours_between(window.pickup, window.dropoff)
    if duration <= 0:
        raise InvalidWindow(
            "dropoff must be after pickup",
            details={"pickup": window.pickup.isoformat(), "dropoff": window.dropoff.isoformat()},
        )
    return duration


# ═══════════════════════════════════════════════════════════════════════════
# Shared pieces
# ═══════════════════════════════════════════════════════════════════════════

def _finish(
    *,
    base_price: Decimal,
    gst_percentage: Decimal,
    weekend_surcharge_amount: Decimal = Decimal("0"),
    **fields,
) -> Quote:
    """Apply the common money tail and build the Quote."""
    base = round_money(base_price)
    surcharge = round_money(weekend_surcharge_amount)
    subtotal = base + surcharge
    gst_amount = round_money(subtotal * gst_percentage / 100)
    return Quote(
        base_price=base,
        weekend_surcharge_amount=surcharge,
        subtotal=subtotal,
        gst_percentage=gst_percentage,
        gst_amount=gst_amount,
        total=subtotal + gst_amount,
        **fields,
    )


def _included_km(
    km_limit: Decimal | None,
    km_limit_per_hour: Decimal | None,
    billable_hours: Decimal,
) -> Decimal | None:
    # Absolute limit wins when both are configured.
    if km_limit is not None:
        return km_limit
    if km_limit_per_hour is not None:
        return km_limit_per_hour * billable_hours
    return None


def _min_note(duration: Decimal, min_hours: Decimal) -> str:
    return f" (min {plain(min_hours)} hrs)" if duration < min_hours else ""


def _end_after(start: datetime, hours: Decimal) -> datetime:
    return shift(start, timedelta(hours=int(hours)))


# ═══════════════════════════════════════════════════════════════════════════
# Simple model
# ═══════════════════════════════════════════════════════════════════════════

def _cheapest_longer_block(
    schedule: SimpleModel,
    whole: Decimal,
    settings: EngineSettings,
) -> tuple[Decimal, int, str] | None:
    """Cheapest ``(price, hours, pricing_type)`` block covering ``whole`` hours or more."""
    blocks = [
        (price, hours, "override")
        for hours, price in schedule.hourly_overrides.items()
        if hours >= whole
    ]
    if schedule.price_per_week is not None and whole <= settings.hours_per_week:
        blocks.append((schedule.price_per_week, settings.hours_per_week, "weekly"))
    return min(blocks, key=lambda block: block[0], default=None)


def _quote_simple(
    schedule: SimpleModel,
    window: RentalWindow,
    duration: Decimal,
    settings: EngineSettings,
) -> Quote:
    effective = max(duration, schedule.min_booking_hours)
    whole = ceil_whole(effective)
    note = _min_note(duration, schedule.min_booking_hours)
    weekday_hours = weekend_hours = Decimal("0")

    # Block prices first: they are publisher-set discounts over hourly accrual.
    if schedule.price_12_hours is not None and effective <= settings.block_hours:
        pricing_type = "12hours"
        base = schedule.price_12_hours
        breakdown = f"{settings.block_hours} hour package for {plain(whole)} hrs{note}"
    elif int(whole) in schedule.hourly_overrides:
        pricing_type = "override"
        base = schedule.hourly_overrides[int(whole)]
        breakdown = f"{plain(whole)} hour package{note}"
    elif schedule.price_per_week is not None and effective > settings.hours_per_week:
        pricing_type = "weekly"
        weeks = whole / settings.hours_per_week
        base = schedule.price_per_week * whole / settings.hours_per_week
        breakdown = (
            f"{amount(schedule.price_per_week)}/week × "
            f"{plain(weeks.quantize(Decimal('0.01')))} weeks ({plain(whole)} hrs){note}"
        )
    else:
        if schedule.weekday_rate is None and schedule.weekend_rate is None:
            raise IncompleteTariff("simple", "weekday_rate or weekend_rate")
        pricing_type = "tariff"
        weekday_hours, weekend_hours = split_hours(
            window.pickup, _end_after(window.pickup, whole), settings.weekend_days,
        )
        weekday_rate = schedule.hourly_rate(weekend=False)
        weekend_rate = schedule.hourly_rate(weekend=True)
        base = weekday_hours * weekday_rate + weekend_hours * weekend_rate
        parts = []
        if weekday_hours > 0:
            parts.append(f"{plain(weekday_hours.quantize(Decimal('0.01')))} hrs × {amount(weekday_rate)}/hr weekday")
        if weekend_hours > 0:
            parts.append(f"{plain(weekend_hours.quantize(Decimal('0.01')))} hrs × {amount(weekend_rate)}/hr weekend")
        breakdown = " + ".join(parts) + note

    # A longer fixed-price block that is cheaper caps the price, so adding
    # hours never lowers it.
    cap = _cheapest_longer_block(schedule, whole, settings)
    if cap is not None and cap[0] < base:
        base, block_hours, pricing_type = cap
        weekday_hours = weekend_hours = Decimal("0")
        if pricing_type == "weekly":
            breakdown = f"1 week package ({amount(base)}) for {plain(whole)} hrs{note}"
        else:
            breakdown = f"{block_hours} hour package for {plain(whole)} hrs{note}"

    logger.debug("Simple quote: %s for %s hrs (billed %s)", pricing_type, duration, whole)
    return _finish(
        base_price=base,
        gst_percentage=schedule.gst_percentage,
        pricing_model="simple",
        pricing_type=pricing_type,
        duration_hours=duration,
        billable_hours=whole,
        weekday_hours=weekday_hours,
        weekend_hours=weekend_hours,
        has_weekend=weekend_hours > 0,
        breakdown_text=breakdown,
        included_km=_included_km(schedule.km_limit, schedule.km_limit_per_hour, whole),
        excess_km_rate=schedule.excess_km_charge,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Slab model
# ═══════════════════════════════════════════════════════════════════════════

def _in_range(schedule: SlabModel, name: str, duration: Decimal) -> bool:
    slab = schedule.slab(name)
    return slab is not None and slab.duration_min <= duration <= slab.duration_max


def select_slab(schedule: SlabModel, duration: Decimal) -> str:
    """Slab to use when the caller did not pick one.

    A single configured slab is always used; otherwise the longest slab whose
    duration range covers ``duration`` wins.
    """
    configured = schedule.slabs.configured()
    if len(configured) == 1:
        return configured[0]
    for name in SLAB_SELECTION_ORDER:
        if _in_range(schedule, name, duration):
            return name
    raise IncompleteTariff("slab", f"a slab covering {plain(duration.quantize(Decimal('0.01')))} hours")


def _quote_slab(
    schedule: SlabModel,
    window: RentalWindow,
    duration: Decimal,
    settings: EngineSettings,
    requested: str | None,
) -> Quote:
    name = requested or select_slab(schedule, duration)
    slab = schedule.slab(name)
    if slab is None:
        raise IncompleteTariff("slab", f"{name} slab")
    if not _in_range(schedule, name, duration):
        raise SlabDurationOutOfRange(
            name, duration.quantize(Decimal("0.01")), slab.duration_min, slab.duration_max,
        )

    hours = max(duration, schedule.min_booking_hours)
    if slab.minimum_booking_rule == "min_duration":
        hours = max(hours, slab.minimum_value)

    unit = SLAB_UNIT_HOURS[name]
    units = ceil_whole(hours / unit)
    base = slab.price * units
    if slab.minimum_booking_rule == "min_price":
        base = max(base, slab.minimum_value)

    has_weekend = touches_weekend(window.pickup, window.dropoff, settings.weekend_days)
    surge = schedule.weekend_surge_multiplier if has_weekend else Decimal("1.0")
    surcharge = round_money(base) * (surge - 1)

    breakdown = f"{name} slab: {plain(units)} {SLAB_UNIT_LABELS[name]} × {amount(slab.price)}"
    if slab.minimum_booking_rule == "min_price" and base == slab.minimum_value:
        breakdown += f" (min price {amount(slab.minimum_value)})"

    logger.debug("Slab quote: %s × %s units, surge %s", name, units, surge)
    return _finish(
        base_price=base,
        weekend_surcharge_amount=surcharge,
        gst_percentage=schedule.gst_percentage,
        pricing_model="slab",
        pricing_type=name,
        slab=name,
        duration_hours=duration,
        billable_hours=units * unit,
        has_weekend=has_weekend,
        surge_multiplier=surge,
        breakdown_text=breakdown,
        included_km=slab.included_km,
        excess_km_rate=schedule.excess_km_charge if schedule.excess_km_charge is not None else slab.extra_km_price,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Flat-hourly model
# ═══════════════════════════════════════════════════════════════════════════

def _quote_flat(schedule: FlatHourlyModel, duration: Decimal) -> Quote:
    whole = ceil_whole(max(duration, schedule.min_booking_hours))
    base = whole * schedule.price_per_hour
    note = _min_note(duration, schedule.min_booking_hours)
    return _finish(
        base_price=base,
        gst_percentage=schedule.gst_percentage,
        pricing_model="flat_hourly",
        pricing_type="hourly",
        duration_hours=duration,
        billable_hours=whole,
        breakdown_text=f"{plain(whole)} hrs × {amount(schedule.price_per_hour)}/hr{note}",
        included_km=_included_km(schedule.km_limit, schedule.km_limit_per_hour, whole),
        excess_km_rate=schedule.excess_km_charge,
    )
