"""Settlement calculator — frozen quote + post-ride facts → Settlement.

  total_km        = max(0, end_km − start_km)
  excess_km       = max(0, total_km − included_km)
  distance_charge = excess_km × excess_km_rate
  delay_hours     = delay_minutes / 60            (two decimals)
  delay_charge    = delay_hours × (weekday_rate or price_per_hour)
  final_total     = quote.total + distance_charge + delay_charge

Delay is persisted in whole minutes but charged in hours.  The conversion
lives only in ``delay_minutes_to_hours`` / ``delay_hours_to_minutes``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from rental_billing.config.tariff import TariffConfig
from rental_billing.config.window import SettlementFacts
from rental_billing.engine.money import CENT, ZERO, elapsed, positive, round_money
from rental_billing.errors import InvalidOdometer, InvalidReturnTime
from rental_billing.models.results import Quote, Settlement

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Delay unit conversion (persistence boundary)
# ═══════════════════════════════════════════════════════════════════════════

def delay_minutes_between(scheduled_dropoff: datetime, actual_return: datetime) -> int:
    """Whole minutes late, floored; 0 for an on-time or early return.

    Raises ``InvalidReturnTime`` when one time is timezone-aware and the other is not.
    """
    if (scheduled_dropoff.tzinfo is None) != (actual_return.tzinfo is None):
        raise InvalidReturnTime(scheduled_dropoff, actual_return)
    late = elapsed(scheduled_dropoff, actual_return) // timedelta(minutes=1)
    return max(0, late)


def delay_minutes_to_hours(minutes: int) -> Decimal:
    """Persisted minutes → charged hours, rounded half-up to 0.01 h (90 → 1.50)."""
    return (Decimal(minutes) / 60).quantize(CENT, rounding=ROUND_HALF_UP)


def delay_hours_to_minutes(hours: Decimal) -> int:
    """Displayed hours → persisted whole minutes (1.5 → 90)."""
    return int((Decimal(hours) * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ═══════════════════════════════════════════════════════════════════════════
# Settlement
# ═══════════════════════════════════════════════════════════════════════════

def delay_rate(config: TariffConfig) -> Decimal | None:
    """Hourly rate for late return: weekday_rate, else price_per_hour."""
    return positive(config.weekday_rate) or positive(config.price_per_hour)


def settle(config: TariffConfig, quote: Quote, facts: SettlementFacts) -> Settlement:
    """Compute distance overage and delay charges for a completed ride.

    Raises ``InvalidOdometer`` when the closing reading is below the opening
    one and ``InvalidReturnTime`` for a mix of aware and naive return times,
    both before any charge is computed.
    """
    if facts.end_km < facts.start_km:
        raise InvalidOdometer(facts.start_km, facts.end_km)
    if (facts.scheduled_dropoff.tzinfo is None) != (facts.actual_return.tzinfo is None):
        raise InvalidReturnTime(facts.scheduled_dropoff, facts.actual_return)

    # ── Distance ──────────────────────────────────────────────────────
    total_km = max(Decimal("0"), facts.end_km - facts.start_km)
    included_km = quote.included_km
    # Tariff rate wins; a slab quote carries its own frozen overage rate.
    km_rate = positive(config.excess_km_charge) or positive(quote.excess_km_rate)

    if included_km is None:
        excess_km = Decimal("0")
    else:
        excess_km = max(Decimal("0"), total_km - included_km)

    if included_km is not None and km_rate is not None:
        distance_charge = round_money(excess_km * km_rate)
    else:
        distance_charge = ZERO

    # ── Delay ─────────────────────────────────────────────────────────
    minutes = delay_minutes_between(facts.scheduled_dropoff, facts.actual_return)
    hours = delay_minutes_to_hours(minutes)
    rate = delay_rate(config)

    if hours > 0 and rate is not None:
        delay_charge = round_money(hours * rate)
    else:
        delay_charge = ZERO
        if hours > 0:
            logger.warning("Late return of %s minutes not charged: tariff has no hourly rate", minutes)

    extras = distance_charge + delay_charge
    logger.debug("Settlement: distance %s, delay %s, extras %s", distance_charge, delay_charge, extras)
    return Settlement(
        total_km=total_km,
        excess_km=excess_km,
        excess_km_rate=km_rate,
        distance_charge=distance_charge,
        delay_minutes=minutes,
        delay_hours=hours,
        delay_rate=rate,
        delay_charge=delay_charge,
        extras=extras,
        quote_total=quote.total,
        final_total=quote.total + extras,
    )
