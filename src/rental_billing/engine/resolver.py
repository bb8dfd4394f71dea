"""Tariff resolver — picks the pricing model for a tariff.

Decision order (first match wins):
  1. any of price_12_hours, hourly_overrides[13..24], price_per_week,
     weekday_rate, weekend_rate          → SimpleModel
  2. a pricing_slabs block with a priced slab → SlabModel
  3. price_per_hour                      → FlatHourlyModel
  4. otherwise                           → NoPricingSignal

A rate of zero is treated exactly like an unset rate.  The resolver computes
no price; it only normalises the tariff into one schedule variant.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from rental_billing.config.settings import EngineSettings
from rental_billing.config.tariff import PricingSlabs, TariffConfig
from rental_billing.engine.money import positive
from rental_billing.errors import NoPricingSignal
from rental_billing.models.schedule import (
    FlatHourlyModel,
    ResolvedSchedule,
    SimpleModel,
    SlabModel,
)

logger = logging.getLogger(__name__)


def _gst(config: TariffConfig, settings: EngineSettings) -> Decimal:
    if config.gst_percentage is None:
        return settings.default_gst_percentage
    return config.gst_percentage


def _priced_slabs(slabs: PricingSlabs | None) -> PricingSlabs | None:
    """Drop slabs priced at zero; None if nothing priced remains."""
    if slabs is None:
        return None
    kept = {
        name: getattr(slabs, name)
        for name in slabs.configured()
        if getattr(slabs, name).price > 0
    }
    return PricingSlabs(**kept) if kept else None


def resolve(config: TariffConfig, settings: EngineSettings | None = None) -> ResolvedSchedule:
    """Resolve a tariff into exactly one schedule variant.

    Raises ``NoPricingSignal`` when no field carries a usable rate.
    """
    settings = settings or EngineSettings()
    gst = _gst(config, settings)

    overrides = {hours: price for hours, price in config.hourly_overrides.items() if price > 0}
    simple_signals = (
        positive(config.price_12_hours),
        positive(config.price_per_week),
        positive(config.weekday_rate),
        positive(config.weekend_rate),
    )
    if overrides or any(signal is not None for signal in simple_signals):
        logger.debug("Tariff resolved to simple model")
        return SimpleModel(
            weekday_rate=positive(config.weekday_rate),
            weekend_rate=positive(config.weekend_rate),
            price_12_hours=positive(config.price_12_hours),
            price_per_week=positive(config.price_per_week),
            hourly_overrides=dict(sorted(overrides.items())),
            min_booking_hours=config.min_booking_hours,
            gst_percentage=gst,
            km_limit=positive(config.km_limit),
            km_limit_per_hour=positive(config.km_limit_per_hour),
            excess_km_charge=positive(config.excess_km_charge),
        )

    slabs = _priced_slabs(config.pricing_slabs)
    if slabs is not None:
        logger.debug("Tariff resolved to slab model (%s)", ", ".join(slabs.configured()))
        return SlabModel(
            slabs=slabs,
            weekend_surge_multiplier=config.weekend_surge_multiplier,
            min_booking_hours=config.min_booking_hours,
            gst_percentage=gst,
            excess_km_charge=positive(config.excess_km_charge),
        )

    fallback = fallback_schedule(config, settings)
    if fallback is not None:
        logger.debug("Tariff resolved to flat-hourly model")
        return fallback

    raise NoPricingSignal()


def fallback_schedule(
    config: TariffConfig,
    settings: EngineSettings | None = None,
) -> FlatHourlyModel | None:
    """Flat-hourly schedule for callers recovering from ``IncompleteTariff``.

    Returns None when the tariff has no ``price_per_hour``.  The engine never
    applies this on its own; switching models is the caller's decision.
    """
    rate = positive(config.price_per_hour)
    if rate is None:
        return None
    settings = settings or EngineSettings()
    return FlatHourlyModel(
        price_per_hour=rate,
        min_booking_hours=config.min_booking_hours,
        gst_percentage=_gst(config, settings),
        km_limit=positive(config.km_limit),
        km_limit_per_hour=positive(config.km_limit_per_hour),
        excess_km_charge=positive(config.excess_km_charge),
    )


def available_slabs(config: TariffConfig) -> list[str]:
    """Slab choices to offer in the booking UI.

    A tariff without slabs but with ``price_per_hour`` offers ``["hourly"]``.
    """
    slabs = _priced_slabs(config.pricing_slabs)
    if slabs is not None:
        return slabs.configured()
    if positive(config.price_per_hour) is not None:
        return ["hourly"]
    return []
