"""Shared test fixtures — sample tariffs matching tariffs/fleet.yaml."""

from __future__ import annotations

import pytest

from rental_billing.config import (
    EngineSettings,
    PricingSlab,
    PricingSlabs,
    TariffConfig,
)


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings()


@pytest.fixture
def weekday_tariff() -> TariffConfig:
    """100/hr on weekdays only, 18% GST by default."""
    return TariffConfig(weekday_rate=100, km_limit=100, excess_km_charge=5)


@pytest.fixture
def split_tariff() -> TariffConfig:
    return TariffConfig(weekday_rate=100, weekend_rate=150, km_limit=100, excess_km_charge=5)


@pytest.fixture
def block_tariff() -> TariffConfig:
    return TariffConfig(
        price_12_hours=900,
        hourly_overrides={18: 1300, 24: 1600},
        price_per_week=6300,
        weekday_rate=100,
        km_limit_per_hour=10,
        excess_km_charge=6,
    )


@pytest.fixture
def slab_tariff() -> TariffConfig:
    return TariffConfig(
        weekend_surge_multiplier=1.2,
        pricing_slabs=PricingSlabs(
            hourly=PricingSlab(
                price=60, duration_min=1, duration_max=23, included_km=10, extra_km_price=4,
                minimum_booking_rule="min_duration", minimum_value=3,
            ),
            daily=PricingSlab(price=700, duration_min=24, duration_max=167, included_km=150, extra_km_price=4),
            weekly=PricingSlab(price=3500, duration_min=168, duration_max=720, included_km=1000, extra_km_price=3),
        ),
    )


@pytest.fixture
def flat_tariff() -> TariffConfig:
    return TariffConfig(price_per_hour=80, km_limit=60, excess_km_charge=5)
