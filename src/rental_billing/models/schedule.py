"""Resolved rate schedules — the closed set of pricing models.

``engine.resolver.resolve`` inspects a ``TariffConfig`` once and returns exactly
one of these.  Everything downstream matches on ``kind`` instead of re-checking
which tariff fields happen to be set.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from rental_billing.config.tariff import PricingSlab, PricingSlabs


class SimpleModel(BaseModel):
    """Block prices (12 h, 13–24 h overrides, weekly) over weekday/weekend hourly rates."""

    kind: Literal["simple"] = "simple"
    weekday_rate: Decimal | None = None
    weekend_rate: Decimal | None = None
    price_12_hours: Decimal | None = None
    price_per_week: Decimal | None = None
    hourly_overrides: dict[int, Decimal] = Field(default_factory=dict)
    min_booking_hours: Decimal = Decimal("0")
    gst_percentage: Decimal
    km_limit: Decimal | None = None
    km_limit_per_hour: Decimal | None = None
    excess_km_charge: Decimal | None = None

    def hourly_rate(self, weekend: bool) -> Decimal | None:
        """Rate for one hour on a weekend or weekday.

        A tariff that configures only one of the two rates bills every hour
        at that rate.
        """
        if weekend:
            return self.weekend_rate if self.weekend_rate is not None else self.weekday_rate
        return self.weekday_rate if self.weekday_rate is not None else self.weekend_rate


class SlabModel(BaseModel):
    """Legacy named slabs (hourly / daily / weekly)."""

    kind: Literal["slab"] = "slab"
    slabs: PricingSlabs
    weekend_surge_multiplier: Decimal = Decimal("1.0")
    min_booking_hours: Decimal = Decimal("0")
    gst_percentage: Decimal
    excess_km_charge: Decimal | None = None

    def slab(self, name: str) -> PricingSlab | None:
        return getattr(self.slabs, name, None)


class FlatHourlyModel(BaseModel):
    """Single legacy ``price_per_hour`` for every hour."""

    kind: Literal["flat_hourly"] = "flat_hourly"
    price_per_hour: Decimal
    min_booking_hours: Decimal = Decimal("0")
    gst_percentage: Decimal
    km_limit: Decimal | None = None
    km_limit_per_hour: Decimal | None = None
    excess_km_charge: Decimal | None = None


ResolvedSchedule = Annotated[
    Union[SimpleModel, SlabModel, FlatHourlyModel],
    Field(discriminator="kind"),
]
