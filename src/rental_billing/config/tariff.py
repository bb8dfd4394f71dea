"""Tariff configuration — the rate fields attached to one vehicle."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

SlabName = Literal["hourly", "daily", "weekly"]

OVERRIDE_HOURS = range(13, 25)


class PricingSlab(BaseModel):
    """One legacy pricing tier.  ``price`` is charged per slab unit."""

    price: Decimal = Field(ge=0, description="Price per unit (hour, day or week)")
    duration_min: Decimal = Field(default=Decimal("0"), ge=0, description="Shortest booking this slab accepts (hours)")
    duration_max: Decimal = Field(default=Decimal("8760"), gt=0, description="Longest booking this slab accepts (hours)")
    included_km: Decimal = Field(default=Decimal("0"), ge=0, description="Distance bundled with the booking (km)")
    extra_km_price: Decimal = Field(default=Decimal("0"), ge=0, description="Overage per km beyond included_km")
    minimum_booking_rule: Literal["none", "min_duration", "min_price"] = Field(
        default="none",
        description="'min_duration' bills at least minimum_value hours; "
                    "'min_price' charges at least minimum_value.",
    )
    minimum_value: Decimal = Field(default=Decimal("0"), ge=0)


class PricingSlabs(BaseModel):
    """Named legacy slabs.  Any subset may be configured."""

    hourly: PricingSlab | None = None
    daily: PricingSlab | None = None
    weekly: PricingSlab | None = None

    def configured(self) -> list[str]:
        """Slab names that carry a slab, in hourly → daily → weekly order."""
        return [name for name in ("hourly", "daily", "weekly") if getattr(self, name) is not None]


class TariffConfig(BaseModel):
    """All pricing fields a vehicle may carry.

    Every field is optional; which ones are set decides the pricing model
    (see ``engine.resolver``).  A rate of zero counts as unset.
    """

    # --- Simple model ---
    weekday_rate: Decimal | None = Field(default=None, ge=0, description="Hourly rate on weekdays")
    weekend_rate: Decimal | None = Field(default=None, ge=0, description="Hourly rate on weekend days")
    price_12_hours: Decimal | None = Field(default=None, ge=0, description="Flat price for bookings up to 12 hours")
    price_per_week: Decimal | None = Field(default=None, ge=0, description="Flat price for a 7-day block")
    hourly_overrides: dict[int, Decimal] = Field(
        default_factory=dict,
        description="Flat price for exactly N hours, N in 13..24 (e.g. {18: 1400})",
    )

    # --- Distance allowance ---
    km_limit: Decimal | None = Field(default=None, ge=0, description="Absolute included distance (km)")
    km_limit_per_hour: Decimal | None = Field(
        default=None, ge=0,
        description="Included distance per billable hour; ignored when km_limit is set",
    )
    excess_km_charge: Decimal | None = Field(default=None, ge=0, description="Charge per km beyond the allowance")

    # --- Common ---
    min_booking_hours: Decimal = Field(default=Decimal("0"), ge=0, description="Minimum chargeable duration (hours)")
    gst_percentage: Decimal | None = Field(
        default=None, ge=0, le=100,
        description="GST rate in percent.  None → EngineSettings.default_gst_percentage",
    )

    # --- Legacy ---
    price_per_hour: Decimal | None = Field(default=None, ge=0, description="Legacy single hourly rate")
    pricing_slabs: PricingSlabs | None = None
    weekend_surge_multiplier: Decimal = Field(
        default=Decimal("1.0"), ge=1,
        description="Slab-model multiplier when the booking touches a weekend day",
    )

    @field_validator("hourly_overrides")
    @classmethod
    def _override_hours_in_range(cls, v: dict[int, Decimal]) -> dict[int, Decimal]:
        for hours, price in v.items():
            if hours not in OVERRIDE_HOURS:
                raise ValueError(f"hourly override for {hours}h: only 13..24 hours may be overridden")
            if price < 0:
                raise ValueError(f"hourly override for {hours}h must not be negative")
        return v
