"""Result types — the records every pricing surface renders verbatim.

A ``Quote`` is produced before payment and frozen once payment succeeds.  A
``Settlement`` is produced once at ride close.  Display surfaces and invoices
read these fields as-is; they never recompute or re-round them.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel


# ═══════════════════════════════════════════════════════════════════════════
# Quote
# ═══════════════════════════════════════════════════════════════════════════

class Quote(BaseModel):
    """Price for one rental window under one resolved schedule.

    Invariants (exact, all amounts quantized to 0.01):
      subtotal = base_price + weekend_surcharge_amount
      total    = subtotal + gst_amount
    """

    pricing_model: Literal["simple", "slab", "flat_hourly"]
    pricing_type: str
    """Branch that produced base_price: '12hours', 'override', 'weekly',
    'tariff', 'hourly', or the slab name ('hourly' / 'daily' / 'weekly')."""

    slab: str | None = None
    """Slab name for slab-model quotes."""

    # --- Time ---
    duration_hours: Decimal
    """Requested pickup → dropoff in hours, unrounded."""

    billable_hours: Decimal
    """Hours actually charged after minimum-booking and unit rounding."""

    weekday_hours: Decimal = Decimal("0")
    """Billable hours falling on weekdays; only populated for hourly accrual."""

    weekend_hours: Decimal = Decimal("0")
    """Billable hours falling on weekend days; only populated for hourly accrual."""

    has_weekend: bool = False
    surge_multiplier: Decimal = Decimal("1.0")

    # --- Money ---
    base_price: Decimal
    weekend_surcharge_amount: Decimal = Decimal("0.00")
    subtotal: Decimal
    gst_percentage: Decimal
    gst_amount: Decimal
    total: Decimal

    breakdown_text: str
    """One display line naming the model and rate behind base_price."""

    # --- Distance ---
    included_km: Decimal | None = None
    """Distance allowance frozen at quote time; None → no overage is ever charged."""

    excess_km_rate: Decimal | None = None
    """Per-km overage rate in force for this quote."""


# ═══════════════════════════════════════════════════════════════════════════
# Settlement
# ═══════════════════════════════════════════════════════════════════════════

class Settlement(BaseModel):
    """Additional charges at ride close and the final amount due.

      extras      = distance_charge + delay_charge
      final_total = quote_total + extras
    """

    total_km: Decimal
    """max(0, end_km − start_km)."""

    excess_km: Decimal
    """max(0, total_km − included_km)."""

    excess_km_rate: Decimal | None = None
    distance_charge: Decimal

    delay_minutes: int
    """Whole minutes past the scheduled dropoff; this is the persisted unit."""

    delay_hours: Decimal
    """delay_minutes / 60 at two-decimal precision; this is the charged unit."""

    delay_rate: Decimal | None = None
    delay_charge: Decimal

    extras: Decimal
    quote_total: Decimal
    final_total: Decimal


# ═══════════════════════════════════════════════════════════════════════════
# Payment check
# ═══════════════════════════════════════════════════════════════════════════

class PaymentCheck(BaseModel):
    """Outcome of re-quoting immediately before charging."""

    ok: bool
    """False → tariff changed since preview; block payment and re-show the new quote."""

    stored_total: Decimal
    current_total: Decimal
    difference: Decimal
    tolerance: Decimal


# ═══════════════════════════════════════════════════════════════════════════
# Invoice
# ═══════════════════════════════════════════════════════════════════════════

class InvoiceLine(BaseModel):
    label: str
    amount: Decimal


class Invoice(BaseModel):
    """Line items copied from persisted records, in display order."""

    lines: list[InvoiceLine]
    quote_total: Decimal
    extras: Decimal
    grand_total: Decimal
