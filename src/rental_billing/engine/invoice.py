"""Invoice assembly — persisted Quote + Settlement → ordered line items.

Copies amounts from the records; it performs no arithmetic, so an invoice
always shows exactly what the booking and end-ride screens showed.
"""

from __future__ import annotations

from rental_billing.engine.money import ZERO, amount, plain
from rental_billing.models.results import Invoice, InvoiceLine, Quote, Settlement


def build_invoice(quote: Quote, settlement: Settlement | None = None) -> Invoice:
    lines = [InvoiceLine(label=f"Rental charges ({quote.breakdown_text})", amount=quote.base_price)]

    if quote.weekend_surcharge_amount > 0:
        lines.append(InvoiceLine(
            label=f"Weekend surcharge (x{plain(quote.surge_multiplier)})",
            amount=quote.weekend_surcharge_amount,
        ))
    lines.append(InvoiceLine(label=f"GST ({plain(quote.gst_percentage)}%)", amount=quote.gst_amount))

    if settlement is None:
        return Invoice(lines=lines, quote_total=quote.total, extras=ZERO, grand_total=quote.total)

    if settlement.distance_charge > 0:
        lines.append(InvoiceLine(
            label=f"Excess distance ({plain(settlement.excess_km)} km x {amount(settlement.excess_km_rate)}/km)",
            amount=settlement.distance_charge,
        ))
    if settlement.delay_charge > 0:
        lines.append(InvoiceLine(
            label=f"Delay charges ({amount(settlement.delay_hours)} hrs x {amount(settlement.delay_rate)}/hr)",
            amount=settlement.delay_charge,
        ))
    return Invoice(
        lines=lines,
        quote_total=settlement.quote_total,
        extras=settlement.extras,
        grand_total=settlement.final_total,
    )
