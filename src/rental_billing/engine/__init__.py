"""Engine — pure pricing and settlement functions."""

from rental_billing.engine.resolver import available_slabs, fallback_schedule, resolve
from rental_billing.engine.quote import quote, select_slab, window_hours
from rental_billing.engine.settlement import (
    delay_hours_to_minutes,
    delay_minutes_between,
    delay_minutes_to_hours,
    delay_rate,
    settle,
)
from rental_billing.engine.ledger import (
    check_quote_for_payment,
    open_ledger,
    record_payment,
    requote,
    settle_rental,
)
from rental_billing.engine.invoice import build_invoice

__all__ = [
    "resolve",
    "fallback_schedule",
    "available_slabs",
    "quote",
    "select_slab",
    "window_hours",
    "settle",
    "delay_rate",
    "delay_minutes_between",
    "delay_minutes_to_hours",
    "delay_hours_to_minutes",
    "open_ledger",
    "requote",
    "check_quote_for_payment",
    "record_payment",
    "settle_rental",
    "build_invoice",
]
