"""Monetary record of one rental: Quoted → Paid → Settled."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from rental_billing.models.results import PaymentCheck, Quote, Settlement

LedgerState = Literal["quoted", "paid", "settled"]


class RentalLedger(BaseModel):
    """Quote and settlement for one rental id.

    ``quote`` is replaceable while ``quoted`` and frozen from ``paid`` on.
    ``settlement`` is set exactly once, on the ``paid → settled`` transition.
    """

    rental_id: str
    state: LedgerState = "quoted"
    quote: Quote
    settlement: Settlement | None = None


class LedgerTransition(BaseModel):
    """Result of a ledger operation.  ``changed=False`` → no-op; ``ledger`` is the current record."""

    ledger: RentalLedger
    changed: bool
    message: str
    payment_check: PaymentCheck | None = None
    """Set by payment attempts; ok=False means the quote drifted and payment was refused."""
