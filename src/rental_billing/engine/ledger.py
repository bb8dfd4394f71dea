"""Rental monetary ledger — Quoted → Paid → Settled.

Transitions are pure: each returns a new ``RentalLedger`` inside a
``LedgerTransition`` and never mutates its input.  A transition attempted
from the wrong state is a no-op that reports the current state; in
particular a settled rental is never settled again.

Single-writer discipline for persisting the result belongs to the caller.
"""

from __future__ import annotations

import logging

from rental_billing.config.settings import EngineSettings
from rental_billing.config.tariff import TariffConfig
from rental_billing.config.window import SettlementFacts
from rental_billing.engine.settlement import settle
from rental_billing.models.ledger import LedgerTransition, RentalLedger
from rental_billing.models.results import PaymentCheck, Quote

logger = logging.getLogger(__name__)


def open_ledger(rental_id: str, quote: Quote) -> RentalLedger:
    """Start a ledger in the ``quoted`` state."""
    return RentalLedger(rental_id=rental_id, state="quoted", quote=quote)


def _noop(ledger: RentalLedger, action: str, **extra) -> LedgerTransition:
    return LedgerTransition(
        ledger=ledger,
        changed=False,
        message=f"Rental {ledger.rental_id} is {ledger.state}; cannot {action}",
        **extra,
    )


def requote(ledger: RentalLedger, quote: Quote) -> LedgerTransition:
    """Replace the quote while the rental is still unpaid."""
    if ledger.state != "quoted":
        return _noop(ledger, "change a frozen quote")
    return LedgerTransition(
        ledger=ledger.model_copy(update={"quote": quote}),
        changed=True,
        message=f"Rental {ledger.rental_id} requoted at {quote.total}",
    )


def check_quote_for_payment(
    stored: Quote,
    recomputed: Quote,
    settings: EngineSettings | None = None,
) -> PaymentCheck:
    """Compare the previewed total with a fresh quote taken just before charging."""
    settings = settings or EngineSettings()
    difference = abs(recomputed.total - stored.total)
    check = PaymentCheck(
        ok=difference <= settings.payment_tolerance,
        stored_total=stored.total,
        current_total=recomputed.total,
        difference=difference,
        tolerance=settings.payment_tolerance,
    )
    if not check.ok:
        logger.warning(
            "Quote drift before payment: stored %s, current %s", stored.total, recomputed.total,
        )
    return check


def record_payment(
    ledger: RentalLedger,
    recomputed: Quote,
    settings: EngineSettings | None = None,
) -> LedgerTransition:
    """Freeze the stored quote as paid, unless the tariff changed since preview.

    On drift the ledger stays ``quoted`` and the caller must show
    ``recomputed`` to the user before trying again.
    """
    if ledger.state != "quoted":
        return _noop(ledger, "take payment")

    check = check_quote_for_payment(ledger.quote, recomputed, settings)
    if not check.ok:
        return LedgerTransition(
            ledger=ledger,
            changed=False,
            message=f"Rental {ledger.rental_id} quote changed from {check.stored_total} "
                    f"to {check.current_total}; payment blocked",
            payment_check=check,
        )
    return LedgerTransition(
        ledger=ledger.model_copy(update={"state": "paid"}),
        changed=True,
        message=f"Rental {ledger.rental_id} paid {ledger.quote.total}",
        payment_check=check,
    )


def settle_rental(
    ledger: RentalLedger,
    config: TariffConfig,
    facts: SettlementFacts,
) -> LedgerTransition:
    """Settle a paid rental against its frozen quote.

    Unpaid or already-settled rentals are returned unchanged.
    """
    if ledger.state != "paid":
        return _noop(ledger, "settle")

    settlement = settle(config, ledger.quote, facts)
    return LedgerTransition(
        ledger=ledger.model_copy(update={"state": "settled", "settlement": settlement}),
        changed=True,
        message=f"Rental {ledger.rental_id} settled at {settlement.final_total}",
    )
