"""Result models — engine output contracts."""

from rental_billing.models.schedule import (
    FlatHourlyModel,
    ResolvedSchedule,
    SimpleModel,
    SlabModel,
)
from rental_billing.models.results import (
    Invoice,
    InvoiceLine,
    PaymentCheck,
    Quote,
    Settlement,
)
from rental_billing.models.ledger import LedgerTransition, RentalLedger

__all__ = [
    "FlatHourlyModel",
    "ResolvedSchedule",
    "SimpleModel",
    "SlabModel",
    "Invoice",
    "InvoiceLine",
    "PaymentCheck",
    "Quote",
    "Settlement",
    "LedgerTransition",
    "RentalLedger",
]
