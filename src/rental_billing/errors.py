"""Error taxonomy for the billing engine.

All failures are deterministic input-validation errors; none are transient and
none is worth retrying.  Each carries a stable ``error_code`` so the API layer
can map it to a JSON body without inspecting the message.
"""

from __future__ import annotations

from typing import Any


class BillingError(Exception):
    """Base billing engine exception."""

    error_code = "ERR_BILLING"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ── Tariff resolution ───────────────────────────────────────────────────

class ConfigError(BillingError):
    """Tariff configuration cannot be turned into a rate schedule."""

    error_code = "ERR_TARIFF_CONFIG"


class NoPricingSignal(ConfigError):
    """Raised when no tariff field resolves to a non-zero rate."""

    error_code = "ERR_TARIFF_NO_SIGNAL"

    def __init__(self, message: str = "Tariff has no usable pricing rate"):
        super().__init__(message)


# ── Quoting ─────────────────────────────────────────────────────────────

class PricingError(BillingError):
    """A quote could not be produced for the resolved schedule."""

    error_code = "ERR_PRICING"


class IncompleteTariff(PricingError):
    """Raised when the selected model lacks a field it needs for this window."""

    error_code = "ERR_TARIFF_INCOMPLETE"

    def __init__(self, model: str, missing: str):
        super().__init__(
            f"{model} tariff is missing {missing}",
            details={"model": model, "missing": missing},
        )


class InvalidWindow(PricingError):
    """Raised for a rental window with non-positive duration."""

    error_code = "ERR_WINDOW_INVALID"


class SlabDurationOutOfRange(PricingError):
    """Raised when an explicitly chosen slab does not cover the duration."""

    error_code = "ERR_SLAB_RANGE"

    def __init__(self, slab: str, duration_hours, duration_min, duration_max):
        super().__init__(
            f"Duration {duration_hours} hours is outside the valid range for "
            f"{slab} pricing ({duration_min}-{duration_max} hours)",
            details={
                "slab": slab,
                "duration_hours": str(duration_hours),
                "duration_min": str(duration_min),
                "duration_max": str(duration_max),
            },
        )


# ── Settlement ──────────────────────────────────────────────────────────

class SettlementError(BillingError):
    """Post-ride facts cannot be settled."""

    error_code = "ERR_SETTLEMENT"


class InvalidOdometer(SettlementError):
    """Raised when the closing odometer reading is below the opening one."""

    error_code = "ERR_ODOMETER_INVALID"

    def __init__(self, start_km, end_km):
        super().__init__(
            f"End odometer reading {end_km} is less than start reading {start_km}",
            details={"start_km": str(start_km), "end_km": str(end_km)},
        )


class InvalidReturnTime(SettlementError):
    """Raised when the scheduled and actual return times mix aware and naive values."""

    error_code = "ERR_RETURN_TIME_INVALID"

    def __init__(self, scheduled_dropoff, actual_return):
        super().__init__(
            "scheduled_dropoff and actual_return must both be timezone-aware or both naive",
            details={
                "scheduled_dropoff": scheduled_dropoff.isoformat(),
                "actual_return": actual_return.isoformat(),
            },
        )
