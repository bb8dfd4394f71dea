"""FastAPI server — billing engine surface for booking, payment and admin screens.

Run with:
    uvicorn rental_billing.api.server:app --reload --port 8000

Or:
    python -m rental_billing.api.server

Endpoints:
    GET  /health          — liveness
    GET  /schema          — JSON Schema of TariffConfig
    POST /tariff/resolve  — which pricing model a tariff uses + slab choices
    POST /quote           — price a rental window (booking preview)
    POST /quote/verify    — re-quote before charging; block payment on drift
    POST /settle          — end-of-ride distance / delay charges
    POST /invoice         — invoice lines from persisted quote + settlement

Set ``RENTAL_BILLING_SETTINGS_FILE`` to a YAML file to override ``EngineSettings``;
``RENTAL_BILLING_HOST`` / ``_PORT`` / ``_RELOAD`` configure ``main()`` (see ``ApiSettings``).
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from rental_billing.config.loader import load_settings
from rental_billing.config.settings import ApiSettings, EngineSettings
from rental_billing.config.tariff import SlabName, TariffConfig
from rental_billing.config.window import RentalWindow, SettlementFacts
from rental_billing.engine.invoice import build_invoice
from rental_billing.engine.ledger import check_quote_for_payment
from rental_billing.engine.quote import quote
from rental_billing.engine.resolver import available_slabs, fallback_schedule, resolve
from rental_billing.engine.settlement import settle
from rental_billing.errors import BillingError, IncompleteTariff
from rental_billing.models.results import Invoice, PaymentCheck, Quote, Settlement
from rental_billing.models.schedule import FlatHourlyModel

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Request / response models
# ═══════════════════════════════════════════════════════════════════════════

class QuoteRequest(BaseModel):
    """Request body for /quote and /quote/verify."""
    tariff: TariffConfig
    window: RentalWindow
    slab: SlabName | None = Field(
        default=None,
        description="Legacy slab picked by the user; only used for slab-model tariffs",
    )
    allow_fallback: bool = Field(
        default=True,
        description="Retry with the flat price_per_hour rate when the selected model "
                    "is missing a rate this window needs",
    )


class QuoteResponse(BaseModel):
    quote: Quote
    fallback_used: bool = False


class VerifyRequest(QuoteRequest):
    """Request body for /quote/verify."""
    stored_quote: Quote = Field(description="Quote the user saw and agreed to")


class VerifyResponse(BaseModel):
    check: PaymentCheck
    current_quote: Quote
    fallback_used: bool = False


class ResolveResponse(BaseModel):
    pricing_model: str
    schedule: dict[str, Any]
    available_slabs: list[str]


class SettleRequest(BaseModel):
    tariff: TariffConfig
    quote: Quote
    facts: SettlementFacts


class InvoiceRequest(BaseModel):
    quote: Quote
    settlement: Settlement | None = None


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def engine_settings(api_settings: ApiSettings) -> EngineSettings:
    """EngineSettings from the configured YAML file, or the defaults."""
    if api_settings.settings_file is not None:
        logger.info("Loading engine settings from %s", api_settings.settings_file)
        return load_settings(api_settings.settings_file)
    return EngineSettings()


def quote_with_fallback(
    req: QuoteRequest,
    settings: EngineSettings,
) -> tuple[Quote, bool]:
    """Quote under the resolved model; on IncompleteTariff optionally retry flat-hourly.

    Returns ``(quote, fallback_used)``.
    """
    schedule = resolve(req.tariff, settings)
    try:
        return quote(schedule, req.window, settings, slab=req.slab), False
    except IncompleteTariff:
        fallback = fallback_schedule(req.tariff, settings) if req.allow_fallback else None
        if fallback is None or isinstance(schedule, FlatHourlyModel):
            raise
        logger.warning("%s tariff incomplete for this window; falling back to flat hourly", schedule.kind)
        return quote(fallback, req.window, settings), True


async def billing_error_handler(request: Request, exc: BillingError) -> JSONResponse:
    """Map engine validation failures to a 422 with a stable error code."""
    return JSONResponse(
        status_code=422,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

def create_app(settings: EngineSettings | None = None, api_settings: ApiSettings | None = None) -> FastAPI:
    """Build the API around one explicit ``EngineSettings`` instance.

    Without ``settings``, they come from ``api_settings.settings_file``
    (``ApiSettings()`` reads the environment when that is omitted too).
    """
    settings = settings or engine_settings(api_settings or ApiSettings())

    app = FastAPI(
        title="Rental Billing API",
        version="1.0",
        description=(
            "Quote, verify and settle vehicle rentals. Every surface that shows a "
            "price calls these endpoints and renders the result verbatim."
        ),
    )
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(BillingError, billing_error_handler)

    @app.get("/health")
    def health_check():
        """Health check for deployment platforms."""
        return {"status": "ok"}

    @app.get("/schema")
    def get_schema():
        """JSON Schema for TariffConfig — every pricing field with constraints."""
        return TariffConfig.model_json_schema()

    @app.post("/tariff/resolve", response_model=ResolveResponse)
    def resolve_tariff(tariff: TariffConfig):
        """Report which pricing model a tariff resolves to."""
        schedule = resolve(tariff, settings)
        return ResolveResponse(
            pricing_model=schedule.kind,
            schedule=schedule.model_dump(mode="json"),
            available_slabs=available_slabs(tariff),
        )

    @app.post("/quote", response_model=QuoteResponse)
    def create_quote(req: QuoteRequest):
        """Price a rental window for the booking preview."""
        result, fallback_used = quote_with_fallback(req, settings)
        return QuoteResponse(quote=result, fallback_used=fallback_used)

    @app.post("/quote/verify", response_model=VerifyResponse)
    def verify_quote(req: VerifyRequest):
        """Re-quote immediately before charging.

        ``check.ok == false`` → the tariff changed since preview; do not charge,
        show ``current_quote`` instead.
        """
        current, fallback_used = quote_with_fallback(req, settings)
        return VerifyResponse(
            check=check_quote_for_payment(req.stored_quote, current, settings),
            current_quote=current,
            fallback_used=fallback_used,
        )

    @app.post("/settle", response_model=Settlement)
    def settle_ride(req: SettleRequest):
        """Distance overage and delay charges at ride close."""
        return settle(req.tariff, req.quote, req.facts)

    @app.post("/invoice", response_model=Invoice)
    def invoice(req: InvoiceRequest):
        """Invoice lines copied from the persisted records."""
        return build_invoice(req.quote, req.settlement)

    return app


app = create_app()


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn
    api_settings = ApiSettings()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "rental_billing.api.server:app",
        host=api_settings.host,
        port=api_settings.port,
        reload=api_settings.reload,
    )


if __name__ == "__main__":
    main()
