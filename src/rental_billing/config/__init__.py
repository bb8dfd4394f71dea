"""Configuration models — tariff, time inputs and engine settings."""

from rental_billing.config.tariff import PricingSlab, PricingSlabs, TariffConfig
from rental_billing.config.window import RentalWindow, SettlementFacts
from rental_billing.config.settings import ApiSettings, EngineSettings
from rental_billing.config.loader import load_settings, load_tariff, load_tariff_catalog

__all__ = [
    "PricingSlab",
    "PricingSlabs",
    "TariffConfig",
    "RentalWindow",
    "SettlementFacts",
    "EngineSettings",
    "ApiSettings",
    "load_settings",
    "load_tariff",
    "load_tariff_catalog",
]
