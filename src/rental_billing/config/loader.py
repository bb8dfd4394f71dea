"""YAML loaders for tariff and settings files."""

from __future__ import annotations

from pathlib import Path

import yaml

from rental_billing.config.settings import EngineSettings
from rental_billing.config.tariff import TariffConfig


def _read_yaml(path: str | Path) -> dict:
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return data


def load_tariff(path: str | Path) -> TariffConfig:
    """Load a single vehicle tariff."""
    return TariffConfig(**_read_yaml(path))


def load_tariff_catalog(path: str | Path) -> dict[str, TariffConfig]:
    """Load a ``{vehicle_id: tariff}`` mapping from one file."""
    return {str(vehicle_id): TariffConfig(**(body or {})) for vehicle_id, body in _read_yaml(path).items()}


def load_settings(path: str | Path) -> EngineSettings:
    """Load engine settings.  Missing keys keep their defaults."""
    return EngineSettings(**_read_yaml(path))
