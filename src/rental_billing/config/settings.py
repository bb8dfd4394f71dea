"""Engine-wide settings and API server settings.

The engine takes ``EngineSettings`` explicitly and reads no globals; only the
API layer reads the environment, through ``ApiSettings``.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseModel):
    """Knobs shared by every pricing surface.

    The defaults reproduce production behaviour; override them only in a
    deployment-wide settings file so every caller sees the same numbers.
    """

    default_gst_percentage: Decimal = Field(
        default=Decimal("18.0"), ge=0, le=100,
        description="GST applied when a tariff leaves gst_percentage unset",
    )
    weekend_days: list[int] = Field(
        default_factory=lambda: [5, 6],
        description="datetime.weekday() values billed at the weekend rate (5=Sat, 6=Sun)",
    )
    payment_tolerance: Decimal = Field(
        default=Decimal("0.01"), ge=0,
        description="Largest stored-vs-recomputed total difference that still lets payment proceed",
    )
    block_hours: int = Field(default=12, ge=1, description="Length of the flat price_12_hours block")
    hours_per_week: int = Field(default=168, ge=1, description="Hours in one weekly block")

    @field_validator("weekend_days")
    @classmethod
    def _valid_weekdays(cls, v: list[int]) -> list[int]:
        for day in v:
            if not 0 <= day <= 6:
                raise ValueError(f"weekend day {day} is not a datetime.weekday() value (0-6)")
        return sorted(set(v))


class ApiSettings(BaseSettings):
    """HTTP server settings, read from ``RENTAL_BILLING_*`` environment variables or ``.env``."""

    settings_file: Path | None = Field(
        default=None,
        description="YAML file with EngineSettings overrides; unset → built-in defaults",
    )
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = True

    model_config = SettingsConfigDict(env_prefix="RENTAL_BILLING_", env_file=".env", case_sensitive=False)
