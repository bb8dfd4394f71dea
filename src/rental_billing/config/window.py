"""Time inputs — the requested rental window and the facts known at ride close."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class RentalWindow(BaseModel):
    """Requested pickup → dropoff.

    Ordering is checked by the quote calculator, which reports a bad window
    as ``InvalidWindow`` rather than a schema error.
    """

    pickup: datetime
    dropoff: datetime


class SettlementFacts(BaseModel):
    """Odometer readings and return times supplied by the admin at ride close."""

    start_km: Decimal = Field(ge=0, description="Odometer at pickup (km)")
    end_km: Decimal = Field(ge=0, description="Odometer at return (km)")
    scheduled_dropoff: datetime
    actual_return: datetime
