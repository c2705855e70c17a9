"""
Price - observed prices and model outputs

Immutable Pydantic models for the data flowing between the price-history
provider, the valuation model and the chart series builder.
"""

from datetime import date as DateType
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PricePoint(BaseModel):
    """A single observed market price sample (USD)."""

    timestamp: datetime = Field(..., description="Sample time")
    price: float = Field(..., gt=0, description="Market price in USD")

    model_config = {"frozen": True}


class CurrentPrice(BaseModel):
    """Latest spot price in USD and in the local fiat currency."""

    usd: float = Field(..., ge=0, description="Spot price in USD")
    jpy: float = Field(..., ge=0, description="Spot price in JPY")

    model_config = {"frozen": True}


class ModelOutput(BaseModel):
    """Median and support model prices for one day offset."""

    median_usd: float = Field(..., gt=0, description="Median (fair value) price in USD")
    support_usd: float = Field(..., gt=0, description="Support (floor) price in USD")

    model_config = {"frozen": True}


class PowerLawPoint(BaseModel):
    """
    One chart sample: model prices with the observed price where one exists.

    Future points carry model prices only (price is None).
    """

    date: DateType = Field(..., description="Calendar date of the sample")
    days: int = Field(..., description="Days since genesis")
    price: Optional[float] = Field(default=None, gt=0, description="Observed price in USD")
    median_usd: float = Field(..., gt=0, description="Median model price in USD")
    support_usd: float = Field(..., gt=0, description="Support model price in USD")
    is_future: bool = Field(default=False, description="True for projected points")

    model_config = {"frozen": True}
