"""
Power-law chart series and current-position snapshot

Builds the data the chart and tracker widgets consume:
- historical prices annotated with median/support model prices
- yearly model-only points projected to a future date
- the position of the current spot price against the model

The series is cached in an explicit PowerLawSeriesCache owned by the caller;
the cache rebuilds whenever the input price set or projection end changes.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from src.core.domain.day_index import days_since_epoch, to_calendar_date
from src.core.domain.price import CurrentPrice, ModelOutput, PowerLawPoint, PricePoint
from src.core.math.numerical_safeguards import is_valid_float, safe_divide
from src.valuation.position import PositionMetric, evaluate_position
from src.valuation.power_law import (
    DEFAULT_COEFFICIENTS,
    PowerLawCoefficients,
    model_output,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SERIES
# =============================================================================


def _model_point(
    day: date,
    price: Optional[float],
    is_future: bool,
    coefficients: PowerLawCoefficients,
) -> PowerLawPoint:
    days = days_since_epoch(day)
    output = model_output(days, coefficients)
    return PowerLawPoint(
        date=day,
        days=days,
        price=price,
        median_usd=output.median_usd,
        support_usd=output.support_usd,
        is_future=is_future,
    )


def build_power_law_series(
    prices: Iterable[PricePoint],
    projection_end: Optional[date] = None,
    coefficients: PowerLawCoefficients = DEFAULT_COEFFICIENTS,
) -> list[PowerLawPoint]:
    """
    Chart series of observed prices plus model-only future points.

    Args:
        prices: Observed price samples, any order
        projection_end: Last date of the projection; January 1st of every
            year after the last observation up to this date is added as a
            future point. None adds no future points.
        coefficients: Model constants

    Returns:
        Points sorted by date, historical first
    """
    history = sorted(prices, key=lambda p: p.timestamp)
    series = [
        _model_point(to_calendar_date(p.timestamp), p.price, False, coefficients)
        for p in history
    ]

    if projection_end is None:
        return series

    last_day = series[-1].date if series else None
    first_year = last_day.year + 1 if last_day is not None else projection_end.year
    for year in range(first_year, projection_end.year + 1):
        day = date(year, 1, 1)
        if day > projection_end:
            break
        series.append(_model_point(day, None, True, coefficients))

    return series


class PowerLawSeriesCache:
    """Caller-owned cache of the last built series.

    The key is the full input set (prices, projection end, coefficients), so
    a changed price history invalidates the cache automatically.
    """

    def __init__(self, coefficients: PowerLawCoefficients = DEFAULT_COEFFICIENTS):
        self.coefficients = coefficients
        self._key: Optional[tuple] = None
        self._series: list[PowerLawPoint] = []
        self.builds = 0

    def get_or_build(
        self,
        prices: Sequence[PricePoint],
        projection_end: Optional[date] = None,
    ) -> list[PowerLawPoint]:
        key = (tuple(prices), projection_end, self.coefficients)
        if key != self._key:
            logger.debug("Rebuilding power-law series for %d prices", len(prices))
            self._series = build_power_law_series(prices, projection_end, self.coefficients)
            self._key = key
            self.builds += 1
        return list(self._series)

    def invalidate(self) -> None:
        self._key = None
        self._series = []


# =============================================================================
# SNAPSHOT
# =============================================================================


class PowerLawSnapshot(BaseModel):
    """Tracker view of the current price against the model."""

    days_since_genesis: int
    nearest_model: Optional[ModelOutput] = Field(default=None, description="Model point closest to now")
    position: Optional[PositionMetric] = Field(
        default=None, description="Spot price against the latest observed model point"
    )
    daily_change_pct: Optional[float] = None

    model_config = {"frozen": True}


def latest_observed_point(series: Sequence[PowerLawPoint]) -> Optional[PowerLawPoint]:
    """Most recent non-future point that carries an observed price."""
    observed = [p for p in series if not p.is_future and p.price is not None]
    if not observed:
        return None
    return max(observed, key=lambda p: p.date)


def closest_point(series: Sequence[PowerLawPoint], when: date) -> Optional[PowerLawPoint]:
    """Point whose date is nearest to when (first one wins on ties)."""
    if not series:
        return None
    return min(series, key=lambda p: abs((p.date - when).days))


def daily_change_pct(current_usd: Optional[float], daily_prices: Sequence[PricePoint]) -> Optional[float]:
    """
    Change of the spot price against the previous daily sample, percent.

    The newest sample is taken as today; the one before it as yesterday.
    """
    if not current_usd or len(daily_prices) < 2:
        return None
    newest_first = sorted(daily_prices, key=lambda p: p.timestamp, reverse=True)
    yesterday = newest_first[1].price
    return safe_divide(current_usd - yesterday, yesterday) * 100.0


def current_snapshot(
    current_price: Optional[CurrentPrice],
    series: Sequence[PowerLawPoint],
    daily_prices: Sequence[PricePoint] = (),
    now: Optional[datetime] = None,
) -> PowerLawSnapshot:
    """
    Position of the spot price and the model values around now.

    Missing data degrades field by field to None rather than failing.
    """
    today = to_calendar_date(now or datetime.now())
    nearest = closest_point(series, today)
    latest = latest_observed_point(series)

    position = None
    if current_price is not None and latest is not None:
        position = evaluate_position(
            current_price.usd,
            ModelOutput(median_usd=latest.median_usd, support_usd=latest.support_usd),
        )

    return PowerLawSnapshot(
        days_since_genesis=days_since_epoch(today),
        nearest_model=(
            ModelOutput(median_usd=nearest.median_usd, support_usd=nearest.support_usd)
            if nearest is not None
            else None
        ),
        position=position,
        daily_change_pct=daily_change_pct(current_price.usd if current_price else None, daily_prices),
    )


def format_percentage(value: Optional[float], decimals: int = 1) -> str:
    """
    Signed percentage for display.

    Examples:
        >>> format_percentage(12.345)
        '+12.3%'
        >>> format_percentage(-4.0, 2)
        '-4.00%'
        >>> format_percentage(None)
        '-'
    """
    if value is None or not is_valid_float(value):
        return "-"
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimals}f}%"
