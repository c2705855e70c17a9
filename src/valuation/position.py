"""
Position & Deviation Metrics

Where the market price sits relative to the power-law model:
- relative position: % deviation from the median model
- support deviation: % deviation from the support model
- zone / label / colour classification of the relative position

Zone thresholds (percent, relative position p):
    p < -50          STRONG_BUY
    -50 <= p < -30   UNDERVALUED
    -30 <= p < -10   SLIGHTLY_UNDERVALUED
    -10 <= p <= 10   FAIR
    10 < p <= 30     CAUTION
    30 < p <= 70     OVERHEATED
    p > 70           PEAK_WARNING

All functions are total: missing or degenerate inputs give None (metrics)
or the sentinel label/colour, never an exception.
"""

from enum import Enum
from typing import Final, Optional

from pydantic import BaseModel, Field

from src.core.domain.price import ModelOutput
from src.core.math.numerical_safeguards import is_valid_float, safe_divide


# =============================================================================
# CONSTANTS
# =============================================================================

# Support deviation below which the price counts as "near the floor"
NEAR_SUPPORT_THRESHOLD_PCT: Final[float] = 10.0

INCALCULABLE_LABEL: Final[str] = "incalculable"
NEAR_SUPPORT_SUFFIX: Final[str] = " - near support floor"

COLOR_UNAVAILABLE: Final[str] = "#888888"
COLOR_STRONG_BUY: Final[str] = "#1565C0"
COLOR_DANGER: Final[str] = "#B71C1C"
COLOR_NEAR_SUPPORT: Final[str] = "#D81B60"
COLOR_DEFAULT: Final[str] = "#FFFFFF"


# =============================================================================
# ZONES
# =============================================================================


class PositionZone(str, Enum):
    """Valuation bucket of a relative position."""

    STRONG_BUY = "strong_buy"
    UNDERVALUED = "undervalued"
    SLIGHTLY_UNDERVALUED = "slightly_undervalued"
    FAIR = "fair"
    CAUTION = "caution"
    OVERHEATED = "overheated"
    PEAK_WARNING = "peak_warning"

    @property
    def label(self) -> str:
        return _ZONE_LABELS[self]

    @property
    def color(self) -> str:
        return _ZONE_COLORS[self]


_ZONE_LABELS: dict[PositionZone, str] = {
    PositionZone.STRONG_BUY: "Strong buy zone",
    PositionZone.UNDERVALUED: "Undervalued",
    PositionZone.SLIGHTLY_UNDERVALUED: "Slightly undervalued",
    PositionZone.FAIR: "Fair range",
    PositionZone.CAUTION: "Rising (caution)",
    PositionZone.OVERHEATED: "Overheated",
    PositionZone.PEAK_WARNING: "Peak warning (consider selling)",
}

_ZONE_COLORS: dict[PositionZone, str] = {
    PositionZone.STRONG_BUY: COLOR_STRONG_BUY,
    PositionZone.UNDERVALUED: "#2196F3",
    PositionZone.SLIGHTLY_UNDERVALUED: "#4CAF50",
    PositionZone.FAIR: "#8BC34A",
    PositionZone.CAUTION: "#FF9800",
    PositionZone.OVERHEATED: "#F44336",
    PositionZone.PEAK_WARNING: COLOR_DANGER,
}


# =============================================================================
# METRICS
# =============================================================================


def _usable(value: Optional[float]) -> bool:
    # 0 and None mean "no data"
    return value is not None and value != 0 and is_valid_float(value)


def relative_position(
    price: Optional[float],
    median: Optional[float],
    support: Optional[float] = None,
) -> Optional[float]:
    """
    Percentage deviation of price from the median model.

    Args:
        price: Market price (USD)
        median: Median model price (USD)
        support: Support model price (USD); when given it must be usable too

    Returns:
        (price - median) / median * 100, or None if an input is missing/zero

    Examples:
        >>> relative_position(100.0, 100.0)
        0.0
        >>> relative_position(150.0, 100.0)
        50.0
        >>> relative_position(150.0, 0.0) is None
        True
    """
    if not _usable(price) or not _usable(median):
        return None
    if support is not None and not _usable(support):
        return None
    return safe_divide(price - median, median) * 100.0


def support_deviation(price: Optional[float], support: Optional[float]) -> Optional[float]:
    """Percentage deviation of price from the support model, or None."""
    if not _usable(price) or not _usable(support):
        return None
    return safe_divide(price - support, support) * 100.0


def position_zone(position: Optional[float]) -> Optional[PositionZone]:
    """Zone of a relative position; None when the position is unavailable."""
    if position is None or not is_valid_float(position):
        return None
    if position < -50:
        return PositionZone.STRONG_BUY
    if position < -30:
        return PositionZone.UNDERVALUED
    if position < -10:
        return PositionZone.SLIGHTLY_UNDERVALUED
    if position <= 10:
        return PositionZone.FAIR
    if position <= 30:
        return PositionZone.CAUTION
    if position <= 70:
        return PositionZone.OVERHEATED
    return PositionZone.PEAK_WARNING


def _near_support(deviation: Optional[float]) -> bool:
    return deviation is not None and deviation < NEAR_SUPPORT_THRESHOLD_PCT


def position_label(position: Optional[float], support_deviation: Optional[float] = None) -> str:
    """
    Human-readable label of a relative position.

    A support deviation below NEAR_SUPPORT_THRESHOLD_PCT appends the
    near-support qualifier whatever the zone.

    Examples:
        >>> position_label(-50.0)
        'Undervalued'
        >>> position_label(10.0)
        'Fair range'
        >>> position_label(0.0, support_deviation=5.0)
        'Fair range - near support floor'
        >>> position_label(None)
        'incalculable'
    """
    zone = position_zone(position)
    if zone is None:
        return INCALCULABLE_LABEL

    if _near_support(support_deviation):
        return f"{zone.label}{NEAR_SUPPORT_SUFFIX}"
    return zone.label


def position_color(position: Optional[float], support_deviation: Optional[float] = None) -> str:
    """
    Display colour of a relative position.

    Precedence: strong-buy (< -50) and danger (> 70) colours first; the
    near-support colour only inside [-50, 70]; then the zone palette.
    """
    if position is None or not is_valid_float(position):
        return COLOR_UNAVAILABLE

    if position < -50:
        return COLOR_STRONG_BUY
    if position > 70:
        return COLOR_DANGER

    if _near_support(support_deviation):
        return COLOR_NEAR_SUPPORT

    zone = position_zone(position)
    if zone is None:
        return COLOR_DEFAULT
    return zone.color


# =============================================================================
# POSITION METRIC
# =============================================================================


class PositionMetric(BaseModel):
    """Position of one observed price against one model output."""

    relative_position_pct: float = Field(..., description="% deviation from the median model")
    support_deviation_pct: float = Field(..., description="% deviation from the support model")
    zone: PositionZone
    label: str
    color: str = Field(..., pattern=r"^#[0-9A-Fa-f]{6}$")

    model_config = {"frozen": True}


def evaluate_position(price: Optional[float], output: ModelOutput) -> Optional[PositionMetric]:
    """Full position metric, or None when the price is unavailable."""
    position = relative_position(price, output.median_usd, output.support_usd)
    deviation = support_deviation(price, output.support_usd)
    zone = position_zone(position)
    if position is None or deviation is None or zone is None:
        return None

    return PositionMetric(
        relative_position_pct=position,
        support_deviation_pct=deviation,
        zone=zone,
        label=position_label(position, deviation),
        color=position_color(position, deviation),
    )
