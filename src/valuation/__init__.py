"""
Valuation: the power-law price model and where a price sits against it.
"""

from src.valuation.position import (
    PositionMetric,
    PositionZone,
    evaluate_position,
    position_color,
    position_label,
    position_zone,
    relative_position,
    support_deviation,
)
from src.valuation.power_law import (
    DEFAULT_COEFFICIENTS,
    DecayAdjustedPricer,
    PowerLawCoefficients,
    ProjectionConfig,
    decay_scale,
    median_price,
    model_output,
    support_price,
)
from src.valuation.series import (
    PowerLawSeriesCache,
    PowerLawSnapshot,
    build_power_law_series,
    current_snapshot,
    format_percentage,
)

__all__ = [
    # Power law
    "DEFAULT_COEFFICIENTS",
    "PowerLawCoefficients",
    "ProjectionConfig",
    "DecayAdjustedPricer",
    "decay_scale",
    "median_price",
    "support_price",
    "model_output",
    # Position
    "PositionZone",
    "PositionMetric",
    "relative_position",
    "support_deviation",
    "position_zone",
    "position_label",
    "position_color",
    "evaluate_position",
    # Series
    "PowerLawSeriesCache",
    "PowerLawSnapshot",
    "build_power_law_series",
    "current_snapshot",
    "format_percentage",
]
