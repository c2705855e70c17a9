"""
Regression - log-log goodness of fit

Fit quality of the power law on a price history, in log10 space:

    x = log10(max(1, days_since_genesis(t)))
    y = log10(max(eps, price))

    r  = (n*Sxy - Sx*Sy) / sqrt((n*Sxx - Sx^2) * (n*Syy - Sy^2))
    R² = r^2

r_squared is total: empty or degenerate input gives 0.0, never NaN and never
an exception. fit_log_log is offline tooling for refitting the model
constants and does raise on degenerate input.
"""

import logging
import math
from typing import Iterable, NamedTuple, Union

from src.core.domain.day_index import DateLike, days_since_epoch
from src.core.domain.price import PricePoint
from src.core.math.numerical_safeguards import is_valid_float, safe_log10, validate_finite

logger = logging.getLogger(__name__)

# Relative size below which a variance term counts as zero
_SPREAD_REL_TOL = 1e-12

Sample = Union[PricePoint, tuple[DateLike, float]]


class _LogSums(NamedTuple):
    n: int
    sum_x: float
    sum_y: float
    sum_xy: float
    sum_xx: float
    sum_yy: float


class LogLogFit(NamedTuple):
    """Ordinary least squares fit of log10(price) on log10(days)."""

    intercept: float  # A in log10(price) = A + B * log10(days)
    slope: float  # B
    r_squared: float
    n: int


def _to_xy(sample: Sample) -> tuple[float, float]:
    if isinstance(sample, PricePoint):
        timestamp, price = sample.timestamp, sample.price
    else:
        timestamp, price = sample
    # safe_log10 would clamp NaN/Inf into a plausible value; refuse them here
    validate_finite(price, "price")
    x = safe_log10(max(1, days_since_epoch(timestamp)))
    y = safe_log10(price)
    return x, y


def _accumulate(series: Iterable[Sample]) -> _LogSums | None:
    n = 0
    sum_x = sum_y = sum_xy = sum_xx = sum_yy = 0.0

    for sample in series:
        try:
            x, y = _to_xy(sample)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("Unreadable sample %r: %s", sample, e)
            return None
        if not (is_valid_float(x) and is_valid_float(y)):
            logger.warning("Invalid log value for sample %r: x=%s y=%s", sample, x, y)
            return None
        n += 1
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x
        sum_yy += y * y

    return _LogSums(n, sum_x, sum_y, sum_xy, sum_xx, sum_yy)


def _spread(n: int, total: float, total_sq: float) -> float:
    """n * sum(v^2) - sum(v)^2, with cancellation noise snapped to 0."""
    spread = n * total_sq - total * total
    if spread <= _SPREAD_REL_TOL * abs(n * total_sq):
        return 0.0
    return spread


def _r_squared_from_sums(sums: _LogSums) -> float:
    n = sums.n
    numerator = n * sums.sum_xy - sums.sum_x * sums.sum_y
    variance_term = _spread(n, sums.sum_x, sums.sum_xx) * _spread(n, sums.sum_y, sums.sum_yy)
    if not is_valid_float(variance_term) or variance_term <= 0:
        return 0.0

    denominator = math.sqrt(variance_term)
    if denominator == 0:
        return 0.0

    result = (numerator / denominator) ** 2
    if not is_valid_float(result):
        return 0.0
    # rounding can push a perfect fit a hair above 1
    return min(result, 1.0)


def r_squared(series: Iterable[Sample]) -> float:
    """
    Coefficient of determination of the log-log linear fit.

    Args:
        series: PricePoint objects or (timestamp, price) pairs; timestamps may
            be dates, datetimes or epoch milliseconds

    Returns:
        R² in [0, 1]; 0.0 for empty, constant or invalid input

    Examples:
        >>> r_squared([])
        0.0
    """
    sums = _accumulate(series)
    if sums is None:
        return 0.0
    if sums.n == 0:
        logger.warning("r_squared: no data provided, returning 0")
        return 0.0
    return _r_squared_from_sums(sums)


def fit_log_log(series: Iterable[Sample]) -> LogLogFit:
    """
    Least squares power-law fit of a price history.

    Returns:
        LogLogFit(intercept, slope, r_squared, n)

    Raises:
        ValueError: fewer than two samples, invalid samples, or all samples
            on the same day
    """
    sums = _accumulate(series)
    if sums is None:
        raise ValueError("series contains invalid samples")
    if sums.n < 2:
        raise ValueError(f"at least 2 samples are required, got {sums.n}")

    n = sums.n
    x_variance_term = _spread(n, sums.sum_x, sums.sum_xx)
    if x_variance_term <= 0:
        raise ValueError("samples must span more than one day offset")

    slope = (n * sums.sum_xy - sums.sum_x * sums.sum_y) / x_variance_term
    intercept = (sums.sum_y - slope * sums.sum_x) / n

    return LogLogFit(
        intercept=intercept,
        slope=slope,
        r_squared=_r_squared_from_sums(sums),
        n=n,
    )
