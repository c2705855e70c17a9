"""
Power-Law Valuation Model

Median (fair value) and support (floor) prices as a log-log linear function
of the number of days since genesis:

    log10(median)  = A_med + B_med * log10(days)
    log10(support) = A_sup + B_sup * log10(days)

plus the decay-adjusted projection used by both simulators for years at and
after the transition year:

    scale(Y) = target_scale + (1 - target_scale) * exp(-decay_rate * (Y - (T - 1)))
    price(Y) = ref_price * (median(days(Y)) / median(ref_days)) ** scale(Y)

where T is the transition start year and (ref_price, ref_days) are taken at
January 1st of T - 1.
"""

import math
from dataclasses import dataclass
from typing import Final

from src.core.domain.day_index import year_start_days
from src.core.domain.model_variant import PriceModel
from src.core.domain.price import ModelOutput
from src.core.math.numerical_safeguards import (
    MAX_FINITE,
    from_log10,
    safe_divide,
    safe_log10,
    sanitize_float,
)

# Smallest day offset fed to the logarithm
MIN_MODEL_DAYS: Final[int] = 1


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class PowerLawCoefficients:
    """Regression constants fitted offline on the full price history."""

    median_intercept: float = -17.01593313
    median_slope: float = 5.84509376
    support_intercept: float = -17.668
    support_slope: float = 5.926


@dataclass(frozen=True)
class ProjectionConfig:
    """Year boundaries of the long-horizon projection.

    transition_start_year: first year priced with the decay adjustment
    target_year: accumulation runs last at least until this year
    horizon_year: last year of a drawdown run
    """

    transition_start_year: int = 2039
    target_year: int = 2050
    horizon_year: int = 2050

    def __post_init__(self) -> None:
        if self.transition_start_year < 2010:
            raise ValueError(
                f"transition_start_year must be >= 2010, got {self.transition_start_year}"
            )
        if self.horizon_year < 2010:
            raise ValueError(f"horizon_year must be >= 2010, got {self.horizon_year}")


DEFAULT_COEFFICIENTS: Final[PowerLawCoefficients] = PowerLawCoefficients()


# =============================================================================
# BASE MODEL
# =============================================================================


def _model_log_price(days: float, intercept: float, slope: float) -> float:
    return intercept + slope * safe_log10(max(MIN_MODEL_DAYS, sanitize_float(days, fallback=1.0)))


def median_price(
    days: float,
    model: PriceModel = PriceModel.STANDARD,
    coefficients: PowerLawCoefficients = DEFAULT_COEFFICIENTS,
) -> float:
    """
    Median model price (USD) for a day offset.

    The variant is accepted for call-site symmetry; both variants share the
    base coefficients and only differ in the decay adjustment.

    Examples:
        >>> median_price(1) == 10 ** -17.01593313
        True
    """
    return from_log10(
        _model_log_price(days, coefficients.median_intercept, coefficients.median_slope)
    )


def support_price(
    days: float,
    coefficients: PowerLawCoefficients = DEFAULT_COEFFICIENTS,
) -> float:
    """Support (floor) model price (USD) for a day offset."""
    return from_log10(
        _model_log_price(days, coefficients.support_intercept, coefficients.support_slope)
    )


def model_output(
    days: float,
    coefficients: PowerLawCoefficients = DEFAULT_COEFFICIENTS,
) -> ModelOutput:
    """Median and support prices for one day offset."""
    return ModelOutput(
        median_usd=median_price(days, coefficients=coefficients),
        support_usd=support_price(days, coefficients=coefficients),
    )


# =============================================================================
# DECAY-ADJUSTED PROJECTION
# =============================================================================


def decay_scale(year: int, model: PriceModel, transition_start_year: int) -> float:
    """
    Exponent applied to the raw growth ratio in year.

    Equals 1 at transition_start_year - 1 and converges to model.target_scale.
    """
    elapsed = year - (transition_start_year - 1)
    return model.target_scale + (1.0 - model.target_scale) * math.exp(-model.decay_rate * elapsed)


class DecayAdjustedPricer:
    """Per-run median pricer with the post-transition decay adjustment.

    The reference point is computed on the first year at or after the
    transition start and reused for the rest of the run; create one pricer
    per simulation run.
    """

    def __init__(
        self,
        model: PriceModel = PriceModel.STANDARD,
        config: ProjectionConfig | None = None,
        coefficients: PowerLawCoefficients = DEFAULT_COEFFICIENTS,
    ):
        self.model = model
        self.config = config or ProjectionConfig()
        self.coefficients = coefficients
        self._reference: tuple[float, int] | None = None

    @property
    def reference(self) -> tuple[float, int] | None:
        """(reference_price_usd, reference_days) once computed, else None."""
        return self._reference

    def _reference_point(self) -> tuple[float, int]:
        if self._reference is None:
            reference_days = year_start_days(self.config.transition_start_year - 1)
            reference_price = median_price(reference_days, self.model, self.coefficients)
            self._reference = (reference_price, reference_days)
        return self._reference

    def price_usd(self, year: int) -> float:
        """Median price (USD) at January 1st of year, decay-adjusted if due."""
        days = year_start_days(year)
        raw_price = median_price(days, self.model, self.coefficients)

        if year < self.config.transition_start_year:
            return raw_price

        reference_price, reference_days = self._reference_point()
        ratio = safe_divide(
            raw_price,
            median_price(reference_days, self.model, self.coefficients),
            fallback=1.0,
        )
        scale = decay_scale(year, self.model, self.config.transition_start_year)
        try:
            adjusted = reference_price * math.pow(ratio, scale)
        except OverflowError:
            return MAX_FINITE
        return sanitize_float(adjusted, fallback=raw_price)

    def price_fiat(
        self,
        year: int,
        base_year: int,
        exchange_rate: float,
        inflation_rate_pct: float = 0.0,
    ) -> float:
        """
        Price in fiat with the exchange rate inflated from base_year to year.

        Args:
            year: Year priced
            base_year: Year in which exchange_rate applies
            exchange_rate: Fiat per USD in base_year
            inflation_rate_pct: Annual inflation, percent

        Returns:
            price_usd(year) * exchange_rate * (1 + inflation) ** (year - base_year)
        """
        effective_rate = exchange_rate * math.pow(1.0 + inflation_rate_pct / 100.0, year - base_year)
        return self.price_usd(year) * effective_rate
