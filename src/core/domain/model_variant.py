"""
PriceModel - variant selector for the long-horizon decay adjustment.

Both variants share the base power-law coefficients; they differ only in how
strongly the extrapolated curve is flattened after the transition year.
"""

from enum import Enum


class PriceModel(str, Enum):
    """Projection variant with its (target_scale, decay_rate) pair."""

    STANDARD = "standard"
    CONSERVATIVE = "conservative"

    @property
    def target_scale(self) -> float:
        """Asymptotic exponent applied to the raw growth ratio."""
        return _DECAY_PARAMETERS[self][0]

    @property
    def decay_rate(self) -> float:
        """Speed at which the exponent converges to target_scale."""
        return _DECAY_PARAMETERS[self][1]


_DECAY_PARAMETERS: dict[PriceModel, tuple[float, float]] = {
    PriceModel.STANDARD: (0.41, 0.2),
    PriceModel.CONSERVATIVE: (0.5, 0.25),
}
