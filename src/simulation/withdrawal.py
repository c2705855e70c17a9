"""
Drawdown Simulator - withdrawals from a BTC holding on the power-law model

Year loop from the withdrawal start year to the projection horizon:
1. pick the active phase (second phase from its start year on)
2. price the year exactly like the accumulation simulator
3. gross withdrawal:
   - fixed:      monthly_amount * 12 / (1 - tax_rate)   (amount is after tax)
   - percentage: remaining_btc * price * annual_rate    (no tax gross-up)
4. withdraw at most the remaining holding; the balance never goes negative

The loop always runs to the horizon. Rows after depletion show zero
withdrawal and zero balance; find_depletion_year locates the first of them.
"""

import logging
from datetime import date
from typing import Any, Final, Mapping, Optional, Sequence

from src.core.domain.simulation import (
    SimulationResult,
    WithdrawalInput,
    WithdrawalMode,
    WithdrawalPhase,
    WithdrawalRow,
)
from src.core.math.numerical_safeguards import (
    EPS_QTY,
    clamp,
    is_zero,
    safe_divide,
    validate_finite,
)
from src.simulation.accumulation import MONTHS_PER_YEAR, SIMULATION_ERROR_KEY
from src.simulation.inputs import SimulationDefaults, parse_withdrawal_request
from src.valuation.power_law import (
    DEFAULT_COEFFICIENTS,
    DecayAdjustedPricer,
    PowerLawCoefficients,
    ProjectionConfig,
)

logger = logging.getLogger(__name__)

# Remaining balance below this is treated as fully depleted
DEPLETION_EPS_BTC: Final[float] = EPS_QTY


def gross_withdrawal_fiat(
    phase: WithdrawalPhase,
    remaining_btc: float,
    price_fiat: float,
    tax_rate_pct: float,
) -> float:
    """
    Pre-tax fiat amount a phase asks for in one year.

    Fixed mode grosses the after-tax amount up for tax; percentage mode takes
    its rate of the current fiat balance as is.
    """
    if phase.mode == WithdrawalMode.FIXED:
        return phase.monthly_amount * MONTHS_PER_YEAR / (1.0 - tax_rate_pct / 100.0)
    return remaining_btc * price_fiat * (phase.annual_rate / 100.0)


def find_depletion_year(rows: Sequence[WithdrawalRow]) -> Optional[int]:
    """First year whose closing balance is zero, or None if it never runs out."""
    for row in rows:
        if row.remaining_btc <= 0:
            return row.year
    return None


class WithdrawalSimulator:
    """Drawdown simulator with an optional second withdrawal phase."""

    def __init__(
        self,
        config: ProjectionConfig | None = None,
        defaults: SimulationDefaults | None = None,
        coefficients: PowerLawCoefficients = DEFAULT_COEFFICIENTS,
        current_year: int | None = None,
    ):
        """
        Args:
            config: projection year boundaries (horizon_year ends every run)
            defaults: values for omitted optional request fields
            coefficients: power-law constants
            current_year: year the exchange rate is quoted in and the earliest
                allowed start year (default: this calendar year)
        """
        self.config = config or ProjectionConfig()
        self.defaults = defaults or SimulationDefaults()
        self.coefficients = coefficients
        self.current_year = current_year

    def _current_year(self) -> int:
        return self.current_year if self.current_year is not None else date.today().year

    def simulate(self, request: Mapping[str, Any]) -> SimulationResult[WithdrawalRow]:
        """
        Validate a raw request and run the drawdown.

        Returns:
            SimulationResult with all rows, or with field errors (validation)
            or a single "simulation" error (computation failure) and no rows
        """
        current_year = self._current_year()
        inputs, errors = parse_withdrawal_request(request, current_year, self.config, self.defaults)
        if errors:
            logger.info("Withdrawal request rejected: %s", sorted(errors))
            return SimulationResult[WithdrawalRow](errors=errors)

        try:
            rows = self.project(inputs, current_year)
        except (ArithmeticError, ValueError) as e:
            logger.exception("Withdrawal simulation failed")
            return SimulationResult[WithdrawalRow](
                errors={SIMULATION_ERROR_KEY: f"Simulation error: {e}"}
            )

        depletion_year = find_depletion_year(rows)
        if depletion_year is not None:
            logger.debug("Holding depleted in %d", depletion_year)
        return SimulationResult[WithdrawalRow](rows=rows)

    def project(self, inputs: WithdrawalInput, current_year: int) -> list[WithdrawalRow]:
        """
        Year-by-year drawdown of a validated plan.

        Args:
            inputs: validated plan
            current_year: base year of the exchange rate for inflation

        Raises:
            ArithmeticError: on a degenerate price (caught by simulate)
            ValueError: when a price or amount leaves the finite range (caught
                by simulate)
        """
        pricer = DecayAdjustedPricer(inputs.price_model, self.config, self.coefficients)
        remaining_btc = inputs.initial_btc

        rows: list[WithdrawalRow] = []
        for year in range(inputs.start_year, self.config.horizon_year + 1):
            phase_label, phase = inputs.phase_for(year)
            price_fiat = pricer.price_fiat(
                year, current_year, inputs.exchange_rate, inputs.inflation_rate
            )
            validate_finite(price_fiat, f"BTC price in {year}")

            opening_btc = remaining_btc
            gross_fiat = gross_withdrawal_fiat(phase, remaining_btc, price_fiat, inputs.tax_rate)
            withdrawal_btc = clamp(gross_fiat / price_fiat, 0.0, remaining_btc)

            remaining_btc -= withdrawal_btc
            if is_zero(remaining_btc, DEPLETION_EPS_BTC):
                remaining_btc = 0.0

            withdrawal_fiat = withdrawal_btc * price_fiat
            total_value_fiat = remaining_btc * price_fiat
            validate_finite(withdrawal_fiat, f"withdrawal in {year}")
            validate_finite(total_value_fiat, f"holding value in {year}")

            rows.append(
                WithdrawalRow(
                    year=year,
                    btc_price_fiat=price_fiat,
                    phase_label=phase_label,
                    effective_rate=safe_divide(withdrawal_btc, opening_btc) * 100.0,
                    withdrawal_fiat=withdrawal_fiat,
                    withdrawal_btc=withdrawal_btc,
                    remaining_btc=remaining_btc,
                    total_value_fiat=total_value_fiat,
                )
            )

        return rows
