"""
Accumulation Simulator - periodic purchases projected on the power-law model

Year loop from the start year to max(target_year, start_year + years):
1. price the year with the decay-adjusted median model, in fiat, with the
   exchange rate inflated from the start year
2. buy monthly_investment * 12 worth of BTC while the contribution period
   lasts
3. emit one row with the holding and its fiat value

The initial holding is either given in BTC or converted from fiat at the
raw median price of the start year.
"""

import logging
from datetime import date
from typing import Any, Final, Mapping

from src.core.domain.day_index import year_start_days
from src.core.domain.simulation import (
    AccumulationInput,
    AccumulationRow,
    FundingType,
    SimulationResult,
)
from src.core.math.numerical_safeguards import validate_finite
from src.simulation.inputs import SimulationDefaults, parse_accumulation_request
from src.valuation.power_law import (
    DEFAULT_COEFFICIENTS,
    DecayAdjustedPricer,
    PowerLawCoefficients,
    ProjectionConfig,
    median_price,
)

logger = logging.getLogger(__name__)

SIMULATION_ERROR_KEY: Final[str] = "simulation"
MONTHS_PER_YEAR: Final[int] = 12


class AccumulationSimulator:
    """Accumulation (DCA) simulator.

    Stateless between runs: every call builds its own pricer and
    accumulators, so one instance can serve any number of requests.
    """

    def __init__(
        self,
        config: ProjectionConfig | None = None,
        defaults: SimulationDefaults | None = None,
        coefficients: PowerLawCoefficients = DEFAULT_COEFFICIENTS,
        current_year: int | None = None,
    ):
        """
        Args:
            config: projection year boundaries
            defaults: values for omitted optional request fields
            coefficients: power-law constants
            current_year: first simulated year (default: this calendar year)
        """
        self.config = config or ProjectionConfig()
        self.defaults = defaults or SimulationDefaults()
        self.coefficients = coefficients
        self.current_year = current_year

    def _start_year(self) -> int:
        return self.current_year if self.current_year is not None else date.today().year

    def simulate(self, request: Mapping[str, Any]) -> SimulationResult[AccumulationRow]:
        """
        Validate a raw request and run the projection.

        Returns:
            SimulationResult with all rows, or with field errors (validation)
            or a single "simulation" error (computation failure) and no rows
        """
        inputs, errors = parse_accumulation_request(request, self.defaults)
        if errors:
            logger.info("Accumulation request rejected: %s", sorted(errors))
            return SimulationResult[AccumulationRow](errors=errors)

        try:
            rows = self.project(inputs)
        except (ArithmeticError, ValueError) as e:
            logger.exception("Accumulation simulation failed")
            return SimulationResult[AccumulationRow](
                errors={SIMULATION_ERROR_KEY: f"Simulation error: {e}"}
            )

        logger.debug("Accumulation simulation produced %d rows", len(rows))
        return SimulationResult[AccumulationRow](rows=rows)

    def project(self, inputs: AccumulationInput) -> list[AccumulationRow]:
        """
        Year-by-year projection of a validated plan.

        Raises:
            ArithmeticError: on a degenerate price (caught by simulate)
            ValueError: when a price or value leaves the finite range (caught
                by simulate)
        """
        start_year = self._start_year()
        end_year = max(self.config.target_year, start_year + inputs.years)
        pricer = DecayAdjustedPricer(inputs.price_model, self.config, self.coefficients)

        if inputs.funding_type == FundingType.FIAT:
            initial_price_fiat = (
                median_price(year_start_days(start_year), inputs.price_model, self.coefficients)
                * inputs.exchange_rate
            )
            btc_held = inputs.initial_investment / initial_price_fiat
        else:
            btc_held = inputs.initial_btc_holding

        rows: list[AccumulationRow] = []
        for year in range(start_year, end_year + 1):
            is_contribution_period = year < start_year + inputs.years
            price_fiat = pricer.price_fiat(
                year, start_year, inputs.exchange_rate, inputs.inflation_rate
            )
            validate_finite(price_fiat, f"BTC price in {year}")

            annual_contribution = (
                inputs.monthly_investment * MONTHS_PER_YEAR if is_contribution_period else 0.0
            )
            btc_purchased = annual_contribution / price_fiat
            btc_held += btc_purchased
            total_value_fiat = btc_held * price_fiat
            validate_finite(total_value_fiat, f"holding value in {year}")

            rows.append(
                AccumulationRow(
                    year=year,
                    btc_price_fiat=price_fiat,
                    annual_contribution_fiat=annual_contribution,
                    btc_purchased=btc_purchased,
                    cumulative_btc_held=btc_held,
                    total_value_fiat=total_value_fiat,
                    is_contribution_period=is_contribution_period,
                )
            )

        return rows
