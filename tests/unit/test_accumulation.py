"""
Tests for the Accumulation Simulator

Checks:
1. Row span (start year to max(target year, start + years))
2. BTC-funded and fiat-funded initial holdings
3. Contribution period and purchases
4. Inflation and the decay adjustment flowing into prices
5. Validation and computation errors surfacing as result errors
"""

import pytest

from src.core.domain.day_index import year_start_days
from src.core.domain.model_variant import PriceModel
from src.simulation.accumulation import SIMULATION_ERROR_KEY, AccumulationSimulator
from src.simulation.inputs import YEARS_MESSAGE
from src.valuation.power_law import DecayAdjustedPricer, ProjectionConfig, median_price

START_YEAR = 2025


@pytest.fixture
def btc_request():
    return {
        "initial_investment_type": "btc",
        "initial_btc_holding": "1.0",
        "monthly_investment": "0",
        "years": "1",
        "exchange_rate": "150",
    }


@pytest.fixture
def fiat_request():
    return {
        "initial_investment_type": "fiat",
        "initial_investment": "1000000",
        "monthly_investment": "10000",
        "years": "2",
        "exchange_rate": "150",
    }


@pytest.fixture
def short_simulator():
    """Simulator whose target year does not extend the run."""
    return AccumulationSimulator(config=ProjectionConfig(target_year=START_YEAR), current_year=START_YEAR)


class TestAccumulationRows:
    """Row layout and holdings"""

    def test_btc_holding_without_contributions(self, short_simulator, btc_request) -> None:
        """One BTC, no contributions, one year: two rows, constant holding, rising value"""
        result = short_simulator.simulate(btc_request)

        assert result.ok
        assert result.errors == {}
        assert [row.year for row in result.rows] == [2025, 2026]
        assert all(row.cumulative_btc_held == 1.0 for row in result.rows)
        assert all(row.btc_purchased == 0.0 for row in result.rows)
        assert result.rows[1].total_value_fiat > result.rows[0].total_value_fiat

    def test_run_extends_to_target_year(self, btc_request) -> None:
        simulator = AccumulationSimulator(current_year=START_YEAR)
        rows = simulator.simulate(btc_request).rows

        assert rows[0].year == START_YEAR
        assert rows[-1].year == 2050
        assert len(rows) == 2050 - START_YEAR + 1

    def test_run_extends_past_target_year(self, btc_request) -> None:
        simulator = AccumulationSimulator(current_year=START_YEAR)
        rows = simulator.simulate(dict(btc_request, years="40")).rows

        assert rows[-1].year == START_YEAR + 40

    def test_contribution_period(self, short_simulator, fiat_request) -> None:
        rows = short_simulator.simulate(fiat_request).rows

        assert [row.year for row in rows] == [2025, 2026, 2027]
        assert [row.is_contribution_period for row in rows] == [True, True, False]
        assert [row.annual_contribution_fiat for row in rows] == [120000.0, 120000.0, 0.0]
        assert rows[2].btc_purchased == 0.0
        assert rows[2].cumulative_btc_held == rows[1].cumulative_btc_held

    def test_fiat_funding_converted_at_start_year_median(self, short_simulator, fiat_request) -> None:
        rows = short_simulator.simulate(fiat_request).rows
        start_price_fiat = median_price(year_start_days(START_YEAR)) * 150.0

        assert rows[0].btc_price_fiat == pytest.approx(start_price_fiat)
        assert rows[0].cumulative_btc_held == pytest.approx((1_000_000 + 120_000) / start_price_fiat)

    def test_purchases_follow_price(self, short_simulator, fiat_request) -> None:
        rows = short_simulator.simulate(fiat_request).rows

        for row in rows[:2]:
            assert row.btc_purchased == pytest.approx(row.annual_contribution_fiat / row.btc_price_fiat)
            assert row.total_value_fiat == pytest.approx(row.cumulative_btc_held * row.btc_price_fiat)

    def test_holding_never_decreases(self, fiat_request) -> None:
        rows = AccumulationSimulator(current_year=START_YEAR).simulate(dict(fiat_request, years="15")).rows
        holdings = [row.cumulative_btc_held for row in rows]
        assert holdings == sorted(holdings)


class TestAccumulationPricing:
    """Prices flowing into the rows"""

    def test_inflation_compounds_from_start_year(self, short_simulator, fiat_request) -> None:
        rows = short_simulator.simulate(dict(fiat_request, inflation_rate="3")).rows
        pricer = DecayAdjustedPricer()

        assert rows[0].btc_price_fiat == pytest.approx(pricer.price_usd(2025) * 150.0)
        assert rows[2].btc_price_fiat == pytest.approx(pricer.price_usd(2027) * 150.0 * 1.03**2)

    def test_decay_adjustment_after_transition(self, btc_request) -> None:
        simulator = AccumulationSimulator(current_year=START_YEAR)
        rows = {row.year: row for row in simulator.simulate(btc_request).rows}

        assert rows[2038].btc_price_fiat == pytest.approx(median_price(year_start_days(2038)) * 150.0)
        assert rows[2045].btc_price_fiat < median_price(year_start_days(2045)) * 150.0

    def test_price_model_changes_late_years_only(self, btc_request) -> None:
        simulator = AccumulationSimulator(current_year=START_YEAR)
        standard = simulator.simulate(btc_request).rows
        conservative = simulator.simulate(dict(btc_request, price_model=PriceModel.CONSERVATIVE.value)).rows

        assert standard[0].btc_price_fiat == conservative[0].btc_price_fiat
        assert standard[-1].btc_price_fiat != conservative[-1].btc_price_fiat


class TestAccumulationErrors:
    """Validation and computation failures"""

    def test_validation_errors_give_no_rows(self, short_simulator, btc_request) -> None:
        result = short_simulator.simulate(dict(btc_request, years="0"))

        assert not result.ok
        assert result.rows == []
        assert result.errors == {"years": YEARS_MESSAGE}

    def test_computation_error_is_reported(self, short_simulator, fiat_request, monkeypatch) -> None:
        monkeypatch.setattr("src.simulation.accumulation.median_price", lambda *args, **kwargs: 0.0)

        result = short_simulator.simulate(fiat_request)

        assert result.rows == []
        assert list(result.errors) == [SIMULATION_ERROR_KEY]
        assert result.errors[SIMULATION_ERROR_KEY].startswith("Simulation error:")

    def test_price_overflow_is_reported(self, short_simulator, btc_request) -> None:
        result = short_simulator.simulate(dict(btc_request, exchange_rate="1e308"))

        assert result.rows == []
        assert list(result.errors) == [SIMULATION_ERROR_KEY]
        assert "finite" in result.errors[SIMULATION_ERROR_KEY]

    def test_holding_value_overflow_is_reported(self, short_simulator, btc_request) -> None:
        result = short_simulator.simulate(dict(btc_request, initial_btc_holding="1e305"))

        assert result.rows == []
        assert list(result.errors) == [SIMULATION_ERROR_KEY]
        assert "holding value" in result.errors[SIMULATION_ERROR_KEY]

    def test_simulator_reusable(self, short_simulator, btc_request) -> None:
        first = short_simulator.simulate(btc_request)
        second = short_simulator.simulate(btc_request)
        assert first.rows == second.rows
