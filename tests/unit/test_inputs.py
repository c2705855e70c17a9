"""
Tests for simulator input parsing

Checks:
1. Text to number parsing
2. Per-field validation vocabulary of both simulators
3. Defaults for omitted optional fields
4. Configuration validation
"""

import pytest

from src.core.contracts.validators import REQUIRED_MESSAGE
from src.core.domain.model_variant import PriceModel
from src.core.domain.simulation import FundingType, WithdrawalMode
from src.simulation.inputs import (
    NON_NEGATIVE_MESSAGE,
    POSITIVE_MESSAGE,
    RATE_MESSAGE,
    TAX_RATE_MESSAGE,
    YEARS_MESSAGE,
    SimulationDefaults,
    parse_accumulation_request,
    parse_integer,
    parse_number,
    parse_withdrawal_request,
    year_range_message,
)
from src.valuation.power_law import ProjectionConfig

CURRENT_YEAR = 2025


@pytest.fixture
def accumulation_request():
    return {
        "initial_investment_type": "btc",
        "initial_btc_holding": "0.5",
        "monthly_investment": "30000",
        "years": "10",
    }


@pytest.fixture
def withdrawal_request():
    return {
        "initial_btc": "2",
        "start_year": "2030",
        "withdrawal_type": "percentage",
        "withdrawal_rate": "4",
    }


# =============================================================================
# FIELD PARSING
# =============================================================================


class TestParseNumber:
    """Tests for parse_number / parse_integer"""

    @pytest.mark.parametrize("raw,expected", [("1.5", 1.5), (" 42 ", 42.0), ("-3", -3.0), (7, 7.0), (2.5, 2.5)])
    def test_valid(self, raw, expected) -> None:
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "1,000", "nan", "inf", True])
    def test_invalid(self, raw) -> None:
        assert parse_number(raw) is None

    def test_integer(self) -> None:
        assert parse_integer("10") == 10
        assert parse_integer("10.0") == 10
        assert parse_integer(2030) == 2030

    def test_fractional_integer_rejected(self) -> None:
        assert parse_integer("10.5") is None
        assert parse_integer("ten") is None


# =============================================================================
# ACCUMULATION
# =============================================================================


class TestParseAccumulation:
    """Tests for parse_accumulation_request"""

    def test_valid_btc_request(self, accumulation_request) -> None:
        inputs, errors = parse_accumulation_request(accumulation_request)

        assert errors == {}
        assert inputs.funding_type == FundingType.BTC
        assert inputs.initial_btc_holding == 0.5
        assert inputs.initial_investment == 0.0
        assert inputs.monthly_investment == 30000.0
        assert inputs.years == 10

    def test_defaults_applied(self, accumulation_request) -> None:
        inputs, _ = parse_accumulation_request(accumulation_request)

        assert inputs.exchange_rate == 150.0
        assert inputs.inflation_rate == 0.0
        assert inputs.price_model == PriceModel.STANDARD

    def test_custom_defaults(self, accumulation_request) -> None:
        defaults = SimulationDefaults(exchange_rate=7.2, price_model=PriceModel.CONSERVATIVE)
        inputs, _ = parse_accumulation_request(accumulation_request, defaults)

        assert inputs.exchange_rate == 7.2
        assert inputs.price_model == PriceModel.CONSERVATIVE

    def test_fiat_request(self, accumulation_request) -> None:
        request = dict(accumulation_request, initial_investment_type="fiat", initial_investment="1000000")
        inputs, errors = parse_accumulation_request(request)

        assert errors == {}
        assert inputs.funding_type == FundingType.FIAT
        assert inputs.initial_investment == 1_000_000.0
        assert inputs.initial_btc_holding == 0.0

    @pytest.mark.parametrize("years", ["1", "50"])
    def test_years_bounds_accepted(self, accumulation_request, years) -> None:
        _, errors = parse_accumulation_request(dict(accumulation_request, years=years))
        assert errors == {}

    @pytest.mark.parametrize("years", ["0", "51", "2.5", "many"])
    def test_years_out_of_range(self, accumulation_request, years) -> None:
        inputs, errors = parse_accumulation_request(dict(accumulation_request, years=years))

        assert inputs is None
        assert errors == {"years": YEARS_MESSAGE}

    def test_zero_monthly_investment_allowed(self, accumulation_request) -> None:
        inputs, errors = parse_accumulation_request(dict(accumulation_request, monthly_investment="0"))
        assert errors == {}
        assert inputs.monthly_investment == 0.0

    def test_negative_values(self, accumulation_request) -> None:
        request = dict(accumulation_request, initial_btc_holding="-1", monthly_investment="-5")
        _, errors = parse_accumulation_request(request)

        assert errors == {
            "initial_btc_holding": NON_NEGATIVE_MESSAGE,
            "monthly_investment": NON_NEGATIVE_MESSAGE,
        }

    def test_exchange_and_inflation(self, accumulation_request) -> None:
        request = dict(accumulation_request, exchange_rate="0", inflation_rate="-1")
        _, errors = parse_accumulation_request(request)

        assert errors == {
            "exchange_rate": POSITIVE_MESSAGE,
            "inflation_rate": NON_NEGATIVE_MESSAGE,
        }

    def test_blank_optional_field_is_an_error(self, accumulation_request) -> None:
        _, errors = parse_accumulation_request(dict(accumulation_request, exchange_rate=""))
        assert errors == {"exchange_rate": POSITIVE_MESSAGE}

    def test_schema_and_value_errors_combined(self, accumulation_request) -> None:
        request = dict(accumulation_request, years="0")
        del request["monthly_investment"]
        _, errors = parse_accumulation_request(request)

        assert errors == {"monthly_investment": REQUIRED_MESSAGE, "years": YEARS_MESSAGE}

    def test_unknown_funding_type(self, accumulation_request) -> None:
        inputs, errors = parse_accumulation_request(dict(accumulation_request, initial_investment_type="gold"))
        assert inputs is None
        assert set(errors) == {"initial_investment_type"}


# =============================================================================
# WITHDRAWAL
# =============================================================================


class TestParseWithdrawal:
    """Tests for parse_withdrawal_request"""

    def test_valid_percentage_request(self, withdrawal_request) -> None:
        inputs, errors = parse_withdrawal_request(withdrawal_request, CURRENT_YEAR)

        assert errors == {}
        assert inputs.initial_btc == 2.0
        assert inputs.start_year == 2030
        assert inputs.first_phase.mode == WithdrawalMode.PERCENTAGE
        assert inputs.first_phase.annual_rate == 4.0
        assert inputs.second_phase is None
        assert inputs.tax_rate == 20.315

    def test_fixed_request(self, withdrawal_request) -> None:
        request = dict(withdrawal_request, withdrawal_type="fixed", withdrawal_amount="250000")
        inputs, errors = parse_withdrawal_request(request, CURRENT_YEAR)

        assert errors == {}
        assert inputs.first_phase.mode == WithdrawalMode.FIXED
        assert inputs.first_phase.monthly_amount == 250000.0

    def test_initial_btc_must_be_positive(self, withdrawal_request) -> None:
        _, errors = parse_withdrawal_request(dict(withdrawal_request, initial_btc="0"), CURRENT_YEAR)
        assert errors == {"initial_btc": POSITIVE_MESSAGE}

    @pytest.mark.parametrize("start_year", ["2024", "2051"])
    def test_start_year_range(self, withdrawal_request, start_year) -> None:
        _, errors = parse_withdrawal_request(dict(withdrawal_request, start_year=start_year), CURRENT_YEAR)
        assert errors == {"start_year": year_range_message(CURRENT_YEAR, 2050)}

    def test_start_year_bounds_accepted(self, withdrawal_request) -> None:
        for start_year in ("2025", "2050"):
            _, errors = parse_withdrawal_request(dict(withdrawal_request, start_year=start_year), CURRENT_YEAR)
            assert errors == {}

    def test_custom_horizon(self, withdrawal_request) -> None:
        config = ProjectionConfig(horizon_year=2060)
        inputs, errors = parse_withdrawal_request(dict(withdrawal_request, start_year="2055"), CURRENT_YEAR, config)
        assert errors == {}
        assert inputs.start_year == 2055

    @pytest.mark.parametrize("rate", ["0", "100.5", "-2"])
    def test_rate_out_of_range(self, withdrawal_request, rate) -> None:
        _, errors = parse_withdrawal_request(dict(withdrawal_request, withdrawal_rate=rate), CURRENT_YEAR)
        assert errors == {"withdrawal_rate": RATE_MESSAGE}

    def test_rate_of_one_hundred_accepted(self, withdrawal_request) -> None:
        _, errors = parse_withdrawal_request(dict(withdrawal_request, withdrawal_rate="100"), CURRENT_YEAR)
        assert errors == {}

    def test_fixed_amount_must_be_positive(self, withdrawal_request) -> None:
        request = dict(withdrawal_request, withdrawal_type="fixed", withdrawal_amount="0")
        _, errors = parse_withdrawal_request(request, CURRENT_YEAR)
        assert errors == {"withdrawal_amount": POSITIVE_MESSAGE}

    @pytest.mark.parametrize("tax_rate", ["100", "-1"])
    def test_tax_rate_range(self, withdrawal_request, tax_rate) -> None:
        _, errors = parse_withdrawal_request(dict(withdrawal_request, tax_rate=tax_rate), CURRENT_YEAR)
        assert errors == {"tax_rate": TAX_RATE_MESSAGE}

    def test_zero_tax_accepted(self, withdrawal_request) -> None:
        inputs, errors = parse_withdrawal_request(dict(withdrawal_request, tax_rate="0"), CURRENT_YEAR)
        assert errors == {}
        assert inputs.tax_rate == 0.0

    def test_second_phase(self, withdrawal_request) -> None:
        request = dict(
            withdrawal_request,
            second_phase_enabled=True,
            second_phase_year="2040",
            second_phase_type="fixed",
            second_phase_amount="100000",
        )
        inputs, errors = parse_withdrawal_request(request, CURRENT_YEAR)

        assert errors == {}
        assert inputs.second_phase.start_year == 2040
        assert inputs.second_phase.mode == WithdrawalMode.FIXED
        assert inputs.second_phase.monthly_amount == 100000.0

    def test_second_phase_before_first(self, withdrawal_request) -> None:
        request = dict(
            withdrawal_request,
            second_phase_enabled=True,
            second_phase_year="2029",
            second_phase_type="percentage",
            second_phase_rate="3",
        )
        _, errors = parse_withdrawal_request(request, CURRENT_YEAR)
        assert errors == {"second_phase_year": year_range_message(2030, 2050)}

    def test_disabled_second_phase_ignored(self, withdrawal_request) -> None:
        request = dict(
            withdrawal_request,
            second_phase_enabled=False,
            second_phase_year="1999",
            second_phase_type="fixed",
            second_phase_amount="-5",
        )
        inputs, errors = parse_withdrawal_request(request, CURRENT_YEAR)

        assert errors == {}
        assert inputs.second_phase is None


# =============================================================================
# CONFIG
# =============================================================================


class TestSimulationDefaults:
    """Tests for SimulationDefaults"""

    def test_defaults(self) -> None:
        defaults = SimulationDefaults()
        assert defaults.exchange_rate == 150.0
        assert defaults.inflation_rate == 0.0
        assert defaults.tax_rate == 20.315

    @pytest.mark.parametrize(
        "kwargs",
        [{"exchange_rate": 0.0}, {"inflation_rate": -1.0}, {"tax_rate": 100.0}, {"tax_rate": -0.5}],
    )
    def test_invalid_defaults(self, kwargs) -> None:
        with pytest.raises(ValueError):
            SimulationDefaults(**kwargs)
