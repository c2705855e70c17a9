"""
Simulator inputs - text fields to validated models

Form fields arrive as text. Parsing happens in two steps:
1. structure: the request is checked against its JSON Schema contract
   (required fields, enum values, field types)
2. values: each numeric field is parsed and range-checked

Both steps report problems as a field -> message mapping; nothing here
raises for bad user input. A model is returned only when the mapping is
empty.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Final, Mapping, Optional

from src.core.contracts import AccumulationRequestValidator, WithdrawalRequestValidator
from src.core.domain.model_variant import PriceModel
from src.core.domain.simulation import (
    AccumulationInput,
    FundingType,
    WithdrawalInput,
    WithdrawalMode,
    WithdrawalPhase,
)
from src.core.math.numerical_safeguards import is_valid_float
from src.valuation.power_law import ProjectionConfig


# =============================================================================
# MESSAGES
# =============================================================================

NON_NEGATIVE_MESSAGE: Final[str] = "Enter a value of 0 or more"
POSITIVE_MESSAGE: Final[str] = "Enter a value greater than 0"
YEARS_MESSAGE: Final[str] = "Enter a period between 1 and 50 years"
RATE_MESSAGE: Final[str] = "Enter a rate above 0 and up to 100%"
TAX_RATE_MESSAGE: Final[str] = "Enter a rate of at least 0 and below 100%"

MIN_YEARS: Final[int] = 1
MAX_YEARS: Final[int] = 50


def year_range_message(first: int, last: int) -> str:
    return f"Enter a year between {first} and {last}"


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class SimulationDefaults:
    """Values used for optional fields left out of a request."""

    exchange_rate: float = 150.0  # fiat per USD
    inflation_rate: float = 0.0  # percent per year
    tax_rate: float = 20.315  # percent
    price_model: PriceModel = PriceModel.STANDARD

    def __post_init__(self) -> None:
        if self.exchange_rate <= 0:
            raise ValueError(f"exchange_rate must be positive, got {self.exchange_rate}")
        if self.inflation_rate < 0:
            raise ValueError(f"inflation_rate must be non-negative, got {self.inflation_rate}")
        if not 0 <= self.tax_rate < 100:
            raise ValueError(f"tax_rate must be in [0, 100), got {self.tax_rate}")


# =============================================================================
# FIELD PARSING
# =============================================================================


def parse_number(raw: Any) -> Optional[float]:
    """
    Parse a finite number from form input.

    Examples:
        >>> parse_number(" 1.5 ")
        1.5
        >>> parse_number("") is None
        True
        >>> parse_number("nan") is None
        True
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    return value if is_valid_float(value) else None


def parse_integer(raw: Any) -> Optional[int]:
    """Parse a whole number ("10" or "10.0"); fractional values are rejected."""
    value = parse_number(raw)
    if value is None or not value.is_integer():
        return None
    return int(value)


class FieldErrors:
    """Collects per-field errors while reading a request."""

    def __init__(self, request: Mapping[str, Any], errors: Optional[Dict[str, str]] = None):
        self.request = request
        self.errors: Dict[str, str] = dict(errors or {})

    def _read(
        self,
        field: str,
        parser: Callable[[Any], Optional[float]],
        accept: Callable[[float], bool],
        message: str,
        default: Optional[float] = None,
    ) -> Optional[float]:
        if field in self.errors:
            return None
        if field not in self.request and default is not None:
            return default

        value = parser(self.request.get(field))
        if value is None or not accept(value):
            self.errors[field] = message
            return None
        return value

    def number(
        self,
        field: str,
        accept: Callable[[float], bool],
        message: str,
        default: Optional[float] = None,
    ) -> Optional[float]:
        """Read a numeric field; record message if it is missing, malformed or rejected."""
        return self._read(field, parse_number, accept, message, default)

    def integer(self, field: str, accept: Callable[[int], bool], message: str) -> Optional[int]:
        value = self._read(field, parse_integer, accept, message)
        return None if value is None else int(value)

    def __bool__(self) -> bool:
        return bool(self.errors)


def _non_negative(value: float) -> bool:
    return value >= 0


def _positive(value: float) -> bool:
    return value > 0


def _percentage_rate(value: float) -> bool:
    return 0 < value <= 100


def _tax_rate(value: float) -> bool:
    return 0 <= value < 100


# =============================================================================
# ACCUMULATION
# =============================================================================

_ACCUMULATION_VALIDATOR = AccumulationRequestValidator()
_WITHDRAWAL_VALIDATOR = WithdrawalRequestValidator()


def parse_accumulation_request(
    request: Mapping[str, Any],
    defaults: SimulationDefaults | None = None,
) -> tuple[Optional[AccumulationInput], Dict[str, str]]:
    """
    Validate and parse an accumulation request.

    Args:
        request: Raw form fields
        defaults: Values for omitted optional fields

    Returns:
        (input, {}) on success, (None, errors) otherwise
    """
    defaults = defaults or SimulationDefaults()
    fields = FieldErrors(request, _ACCUMULATION_VALIDATOR.field_errors(request))
    if not isinstance(request, Mapping):
        return None, fields.errors

    funding_type = None
    if "initial_investment_type" not in fields.errors:
        funding_type = FundingType(request["initial_investment_type"])

    initial_investment = 0.0
    initial_btc_holding = 0.0
    if funding_type == FundingType.FIAT:
        initial_investment = fields.number("initial_investment", _non_negative, NON_NEGATIVE_MESSAGE)
    elif funding_type == FundingType.BTC:
        initial_btc_holding = fields.number("initial_btc_holding", _non_negative, NON_NEGATIVE_MESSAGE)

    monthly_investment = fields.number("monthly_investment", _non_negative, NON_NEGATIVE_MESSAGE)
    years = fields.integer("years", lambda v: MIN_YEARS <= v <= MAX_YEARS, YEARS_MESSAGE)
    exchange_rate = fields.number(
        "exchange_rate", _positive, POSITIVE_MESSAGE, default=defaults.exchange_rate
    )
    inflation_rate = fields.number(
        "inflation_rate", _non_negative, NON_NEGATIVE_MESSAGE, default=defaults.inflation_rate
    )

    if fields:
        return None, fields.errors

    return (
        AccumulationInput(
            funding_type=funding_type,
            initial_investment=initial_investment,
            initial_btc_holding=initial_btc_holding,
            monthly_investment=monthly_investment,
            years=years,
            price_model=PriceModel(request.get("price_model", defaults.price_model.value)),
            exchange_rate=exchange_rate,
            inflation_rate=inflation_rate,
        ),
        {},
    )


# =============================================================================
# WITHDRAWAL
# =============================================================================


def _read_phase(
    fields: FieldErrors,
    start_year: Optional[int],
    mode_field: str,
    amount_field: str,
    rate_field: str,
) -> Optional[WithdrawalPhase]:
    if mode_field in fields.errors:
        return None
    mode = WithdrawalMode(fields.request[mode_field])

    amount = rate = 0.0
    if mode == WithdrawalMode.FIXED:
        amount = fields.number(amount_field, _positive, POSITIVE_MESSAGE)
    else:
        rate = fields.number(rate_field, _percentage_rate, RATE_MESSAGE)

    if start_year is None or amount is None or rate is None:
        return None
    return WithdrawalPhase(start_year=start_year, mode=mode, monthly_amount=amount, annual_rate=rate)


def parse_withdrawal_request(
    request: Mapping[str, Any],
    current_year: int,
    config: ProjectionConfig | None = None,
    defaults: SimulationDefaults | None = None,
) -> tuple[Optional[WithdrawalInput], Dict[str, str]]:
    """
    Validate and parse a drawdown request.

    Start years must lie between current_year and the projection horizon;
    a second phase may not start before the first one.

    Returns:
        (input, {}) on success, (None, errors) otherwise
    """
    config = config or ProjectionConfig()
    defaults = defaults or SimulationDefaults()
    fields = FieldErrors(request, _WITHDRAWAL_VALIDATOR.field_errors(request))
    if not isinstance(request, Mapping):
        return None, fields.errors

    horizon = config.horizon_year
    initial_btc = fields.number("initial_btc", _positive, POSITIVE_MESSAGE)
    start_year = fields.integer(
        "start_year",
        lambda v: current_year <= v <= horizon,
        year_range_message(current_year, horizon),
    )
    first_phase = _read_phase(
        fields, start_year, "withdrawal_type", "withdrawal_amount", "withdrawal_rate"
    )

    second_phase = None
    if request.get("second_phase_enabled") is True:
        first_allowed = start_year if start_year is not None else current_year
        second_year = fields.integer(
            "second_phase_year",
            lambda v: first_allowed <= v <= horizon,
            year_range_message(first_allowed, horizon),
        )
        second_phase = _read_phase(
            fields, second_year, "second_phase_type", "second_phase_amount", "second_phase_rate"
        )

    tax_rate = fields.number("tax_rate", _tax_rate, TAX_RATE_MESSAGE, default=defaults.tax_rate)
    exchange_rate = fields.number(
        "exchange_rate", _positive, POSITIVE_MESSAGE, default=defaults.exchange_rate
    )
    inflation_rate = fields.number(
        "inflation_rate", _non_negative, NON_NEGATIVE_MESSAGE, default=defaults.inflation_rate
    )

    if fields:
        return None, fields.errors

    return (
        WithdrawalInput(
            initial_btc=initial_btc,
            price_model=PriceModel(request.get("price_model", defaults.price_model.value)),
            first_phase=first_phase,
            second_phase=second_phase,
            tax_rate=tax_rate,
            exchange_rate=exchange_rate,
            inflation_rate=inflation_rate,
        ),
        {},
    )
