"""
Simulation - input, row and result models for both simulators

Inputs are the parsed (numeric) form of the text requests; rows are emitted
append-only, one per simulated year, and never mutated afterwards.
"""

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator

from src.core.domain.model_variant import PriceModel


# =============================================================================
# ENUMS
# =============================================================================


class FundingType(str, Enum):
    """How the initial holding of the accumulation plan is given."""

    FIAT = "fiat"
    BTC = "btc"


class WithdrawalMode(str, Enum):
    """Withdrawal rule of a drawdown phase."""

    FIXED = "fixed"  # monthly fiat amount, after tax
    PERCENTAGE = "percentage"  # annual percentage of the fiat balance


# =============================================================================
# ACCUMULATION
# =============================================================================


class AccumulationInput(BaseModel):
    """Validated accumulation plan."""

    funding_type: FundingType = Field(..., description="Initial holding given in fiat or BTC")
    initial_investment: float = Field(default=0.0, ge=0, description="Initial fiat amount")
    initial_btc_holding: float = Field(default=0.0, ge=0, description="Initial BTC amount")
    monthly_investment: float = Field(..., ge=0, description="Monthly contribution (fiat)")
    years: int = Field(..., ge=1, le=50, description="Contribution period in years")
    price_model: PriceModel = Field(default=PriceModel.STANDARD, description="Projection variant")
    exchange_rate: float = Field(..., gt=0, description="Fiat per USD")
    inflation_rate: float = Field(default=0.0, ge=0, description="Annual inflation, percent")

    model_config = {"frozen": True}


class AccumulationRow(BaseModel):
    """One simulated year of the accumulation plan."""

    year: int
    btc_price_fiat: float = Field(..., description="Projected BTC price in fiat")
    annual_contribution_fiat: float = Field(..., ge=0)
    btc_purchased: float = Field(..., ge=0)
    cumulative_btc_held: float = Field(..., ge=0)
    total_value_fiat: float = Field(..., ge=0)
    is_contribution_period: bool

    model_config = {"frozen": True}


# =============================================================================
# WITHDRAWAL
# =============================================================================

PHASE_1_LABEL = "phase 1"
PHASE_2_LABEL = "phase 2"


class WithdrawalPhase(BaseModel):
    """Withdrawal rule active from start_year on."""

    start_year: int
    mode: WithdrawalMode
    monthly_amount: float = Field(default=0.0, ge=0, description="Fixed mode: monthly fiat after tax")
    annual_rate: float = Field(default=0.0, ge=0, le=100, description="Percentage mode: annual %")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_active_parameter(self) -> "WithdrawalPhase":
        """The parameter of the selected mode must be positive."""
        if self.mode == WithdrawalMode.FIXED and self.monthly_amount <= 0:
            raise ValueError("fixed withdrawal requires a positive monthly_amount")
        if self.mode == WithdrawalMode.PERCENTAGE and self.annual_rate <= 0:
            raise ValueError("percentage withdrawal requires a positive annual_rate")
        return self


class WithdrawalInput(BaseModel):
    """Validated drawdown plan."""

    initial_btc: float = Field(..., gt=0, description="BTC held at the start of withdrawals")
    price_model: PriceModel = Field(default=PriceModel.STANDARD)
    first_phase: WithdrawalPhase
    second_phase: Optional[WithdrawalPhase] = None
    tax_rate: float = Field(default=0.0, ge=0, lt=100, description="Tax on withdrawals, percent")
    exchange_rate: float = Field(..., gt=0, description="Fiat per USD")
    inflation_rate: float = Field(default=0.0, ge=0, description="Annual inflation, percent")

    model_config = {"frozen": True}

    @property
    def start_year(self) -> int:
        return self.first_phase.start_year

    @model_validator(mode="after")
    def check_phase_order(self) -> "WithdrawalInput":
        if self.second_phase is not None and self.second_phase.start_year < self.first_phase.start_year:
            raise ValueError("second phase cannot start before the first phase")
        return self

    def phase_for(self, year: int) -> tuple[str, WithdrawalPhase]:
        """Label and parameters of the phase active in year."""
        if self.second_phase is not None and year >= self.second_phase.start_year:
            return PHASE_2_LABEL, self.second_phase
        return PHASE_1_LABEL, self.first_phase


class WithdrawalRow(BaseModel):
    """One simulated year of the drawdown plan."""

    year: int
    btc_price_fiat: float
    phase_label: str
    effective_rate: float = Field(..., ge=0, description="Share of the opening balance withdrawn, percent")
    withdrawal_fiat: float = Field(..., ge=0)
    withdrawal_btc: float = Field(..., ge=0)
    remaining_btc: float = Field(..., ge=0)
    total_value_fiat: float = Field(..., ge=0)

    model_config = {"frozen": True}


# =============================================================================
# RESULT
# =============================================================================

RowT = TypeVar("RowT")


class SimulationResult(BaseModel, Generic[RowT]):
    """
    Output of a simulator run.

    Either rows is complete and errors is empty, or rows is empty and errors
    maps field names (or "simulation") to human-readable messages.
    """

    rows: list[RowT] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def ok(self) -> bool:
        return not self.errors and bool(self.rows)
