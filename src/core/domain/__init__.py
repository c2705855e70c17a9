"""
Domain models and value objects.

Contains the day index, price samples, model outputs and the simulator
input/row/result models.
"""

from src.core.domain.day_index import (
    GENESIS_DATE,
    MS_PER_DAY,
    DateLike,
    date_from_days,
    days_since_epoch,
    to_calendar_date,
    year_start_days,
)
from src.core.domain.model_variant import PriceModel
from src.core.domain.price import CurrentPrice, ModelOutput, PowerLawPoint, PricePoint
from src.core.domain.simulation import (
    PHASE_1_LABEL,
    PHASE_2_LABEL,
    AccumulationInput,
    AccumulationRow,
    FundingType,
    SimulationResult,
    WithdrawalInput,
    WithdrawalMode,
    WithdrawalPhase,
    WithdrawalRow,
)

__all__ = [
    # Day index
    "GENESIS_DATE",
    "MS_PER_DAY",
    "DateLike",
    "date_from_days",
    "days_since_epoch",
    "to_calendar_date",
    "year_start_days",
    # Model variant
    "PriceModel",
    # Prices
    "PricePoint",
    "CurrentPrice",
    "ModelOutput",
    "PowerLawPoint",
    # Simulation
    "FundingType",
    "WithdrawalMode",
    "AccumulationInput",
    "AccumulationRow",
    "WithdrawalPhase",
    "WithdrawalInput",
    "WithdrawalRow",
    "SimulationResult",
    "PHASE_1_LABEL",
    "PHASE_2_LABEL",
]
