"""
Simulators: accumulation (DCA) and drawdown on the power-law projection.
"""

from src.simulation.accumulation import AccumulationSimulator
from src.simulation.inputs import (
    SimulationDefaults,
    parse_accumulation_request,
    parse_withdrawal_request,
)
from src.simulation.withdrawal import WithdrawalSimulator, find_depletion_year

__all__ = [
    "AccumulationSimulator",
    "WithdrawalSimulator",
    "SimulationDefaults",
    "find_depletion_year",
    "parse_accumulation_request",
    "parse_withdrawal_request",
]
