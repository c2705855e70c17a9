"""
Contract Validation Module

JSON Schema validation of the raw simulator requests.
"""

from .validators import (
    AccumulationRequestValidator,
    ContractValidator,
    SchemaLoader,
    WithdrawalRequestValidator,
)

__all__ = [
    "SchemaLoader",
    "ContractValidator",
    "AccumulationRequestValidator",
    "WithdrawalRequestValidator",
]
