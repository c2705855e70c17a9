"""
Core math modules

Numeric primitives with stability guarantees and the log-log fit.
"""

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_FLOAT_COMPARE_ABS,
    EPS_LOG,
    EPS_QTY,
    MAX_FINITE,
    # Logarithms
    from_log10,
    safe_log10,
    # Safe division
    safe_divide,
    # NaN/Inf sanitization
    is_valid_float,
    sanitize_float,
    # Epsilon comparisons
    is_zero,
    # Utilities
    clamp,
    # Validation
    validate_finite,
)

# Regression
from src.core.math.regression import (
    LogLogFit,
    fit_log_log,
    r_squared,
)

__all__ = [
    # Numerical Safeguards - Epsilon constants
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_LOG",
    "EPS_QTY",
    "MAX_FINITE",
    # Numerical Safeguards - Logarithms
    "from_log10",
    "safe_log10",
    # Numerical Safeguards - Safe division
    "safe_divide",
    # Numerical Safeguards - NaN/Inf sanitization
    "is_valid_float",
    "sanitize_float",
    # Numerical Safeguards - Epsilon comparisons
    "is_zero",
    # Numerical Safeguards - Utilities
    "clamp",
    # Numerical Safeguards - Validation
    "validate_finite",
    # Regression
    "LogLogFit",
    "fit_log_log",
    "r_squared",
]
