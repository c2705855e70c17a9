"""
Numerical Safeguards - Safe Math Primitives

Every formula in the valuation and simulation layers goes through this module:
- clamp-then-log: a logarithm never sees a value <= 0
- safe division with a fallback instead of ZeroDivisionError
- NaN/Inf sanitisation so invalid values never propagate to callers
- zero tests with an absolute tolerance
- finiteness checks for computed results that must not degrade silently

CRITICAL INVARIANTS:
1. safe_log10 / from_log10 never raise and always return finite floats
2. Division by zero never happens (fallback is returned)
3. NaN/Inf never propagate (replaced by the fallback or rejected by validate_finite)
4. All operations are deterministic
"""

import math
import sys
from typing import Final

# =============================================================================
# EPSILON PARAMETERS
# =============================================================================

# Floor applied to the argument of every logarithm
EPS_LOG: Final[float] = 1e-7

# Epsilon for coin quantities (1 satoshi is 1e-8, so stay well below it)
EPS_QTY: Final[float] = 1e-12

# Absolute tolerance for is_zero
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12

# Largest finite value returned by from_log10 on overflow
MAX_FINITE: Final[float] = sys.float_info.max


# =============================================================================
# NaN/Inf SANITISATION
# =============================================================================


def is_valid_float(value: float) -> bool:
    """True if value is a finite number (not NaN, not Inf)."""
    return math.isfinite(value)


def sanitize_float(value: float, fallback: float = 0.0) -> float:
    """
    Replace NaN/Inf with a fallback value.

    Examples:
        >>> sanitize_float(10.0)
        10.0
        >>> sanitize_float(float('nan'))
        0.0
        >>> sanitize_float(float('-inf'), fallback=-1.0)
        -1.0
    """
    if is_valid_float(value):
        return value
    return fallback


# =============================================================================
# LOGARITHMS
# =============================================================================


def safe_log10(value: float, eps: float = EPS_LOG) -> float:
    """
    Base-10 logarithm with the argument clamped to eps.

    The single place where the valuation model takes a logarithm. Non-positive
    and NaN inputs map to log10(eps); +Inf maps to log10 of the largest float.

    Args:
        value: Argument (any float)
        eps: Lower clamp for the argument (default: EPS_LOG)

    Returns:
        log10(max(eps, value)), always finite

    Examples:
        >>> safe_log10(100.0)
        2.0
        >>> safe_log10(0.0)
        -7.0
        >>> safe_log10(-5.0)
        -7.0
    """
    if eps <= 0:
        raise ValueError(f"eps must be positive, got {eps}")

    if math.isnan(value):
        value = eps
    elif math.isinf(value):
        value = MAX_FINITE if value > 0 else eps

    return math.log10(max(eps, value))


def from_log10(log_value: float) -> float:
    """
    Inverse of safe_log10: 10 ** log_value.

    Overflow saturates at MAX_FINITE and NaN maps to 0.0, so the result is
    always a finite non-negative float.

    Examples:
        >>> from_log10(2.0)
        100.0
        >>> from_log10(400.0) == MAX_FINITE
        True
    """
    if math.isnan(log_value):
        return 0.0
    try:
        result = math.pow(10.0, log_value)
    except OverflowError:
        return MAX_FINITE
    return sanitize_float(result, fallback=MAX_FINITE)


# =============================================================================
# SAFE DIVISION
# =============================================================================


def safe_divide(
    numerator: float,
    denominator: float,
    fallback: float = 0.0,
) -> float:
    """
    Division that returns fallback instead of raising or producing NaN/Inf.

    Args:
        numerator: Numerator
        denominator: Denominator
        fallback: Returned when the denominator is zero or the result is
            not finite (default: 0.0)

    Returns:
        numerator / denominator, or fallback

    Examples:
        >>> safe_divide(10.0, 2.0)
        5.0
        >>> safe_divide(10.0, 0.0)
        0.0
        >>> safe_divide(10.0, 0.0, fallback=-1.0)
        -1.0
    """
    num_clean = sanitize_float(numerator, fallback=0.0)
    denom_clean = sanitize_float(denominator, fallback=0.0)

    if denom_clean == 0.0:
        return fallback

    try:
        result = num_clean / denom_clean
    except (ZeroDivisionError, OverflowError):
        return fallback

    return sanitize_float(result, fallback=fallback)


# =============================================================================
# COMPARISONS AND CLAMPING
# =============================================================================


def is_zero(value: float, tol: float = EPS_FLOAT_COMPARE_ABS) -> bool:
    """True if abs(value) <= tol."""
    return abs(value) <= tol


def clamp(
    value: float,
    min_value: float | None = None,
    max_value: float | None = None,
) -> float:
    """
    Clamp value to [min_value, max_value]; either bound may be omitted.

    Examples:
        >>> clamp(5.0, 0.0, 10.0)
        5.0
        >>> clamp(-1.0, 0.0, 10.0)
        0.0
        >>> clamp(15.0, 0.0, 10.0)
        10.0
    """
    result = value

    if min_value is not None:
        result = max(result, min_value)

    if max_value is not None:
        result = min(result, max_value)

    return result


# =============================================================================
# VALIDATION
# =============================================================================


def validate_finite(value: float, name: str) -> None:
    """
    Validate that a computed value is a finite number.

    Args:
        value: Value to check
        name: Parameter name (for the error message)

    Raises:
        ValueError: If value is NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a finite number (not NaN/Inf), got {value}")
