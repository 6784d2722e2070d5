"""
Financial number handling for journal calculations.

Every derived metric in the journal is total: missing, blank, NaN or
infinite inputs are coerced to zero and divisions by a non-positive
denominator yield zero. The helpers here are the single place those
rules live.

Precision Considerations:
- Float64 provides ~15-16 significant decimal digits
- Derived values are stored unrounded so recalculation is idempotent
- Rounding helpers are for presentation only
"""

import math

# Presentation precision (number of decimal places)
AMOUNT_DECIMALS = 2  # Currency amounts
PERCENTAGE_DECIMALS = 4  # Percentages

# Common financial values as float constants
ZERO = 0.0
HUNDRED = 100.0


def to_float(value: object) -> float:
    """Convert loosely typed numeric input to a finite float.

    Args:
        value: Number, numeric string, None or anything else

    Returns:
        Float representation of the value, 0.0 when it is not a finite number

    Examples:
        >>> to_float("1.5")
        1.5
        >>> to_float(None)
        0.0
        >>> to_float(float("nan"))
        0.0
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, float):
        return value if math.isfinite(value) else ZERO
    if isinstance(value, int):
        return float(value)
    if value is None:
        return ZERO
    try:
        result = float(str(value).strip().replace(",", ""))
    except (TypeError, ValueError):
        return ZERO
    return result if math.isfinite(result) else ZERO


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 when the denominator is not positive.

    Args:
        numerator: Dividend
        denominator: Divisor

    Returns:
        numerator / denominator, or 0.0 if denominator <= 0
    """
    numerator = to_float(numerator)
    denominator = to_float(denominator)
    if denominator <= ZERO:
        return ZERO
    result = numerator / denominator
    return result if math.isfinite(result) else ZERO


def as_percentage(numerator: float, denominator: float) -> float:
    """Express numerator as a percentage of a positive denominator."""
    return safe_divide(numerator, denominator) * HUNDRED


def round_amount(amount: float) -> float:
    """Round a currency amount to presentation precision.

    Args:
        amount: Amount value to round

    Returns:
        Rounded amount as float
    """
    return round(to_float(amount), AMOUNT_DECIMALS)


def round_percentage(percentage: float) -> float:
    """Round percentage to presentation precision.

    Args:
        percentage: Percentage value to round

    Returns:
        Rounded percentage as float
    """
    return round(to_float(percentage), PERCENTAGE_DECIMALS)

