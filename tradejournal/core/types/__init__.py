"""
Core type definitions and utilities.
"""

from .calendar import MonthKey, format_date, iter_months, parse_date
from .financial import (
    AMOUNT_DECIMALS,
    HUNDRED,
    PERCENTAGE_DECIMALS,
    ZERO,
    as_percentage,
    round_amount,
    round_percentage,
    safe_divide,
    to_float,
)

__all__ = [
    # Calendar
    "MonthKey",
    "iter_months",
    "parse_date",
    "format_date",
    # Numbers
    "to_float",
    "safe_divide",
    "as_percentage",
    "round_amount",
    "round_percentage",
    # Constants
    "AMOUNT_DECIMALS",
    "PERCENTAGE_DECIMALS",
    "ZERO",
    "HUNDRED",
]
