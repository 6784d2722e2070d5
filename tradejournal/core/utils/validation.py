"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

from typing import Any

from tradejournal.core.constants import (
    FULL_MONTH_NAMES,
    MAX_LEDGER_YEAR,
    MIN_LEDGER_YEAR,
    MONTH_NAMES,
)
from tradejournal.core.exceptions.journal import InvalidMonthError, ValidationError


def normalize_month(month: Any) -> str:
    """Normalize a month name to its 3-letter token.

    Full English month names are shortened; anything else is returned
    stripped but otherwise unchanged.

    Args:
        month: Month name such as 'Jan' or 'January'

    Returns:
        The normalized token
    """
    token = str(month).strip()
    if token in MONTH_NAMES:
        return token
    return FULL_MONTH_NAMES.get(token, token)


def validate_month(month: Any, param_name: str = "month") -> str:
    """Validate and normalize a month token.

    Args:
        month: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The 3-letter month token

    Raises:
        InvalidMonthError: If the value is not a recognized month
    """
    if not isinstance(month, str):
        raise InvalidMonthError(month)
    normalized = normalize_month(month)
    if normalized not in MONTH_NAMES:
        raise InvalidMonthError(month)
    return normalized


def validate_year(year: Any, param_name: str = "year") -> int:
    """Validate that a value is a usable calendar year.

    Args:
        year: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The year as int

    Raises:
        ValidationError: If year is not an integer within the ledger range
    """
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError(f"{param_name} must be an integer, got {type(year).__name__}")
    if not MIN_LEDGER_YEAR <= year <= MAX_LEDGER_YEAR:
        raise ValidationError(
            f"{param_name} must be between {MIN_LEDGER_YEAR} and {MAX_LEDGER_YEAR}, got {year}"
        )
    return year

