"""
Core type definitions and protocols.

This module defines shared callback types so the recalculation pipeline
can consume the ledger without importing it.
"""

from datetime import date
from typing import Protocol


class PortfolioSizeLookup(Protocol):
    """Callable resolving the true portfolio size of a calendar month.

    Implementations may raise or return 0; callers substitute the
    configured fallback size in both cases.
    """

    def __call__(self, month: str, year: int) -> float:
        """Return the portfolio size for (month, year)."""
        ...


class Clock(Protocol):
    """Callable returning today's date, injectable for deterministic tests."""

    def __call__(self) -> date:
        """Return the current date."""
        ...
