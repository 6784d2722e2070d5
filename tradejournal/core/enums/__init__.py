"""
Core enumerations for the trading journal.

This module provides centralized enumerations for domain concepts
like trade sides, position states, accounting bases and capital movements.
"""

from .accounting import AccountingBasis, RecalculationStatus
from .capital_types import CapitalChangeType
from .trade_types import PositionStatus, TradeSide

__all__ = [
    "AccountingBasis",
    "CapitalChangeType",
    "PositionStatus",
    "RecalculationStatus",
    "TradeSide",
]
