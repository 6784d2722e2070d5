"""
Trade side and position status enumerations.

This module defines the allowed trade directions and lifecycle states.
"""

from enum import StrEnum


class TradeSide(StrEnum):
    """
    Allowed trade directions.

    Buy opens a long position, Sell opens a short position.
    """

    BUY = "Buy"
    SELL = "Sell"

    @property
    def is_long(self) -> bool:
        """Check if the side opens a long position."""
        return self == self.BUY

    @property
    def direction(self) -> float:
        """Sign applied to (exit - entry) price differences."""
        return 1.0 if self.is_long else -1.0

    @classmethod
    def parse(cls, value: object) -> "TradeSide":
        """Parse a side token case-insensitively, defaulting to Buy."""
        token = str(value or "").strip().lower()
        if token in ("sell", "short", "s"):
            return cls.SELL
        return cls.BUY


class PositionStatus(StrEnum):
    """
    Allowed position lifecycle states.

    Derived from entered and exited quantities.
    """

    OPEN = "Open"
    PARTIAL = "Partial"
    CLOSED = "Closed"

    @property
    def has_exits(self) -> bool:
        """Check if any quantity has been exited."""
        return self != self.OPEN

    @classmethod
    def from_quantities(cls, exited_qty: float, open_qty: float) -> "PositionStatus":
        """Derive status from exited and remaining quantities."""
        if exited_qty <= 0:
            return cls.OPEN
        if open_qty > 0:
            return cls.PARTIAL
        return cls.CLOSED
