"""
Lot domain model.

A lot is one priced quantity tranche of a trade: the initial entry, a
pyramid add-on, or an exit leg.
"""

import datetime as dt
from dataclasses import dataclass

from tradejournal.core.types.financial import ZERO, to_float


@dataclass(frozen=True)
class Lot:
    """A quantity filled at a price, optionally dated."""

    price: float
    qty: float
    date: dt.date | None = None

    def __post_init__(self) -> None:
        """Coerce price and quantity to finite floats."""
        object.__setattr__(self, "price", to_float(self.price))
        object.__setattr__(self, "qty", to_float(self.qty))

    @property
    def is_filled(self) -> bool:
        """Check if the lot has a positive quantity and price."""
        return self.qty > ZERO and self.price > ZERO

    def notional_value(self) -> float:
        """Price times quantity."""
        return self.price * self.qty


def filled_lots(lots: list[Lot]) -> list[Lot]:
    """Keep only lots with qty > 0 and price > 0, preserving order."""
    return [lot for lot in lots if lot.is_filled]
