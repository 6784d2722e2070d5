"""
Journal persistence interfaces.
"""

from abc import ABC, abstractmethod

from tradejournal.core.models.capital import (
    CapitalChange,
    MonthlyStartingCapitalOverride,
    YearlyStartingCapital,
)
from tradejournal.core.models.trade import Trade


class IJournalStore(ABC):
    """Abstract interface for journal persistence.

    Implementations are best-effort: a failed load returns an empty
    collection and a failed save is logged, neither raises.
    """

    @abstractmethod
    def load_trades(self) -> list[Trade]:
        """Load every persisted trade."""
        pass

    @abstractmethod
    def save_trades(self, trades: list[Trade]) -> bool:
        """Replace the persisted trade collection."""
        pass

    @abstractmethod
    def load_capital_changes(self) -> list[CapitalChange]:
        """Load every persisted capital change."""
        pass

    @abstractmethod
    def save_capital_changes(self, changes: list[CapitalChange]) -> bool:
        """Replace the persisted capital change collection."""
        pass

    @abstractmethod
    def load_yearly_capitals(self) -> list[YearlyStartingCapital]:
        """Load every persisted yearly starting capital."""
        pass

    @abstractmethod
    def save_yearly_capitals(self, capitals: list[YearlyStartingCapital]) -> bool:
        """Replace the persisted yearly starting capitals."""
        pass

    @abstractmethod
    def load_monthly_overrides(self) -> list[MonthlyStartingCapitalOverride]:
        """Load every persisted monthly override."""
        pass

    @abstractmethod
    def save_monthly_overrides(self, overrides: list[MonthlyStartingCapitalOverride]) -> bool:
        """Replace the persisted monthly overrides."""
        pass
