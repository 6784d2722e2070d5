"""
In-memory journal store.
"""

import copy
from threading import RLock

from loguru import logger

from tradejournal.core.interfaces.storage import IJournalStore
from tradejournal.core.models.capital import (
    CapitalChange,
    MonthlyStartingCapitalOverride,
    YearlyStartingCapital,
)
from tradejournal.core.models.trade import Trade


class InMemoryJournalStore(IJournalStore):
    """Journal store holding deep copies of every collection in process memory."""

    def __init__(self) -> None:
        self._collections: dict[str, list] = {
            "trades": [],
            "capital_changes": [],
            "yearly_capitals": [],
            "monthly_overrides": [],
        }
        self._lock = RLock()
        self.save_count = 0

    def _load(self, collection: str) -> list:
        with self._lock:
            return copy.deepcopy(self._collections[collection])

    def _save(self, collection: str, items: list) -> bool:
        with self._lock:
            self._collections[collection] = copy.deepcopy(list(items))
            self.save_count += 1
        logger.debug(f"Stored {len(items)} {collection} in memory")
        return True

    def load_trades(self) -> list[Trade]:
        return self._load("trades")

    def save_trades(self, trades: list[Trade]) -> bool:
        return self._save("trades", trades)

    def load_capital_changes(self) -> list[CapitalChange]:
        return self._load("capital_changes")

    def save_capital_changes(self, changes: list[CapitalChange]) -> bool:
        return self._save("capital_changes", changes)

    def load_yearly_capitals(self) -> list[YearlyStartingCapital]:
        return self._load("yearly_capitals")

    def save_yearly_capitals(self, capitals: list[YearlyStartingCapital]) -> bool:
        return self._save("yearly_capitals", capitals)

    def load_monthly_overrides(self) -> list[MonthlyStartingCapitalOverride]:
        return self._load("monthly_overrides")

    def save_monthly_overrides(self, overrides: list[MonthlyStartingCapitalOverride]) -> bool:
        return self._save("monthly_overrides", overrides)
