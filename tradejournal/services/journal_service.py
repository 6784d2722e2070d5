"""
Journal service.

The session object owning the trade set, the true portfolio ledger and
the persistence store. Every mutation recalculates the full trade set
because allocation and portfolio impact depend on portfolio sizes that
other trades and capital changes move.

Bulk imports are staged: a cheap provisional pass is published at once
and a settled recalculation follows after a short delay. A newer request
supersedes a pending one.
"""

import asyncio
import datetime as dt
from collections.abc import Iterable
from typing import Any

from loguru import logger

from tradejournal.core.enums import AccountingBasis, CapitalChangeType
from tradejournal.core.exceptions.journal import CalculationError, TradeNotFoundError
from tradejournal.core.interfaces.storage import IJournalStore
from tradejournal.core.models.capital import (
    CapitalChange,
    MonthlyStartingCapitalOverride,
    MonthlyTruePortfolio,
    YearlyStartingCapital,
)
from tradejournal.core.models.config import JournalConfig
from tradejournal.core.models.trade import Trade
from tradejournal.core.models.trade_set import TradeSet
from tradejournal.core.protocols import Clock
from tradejournal.infrastructure.storage import DebouncedWriter, InMemoryJournalStore
from tradejournal.services.recalculation import TradeRecalculationPipeline
from tradejournal.services.true_portfolio import TruePortfolioLedger

TradeInput = Trade | dict[str, Any]


def _as_trade(item: TradeInput) -> Trade:
    return item if isinstance(item, Trade) else Trade.from_record(item)


class JournalService:
    """Orchestrates recalculation, the ledger and persistence for one journal."""

    def __init__(
        self,
        store: IJournalStore | None = None,
        config: JournalConfig | None = None,
        today: Clock = dt.date.today,
    ):
        self.config = (config or JournalConfig()).validate()
        self._today = today
        self.store = store or InMemoryJournalStore()
        self.ledger = TruePortfolioLedger(
            fallback_portfolio_size=self.config.fallback_portfolio_size, today=today
        )
        self.pipeline = TradeRecalculationPipeline(
            fallback_portfolio_size=self.config.fallback_portfolio_size, today=today
        )
        self._basis = self.config.default_basis
        self._trade_set = TradeSet(basis=self._basis)
        self._generation = 0
        self._pending: asyncio.Task | None = None
        self._stage_error: Exception | None = None

        delay = self.config.persistence_debounce_seconds
        self._trade_writer = DebouncedWriter(self.store.save_trades, delay, "trades")
        self._change_writer = DebouncedWriter(
            self.store.save_capital_changes, delay, "capital changes"
        )
        self._yearly_writer = DebouncedWriter(
            self.store.save_yearly_capitals, delay, "yearly capitals"
        )
        self._override_writer = DebouncedWriter(
            self.store.save_monthly_overrides, delay, "monthly overrides"
        )

    @classmethod
    def from_store(
        cls,
        store: IJournalStore,
        config: JournalConfig | None = None,
        today: Clock = dt.date.today,
    ) -> "JournalService":
        """Build a service and hydrate it from a store."""
        service = cls(store=store, config=config, today=today)
        service.load()
        return service

    def load(self) -> TradeSet:
        """Replace in-memory state with the store's collections and recalculate."""
        self.ledger = TruePortfolioLedger(
            capital_changes=self.store.load_capital_changes(),
            yearly_capitals=self.store.load_yearly_capitals(),
            monthly_overrides=self.store.load_monthly_overrides(),
            fallback_portfolio_size=self.config.fallback_portfolio_size,
            today=self._today,
        )
        trades = self.store.load_trades()
        logger.info(
            f"Loaded {len(trades)} trades and {len(self.ledger.capital_changes)} capital changes"
        )
        return self._recalculate(trades, persist=False)

    # State

    @property
    def basis(self) -> AccountingBasis:
        """Active accounting basis."""
        return self._basis

    @property
    def trade_set(self) -> TradeSet:
        """Most recently published trade set."""
        return self._trade_set

    @property
    def trades(self) -> list[Trade]:
        return list(self._trade_set.trades)

    @property
    def is_settled(self) -> bool:
        """Check if the published trade set is final and nothing is pending."""
        return self._trade_set.is_settled and not self._has_pending_stage()

    def set_basis(self, basis: AccountingBasis | bool) -> TradeSet:
        """Switch accounting basis; a bool is read as the use-cash-basis flag."""
        self._basis = (
            AccountingBasis.from_flag(basis) if isinstance(basis, bool) else AccountingBasis(basis)
        )
        logger.info(f"Accounting basis set to {self._basis.value}")
        return self.recalculate()

    # Recalculation

    def recalculate(self, trades: Iterable[TradeInput] | None = None) -> TradeSet:
        """Synchronously settle the trade set, superseding any staged pass."""
        self._supersede_pending()
        source = self._trade_set.trades if trades is None else [_as_trade(t) for t in trades]
        return self._recalculate(source)

    def _recalculate(self, trades: list[Trade], persist: bool = True) -> TradeSet:
        lookup = self.ledger.portfolio_size_lookup(trades, self._basis)
        trade_set = self.pipeline.recalculate(trades, lookup, self._basis)
        self._trade_set = trade_set
        if persist:
            self._trade_writer.schedule(list(trade_set.trades))
        return trade_set

    def _has_pending_stage(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def _supersede_pending(self) -> None:
        self._generation += 1
        self._stage_error = None
        if self._has_pending_stage():
            self._pending.cancel()  # type: ignore[union-attr]
            logger.debug("Superseded pending recalculation")
        self._pending = None

    async def bulk_import(self, records: Iterable[TradeInput], replace: bool = False) -> TradeSet:
        """Import trades in two stages.

        Publishes a provisional trade set immediately and schedules the
        settled recalculation after `config.full_recalculation_delay`.

        Args:
            records: Trades or raw camelCase trade records
            replace: Replace the current trades instead of appending

        Returns:
            The provisional trade set
        """
        imported = [_as_trade(record) for record in records]
        trades = imported if replace else [*self._trade_set.trades, *imported]

        self._supersede_pending()
        generation = self._generation
        self._trade_set = self.pipeline.quick_pass(trades, self._basis)
        self._pending = asyncio.create_task(self._settle_later(generation, trades))
        logger.info(f"Imported {len(imported)} trades, full recalculation scheduled")
        return self._trade_set

    async def _settle_later(self, generation: int, trades: list[Trade]) -> None:
        await asyncio.sleep(self.config.full_recalculation_delay)
        if generation != self._generation:
            return
        try:
            self._recalculate(trades)
        except Exception as e:
            self._stage_error = e
            logger.exception(f"Staged recalculation failed, trade set stays provisional: {e}")

    async def wait_until_settled(self) -> TradeSet:
        """Wait for any staged recalculation, including ones that supersede it.

        Raises:
            CalculationError: If the staged recalculation failed; the
                provisional trade set stays published
        """
        while self._has_pending_stage():
            await asyncio.wait({self._pending})  # type: ignore[arg-type]
        if self._stage_error is not None:
            error, self._stage_error = self._stage_error, None
            raise CalculationError(f"Staged recalculation failed: {error}") from error
        return self._trade_set

    # Trades

    def get_trade(self, trade_id: str) -> Trade:
        trade = self._trade_set.find(trade_id)
        if trade is None:
            raise TradeNotFoundError(trade_id)
        return trade

    def add_trade(self, trade: TradeInput) -> Trade:
        """Add a trade and return it fully derived."""
        new_trade = _as_trade(trade)
        trade_set = self.recalculate([*self._trade_set.trades, new_trade])
        return trade_set.find(new_trade.id)  # type: ignore[return-value]

    def update_trade(self, trade: TradeInput) -> Trade:
        """Replace the trade carrying the same id."""
        updated = _as_trade(trade)
        self.get_trade(updated.id)
        trades = [updated if t.id == updated.id else t for t in self._trade_set.trades]
        return self.recalculate(trades).find(updated.id)  # type: ignore[return-value]

    def delete_trade(self, trade_id: str) -> None:
        self.get_trade(trade_id)
        self.recalculate([t for t in self._trade_set.trades if t.id != trade_id])

    # Ledger

    def _ledger_changed(self) -> None:
        self._change_writer.schedule(self.ledger.capital_changes)
        self._yearly_writer.schedule(self.ledger.yearly_capitals)
        self._override_writer.schedule(self.ledger.monthly_overrides)
        self.recalculate()

    def add_capital_change(
        self,
        date: dt.date | None,
        amount: float,
        type: CapitalChangeType | None = None,
        description: str = "",
    ) -> CapitalChange:
        change = self.ledger.add_capital_change(date, amount, type, description)
        self._ledger_changed()
        return change

    def update_capital_change(self, change: CapitalChange) -> CapitalChange:
        updated = self.ledger.update_capital_change(change)
        self._ledger_changed()
        return updated

    def delete_capital_change(self, change_id: str) -> None:
        self.ledger.delete_capital_change(change_id)
        self._ledger_changed()

    def set_yearly_starting_capital(self, year: int, amount: float) -> YearlyStartingCapital:
        capital = self.ledger.set_yearly_starting_capital(year, amount)
        self._ledger_changed()
        return capital

    def set_monthly_starting_capital_override(
        self, month: str, year: int, amount: float
    ) -> MonthlyStartingCapitalOverride:
        override = self.ledger.set_monthly_starting_capital_override(month, year, amount)
        self._ledger_changed()
        return override

    def remove_monthly_starting_capital_override(self, month: str, year: int) -> bool:
        removed = self.ledger.remove_monthly_starting_capital_override(month, year)
        if removed:
            self._ledger_changed()
        return removed

    def get_monthly_true_portfolio(self, month: str, year: int) -> MonthlyTruePortfolio:
        return self.ledger.get_monthly_true_portfolio(
            month, year, self._trade_set.trades, self._basis
        )

    def get_true_portfolio_size(self, month: str, year: int) -> float:
        return self.ledger.get_true_portfolio_size(month, year, self._trade_set.trades, self._basis)

    def get_latest_true_portfolio_size(self) -> float:
        return self.ledger.get_latest_true_portfolio_size(self._trade_set.trades, self._basis)

    def get_all_monthly_true_portfolios(self) -> list[MonthlyTruePortfolio]:
        return self.ledger.get_all_monthly_true_portfolios(self._trade_set.trades, self._basis)

    # Persistence

    def flush(self) -> None:
        """Write every pending collection now."""
        for writer in (
            self._trade_writer,
            self._change_writer,
            self._yearly_writer,
            self._override_writer,
        ):
            writer.flush()

    def close(self) -> None:
        """Flush pending writes and drop any staged recalculation."""
        self._supersede_pending()
        self.flush()
