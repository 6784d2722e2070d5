"""
Trade recalculation pipeline.

Derives every calculated field of a trade set in two passes. Pass one is
per trade and independent; pass two folds a running portfolio impact
(`cumm_pf`) over the trades in sorted order. The order is part of the
result: changing it changes every later `cumm_pf`.
"""

import datetime as dt
from collections.abc import Iterable

from loguru import logger

from tradejournal.core.calculations import accounting
from tradejournal.core.calculations import lot_arithmetic as lots
from tradejournal.core.calculations.trade_fields import derive_lot_fields
from tradejournal.core.constants import DEFAULT_PORTFOLIO_SIZE
from tradejournal.core.enums import AccountingBasis, PositionStatus, RecalculationStatus
from tradejournal.core.models.trade import Trade
from tradejournal.core.models.trade_set import TradeSet
from tradejournal.core.protocols import Clock, PortfolioSizeLookup
from tradejournal.core.types.calendar import MonthKey
from tradejournal.core.types.financial import ZERO, to_float
from tradejournal.core.utils.decorators import log_operation


def trade_sort_key(trade: Trade) -> tuple:
    """Date ascending with trade number as tie-break; undated trades sort last."""
    if trade.date is None:
        return (1, dt.date.max, trade.trade_no)
    return (0, trade.date, trade.trade_no)


def sort_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Trades in recalculation order."""
    return sorted(trades, key=trade_sort_key)


class TradeRecalculationPipeline:
    """Derives calculated trade fields against a portfolio size lookup."""

    def __init__(
        self,
        fallback_portfolio_size: float = DEFAULT_PORTFOLIO_SIZE,
        today: Clock = dt.date.today,
    ):
        self.fallback_portfolio_size = fallback_portfolio_size
        self._today = today

    def portfolio_size(self, lookup: PortfolioSizeLookup | None, when: dt.date | None) -> float:
        """Portfolio size for the month containing `when`.

        Missing lookups, undated trades, failing lookups and zero sizes
        all resolve to the fallback size.
        """
        if lookup is None or when is None:
            return self.fallback_portfolio_size
        key = MonthKey.from_date(when)
        try:
            size = to_float(lookup(key.month, key.year))
        except Exception as e:
            logger.debug(f"Portfolio size lookup failed for {key.label}: {e}")
            return self.fallback_portfolio_size
        return size or self.fallback_portfolio_size

    def derive_lot_fields(self, trade: Trade) -> Trade:
        """Fields that depend only on the trade's own lots and prices."""
        return derive_lot_fields(trade, self._today())

    def pf_impact(
        self, trade: Trade, lookup: PortfolioSizeLookup | None, basis: AccountingBasis
    ) -> float:
        """Portfolio impact measured at the basis-appropriate month.

        Under cash basis each realized exit is measured against the
        portfolio size of its own exit month.
        """
        basis = AccountingBasis(basis)
        if basis.is_cash:
            exits = accounting.cash_basis_exits(trade)
            if exits:
                return sum(
                    (
                        lots.pf_impact(
                            accounting.exit_pl(trade, lot),
                            self.portfolio_size(
                                lookup, accounting.relevant_date(trade, basis, lot)
                            ),
                        )
                        for lot in exits
                    ),
                    ZERO,
                )
        return lots.pf_impact(
            accounting.trade_pl(trade, basis),
            self.portfolio_size(lookup, accounting.relevant_date(trade, basis)),
        )

    def derive_trade(
        self,
        trade: Trade,
        lookup: PortfolioSizeLookup | None = None,
        basis: AccountingBasis = AccountingBasis.ACCRUAL,
    ) -> Trade:
        """Pass one: every derived field except `cumm_pf`."""
        derived = self.derive_lot_fields(trade)
        entry_month_size = self.portfolio_size(lookup, derived.date)
        return derived.replace(
            allocation=lots.allocation(derived.position_size, entry_month_size),
            open_heat=lots.open_heat(
                derived.avg_entry,
                derived.sl,
                derived.tsl,
                derived.open_qty,
                derived.side,
                entry_month_size,
            ),
            pf_impact=self.pf_impact(derived, lookup, basis),
            cumm_pf=ZERO,
            needs_recalculation=False,
        )

    @staticmethod
    def accumulate(trades: list[Trade]) -> list[Trade]:
        """Pass two: running total of portfolio impact over non-Open trades."""
        running = ZERO
        accumulated = []
        for trade in trades:
            if trade.position_status != PositionStatus.OPEN:
                running += trade.pf_impact
            accumulated.append(trade.replace(cumm_pf=running))
        return accumulated

    @log_operation
    def recalculate(
        self,
        trades: Iterable[Trade],
        portfolio_size_lookup: PortfolioSizeLookup | None = None,
        basis: AccountingBasis = AccountingBasis.ACCRUAL,
    ) -> TradeSet:
        """Fully derive a trade set.

        Args:
            trades: Trades in any order, raw or previously derived
            portfolio_size_lookup: Resolves (month, year) to a portfolio size
            basis: Accounting basis for P/L attribution

        Returns:
            Settled trade set in recalculation order
        """
        basis = AccountingBasis(basis)
        ordered = sort_trades(trades)
        derived = [self.derive_trade(trade, portfolio_size_lookup, basis) for trade in ordered]
        settled = self.accumulate(derived)
        logger.info(f"Recalculated {len(settled)} trades on {basis.value} basis")
        return TradeSet(trades=settled, status=RecalculationStatus.SETTLED, basis=basis)

    @log_operation
    def quick_pass(
        self,
        trades: Iterable[Trade],
        basis: AccountingBasis = AccountingBasis.ACCRUAL,
    ) -> TradeSet:
        """Cheap provisional stage: sort and normalize names, keep stale derived values."""
        provisional = [
            trade.replace(name=(trade.name or "").upper(), needs_recalculation=True)
            for trade in sort_trades(trades)
        ]
        logger.debug(f"Quick pass over {len(provisional)} trades")
        return TradeSet(
            trades=provisional,
            status=RecalculationStatus.PROVISIONAL,
            basis=AccountingBasis(basis),
        )
