"""
Accounting basis resolution.

The single place where accrual and cash basis diverge. Accrual attributes
a trade's whole realized P/L to its initiation month; cash attributes
each exit leg's P/L to the month of that exit. Total P/L is the same
under both, only its timing differs.
"""

import datetime as dt
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from tradejournal.core.enums import AccountingBasis, PositionStatus
from tradejournal.core.models.lot import Lot
from tradejournal.core.models.trade import Trade
from tradejournal.core.types.calendar import MonthKey
from tradejournal.core.types.financial import ZERO, to_float
from tradejournal.core.utils.decorators import validate_calendar


@dataclass(frozen=True)
class PLObservation:
    """A (date, P/L) contribution of one trade, or of one exit under cash basis."""

    trade: Trade
    date: dt.date
    pl: float
    exit: Lot | None = None

    @property
    def month_key(self) -> MonthKey:
        return MonthKey.from_date(self.date)


def _cost_basis(trade: Trade) -> float:
    avg = to_float(trade.avg_entry)
    return avg if avg > ZERO else to_float(trade.entry)


def cash_basis_exits(trade: Trade) -> list[Lot]:
    """Exit legs that realize cash: dated, qty > 0 and price > 0 on a non-Open trade."""
    if not trade.position_status.has_exits:
        return []
    return [lot for lot in trade.exit_lots() if lot.date is not None]


def exit_pl(trade: Trade, exit_lot: Lot) -> float:
    """P/L of a single exit leg against the trade's average entry."""
    cost = _cost_basis(trade)
    if cost <= ZERO or exit_lot.price <= ZERO:
        return ZERO
    return (exit_lot.price - cost) * exit_lot.qty * trade.side.direction


def relevant_date(
    trade: Trade, basis: AccountingBasis, exit_lot: Lot | None = None
) -> dt.date | None:
    """Date a P/L amount is attributed to under the given basis.

    Cash basis uses the targeted exit's date; without one (or under
    accrual) the trade's initiation date applies.
    """
    if AccountingBasis(basis).is_cash and exit_lot is not None and exit_lot.date is not None:
        return exit_lot.date
    return trade.date


def trade_pl(trade: Trade, basis: AccountingBasis, exit_lot: Lot | None = None) -> float:
    """P/L attributable under the given basis.

    Accrual returns the FIFO-realized total. Cash returns the targeted
    exit's P/L; with no exit targeted a Closed trade yields its realized
    total, a Partial trade the sum over its realized exits and an Open
    trade zero.
    """
    if not AccountingBasis(basis).is_cash:
        if trade.position_status == PositionStatus.OPEN:
            return ZERO
        return to_float(trade.pl_rs)
    if exit_lot is not None:
        return exit_pl(trade, exit_lot)
    if trade.position_status == PositionStatus.CLOSED:
        return to_float(trade.pl_rs)
    if trade.position_status == PositionStatus.PARTIAL:
        return sum((exit_pl(trade, lot) for lot in cash_basis_exits(trade)), ZERO)
    return ZERO


def pl_observations(trades: Iterable[Trade], basis: AccountingBasis) -> Iterator[PLObservation]:
    """Every dated P/L contribution in the trade set under the given basis.

    Undated trades (accrual) and undated exits (cash) contribute nothing.
    """
    basis = AccountingBasis(basis)
    for trade in trades:
        if basis.is_cash:
            for lot in cash_basis_exits(trade):
                yield PLObservation(
                    trade, lot.date, exit_pl(trade, lot), lot  # type: ignore[arg-type]
                )
        elif trade.date is not None:
            yield PLObservation(trade, trade.date, trade_pl(trade, basis))


def monthly_pl(trades: Iterable[Trade], basis: AccountingBasis) -> dict[MonthKey, float]:
    """Attributed P/L summed per month."""
    totals: dict[MonthKey, float] = defaultdict(float)
    for observation in pl_observations(trades, basis):
        totals[observation.month_key] += observation.pl
    return dict(totals)


@validate_calendar
def trades_for_month(
    trades: Iterable[Trade], month: str, year: int, basis: AccountingBasis
) -> list[PLObservation]:
    """Observations attributed to one month.

    Under cash basis a trade appears once per exit falling in the month.
    """
    key = MonthKey.from_token(month, year)
    return [obs for obs in pl_observations(trades, basis) if obs.month_key == key]


@validate_calendar
def trades_pl_for_month(
    trades: Iterable[Trade], month: str, year: int, basis: AccountingBasis
) -> float:
    """Attributed P/L for one month."""
    return sum((obs.pl for obs in trades_for_month(trades, month, year, basis)), ZERO)
