"""
Portfolio-independent trade fields.

Everything a trade derives from its own lots and prices. None of it reads
the portfolio size, so the ledger can compute realized P/L from raw
trades before any sizing exists.
"""

import datetime as dt

from tradejournal.core.calculations import lot_arithmetic as lots
from tradejournal.core.enums import PositionStatus
from tradejournal.core.models.trade import Trade
from tradejournal.core.types.financial import ZERO


def derive_lot_fields(trade: Trade, as_of: dt.date) -> Trade:
    """Copy of the trade with its lot-derived fields recomputed.

    Args:
        trade: Raw or previously derived trade
        as_of: Date an unexited remainder is held until

    Returns:
        New trade; the input is not modified
    """
    entry_lots = trade.entry_lots()
    exit_lots = trade.exit_lots()

    average_entry = lots.avg_entry(entry_lots)
    entered = lots.total_qty(entry_lots)
    exited = lots.exited_qty(*(lot.qty for lot in exit_lots))
    remaining = lots.open_qty(entered, exited)
    average_exit = lots.avg_exit_price(exit_lots)
    status = PositionStatus.from_quantities(exited, remaining)
    current_price = trade.cmp or average_exit or trade.entry

    return trade.replace(
        name=(trade.name or "").upper(),
        avg_entry=average_entry,
        position_size=lots.position_size(average_entry, entered),
        sl_percent=lots.sl_percent(trade.sl, trade.entry),
        exited_qty=exited,
        open_qty=remaining,
        avg_exit_price=average_exit,
        stock_move=lots.stock_move(
            average_entry, average_exit, trade.cmp, remaining, exited, status, trade.side
        ),
        reward_risk=lots.reward_risk(
            current_price,
            trade.entry or average_entry,
            trade.sl,
            status,
            average_exit,
            remaining,
            exited,
            trade.side,
        ),
        holding_days=lots.holding_days(trade.entry_legs(), trade.exit_legs(), trade.date, as_of),
        realised_amount=lots.realised_amount(exited, average_exit),
        pl_rs=lots.realized_pl_fifo(entry_lots, exit_lots, trade.side) if exited > ZERO else ZERO,
        position_status=status,
    )
