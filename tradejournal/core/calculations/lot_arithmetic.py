"""
Lot arithmetic for journal trades.

Pure functions over entry and exit lots. Every function is total: missing
or non-finite inputs count as zero and divisions by a non-positive
denominator yield zero, so a derived field is always a finite number.
"""

import datetime as dt
from collections.abc import Iterable

from tradejournal.core.enums import PositionStatus, TradeSide
from tradejournal.core.models.lot import Lot, filled_lots
from tradejournal.core.types.financial import ZERO, as_percentage, safe_divide, to_float


def total_qty(lots: Iterable[Lot]) -> float:
    """Sum of quantities over lots with qty > 0 and price > 0."""
    return sum((lot.qty for lot in filled_lots(list(lots))), ZERO)


def _weighted_average_price(lots: Iterable[Lot]) -> float:
    qualifying = filled_lots(list(lots))
    quantity = sum((lot.qty for lot in qualifying), ZERO)
    notional = sum((lot.notional_value() for lot in qualifying), ZERO)
    return safe_divide(notional, quantity)


def avg_entry(lots: Iterable[Lot]) -> float:
    """Quantity-weighted average entry price, 0 when no lot qualifies."""
    return _weighted_average_price(lots)


def avg_exit_price(lots: Iterable[Lot]) -> float:
    """Quantity-weighted average exit price, 0 when no lot qualifies."""
    return _weighted_average_price(lots)


def position_size(avg_price: float, quantity: float) -> float:
    """Capital deployed: average price times total quantity."""
    return to_float(avg_price) * to_float(quantity)


def allocation(size: float, portfolio_size: float) -> float:
    """Position size as a percentage of the portfolio."""
    return as_percentage(size, portfolio_size)


def sl_percent(sl_price: float, entry_price: float) -> float:
    """Distance from entry to stop as a percentage of entry."""
    sl_price = to_float(sl_price)
    entry_price = to_float(entry_price)
    if sl_price <= ZERO or entry_price <= ZERO:
        return ZERO
    return as_percentage(abs(entry_price - sl_price), entry_price)


def exited_qty(*exit_qtys: float) -> float:
    """Sum of the non-negative exit quantities."""
    return sum((max(ZERO, to_float(qty)) for qty in exit_qtys), ZERO)


def open_qty(total_entry_qty: float, exited: float) -> float:
    """Quantity still held, floored at zero."""
    return max(ZERO, to_float(total_entry_qty) - to_float(exited))


def realized_pl_fifo(entry_lots: Iterable[Lot], exit_lots: Iterable[Lot], side: TradeSide) -> float:
    """Realized P/L with exits matched against entries first in, first out.

    Entry lots are consumed in the order given, splitting a lot when an
    exit only takes part of it. Exit quantity beyond the total entry
    quantity is ignored.

    Args:
        entry_lots: Entry lots in entry order
        exit_lots: Exit lots in leg order
        side: Trade direction

    Returns:
        Total realized P/L, 0 when there are no exits

    Examples:
        >>> realized_pl_fifo([Lot(100, 10), Lot(110, 10)], [Lot(120, 15)], TradeSide.BUY)
        250.0
    """
    direction = TradeSide.parse(side).direction
    remaining = [[lot.price, lot.qty] for lot in filled_lots(list(entry_lots))]
    pl = ZERO
    cursor = 0

    for exit_lot in filled_lots(list(exit_lots)):
        to_match = exit_lot.qty
        while to_match > ZERO and cursor < len(remaining):
            entry_price, available = remaining[cursor]
            matched = min(to_match, available)
            pl += (exit_lot.price - entry_price) * matched * direction
            remaining[cursor][1] = available - matched
            to_match -= matched
            if remaining[cursor][1] <= ZERO:
                cursor += 1

    return pl


def reference_price(
    status: PositionStatus,
    avg_exit: float,
    current_price: float,
    exited: float,
    remaining: float,
) -> float:
    """Price a trade's outcome is measured against.

    Closed trades use the average exit, open trades the current price and
    partial trades a quantity-weighted blend of the two (the average exit
    alone when no current price is known).
    """
    avg_exit = to_float(avg_exit)
    current_price = to_float(current_price)
    if status == PositionStatus.CLOSED:
        return avg_exit
    if status == PositionStatus.OPEN:
        return current_price
    if current_price <= ZERO:
        return avg_exit
    return safe_divide(
        avg_exit * to_float(exited) + current_price * to_float(remaining),
        to_float(exited) + to_float(remaining),
    )


def stock_move(
    entry_price: float,
    avg_exit: float,
    current_price: float,
    remaining: float,
    exited: float,
    status: PositionStatus,
    side: TradeSide,
) -> float:
    """Percentage move of the reference price from the average entry.

    Positive means the move favoured the trade, so shorts flip the sign.
    """
    entry_price = to_float(entry_price)
    if entry_price <= ZERO:
        return ZERO
    ref = reference_price(status, avg_exit, current_price, exited, remaining)
    if ref <= ZERO:
        return ZERO
    return as_percentage(ref - entry_price, entry_price) * TradeSide.parse(side).direction


def reward_risk(
    current_price: float,
    entry_price: float,
    sl_price: float,
    status: PositionStatus,
    avg_exit: float,
    remaining: float,
    exited: float,
    side: TradeSide,
) -> float:
    """Reward per unit divided by risk per unit.

    Risk is the distance from entry to stop. Reward is measured to the
    same reference price `stock_move` uses.
    """
    entry_price = to_float(entry_price)
    sl_price = to_float(sl_price)
    if entry_price <= ZERO or sl_price <= ZERO:
        return ZERO
    risk = abs(entry_price - sl_price)
    ref = reference_price(status, avg_exit, current_price, exited, remaining)
    if ref <= ZERO:
        return ZERO
    reward = (ref - entry_price) * TradeSide.parse(side).direction
    return safe_divide(reward, risk)


def _days_between(start: dt.date | None, end: dt.date | None) -> int:
    if start is None or end is None:
        return 0
    return max(0, (end - start).days)


def holding_days(
    entry_lots: Iterable[Lot],
    exit_lots: Iterable[Lot],
    trade_date: dt.date | None,
    as_of: dt.date | None = None,
) -> int:
    """Quantity-weighted average holding period in days.

    Exit tranches are matched first in, first out against entry tranches.
    Each matched piece is weighted by its own interval from entry date to
    exit date; quantity never exited is held until `as_of`. Entry lots
    without a date use the trade date. Exit lots without a date use the
    earliest dated exit, else the trade date.

    Args:
        entry_lots: Dated entry lots in entry order
        exit_lots: Dated exit lots in leg order
        trade_date: Initiation date of the trade
        as_of: End of the holding interval for open quantity, defaults to today

    Returns:
        Rounded average days held, 0 when nothing was entered
    """
    entries = filled_lots(list(entry_lots))
    exits = filled_lots(list(exit_lots))
    if not entries:
        return 0
    as_of = as_of or dt.date.today()

    dated_exits = [lot.date for lot in exits if lot.date is not None]
    exit_fallback = min(dated_exits) if dated_exits else trade_date

    remaining = [[lot.date or trade_date, lot.qty] for lot in entries]
    weighted_days = ZERO
    total = sum((lot.qty for lot in entries), ZERO)
    cursor = 0

    for exit_lot in exits:
        exit_date = exit_lot.date or exit_fallback
        to_match = exit_lot.qty
        while to_match > ZERO and cursor < len(remaining):
            entry_date, available = remaining[cursor]
            matched = min(to_match, available)
            weighted_days += matched * _days_between(entry_date, exit_date)
            remaining[cursor][1] = available - matched
            to_match -= matched
            if remaining[cursor][1] <= ZERO:
                cursor += 1

    for entry_date, available in remaining[cursor:]:
        if available > ZERO:
            weighted_days += available * _days_between(entry_date, as_of)

    return int(round(safe_divide(weighted_days, total)))


def realised_amount(exited: float, avg_exit: float) -> float:
    """Proceeds of the exited quantity."""
    return to_float(exited) * to_float(avg_exit)


def pf_impact(pl: float, portfolio_size: float) -> float:
    """P/L as a percentage of the portfolio."""
    return as_percentage(pl, portfolio_size)


def open_heat(
    entry_price: float,
    sl_price: float,
    tsl_price: float,
    remaining: float,
    side: TradeSide,
    portfolio_size: float,
) -> float:
    """Capital at risk on the open quantity as a percentage of the portfolio.

    The trailing stop replaces the initial stop when set. Risk already
    locked in as profit by the stop counts as zero.
    """
    entry_price = to_float(entry_price)
    stop = to_float(tsl_price) if to_float(tsl_price) > ZERO else to_float(sl_price)
    remaining = to_float(remaining)
    if entry_price <= ZERO or stop <= ZERO or remaining <= ZERO:
        return ZERO
    if TradeSide.parse(side).is_long:
        risk_per_unit = max(ZERO, entry_price - stop)
    else:
        risk_per_unit = max(ZERO, stop - entry_price)
    return as_percentage(risk_per_unit * remaining, portfolio_size)
