"""
Read-only analytics over recalculated trades and the monthly ledger.
"""

from collections.abc import Iterable
from dataclasses import asdict, dataclass

import pandas as pd

from tradejournal.core.calculations.accounting import trade_pl
from tradejournal.core.enums import AccountingBasis, PositionStatus
from tradejournal.core.models.capital import MonthlyTruePortfolio
from tradejournal.core.models.trade import Trade
from tradejournal.core.types.financial import (
    ZERO,
    as_percentage,
    round_amount,
    round_percentage,
    safe_divide,
)

MONTHLY_FRAME_COLUMNS = [
    "month",
    "year",
    "starting_capital",
    "capital_changes",
    "pl",
    "final_capital",
    "return_pct",
]
AMOUNT_COLUMNS = ["starting_capital", "capital_changes", "pl", "final_capital"]


@dataclass(frozen=True)
class PerformanceMetrics:
    """Aggregate trade statistics under one accounting basis."""

    basis: AccountingBasis
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = ZERO
    gross_pl: float = ZERO
    avg_gain: float = ZERO
    avg_loss: float = ZERO
    avg_pos_move: float = ZERO
    avg_neg_move: float = ZERO
    avg_position_size: float = ZERO
    avg_holding_days: float = ZERO
    avg_r: float = ZERO
    plan_followed: float = ZERO
    open_positions: int = 0

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        return {**asdict(self), "basis": self.basis.value}


def _mean(values: list[float]) -> float:
    return safe_divide(sum(values, ZERO), len(values))


def compute_performance_metrics(
    trades: Iterable[Trade], basis: AccountingBasis = AccountingBasis.ACCRUAL
) -> PerformanceMetrics:
    """Win rate, average gain/loss, stock moves and related statistics.

    Winners and losers are classified by the P/L attributable under the
    given basis. Average position size is the mean allocation.
    """
    basis = AccountingBasis(basis)
    trades = list(trades)
    if not trades:
        return PerformanceMetrics(basis=basis)

    attributed = [(trade, trade_pl(trade, basis)) for trade in trades]
    winners = [(trade, pl) for trade, pl in attributed if pl > ZERO]
    losers = [(trade, pl) for trade, pl in attributed if pl < ZERO]
    total = len(trades)

    return PerformanceMetrics(
        basis=basis,
        total_trades=total,
        winning_trades=len(winners),
        losing_trades=len(losers),
        win_rate=as_percentage(len(winners), total),
        gross_pl=sum((pl for _, pl in attributed), ZERO),
        avg_gain=_mean([pl for _, pl in winners]),
        avg_loss=_mean([pl for _, pl in losers]),
        avg_pos_move=_mean([trade.stock_move for trade, _ in winners]),
        avg_neg_move=_mean([trade.stock_move for trade, _ in losers]),
        avg_position_size=_mean([trade.allocation for trade in trades]),
        avg_holding_days=_mean([float(trade.holding_days) for trade in trades]),
        avg_r=_mean([trade.reward_risk for trade in trades]),
        plan_followed=as_percentage(sum(1 for trade in trades if trade.plan_followed), total),
        open_positions=sum(
            1
            for trade in trades
            if trade.position_status in (PositionStatus.OPEN, PositionStatus.PARTIAL)
        ),
    )


def monthly_portfolio_frame(portfolios: Iterable[MonthlyTruePortfolio]) -> pd.DataFrame:
    """Ledger records as a DataFrame indexed by 'YYYY-MM'.

    `return_pct` is the month's P/L as a percentage of its starting
    capital after capital changes.
    """
    portfolios = list(portfolios)
    periods = pd.Index(
        [f"{p.year:04d}-{p.key.month_index + 1:02d}" for p in portfolios], name="period"
    )
    if not portfolios:
        return pd.DataFrame(columns=MONTHLY_FRAME_COLUMNS, index=periods)

    df = pd.DataFrame([portfolio.to_dict() for portfolio in portfolios], index=periods)
    df["return_pct"] = [
        as_percentage(pl, start) for pl, start in zip(df["pl"], df["starting_capital"], strict=True)
    ]
    return df[MONTHLY_FRAME_COLUMNS]


def round_portfolio_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Copy of a ledger frame rounded to presentation precision."""
    rounded = df.copy()
    for column in AMOUNT_COLUMNS:
        rounded[column] = rounded[column].map(round_amount)
    rounded["return_pct"] = rounded["return_pct"].map(round_percentage)
    return rounded


def accounting_basis_display(basis: AccountingBasis) -> dict[str, str]:
    """Labels describing a basis for reports."""
    basis = AccountingBasis(basis)
    return {
        "basis": basis.value,
        "name": basis.display_name,
        "description": basis.description,
    }
