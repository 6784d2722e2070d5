"""
Journal calculations: lot arithmetic and accounting basis resolution.
"""

from .accounting import (
    PLObservation,
    cash_basis_exits,
    exit_pl,
    monthly_pl,
    pl_observations,
    relevant_date,
    trade_pl,
    trades_for_month,
    trades_pl_for_month,
)
from .lot_arithmetic import (
    allocation,
    avg_entry,
    avg_exit_price,
    exited_qty,
    holding_days,
    open_heat,
    open_qty,
    pf_impact,
    position_size,
    realised_amount,
    realized_pl_fifo,
    reference_price,
    reward_risk,
    sl_percent,
    stock_move,
    total_qty,
)
from .trade_fields import derive_lot_fields

__all__ = [
    # Lot arithmetic
    "allocation",
    "avg_entry",
    "avg_exit_price",
    "exited_qty",
    "holding_days",
    "open_heat",
    "open_qty",
    "pf_impact",
    "position_size",
    "realised_amount",
    "realized_pl_fifo",
    "reference_price",
    "reward_risk",
    "sl_percent",
    "stock_move",
    "total_qty",
    # Trade fields
    "derive_lot_fields",
    # Accounting basis
    "PLObservation",
    "cash_basis_exits",
    "exit_pl",
    "monthly_pl",
    "pl_observations",
    "relevant_date",
    "trade_pl",
    "trades_for_month",
    "trades_pl_for_month",
]
