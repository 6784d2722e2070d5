"""
Trade domain model.

A trade is one logical position: an initial entry, up to two pyramid
add-ons and up to three exit legs. Every derived field is present and
defaulted so a freshly imported trade and a fully recalculated one have
the same shape.
"""

import dataclasses
import datetime as dt
import uuid
from dataclasses import dataclass
from typing import Any

from tradejournal.core.enums import PositionStatus, TradeSide
from tradejournal.core.models.lot import Lot, filled_lots
from tradejournal.core.types.calendar import MonthKey

DERIVED_FIELDS = (
    "avg_entry",
    "position_size",
    "allocation",
    "sl_percent",
    "open_qty",
    "exited_qty",
    "avg_exit_price",
    "stock_move",
    "reward_risk",
    "holding_days",
    "realised_amount",
    "pl_rs",
    "pf_impact",
    "cumm_pf",
    "open_heat",
    "position_status",
)


def generate_id(prefix: str = "trade") -> str:
    """Generate a unique record id."""
    return f"{prefix}_{uuid.uuid4().hex}"


@dataclass
class Trade:
    """A journaled trade with its raw inputs and derived metrics."""

    # Identity and initiation
    id: str = ""
    trade_no: str = ""
    date: dt.date | None = None
    name: str = ""
    buy_sell: TradeSide = TradeSide.BUY
    setup: str = ""
    base_duration: str = ""

    # Entry lots
    entry: float = 0.0
    initial_qty: float = 0.0
    pyramid1_price: float = 0.0
    pyramid1_qty: float = 0.0
    pyramid1_date: dt.date | None = None
    pyramid2_price: float = 0.0
    pyramid2_qty: float = 0.0
    pyramid2_date: dt.date | None = None

    # Stops and live price
    sl: float = 0.0
    tsl: float = 0.0
    cmp: float = 0.0

    # Exit lots
    exit1_price: float = 0.0
    exit1_qty: float = 0.0
    exit1_date: dt.date | None = None
    exit2_price: float = 0.0
    exit2_qty: float = 0.0
    exit2_date: dt.date | None = None
    exit3_price: float = 0.0
    exit3_qty: float = 0.0
    exit3_date: dt.date | None = None

    # Journal annotations
    plan_followed: bool = False
    exit_trigger: str = ""
    proficiency_growth_areas: str = ""
    notes: str = ""

    # Derived
    avg_entry: float = 0.0
    position_size: float = 0.0
    allocation: float = 0.0
    sl_percent: float = 0.0
    open_qty: float = 0.0
    exited_qty: float = 0.0
    avg_exit_price: float = 0.0
    stock_move: float = 0.0
    reward_risk: float = 0.0
    holding_days: int = 0
    realised_amount: float = 0.0
    pl_rs: float = 0.0
    pf_impact: float = 0.0
    cumm_pf: float = 0.0
    open_heat: float = 0.0
    position_status: PositionStatus = PositionStatus.OPEN
    needs_recalculation: bool = False

    def __post_init__(self) -> None:
        """Normalize enum fields and assign an id when missing."""
        self.buy_sell = TradeSide.parse(self.buy_sell)
        if not isinstance(self.position_status, PositionStatus):
            try:
                self.position_status = PositionStatus(self.position_status)
            except ValueError:
                self.position_status = PositionStatus.OPEN
        if not self.id:
            self.id = generate_id()

    @property
    def side(self) -> TradeSide:
        """Trade direction."""
        return self.buy_sell

    @property
    def month_key(self) -> MonthKey | None:
        """Month of initiation, None when the trade is undated."""
        return MonthKey.from_date(self.date) if self.date else None

    def entry_legs(self) -> list[Lot]:
        """All entry legs in entry order; pyramids default to the trade date."""
        return [
            Lot(self.entry, self.initial_qty, self.date),
            Lot(self.pyramid1_price, self.pyramid1_qty, self.pyramid1_date or self.date),
            Lot(self.pyramid2_price, self.pyramid2_qty, self.pyramid2_date or self.date),
        ]

    def exit_legs(self) -> list[Lot]:
        """All exit legs in leg order."""
        return [
            Lot(self.exit1_price, self.exit1_qty, self.exit1_date),
            Lot(self.exit2_price, self.exit2_qty, self.exit2_date),
            Lot(self.exit3_price, self.exit3_qty, self.exit3_date),
        ]

    def entry_lots(self) -> list[Lot]:
        """Entry legs with positive quantity and price."""
        return filled_lots(self.entry_legs())

    def exit_lots(self) -> list[Lot]:
        """Exit legs with positive quantity and price."""
        return filled_lots(self.exit_legs())

    def derived_values(self) -> dict[str, Any]:
        """Snapshot of the derived fields."""
        return {name: getattr(self, name) for name in DERIVED_FIELDS}

    def replace(self, **changes: Any) -> "Trade":
        """Copy of this trade with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def to_record(self) -> dict[str, Any]:
        """Serialize to the camelCase record shape used by stores."""
        from tradejournal.schemas.records import TradeRecord

        return TradeRecord.from_trade(self).to_payload()

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Trade":
        """Build a trade from a loosely typed (possibly partial) record."""
        from tradejournal.schemas.records import TradeRecord

        return TradeRecord.model_validate(record).to_trade()
