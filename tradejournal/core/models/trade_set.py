"""
Trade set model - the unit the recalculation pipeline publishes.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from tradejournal.core.enums import AccountingBasis, RecalculationStatus
from tradejournal.core.models.trade import Trade


@dataclass
class TradeSet:
    """An ordered trade list tagged with how settled its derived values are."""

    trades: list[Trade] = field(default_factory=list)
    status: RecalculationStatus = RecalculationStatus.SETTLED
    basis: AccountingBasis = AccountingBasis.ACCRUAL

    def __len__(self) -> int:
        return len(self.trades)

    def __iter__(self) -> Iterator[Trade]:
        return iter(self.trades)

    @property
    def is_settled(self) -> bool:
        """Check if every derived value is final."""
        return self.status.is_settled

    def find(self, trade_id: str) -> Trade | None:
        """Look up a trade by id."""
        return next((trade for trade in self.trades if trade.id == trade_id), None)

    def cumulative_pf_series(self) -> list[float]:
        """Running cumm_pf values in trade order."""
        return [trade.cumm_pf for trade in self.trades]
