"""
Capital ledger domain models.

Capital changes, yearly starting capitals and monthly overrides are the
three authoritative inputs of the true portfolio ledger; MonthlyTruePortfolio
is its derived, rederivable output.
"""

import datetime as dt
from dataclasses import asdict, dataclass, field
from typing import Any

from tradejournal.core.enums import CapitalChangeType
from tradejournal.core.models.trade import generate_id
from tradejournal.core.types.calendar import MonthKey
from tradejournal.core.types.financial import ZERO, to_float


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return dt.datetime.now(dt.UTC).isoformat()


@dataclass
class CapitalChange:
    """A dated deposit or withdrawal."""

    date: dt.date | None
    amount: float
    type: CapitalChangeType | None = None
    description: str = ""
    id: str = ""

    def __post_init__(self) -> None:
        """Coerce the amount and infer the type from its sign when missing."""
        self.amount = to_float(self.amount)
        if self.type is None or self.type == "":
            self.type = (
                CapitalChangeType.WITHDRAWAL if self.amount < ZERO else CapitalChangeType.DEPOSIT
            )
        else:
            self.type = CapitalChangeType(str(self.type).lower())
        if not self.id:
            self.id = generate_id("capital")

    @property
    def signed_amount(self) -> float:
        """Amount with the sign implied by the change type."""
        return abs(self.amount) * self.type.sign  # type: ignore[union-attr]

    @property
    def month_key(self) -> MonthKey | None:
        """Month the change falls in, None when undated."""
        return MonthKey.from_date(self.date) if self.date else None


@dataclass
class YearlyStartingCapital:
    """Capital base for January of a year."""

    year: int
    starting_capital: float
    updated_at: str = field(default_factory=utc_timestamp)


@dataclass
class MonthlyStartingCapitalOverride:
    """Replaces the derived starting capital of one month."""

    month: str
    year: int
    starting_capital: float
    updated_at: str = field(default_factory=utc_timestamp)

    @property
    def id(self) -> str:
        """Stable identifier '{Mon}-{year}'."""
        return f"{self.month}-{self.year}"

    @property
    def key(self) -> MonthKey:
        """Month addressed by this override."""
        return MonthKey.from_token(self.month, self.year)


@dataclass(frozen=True)
class MonthlyTruePortfolio:
    """One month of the true portfolio ledger.

    `starting_capital` already includes the month's capital changes.
    """

    month: str
    year: int
    starting_capital: float
    capital_changes: float
    pl: float
    final_capital: float

    @classmethod
    def zero(cls, key: MonthKey) -> "MonthlyTruePortfolio":
        """Zero-valued record for months before any data."""
        return cls(key.month, key.year, ZERO, ZERO, ZERO, ZERO)

    @property
    def key(self) -> MonthKey:
        """Month this record describes."""
        return MonthKey.from_token(self.month, self.year)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)
