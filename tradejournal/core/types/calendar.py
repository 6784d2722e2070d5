"""
Calendar month arithmetic for the monthly ledger.

Months are addressed by 3-letter tokens ('Jan' ... 'Dec') at the public
boundary and by MonthKey internally, which orders chronologically.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime

from tradejournal.core.constants import MONTH_NAMES


@dataclass(frozen=True, order=True)
class MonthKey:
    """A calendar month, ordered by (year, month_index)."""

    year: int
    month_index: int  # 0 = Jan

    @property
    def month(self) -> str:
        """3-letter month token."""
        return MONTH_NAMES[self.month_index]

    @property
    def label(self) -> str:
        """Display label such as 'Mar 2024'."""
        return f"{self.month} {self.year}"

    @property
    def first_day(self) -> date:
        """First calendar day of the month."""
        return date(self.year, self.month_index + 1, 1)

    def previous(self) -> "MonthKey":
        """The month before this one."""
        if self.month_index == 0:
            return MonthKey(self.year - 1, 11)
        return MonthKey(self.year, self.month_index - 1)

    def next(self) -> "MonthKey":
        """The month after this one."""
        if self.month_index == 11:
            return MonthKey(self.year + 1, 0)
        return MonthKey(self.year, self.month_index + 1)

    @classmethod
    def from_date(cls, value: date) -> "MonthKey":
        """Month containing the given date."""
        return cls(value.year, value.month - 1)

    @classmethod
    def from_token(cls, month: str, year: int) -> "MonthKey":
        """Build from an already-normalized 3-letter token."""
        return cls(int(year), MONTH_NAMES.index(month))


def iter_months(start: MonthKey, end: MonthKey) -> Iterator[MonthKey]:
    """Yield every month from start through end inclusive."""
    current = start
    while current <= end:
        yield current
        current = current.next()


def parse_date(value: object) -> date | None:
    """Parse a loosely formatted date, returning None when it is unusable.

    Accepts date/datetime objects and ISO-8601 strings with or without a
    time component.

    Examples:
        >>> parse_date("2024-03-15")
        datetime.date(2024, 3, 15)
        >>> parse_date("2024-03-15T10:30:00.000Z")
        datetime.date(2024, 3, 15)
        >>> parse_date("not a date") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_date(value: date | None) -> str:
    """Render a date as ISO text, empty for None."""
    return value.isoformat() if value else ""
