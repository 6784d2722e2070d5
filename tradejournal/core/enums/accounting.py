"""
Accounting basis and recalculation state enumerations.
"""

from enum import StrEnum


class AccountingBasis(StrEnum):
    """
    Allowed accounting conventions.

    ACCRUAL attributes a trade's P/L to the month it was initiated.
    CASH attributes each exit's P/L to the month of that exit.
    """

    ACCRUAL = "accrual"
    CASH = "cash"

    @property
    def is_cash(self) -> bool:
        """Check if this is the cash basis."""
        return self == self.CASH

    @property
    def display_name(self) -> str:
        """Human readable name."""
        return "Cash Basis" if self.is_cash else "Accrual Basis"

    @property
    def description(self) -> str:
        """Short description of how P/L is attributed."""
        return "P/L attributed to exit dates" if self.is_cash else "P/L attributed to entry dates"

    @classmethod
    def from_flag(cls, use_cash_basis: bool) -> "AccountingBasis":
        """Build a basis from the boolean selector flag."""
        return cls.CASH if use_cash_basis else cls.ACCRUAL


class RecalculationStatus(StrEnum):
    """
    State of a published trade set.

    PROVISIONAL rows come from the quick pass and still carry stale
    derived values; SETTLED rows come from a full recalculation.
    """

    SETTLED = "settled"
    PROVISIONAL = "provisional"

    @property
    def is_settled(self) -> bool:
        """Check if derived values are final."""
        return self == self.SETTLED
