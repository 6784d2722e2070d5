"""
Capital change type enumerations.
"""

from enum import StrEnum


class CapitalChangeType(StrEnum):
    """
    Allowed capital movements.

    Deposits add to the ledger, withdrawals subtract from it.
    """

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"

    @property
    def sign(self) -> float:
        """Sign applied to the absolute amount."""
        return 1.0 if self == self.DEPOSIT else -1.0
