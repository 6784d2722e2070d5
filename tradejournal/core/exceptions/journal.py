"""
Custom exception hierarchy for the trading journal.

This module defines domain-specific exceptions for better error handling.
Arithmetic problems never surface as exceptions; these are reserved for
caller bugs and boundary failures.
"""


class JournalException(Exception):
    """Base exception for all journal-related errors."""

    pass


class ValidationError(JournalException):
    """Raised when input validation fails."""

    pass


class InvalidMonthError(ValidationError):
    """Raised when a month token cannot be resolved to a calendar month."""

    def __init__(self, month: object):
        self.month = month
        super().__init__(
            f"Invalid month: {month!r}. Expected short month names like 'Jan', 'Feb', etc."
        )


class DataError(JournalException):
    """Raised when data access or processing fails."""

    pass


class PersistenceError(DataError):
    """Raised when the persistence store cannot read or write a collection."""

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Persistence failure for {collection}: {reason}")


class CalculationError(JournalException):
    """Raised when mathematical calculations fail."""

    pass


class ConfigurationError(JournalException):
    """Raised when configuration is invalid."""

    pass


class TradeNotFoundError(JournalException):
    """Raised when trying to operate on a non-existent trade."""

    def __init__(self, trade_id: str):
        self.trade_id = trade_id
        super().__init__(f"Trade not found: {trade_id}")


class CapitalChangeNotFoundError(JournalException):
    """Raised when trying to operate on a non-existent capital change."""

    def __init__(self, change_id: str):
        self.change_id = change_id
        super().__init__(f"Capital change not found: {change_id}")
