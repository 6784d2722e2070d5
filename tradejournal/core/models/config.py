"""
Journal configuration model.
"""

from dataclasses import dataclass
from pathlib import Path

from tradejournal.core.constants import (
    DEFAULT_PORTFOLIO_SIZE,
    DEFAULT_STORAGE_DIRECTORY,
    FULL_RECALCULATION_DELAY_SECONDS,
    PERSISTENCE_DEBOUNCE_SECONDS,
)
from tradejournal.core.enums import AccountingBasis
from tradejournal.core.exceptions.journal import ConfigurationError


@dataclass
class JournalConfig:
    """Configuration for a journal session."""

    fallback_portfolio_size: float = DEFAULT_PORTFOLIO_SIZE
    default_basis: AccountingBasis = AccountingBasis.ACCRUAL
    full_recalculation_delay: float = FULL_RECALCULATION_DELAY_SECONDS
    persistence_debounce_seconds: float = PERSISTENCE_DEBOUNCE_SECONDS
    storage_directory: Path = Path(DEFAULT_STORAGE_DIRECTORY)

    def __post_init__(self) -> None:
        self.default_basis = AccountingBasis(self.default_basis)
        self.storage_directory = Path(self.storage_directory)

    def is_valid_fallback(self) -> bool:
        """Validate the fallback portfolio size is positive."""
        return self.fallback_portfolio_size > 0

    def is_valid_recalculation_delay(self) -> bool:
        """Validate the staged recalculation delay is not negative."""
        return self.full_recalculation_delay >= 0

    def is_valid_debounce(self) -> bool:
        """Validate the persistence debounce window is not negative."""
        return self.persistence_debounce_seconds >= 0

    def validate(self) -> "JournalConfig":
        """Raise ConfigurationError on the first invalid setting."""
        if not self.is_valid_fallback():
            raise ConfigurationError(
                f"fallback_portfolio_size must be positive, got {self.fallback_portfolio_size}"
            )
        if not self.is_valid_recalculation_delay():
            raise ConfigurationError(
                "full_recalculation_delay must be non-negative, "
                f"got {self.full_recalculation_delay}"
            )
        if not self.is_valid_debounce():
            raise ConfigurationError(
                "persistence_debounce_seconds must be non-negative, "
                f"got {self.persistence_debounce_seconds}"
            )
        return self

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "fallback_portfolio_size": self.fallback_portfolio_size,
            "default_basis": self.default_basis.value,
            "full_recalculation_delay": self.full_recalculation_delay,
            "persistence_debounce_seconds": self.persistence_debounce_seconds,
            "storage_directory": str(self.storage_directory),
        }
