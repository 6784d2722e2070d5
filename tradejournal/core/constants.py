"""
Core constants and limits.

Defines journal-wide defaults for portfolio valuation, recalculation
scheduling and persistence.
"""

# Portfolio Valuation
DEFAULT_PORTFOLIO_SIZE = 100000.0  # Used when a portfolio size lookup fails or yields 0

# Calendar
MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
FULL_MONTH_NAMES = {
    "January": "Jan",
    "February": "Feb",
    "March": "Mar",
    "April": "Apr",
    "May": "May",
    "June": "Jun",
    "July": "Jul",
    "August": "Aug",
    "September": "Sep",
    "October": "Oct",
    "November": "Nov",
    "December": "Dec",
}
MIN_LEDGER_YEAR = 1900
MAX_LEDGER_YEAR = 9999

# Recalculation Scheduling
FULL_RECALCULATION_DELAY_SECONDS = 0.1  # Delay before the settled pass after a quick pass
PERSISTENCE_DEBOUNCE_SECONDS = 0.5  # Writes within this window collapse into one

# Storage
DEFAULT_STORAGE_DIRECTORY = "data/journal"
TRADES_FILE = "trades.json"
CAPITAL_CHANGES_FILE = "capital_changes.json"
YEARLY_CAPITALS_FILE = "yearly_starting_capitals.json"
MONTHLY_OVERRIDES_FILE = "monthly_starting_capital_overrides.json"
STORE_CACHE_SIZE = 16  # Parsed JSON payloads kept in memory
