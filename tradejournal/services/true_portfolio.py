"""
True portfolio ledger.

Folds starting capital, capital changes and attributed trade P/L forward
month by month. Every month's starting capital is, in order of priority,
its override, the yearly starting capital when it is the earliest month
with data, or the previous month's final capital.
"""

import datetime as dt
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from tradejournal.core.calculations.accounting import monthly_pl
from tradejournal.core.calculations.trade_fields import derive_lot_fields
from tradejournal.core.constants import DEFAULT_PORTFOLIO_SIZE
from tradejournal.core.enums import AccountingBasis, CapitalChangeType
from tradejournal.core.exceptions.journal import CapitalChangeNotFoundError, ValidationError
from tradejournal.core.models.capital import (
    CapitalChange,
    MonthlyStartingCapitalOverride,
    MonthlyTruePortfolio,
    YearlyStartingCapital,
)
from tradejournal.core.models.trade import Trade
from tradejournal.core.protocols import Clock, PortfolioSizeLookup
from tradejournal.core.types.calendar import MonthKey, iter_months
from tradejournal.core.types.financial import ZERO, to_float
from tradejournal.core.utils.decorators import log_operation, validate_calendar
from tradejournal.core.utils.validation import validate_month, validate_year

Memo = dict[MonthKey, MonthlyTruePortfolio]


@dataclass
class LedgerInputs:
    """Snapshot of everything one ledger evaluation reads."""

    earliest: MonthKey
    latest: MonthKey
    capital_changes: dict[MonthKey, float] = field(default_factory=dict)
    pl: dict[MonthKey, float] = field(default_factory=dict)
    overrides: dict[MonthKey, float] = field(default_factory=dict)
    yearly_capitals: dict[int, float] = field(default_factory=dict)


class TruePortfolioLedger:
    """Monthly capital ledger over yearly capitals, overrides and capital changes."""

    def __init__(
        self,
        capital_changes: Iterable[CapitalChange] = (),
        yearly_capitals: Iterable[YearlyStartingCapital] = (),
        monthly_overrides: Iterable[MonthlyStartingCapitalOverride] = (),
        fallback_portfolio_size: float = DEFAULT_PORTFOLIO_SIZE,
        today: Clock = dt.date.today,
    ):
        self._capital_changes: list[CapitalChange] = list(capital_changes)
        self._yearly_capitals: dict[int, YearlyStartingCapital] = {
            capital.year: capital
            for capital in yearly_capitals
            if self._has_usable_year(capital, "yearly starting capital")
        }
        self._overrides: dict[MonthKey, MonthlyStartingCapitalOverride] = {
            override.key: override
            for override in monthly_overrides
            if self._has_usable_year(override, "starting capital override")
        }
        self.fallback_portfolio_size = fallback_portfolio_size
        self._today = today

    @staticmethod
    def _has_usable_year(
        record: YearlyStartingCapital | MonthlyStartingCapitalOverride, kind: str
    ) -> bool:
        """Check a hydrated record's year, dropping it with a warning when unusable."""
        try:
            validate_year(record.year)
        except ValidationError as e:
            logger.warning(f"Ignoring {kind} with unusable year: {e}")
            return False
        return True

    # Yearly starting capital

    @property
    def yearly_capitals(self) -> list[YearlyStartingCapital]:
        """Yearly starting capitals sorted by year."""
        return [self._yearly_capitals[year] for year in sorted(self._yearly_capitals)]

    def set_yearly_starting_capital(self, year: int, amount: float) -> YearlyStartingCapital:
        """Create or replace the starting capital of a year."""
        year = validate_year(year)
        capital = YearlyStartingCapital(year=year, starting_capital=to_float(amount))
        self._yearly_capitals[year] = capital
        logger.info(f"Yearly starting capital for {year} set to {capital.starting_capital}")
        return capital

    def get_yearly_starting_capital(self, year: int) -> float:
        """Starting capital of a year, 0 when unset."""
        capital = self._yearly_capitals.get(year)
        return capital.starting_capital if capital else ZERO

    # Monthly overrides

    @property
    def monthly_overrides(self) -> list[MonthlyStartingCapitalOverride]:
        """Overrides in chronological order."""
        return [self._overrides[key] for key in sorted(self._overrides)]

    @validate_calendar
    def set_monthly_starting_capital_override(
        self, month: str, year: int, amount: float
    ) -> MonthlyStartingCapitalOverride:
        """Create or replace the starting capital override of a month."""
        override = MonthlyStartingCapitalOverride(
            month=month, year=year, starting_capital=to_float(amount)
        )
        self._overrides[override.key] = override
        logger.info(f"Starting capital override {override.id} set to {override.starting_capital}")
        return override

    @validate_calendar
    def remove_monthly_starting_capital_override(self, month: str, year: int) -> bool:
        """Remove a month's override, returning whether one existed."""
        removed = self._overrides.pop(MonthKey.from_token(month, year), None)
        if removed is not None:
            logger.info(f"Starting capital override {removed.id} removed")
        return removed is not None

    @validate_calendar
    def get_monthly_starting_capital_override(self, month: str, year: int) -> float | None:
        """Override value of a month, None when the month is not overridden."""
        override = self._overrides.get(MonthKey.from_token(month, year))
        return override.starting_capital if override else None

    # Capital changes

    @property
    def capital_changes(self) -> list[CapitalChange]:
        """Capital changes in insertion order."""
        return list(self._capital_changes)

    def add_capital_change(
        self,
        date: dt.date | None,
        amount: float,
        type: CapitalChangeType | None = None,
        description: str = "",
    ) -> CapitalChange:
        """Record a new deposit or withdrawal."""
        change = CapitalChange(date=date, amount=amount, type=type, description=description)
        self._capital_changes.append(change)
        logger.info(f"Capital change {change.id} added: {change.signed_amount:+.2f} on {date}")
        return change

    def update_capital_change(self, change: CapitalChange) -> CapitalChange:
        """Replace the capital change carrying the same id."""
        for index, existing in enumerate(self._capital_changes):
            if existing.id == change.id:
                self._capital_changes[index] = change
                logger.info(f"Capital change {change.id} updated")
                return change
        raise CapitalChangeNotFoundError(change.id)

    def delete_capital_change(self, change_id: str) -> None:
        """Delete a capital change by id."""
        remaining = [change for change in self._capital_changes if change.id != change_id]
        if len(remaining) == len(self._capital_changes):
            raise CapitalChangeNotFoundError(change_id)
        self._capital_changes = remaining
        logger.info(f"Capital change {change_id} deleted")

    @validate_calendar
    def get_capital_changes_for_month(self, month: str, year: int) -> float:
        """Net signed capital changes dated within a month."""
        key = MonthKey.from_token(month, year)
        return sum(
            (change.signed_amount for change in self._capital_changes if change.month_key == key),
            ZERO,
        )

    # Ledger evaluation

    def snapshot(
        self, trades: Iterable[Trade], basis: AccountingBasis = AccountingBasis.ACCRUAL
    ) -> LedgerInputs:
        """Freeze the inputs of one ledger evaluation.

        The earliest month is the earliest of trade dates, capital change
        dates and January of each yearly capital; January of the current
        year when there is no data. The latest month is the latest trade
        or capital change date (exit dates too under cash basis), the
        current month when there is none. Trades may be raw: realized P/L
        is derived from their lots here.
        """
        basis = AccountingBasis(basis)
        today = self._today()
        trades = [derive_lot_fields(trade, today) for trade in trades]

        earliest_candidates: list[MonthKey] = []
        latest_candidates: list[MonthKey] = []
        for trade in trades:
            if trade.month_key is not None:
                earliest_candidates.append(trade.month_key)
                latest_candidates.append(trade.month_key)
            if basis.is_cash:
                latest_candidates.extend(
                    MonthKey.from_date(lot.date) for lot in trade.exit_lots() if lot.date
                )

        changes_by_month: dict[MonthKey, float] = defaultdict(float)
        for change in self._capital_changes:
            if change.month_key is None:
                continue
            earliest_candidates.append(change.month_key)
            latest_candidates.append(change.month_key)
            changes_by_month[change.month_key] += change.signed_amount

        earliest_candidates.extend(MonthKey(year, 0) for year in self._yearly_capitals)

        return LedgerInputs(
            earliest=min(earliest_candidates, default=MonthKey(today.year, 0)),
            latest=max(latest_candidates, default=MonthKey.from_date(today)),
            capital_changes=dict(changes_by_month),
            pl=monthly_pl(trades, basis),
            overrides={key: o.starting_capital for key, o in self._overrides.items()},
            yearly_capitals={
                year: capital.starting_capital for year, capital in self._yearly_capitals.items()
            },
        )

    @staticmethod
    def _month_record(
        key: MonthKey, previous_final: float, inputs: LedgerInputs
    ) -> MonthlyTruePortfolio:
        if key in inputs.overrides:
            starting = inputs.overrides[key]
        elif key == inputs.earliest:
            starting = inputs.yearly_capitals.get(key.year, ZERO)
        else:
            starting = previous_final

        changes = inputs.capital_changes.get(key, ZERO)
        revised = starting + changes
        pl = inputs.pl.get(key, ZERO)
        return MonthlyTruePortfolio(
            month=key.month,
            year=key.year,
            starting_capital=revised,
            capital_changes=changes,
            pl=pl,
            final_capital=revised + pl,
        )

    @classmethod
    def evaluate(cls, target: MonthKey, inputs: LedgerInputs, memo: Memo) -> MonthlyTruePortfolio:
        """Resolve one month against a memo scoped to the caller.

        Walks back from the target until it reaches a memoized month, an
        override or the earliest month, then folds forward. Months before
        the earliest month are zero and never memoized.
        """
        if target < inputs.earliest:
            return MonthlyTruePortfolio.zero(target)
        if target in memo:
            return memo[target]

        pending = [target]
        key = target
        while key > inputs.earliest and key not in inputs.overrides:
            key = key.previous()
            if key in memo:
                break
            pending.append(key)

        previous_final = memo[key].final_capital if key in memo else ZERO
        for key in reversed(pending):
            record = cls._month_record(key, previous_final, inputs)
            memo[key] = record
            previous_final = record.final_capital
        return memo[target]

    @validate_calendar
    def get_monthly_true_portfolio(
        self,
        month: str,
        year: int,
        trades: Iterable[Trade] = (),
        basis: AccountingBasis = AccountingBasis.ACCRUAL,
    ) -> MonthlyTruePortfolio:
        """Ledger record of one month, evaluated with a fresh memo.

        Raises:
            InvalidMonthError: If month is not a recognized month name
        """
        inputs = self.snapshot(trades, basis)
        return self.evaluate(MonthKey.from_token(month, year), inputs, {})

    def get_true_portfolio_size(
        self,
        month: str,
        year: int,
        trades: Iterable[Trade] = (),
        basis: AccountingBasis = AccountingBasis.ACCRUAL,
    ) -> float:
        """Final capital of a month, or the fallback size if evaluation fails.

        Raises:
            InvalidMonthError: If month is not a recognized month name
        """
        month = validate_month(month)
        year = validate_year(year)
        try:
            return self.get_monthly_true_portfolio(month, year, trades, basis).final_capital
        except Exception as e:
            logger.warning(
                f"True portfolio size for {month} {year} unavailable, "
                f"using fallback {self.fallback_portfolio_size}: {e}"
            )
            return self.fallback_portfolio_size

    def get_latest_true_portfolio_size(
        self,
        trades: Iterable[Trade] = (),
        basis: AccountingBasis = AccountingBasis.ACCRUAL,
    ) -> float:
        """Portfolio size of the current calendar month."""
        current = MonthKey.from_date(self._today())
        return self.get_true_portfolio_size(current.month, current.year, trades, basis)

    @log_operation
    def get_all_monthly_true_portfolios(
        self,
        trades: Iterable[Trade] = (),
        basis: AccountingBasis = AccountingBasis.ACCRUAL,
    ) -> list[MonthlyTruePortfolio]:
        """Every month from the earliest through the latest data month."""
        inputs = self.snapshot(trades, basis)
        memo: Memo = {}
        portfolios = [
            self.evaluate(key, inputs, memo) for key in iter_months(inputs.earliest, inputs.latest)
        ]
        logger.info(
            f"Enumerated {len(portfolios)} monthly portfolios "
            f"({inputs.earliest.label} to {inputs.latest.label}, "
            f"{AccountingBasis(basis).value} basis)"
        )
        return portfolios

    def portfolio_size_lookup(
        self,
        trades: Iterable[Trade],
        basis: AccountingBasis = AccountingBasis.ACCRUAL,
    ) -> PortfolioSizeLookup:
        """Lookup over a frozen snapshot of the current inputs.

        The snapshot and its memo belong to the returned callable alone,
        so later edits to the ledger never leak into it. Build a new one
        for every recalculation.
        """
        inputs = self.snapshot(trades, basis)
        memo: Memo = {}
        fallback = self.fallback_portfolio_size

        def lookup(month: str, year: int) -> float:
            key = MonthKey.from_token(validate_month(month), validate_year(year))
            try:
                return self.evaluate(key, inputs, memo).final_capital
            except Exception as e:
                logger.warning(
                    f"Portfolio size lookup failed for {key.label}, using {fallback}: {e}"
                )
                return fallback

        return lookup
