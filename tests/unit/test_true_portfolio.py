"""
Unit tests for the true portfolio ledger.
Following TDD approach - testing the monthly capital chain, overrides and capital changes.
"""

from datetime import date

import pytest

from tradejournal.core.enums import AccountingBasis, CapitalChangeType, PositionStatus
from tradejournal.core.exceptions.journal import (
    CapitalChangeNotFoundError,
    InvalidMonthError,
    ValidationError,
)
from tradejournal.core.models.capital import (
    CapitalChange,
    MonthlyStartingCapitalOverride,
    MonthlyTruePortfolio,
    YearlyStartingCapital,
)
from tradejournal.core.models.trade import Trade
from tradejournal.core.types.calendar import MonthKey
from tradejournal.services.true_portfolio import TruePortfolioLedger


def march_2024() -> date:
    return date(2024, 3, 15)


def realized(when: date, pl: float) -> Trade:
    """A raw trade of 100 shares at 100 fully exited on its entry day for `pl`."""
    return Trade(
        date=when,
        entry=100,
        initial_qty=100,
        exit1_price=100 + pl / 100,
        exit1_qty=100,
        exit1_date=when,
    )


@pytest.fixture
def ledger() -> TruePortfolioLedger:
    """Yearly capital 100000 for 2024 and a 20000 deposit in Feb 2024."""
    ledger = TruePortfolioLedger(fallback_portfolio_size=100000, today=march_2024)
    ledger.set_yearly_starting_capital(2024, 100000)
    ledger.add_capital_change(date(2024, 2, 15), 20000)
    return ledger


@pytest.fixture
def trades() -> list[Trade]:
    """One trade realizing +5000 in Mar 2024."""
    return [realized(date(2024, 3, 5), 5000)]


class TestMonthlyChain:
    """Test suite for month-to-month capital propagation."""

    def test_should_converge_through_deposit_and_pl(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test the Jan to Mar chain with a Feb deposit and Mar P/L."""
        # Act
        result = ledger.get_monthly_true_portfolio("Mar", 2024, trades)

        # Assert
        assert result == MonthlyTruePortfolio(
            month="Mar",
            year=2024,
            starting_capital=120000,
            capital_changes=0,
            pl=5000,
            final_capital=125000,
        )

    def test_should_fold_capital_changes_into_starting_capital(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test that the deposit month reports its revised starting capital."""
        result = ledger.get_monthly_true_portfolio("Feb", 2024, trades)

        assert result.starting_capital == pytest.approx(120000)
        assert result.capital_changes == pytest.approx(20000)
        assert result.final_capital == pytest.approx(120000)

    def test_should_seed_earliest_month_from_yearly_capital(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test the earliest month."""
        result = ledger.get_monthly_true_portfolio("Jan", 2024, trades)

        assert result.starting_capital == pytest.approx(100000)
        assert result.final_capital == pytest.approx(100000)

    def test_should_seed_earliest_month_with_zero_without_yearly_capital(self) -> None:
        """Test an earliest month whose year has no starting capital."""
        ledger = TruePortfolioLedger(today=march_2024)
        ledger.add_capital_change(date(2024, 3, 1), 30000)

        result = ledger.get_monthly_true_portfolio("Mar", 2024)

        assert result.starting_capital == pytest.approx(30000)
        assert result.final_capital == pytest.approx(30000)

    def test_should_return_zero_record_before_earliest_month(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test the backward bound of the chain."""
        result = ledger.get_monthly_true_portfolio("Dec", 2023, trades)

        assert result == MonthlyTruePortfolio.zero(MonthKey(2023, 11))

    def test_should_carry_final_capital_past_last_data_month(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test months after the last trade or change."""
        result = ledger.get_monthly_true_portfolio("Dec", 2024, trades)

        assert result.starting_capital == pytest.approx(125000)
        assert result.pl == 0.0

    def test_should_accept_full_month_names(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test month normalization."""
        result = ledger.get_monthly_true_portfolio("March", 2024, trades)

        assert result.month == "Mar"
        assert result.final_capital == pytest.approx(125000)

    def test_should_reject_unknown_months(self, ledger: TruePortfolioLedger) -> None:
        """Test that invalid month tokens raise."""
        with pytest.raises(InvalidMonthError):
            ledger.get_monthly_true_portfolio("Foo", 2024)


class TestMonthlyOverrides:
    """Test suite for starting capital overrides."""

    @pytest.fixture
    def override_trades(self) -> list[Trade]:
        return [
            realized(date(2024, 3, 5), 5000),
            realized(date(2024, 5, 10), 1000),
            realized(date(2024, 7, 10), 2000),
        ]

    def test_should_replace_derived_starting_capital(
        self, ledger: TruePortfolioLedger, override_trades: list[Trade]
    ) -> None:
        """Test that an override short-circuits the chain."""
        # Arrange
        ledger.set_monthly_starting_capital_override("Jun", 2024, 500000)

        # Act
        june = ledger.get_monthly_true_portfolio("Jun", 2024, override_trades)
        july = ledger.get_monthly_true_portfolio("Jul", 2024, override_trades)
        may = ledger.get_monthly_true_portfolio("May", 2024, override_trades)

        # Assert
        assert june.starting_capital == pytest.approx(500000)
        assert july.starting_capital == pytest.approx(june.final_capital)
        assert july.final_capital == pytest.approx(502000)
        assert may.final_capital == pytest.approx(126000)

    def test_should_normalize_and_identify_override(self, ledger: TruePortfolioLedger) -> None:
        """Test override id and month normalization."""
        override = ledger.set_monthly_starting_capital_override("June", 2024, 500000)

        assert override.month == "Jun"
        assert override.id == "Jun-2024"
        assert ledger.get_monthly_starting_capital_override("Jun", 2024) == 500000

    def test_should_upsert_override(self, ledger: TruePortfolioLedger) -> None:
        """Test that setting an override twice keeps one entry."""
        ledger.set_monthly_starting_capital_override("Jun", 2024, 500000)
        ledger.set_monthly_starting_capital_override("Jun", 2024, 600000)

        assert len(ledger.monthly_overrides) == 1
        assert ledger.get_monthly_starting_capital_override("Jun", 2024) == 600000

    def test_should_remove_override(
        self, ledger: TruePortfolioLedger, override_trades: list[Trade]
    ) -> None:
        """Test that removing an override restores the chain."""
        ledger.set_monthly_starting_capital_override("Jun", 2024, 500000)

        assert ledger.remove_monthly_starting_capital_override("Jun", 2024) is True
        assert ledger.remove_monthly_starting_capital_override("Jun", 2024) is False
        assert ledger.get_monthly_starting_capital_override("Jun", 2024) is None
        june = ledger.get_monthly_true_portfolio("Jun", 2024, override_trades)
        assert june.starting_capital == pytest.approx(126000)

    def test_should_reject_invalid_override_month(self, ledger: TruePortfolioLedger) -> None:
        """Test override month validation."""
        with pytest.raises(InvalidMonthError):
            ledger.set_monthly_starting_capital_override("Juno", 2024, 1)


class TestYearlyCapital:
    """Test suite for yearly starting capitals."""

    def test_should_upsert_and_sort_by_year(self) -> None:
        """Test yearly capital upsert semantics."""
        ledger = TruePortfolioLedger()

        ledger.set_yearly_starting_capital(2025, 150000)
        ledger.set_yearly_starting_capital(2024, 100000)
        ledger.set_yearly_starting_capital(2025, 175000)

        assert [capital.year for capital in ledger.yearly_capitals] == [2024, 2025]
        assert ledger.get_yearly_starting_capital(2025) == 175000

    def test_should_return_zero_for_unset_year(self) -> None:
        """Test a year without starting capital."""
        assert TruePortfolioLedger().get_yearly_starting_capital(2023) == 0.0

    def test_should_drop_hydrated_records_without_usable_year(self) -> None:
        """Test that a year-0 capital cannot become the earliest month."""
        # Arrange
        yearly = [YearlyStartingCapital(2024, 100000), YearlyStartingCapital(0, 1)]
        overrides = [
            MonthlyStartingCapitalOverride("Jun", 0, 5),
            MonthlyStartingCapitalOverride("Jun", 2024, 500000),
        ]

        # Act
        ledger = TruePortfolioLedger(
            yearly_capitals=yearly, monthly_overrides=overrides, today=march_2024
        )

        # Assert
        assert [capital.year for capital in ledger.yearly_capitals] == [2024]
        assert [override.id for override in ledger.monthly_overrides] == ["Jun-2024"]
        assert ledger.get_monthly_true_portfolio("Jan", 2024).starting_capital == 100000

    def test_should_reject_non_integer_year(self) -> None:
        """Test year validation."""
        with pytest.raises(ValidationError):
            TruePortfolioLedger().set_yearly_starting_capital("2024", 100000)  # type: ignore[arg-type]


class TestCapitalChanges:
    """Test suite for deposits and withdrawals."""

    def test_should_subtract_withdrawals(self, ledger: TruePortfolioLedger) -> None:
        """Test signed capital change totals."""
        # Arrange
        ledger.add_capital_change(date(2024, 3, 1), 5000, CapitalChangeType.WITHDRAWAL)
        ledger.add_capital_change(date(2024, 3, 2), -3000)

        # Act
        result = ledger.get_capital_changes_for_month("Mar", 2024)

        # Assert
        assert result == pytest.approx(-8000)

    def test_should_infer_type_from_sign(self, ledger: TruePortfolioLedger) -> None:
        """Test capital changes recorded without a type."""
        change = ledger.add_capital_change(date(2024, 3, 2), -3000)

        assert change.type == CapitalChangeType.WITHDRAWAL
        assert change.signed_amount == pytest.approx(-3000)

    def test_should_update_capital_change(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test editing the amount of an existing change."""
        original = ledger.capital_changes[0]

        ledger.update_capital_change(
            CapitalChange(date=original.date, amount=30000, id=original.id)
        )

        assert ledger.get_true_portfolio_size("Mar", 2024, trades) == pytest.approx(135000)

    def test_should_delete_capital_change(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test deleting a change."""
        ledger.delete_capital_change(ledger.capital_changes[0].id)

        assert ledger.capital_changes == []
        assert ledger.get_true_portfolio_size("Mar", 2024, trades) == pytest.approx(105000)

    def test_should_raise_for_unknown_capital_change(self, ledger: TruePortfolioLedger) -> None:
        """Test edits of missing changes."""
        with pytest.raises(CapitalChangeNotFoundError):
            ledger.update_capital_change(CapitalChange(date=None, amount=1, id="missing"))
        with pytest.raises(CapitalChangeNotFoundError):
            ledger.delete_capital_change("missing")

    def test_should_ignore_undated_changes(self, ledger: TruePortfolioLedger) -> None:
        """Test that an undated change belongs to no month."""
        ledger.add_capital_change(None, 99999)

        assert ledger.get_capital_changes_for_month("Feb", 2024) == pytest.approx(20000)


class TestPortfolioSize:
    """Test suite for portfolio size queries."""

    def test_should_return_final_capital(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test portfolio size of a month."""
        assert ledger.get_true_portfolio_size("Mar", 2024, trades) == pytest.approx(125000)

    def test_should_return_latest_month_size(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test portfolio size of the current month."""
        assert ledger.get_latest_true_portfolio_size(trades) == pytest.approx(125000)

    def test_should_raise_for_invalid_month_before_fallback(
        self, ledger: TruePortfolioLedger
    ) -> None:
        """Test that caller bugs are not masked by the fallback."""
        with pytest.raises(InvalidMonthError):
            ledger.get_true_portfolio_size("Foo", 2024)

    def test_should_fall_back_when_evaluation_fails(
        self, ledger: TruePortfolioLedger, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the fallback size on internal failure."""

        def broken(*args, **kwargs):
            raise RuntimeError("corrupt ledger")

        monkeypatch.setattr(ledger, "get_monthly_true_portfolio", broken)

        assert ledger.get_true_portfolio_size("Mar", 2024) == 100000

    def test_should_reflect_edits_between_queries(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test that no memo outlives a query."""
        before = ledger.get_true_portfolio_size("Mar", 2024, trades)
        ledger.add_capital_change(date(2024, 3, 1), 10000)
        after = ledger.get_true_portfolio_size("Mar", 2024, trades)

        assert before == pytest.approx(125000)
        assert after == pytest.approx(135000)


class TestPortfolioSizeLookup:
    """Test suite for the lookup handed to the recalculation pipeline."""

    def test_should_resolve_month_sizes(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test lookup values."""
        lookup = ledger.portfolio_size_lookup(trades)

        assert lookup("Jan", 2024) == pytest.approx(100000)
        assert lookup("Mar", 2024) == pytest.approx(125000)
        assert lookup("Dec", 2023) == 0.0

    def test_should_not_see_later_ledger_edits(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test that a lookup is frozen at creation."""
        lookup = ledger.portfolio_size_lookup(trades)

        ledger.add_capital_change(date(2024, 3, 1), 10000)

        assert lookup("Mar", 2024) == pytest.approx(125000)

    def test_should_reject_invalid_month(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test lookup month validation."""
        lookup = ledger.portfolio_size_lookup(trades)

        with pytest.raises(InvalidMonthError):
            lookup("Foo", 2024)


class TestEnumeration:
    """Test suite for whole-history enumeration."""

    def test_should_enumerate_earliest_through_latest(
        self, ledger: TruePortfolioLedger, trades: list[Trade]
    ) -> None:
        """Test contiguous month enumeration."""
        # Act
        result = ledger.get_all_monthly_true_portfolios(trades)

        # Assert
        assert [(p.month, p.year) for p in result] == [("Jan", 2024), ("Feb", 2024), ("Mar", 2024)]
        assert [p.final_capital for p in result] == pytest.approx([100000, 120000, 125000])

    def test_should_chain_every_enumerated_month(self) -> None:
        """Test that each month starts where the previous one ended."""
        ledger = TruePortfolioLedger(today=march_2024)
        ledger.set_yearly_starting_capital(2023, 50000)
        trades = [realized(date(2023, 11, 5), 1000), realized(date(2024, 2, 5), -400)]

        result = ledger.get_all_monthly_true_portfolios(trades)

        assert len(result) == 14
        for previous, current in zip(result, result[1:]):
            assert current.starting_capital - current.capital_changes == pytest.approx(
                previous.final_capital
            )
        assert result[-1].final_capital == pytest.approx(50600)

    def test_should_enumerate_current_year_without_data(self) -> None:
        """Test enumeration of an empty ledger."""
        result = TruePortfolioLedger(today=march_2024).get_all_monthly_true_portfolios()

        assert [p.month for p in result] == ["Jan", "Feb", "Mar"]
        assert all(p.final_capital == 0.0 for p in result)

    def test_should_extend_to_exit_months_under_cash_basis(
        self, ledger: TruePortfolioLedger
    ) -> None:
        """Test that cash basis enumerates through the last exit month."""
        trade = Trade(
            date=date(2024, 3, 5),
            entry=100,
            initial_qty=10,
            exit1_price=110,
            exit1_qty=10,
            exit1_date=date(2024, 5, 20),
        )

        accrual = ledger.get_all_monthly_true_portfolios([trade], AccountingBasis.ACCRUAL)
        cash = ledger.get_all_monthly_true_portfolios([trade], AccountingBasis.CASH)

        assert accrual[-1].month == "Mar"
        assert cash[-1].month == "May"
        assert cash[-1].pl == pytest.approx(100)
        assert accrual[-1].final_capital == pytest.approx(cash[-1].final_capital)


class TestBasisEquivalence:
    """Test suite for accrual and cash agreement."""

    def test_should_match_pl_for_trade_closed_within_month(
        self, ledger: TruePortfolioLedger
    ) -> None:
        """Test a trade opened and fully closed in the same month."""
        # Arrange
        raw = Trade(
            date=date(2024, 3, 1),
            entry=100,
            initial_qty=10,
            pyramid1_price=110,
            pyramid1_qty=10,
            pyramid1_date=date(2024, 3, 5),
            exit1_price=120,
            exit1_qty=15,
            exit1_date=date(2024, 3, 10),
            exit2_price=130,
            exit2_qty=5,
            exit2_date=date(2024, 3, 20),
        )
        trades = [raw]

        # Act
        accrual = ledger.get_monthly_true_portfolio("Mar", 2024, trades, AccountingBasis.ACCRUAL)
        cash = ledger.get_monthly_true_portfolio("Mar", 2024, trades, AccountingBasis.CASH)

        # Assert
        assert accrual.pl == pytest.approx(350)
        assert cash.pl == pytest.approx(accrual.pl)


class TestRawTrades:
    """Test suite for trades passed without any derived fields."""

    @pytest.fixture
    def raw_trade(self) -> Trade:
        """50 shares bought at 100 and sold at 200 within March."""
        return Trade(
            date=date(2024, 3, 1),
            entry=100,
            initial_qty=50,
            exit1_price=200,
            exit1_qty=50,
            exit1_date=date(2024, 3, 20),
        )

    def test_should_derive_pl_from_lots(self, raw_trade: Trade) -> None:
        """Test that a raw trade contributes its realized P/L."""
        # Arrange
        ledger = TruePortfolioLedger(today=march_2024)
        ledger.set_yearly_starting_capital(2024, 100000)

        # Act
        march = ledger.get_monthly_true_portfolio("Mar", 2024, [raw_trade])

        # Assert
        assert raw_trade.position_status == PositionStatus.OPEN
        assert march.pl == pytest.approx(5000)
        assert march.final_capital == pytest.approx(105000)

    @pytest.mark.parametrize("basis", [AccountingBasis.ACCRUAL, AccountingBasis.CASH])
    def test_should_size_portfolio_from_raw_trades(
        self, raw_trade: Trade, basis: AccountingBasis
    ) -> None:
        """Test sizes and lookups under both bases."""
        ledger = TruePortfolioLedger(today=march_2024)
        ledger.set_yearly_starting_capital(2024, 100000)

        size = ledger.get_true_portfolio_size("Mar", 2024, [raw_trade], basis)
        looked_up = ledger.portfolio_size_lookup([raw_trade], basis)("Mar", 2024)
        enumerated = ledger.get_all_monthly_true_portfolios([raw_trade], basis)

        assert size == pytest.approx(105000)
        assert looked_up == pytest.approx(105000)
        assert enumerated[-1].final_capital == pytest.approx(105000)

    def test_should_ignore_stale_derived_fields(self, raw_trade: Trade) -> None:
        """Test that hand-set derived values are recomputed from the lots."""
        stale = raw_trade.replace(pl_rs=1, position_status=PositionStatus.OPEN)
        ledger = TruePortfolioLedger(today=march_2024)

        assert ledger.get_monthly_true_portfolio("Mar", 2024, [stale]).pl == pytest.approx(5000)
