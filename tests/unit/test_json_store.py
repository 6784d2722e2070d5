"""
Unit tests for the JSON file journal store.
Following TDD approach - testing persistence, caching and best-effort failure handling.
"""

import json
from datetime import date
from pathlib import Path
from unittest.mock import patch

import pytest

from tradejournal.core.constants import (
    CAPITAL_CHANGES_FILE,
    MONTHLY_OVERRIDES_FILE,
    TRADES_FILE,
    YEARLY_CAPITALS_FILE,
)
from tradejournal.core.enums import CapitalChangeType
from tradejournal.core.models.capital import (
    CapitalChange,
    MonthlyStartingCapitalOverride,
    YearlyStartingCapital,
)
from tradejournal.core.models.trade import Trade
from tradejournal.infrastructure.storage import JsonFileJournalStore
from tradejournal.services.true_portfolio import TruePortfolioLedger


@pytest.fixture
def store(tmp_path: Path) -> JsonFileJournalStore:
    """Store rooted in a temporary directory."""
    return JsonFileJournalStore(tmp_path / "journal")


class TestJsonFileJournalStore:
    """Test suite for JsonFileJournalStore."""

    def test_should_reject_non_positive_cache_size(self, tmp_path: Path) -> None:
        """Test constructor validation."""
        with pytest.raises(ValueError, match="Cache size"):
            JsonFileJournalStore(tmp_path, cache_size=0)

    def test_should_return_empty_collections_when_nothing_saved(
        self, store: JsonFileJournalStore
    ) -> None:
        """Test loading from a missing directory."""
        assert store.load_trades() == []
        assert store.load_capital_changes() == []
        assert store.load_yearly_capitals() == []
        assert store.load_monthly_overrides() == []

    def test_should_persist_trades(self, store: JsonFileJournalStore) -> None:
        """Test trade save and load."""
        # Arrange
        trade = Trade(id="t1", date=date(2024, 3, 1), name="INFY", entry=1500, initial_qty=10)

        # Act
        saved = store.save_trades([trade])
        loaded = store.load_trades()

        # Assert
        assert saved is True
        assert loaded == [trade]

    def test_should_write_camel_case_json_arrays(self, store: JsonFileJournalStore) -> None:
        """Test the on-disk format."""
        store.save_trades([Trade(id="t1", trade_no="1")])

        payload = json.loads((store.directory / TRADES_FILE).read_text(encoding="utf-8"))

        assert isinstance(payload, list)
        assert payload[0]["tradeNo"] == "1"
        assert not (store.directory / f"{TRADES_FILE}.tmp").exists()

    def test_should_persist_ledger_inputs(self, store: JsonFileJournalStore) -> None:
        """Test capital changes, yearly capitals and overrides."""
        change = CapitalChange(date(2024, 2, 1), 5000, CapitalChangeType.WITHDRAWAL, id="c1")
        capital = YearlyStartingCapital(2024, 100000, updated_at="t")
        override = MonthlyStartingCapitalOverride("Jun", 2024, 500000, updated_at="t")

        store.save_capital_changes([change])
        store.save_yearly_capitals([capital])
        store.save_monthly_overrides([override])

        assert store.load_capital_changes() == [change]
        assert store.load_yearly_capitals() == [capital]
        assert store.load_monthly_overrides() == [override]

    def test_should_treat_corrupt_file_as_empty(self, store: JsonFileJournalStore) -> None:
        """Test unparseable JSON."""
        store.directory.mkdir(parents=True)
        (store.directory / TRADES_FILE).write_text("{not json", encoding="utf-8")

        assert store.load_trades() == []

    def test_should_treat_non_array_payload_as_empty(self, store: JsonFileJournalStore) -> None:
        """Test a JSON object where an array is expected."""
        store.directory.mkdir(parents=True)
        (store.directory / CAPITAL_CHANGES_FILE).write_text('{"id": "c1"}', encoding="utf-8")

        assert store.load_capital_changes() == []

    def test_should_skip_invalid_records(self, store: JsonFileJournalStore) -> None:
        """Test that one bad record does not drop the collection."""
        store.directory.mkdir(parents=True)
        records = [
            {"month": "Foo", "year": 2024, "startingCapital": 1},
            {"month": "Jun", "year": 2024, "startingCapital": 500000},
            "not a record",
        ]
        (store.directory / MONTHLY_OVERRIDES_FILE).write_text(json.dumps(records), encoding="utf-8")

        loaded = store.load_monthly_overrides()

        assert [override.id for override in loaded] == ["Jun-2024"]

    def test_should_skip_yearly_capitals_without_usable_year(
        self, store: JsonFileJournalStore
    ) -> None:
        """Test that a blank year cannot move the ledger's earliest month."""
        # Arrange
        store.directory.mkdir(parents=True)
        records = [
            {"year": 2024, "startingCapital": 100000},
            {"year": "", "startingCapital": 1},
            {"year": "garbage", "startingCapital": 2},
        ]
        (store.directory / YEARLY_CAPITALS_FILE).write_text(json.dumps(records), encoding="utf-8")

        # Act
        loaded = store.load_yearly_capitals()
        ledger = TruePortfolioLedger(yearly_capitals=loaded, today=lambda: date(2024, 3, 15))
        portfolios = ledger.get_all_monthly_true_portfolios()

        # Assert
        assert [capital.year for capital in loaded] == [2024]
        assert len(portfolios) == 3
        assert portfolios[0].starting_capital == 100000

    def test_should_serve_unchanged_file_from_cache(self, store: JsonFileJournalStore) -> None:
        """Test that a second load skips the disk read."""
        store.save_trades([Trade(id="t1")])
        store.load_trades()

        with patch.object(Path, "read_text", side_effect=AssertionError("disk read")):
            loaded = store.load_trades()

        assert [trade.id for trade in loaded] == ["t1"]

    def test_should_invalidate_cache_on_save(self, store: JsonFileJournalStore) -> None:
        """Test that saves are visible to the next load."""
        store.save_trades([Trade(id="t1")])
        store.load_trades()

        store.save_trades([Trade(id="t2")])

        assert [trade.id for trade in store.load_trades()] == ["t2"]

    def test_should_return_copies_from_cache(self, store: JsonFileJournalStore) -> None:
        """Test that callers cannot mutate cached payloads."""
        store.save_trades([Trade(id="t1", name="A")])

        first = store._read_collection(TRADES_FILE)
        first[0]["name"] = "mutated"

        assert store.load_trades()[0].name == "A"

    def test_should_report_failed_save(self, tmp_path: Path) -> None:
        """Test that a failed write returns False instead of raising."""
        blocker = tmp_path / "blocked"
        blocker.write_text("file in the way", encoding="utf-8")
        store = JsonFileJournalStore(blocker / "journal")

        assert store.save_trades([Trade()]) is False

    def test_should_clear_cache(self, store: JsonFileJournalStore) -> None:
        """Test cache reset."""
        store.save_trades([Trade(id="t1")])
        store.load_trades()

        store.clear_cache()

        assert len(store._cache) == 0
