"""
JSON file journal store.

One JSON array per collection under a storage directory. Parsed payloads
are cached by path, modification time and size, so repeated loads of an
unchanged file skip disk reads. Every failure is logged and degrades to
an empty collection or a failed save; nothing raises into the caller.
"""

import copy
import json
from collections.abc import Callable
from pathlib import Path
from threading import RLock
from typing import Any, TypeVar

from cachetools import LRUCache
from loguru import logger
from pydantic import ValidationError as SchemaValidationError

from tradejournal.core.constants import (
    CAPITAL_CHANGES_FILE,
    DEFAULT_STORAGE_DIRECTORY,
    MONTHLY_OVERRIDES_FILE,
    STORE_CACHE_SIZE,
    TRADES_FILE,
    YEARLY_CAPITALS_FILE,
)
from tradejournal.core.exceptions.journal import PersistenceError
from tradejournal.core.interfaces.storage import IJournalStore
from tradejournal.core.models.capital import (
    CapitalChange,
    MonthlyStartingCapitalOverride,
    YearlyStartingCapital,
)
from tradejournal.core.models.trade import Trade
from tradejournal.schemas.records import (
    CapitalChangeRecord,
    MonthlyOverrideRecord,
    TradeRecord,
    YearlyCapitalRecord,
)


T = TypeVar("T")


class JsonFileJournalStore(IJournalStore):
    """Best-effort journal store backed by JSON files."""

    def __init__(
        self,
        directory: Path | str = DEFAULT_STORAGE_DIRECTORY,
        cache_size: int = STORE_CACHE_SIZE,
    ):
        if cache_size <= 0:
            raise ValueError("Cache size must be positive")
        self.directory = Path(directory)
        self._cache: LRUCache[str, list[dict[str, Any]]] = LRUCache(maxsize=cache_size)
        self._cache_lock = RLock()

    def _path(self, file_name: str) -> Path:
        return self.directory / file_name

    @staticmethod
    def _build_cache_key(path: Path) -> str:
        """Cache key including modification time and size of the file."""
        stat = path.stat()
        return f"{path}:{stat.st_mtime_ns}:{stat.st_size}"

    def _invalidate(self, path: Path) -> None:
        prefix = f"{path}:"
        with self._cache_lock:
            for key in [key for key in self._cache if key.startswith(prefix)]:
                del self._cache[key]

    def _read_collection(self, file_name: str) -> list[dict[str, Any]]:
        """Read a JSON array, returning [] when it is missing or unusable."""
        path = self._path(file_name)
        if not path.exists():
            logger.debug(f"No persisted collection at {path}")
            return []

        try:
            cache_key = self._build_cache_key(path)
            with self._cache_lock:
                if cache_key in self._cache:
                    logger.debug(f"Cache hit for {path.name}")
                    return copy.deepcopy(self._cache[cache_key])

            payload = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(payload, list):
                raise PersistenceError(file_name, "expected a JSON array")

            records = [record for record in payload if isinstance(record, dict)]
            with self._cache_lock:
                self._cache[cache_key] = records
            return copy.deepcopy(records)

        except (OSError, UnicodeDecodeError, json.JSONDecodeError, PersistenceError) as e:
            logger.warning(f"Failed to load {file_name}, treating as empty: {e}")
            return []

    def _write_collection(self, file_name: str, records: list[dict[str, Any]]) -> bool:
        """Atomically replace a JSON array, returning whether it succeeded."""
        path = self._path(file_name)
        temp_path = path.with_name(f"{path.name}.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(records, indent=2), encoding="utf-8")
            temp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save {file_name}: {e}")
            return False
        finally:
            self._invalidate(path)

        logger.debug(f"Saved {len(records)} records to {path}")
        return True

    @staticmethod
    def _parse_records(
        records: list[dict[str, Any]],
        parse: Callable[[dict[str, Any]], T],
        collection: str,
    ) -> list[T]:
        """Parse records, skipping the ones that fail validation."""
        parsed: list[T] = []
        for index, record in enumerate(records):
            try:
                parsed.append(parse(record))
            except SchemaValidationError as e:
                logger.warning(
                    f"Skipping invalid {collection} record #{index}: {e.error_count()} errors"
                )
        return parsed

    def load_trades(self) -> list[Trade]:
        return self._parse_records(
            self._read_collection(TRADES_FILE),
            lambda record: TradeRecord.model_validate(record).to_trade(),
            "trade",
        )

    def save_trades(self, trades: list[Trade]) -> bool:
        return self._write_collection(TRADES_FILE, [trade.to_record() for trade in trades])

    def load_capital_changes(self) -> list[CapitalChange]:
        return self._parse_records(
            self._read_collection(CAPITAL_CHANGES_FILE),
            lambda record: CapitalChangeRecord.model_validate(record).to_model(),
            "capital change",
        )

    def save_capital_changes(self, changes: list[CapitalChange]) -> bool:
        return self._write_collection(
            CAPITAL_CHANGES_FILE,
            [CapitalChangeRecord.from_model(change).to_payload() for change in changes],
        )

    def load_yearly_capitals(self) -> list[YearlyStartingCapital]:
        return self._parse_records(
            self._read_collection(YEARLY_CAPITALS_FILE),
            lambda record: YearlyCapitalRecord.model_validate(record).to_model(),
            "yearly capital",
        )

    def save_yearly_capitals(self, capitals: list[YearlyStartingCapital]) -> bool:
        return self._write_collection(
            YEARLY_CAPITALS_FILE,
            [YearlyCapitalRecord.from_model(capital).to_payload() for capital in capitals],
        )

    def load_monthly_overrides(self) -> list[MonthlyStartingCapitalOverride]:
        return self._parse_records(
            self._read_collection(MONTHLY_OVERRIDES_FILE),
            lambda record: MonthlyOverrideRecord.model_validate(record).to_model(),
            "monthly override",
        )

    def save_monthly_overrides(self, overrides: list[MonthlyStartingCapitalOverride]) -> bool:
        return self._write_collection(
            MONTHLY_OVERRIDES_FILE,
            [MonthlyOverrideRecord.from_model(override).to_payload() for override in overrides],
        )

    def clear_cache(self) -> None:
        """Drop every cached payload."""
        with self._cache_lock:
            self._cache.clear()
        logger.info("Journal store cache cleared")
