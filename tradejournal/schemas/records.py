"""
Pydantic schemas for persisted and imported journal records.

Records use the camelCase keys the journal store and import tooling
produce. Validation here is deliberately lenient: numeric fields coerce
to finite floats, unusable dates become None and unknown enum tokens fall
back to their defaults, so every record yields a usable domain object.
Ledger years are the exception: a record without a usable year is
rejected rather than anchored at year 0.
"""

import dataclasses
import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tradejournal.core.enums import CapitalChangeType, PositionStatus, TradeSide
from tradejournal.core.exceptions.journal import InvalidMonthError, ValidationError
from tradejournal.core.models.capital import (
    CapitalChange,
    MonthlyStartingCapitalOverride,
    YearlyStartingCapital,
    utc_timestamp,
)
from tradejournal.core.models.trade import Trade
from tradejournal.core.types.calendar import parse_date
from tradejournal.core.types.financial import to_float
from tradejournal.core.utils.validation import validate_month, validate_year

TRADE_NUMERIC_FIELDS = (
    "entry",
    "initial_qty",
    "pyramid1_price",
    "pyramid1_qty",
    "pyramid2_price",
    "pyramid2_qty",
    "sl",
    "tsl",
    "cmp",
    "exit1_price",
    "exit1_qty",
    "exit2_price",
    "exit2_qty",
    "exit3_price",
    "exit3_qty",
    "avg_entry",
    "position_size",
    "allocation",
    "sl_percent",
    "open_qty",
    "exited_qty",
    "avg_exit_price",
    "stock_move",
    "reward_risk",
    "realised_amount",
    "pl_rs",
    "pf_impact",
    "cumm_pf",
    "open_heat",
)
TRADE_DATE_FIELDS = (
    "date",
    "pyramid1_date",
    "pyramid2_date",
    "exit1_date",
    "exit2_date",
    "exit3_date",
)
TRADE_TEXT_FIELDS = (
    "id",
    "trade_no",
    "name",
    "setup",
    "base_duration",
    "exit_trigger",
    "proficiency_growth_areas",
    "notes",
)
_TRUTHY = ("true", "yes", "y", "1")


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def _coerce_year(value: Any) -> int:
    """Whole calendar year from an int or numeric string; ValueError otherwise."""
    number = to_float(value)
    if not number.is_integer():
        raise ValueError(f"year must be a whole number, got {value!r}")
    try:
        return validate_year(int(number))
    except ValidationError as e:
        raise ValueError(str(e)) from e


class JournalRecord(BaseModel):
    """Base model for camelCase journal records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        """Dump to a JSON-ready camelCase dictionary."""
        return self.model_dump(by_alias=True, mode="json")


class TradeRecord(JournalRecord):
    """A raw or fully derived trade as stored or imported."""

    id: str = ""
    trade_no: str = ""
    date: dt.date | None = None
    name: str = ""
    buy_sell: TradeSide = TradeSide.BUY
    setup: str = ""
    base_duration: str = ""

    entry: float = 0.0
    initial_qty: float = 0.0
    pyramid1_price: float = 0.0
    pyramid1_qty: float = 0.0
    pyramid1_date: dt.date | None = None
    pyramid2_price: float = 0.0
    pyramid2_qty: float = 0.0
    pyramid2_date: dt.date | None = None

    sl: float = 0.0
    tsl: float = 0.0
    cmp: float = 0.0

    exit1_price: float = 0.0
    exit1_qty: float = 0.0
    exit1_date: dt.date | None = None
    exit2_price: float = 0.0
    exit2_qty: float = 0.0
    exit2_date: dt.date | None = None
    exit3_price: float = 0.0
    exit3_qty: float = 0.0
    exit3_date: dt.date | None = None

    plan_followed: bool = False
    exit_trigger: str = ""
    proficiency_growth_areas: str = ""
    notes: str = ""

    avg_entry: float = 0.0
    position_size: float = 0.0
    allocation: float = 0.0
    sl_percent: float = 0.0
    open_qty: float = 0.0
    exited_qty: float = 0.0
    avg_exit_price: float = 0.0
    stock_move: float = 0.0
    reward_risk: float = 0.0
    holding_days: int = 0
    realised_amount: float = 0.0
    pl_rs: float = 0.0
    pf_impact: float = 0.0
    cumm_pf: float = 0.0
    open_heat: float = 0.0
    position_status: PositionStatus = PositionStatus.OPEN
    needs_recalculation: bool = False

    @field_validator(*TRADE_NUMERIC_FIELDS, mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> float:
        """Missing, blank or non-finite numbers become 0."""
        return to_float(v)

    @field_validator(*TRADE_DATE_FIELDS, mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> dt.date | None:
        """Unparseable dates become None."""
        return parse_date(v)

    @field_validator(*TRADE_TEXT_FIELDS, mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        """None becomes the empty string; numbers are stringified."""
        return "" if v is None else str(v).strip()

    @field_validator("buy_sell", mode="before")
    @classmethod
    def coerce_side(cls, v: Any) -> TradeSide:
        """Side tokens are case-insensitive and default to Buy."""
        return TradeSide.parse(v)

    @field_validator("position_status", mode="before")
    @classmethod
    def coerce_status(cls, v: Any) -> PositionStatus:
        """Unknown statuses default to Open; derivation recomputes them anyway."""
        token = str(v or "").strip().capitalize()
        try:
            return PositionStatus(token)
        except ValueError:
            return PositionStatus.OPEN

    @field_validator("holding_days", mode="before")
    @classmethod
    def coerce_days(cls, v: Any) -> int:
        return int(round(to_float(v)))

    @field_validator("plan_followed", "needs_recalculation", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        return _coerce_bool(v)

    @classmethod
    def from_trade(cls, trade: Trade) -> "TradeRecord":
        """Build a record from a domain trade."""
        return cls.model_validate(dataclasses.asdict(trade))

    def to_trade(self) -> Trade:
        """Convert to a domain trade."""
        return Trade(**self.model_dump())


class CapitalChangeRecord(JournalRecord):
    """A persisted deposit or withdrawal."""

    id: str = ""
    date: dt.date | None = None
    amount: float = 0.0
    type: CapitalChangeType | None = None
    description: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return to_float(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> dt.date | None:
        return parse_date(v)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> CapitalChangeType | None:
        """Unknown or missing types defer to the sign of the amount."""
        token = str(v or "").strip().lower()
        try:
            return CapitalChangeType(token)
        except ValueError:
            return None

    @field_validator("id", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @classmethod
    def from_model(cls, change: CapitalChange) -> "CapitalChangeRecord":
        """Build a record from a domain capital change."""
        return cls(
            id=change.id,
            date=change.date,
            amount=change.amount,
            type=change.type,
            description=change.description,
        )

    def to_model(self) -> CapitalChange:
        """Convert to a domain capital change."""
        return CapitalChange(
            date=self.date,
            amount=self.amount,
            type=self.type,
            description=self.description,
            id=self.id,
        )


class YearlyCapitalRecord(JournalRecord):
    """A persisted yearly starting capital."""

    year: int
    starting_capital: float = Field(default=0.0)
    updated_at: str = Field(default_factory=utc_timestamp)

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, v: Any) -> int:
        return _coerce_year(v)

    @field_validator("starting_capital", mode="before")
    @classmethod
    def coerce_capital(cls, v: Any) -> float:
        return to_float(v)

    @classmethod
    def from_model(cls, capital: YearlyStartingCapital) -> "YearlyCapitalRecord":
        return cls(
            year=capital.year,
            starting_capital=capital.starting_capital,
            updated_at=capital.updated_at,
        )

    def to_model(self) -> YearlyStartingCapital:
        return YearlyStartingCapital(
            year=self.year,
            starting_capital=self.starting_capital,
            updated_at=self.updated_at,
        )


class MonthlyOverrideRecord(JournalRecord):
    """A persisted monthly starting capital override."""

    id: str = ""
    month: str
    year: int
    starting_capital: float = Field(default=0.0)
    updated_at: str = Field(default_factory=utc_timestamp)

    @field_validator("month", mode="before")
    @classmethod
    def normalize_month_token(cls, v: Any) -> str:
        """Full month names are shortened; unknown tokens are rejected."""
        try:
            return validate_month(v)
        except InvalidMonthError as e:
            raise ValueError(str(e)) from e

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, v: Any) -> int:
        return _coerce_year(v)

    @field_validator("starting_capital", mode="before")
    @classmethod
    def coerce_capital(cls, v: Any) -> float:
        return to_float(v)

    @classmethod
    def from_model(cls, override: MonthlyStartingCapitalOverride) -> "MonthlyOverrideRecord":
        return cls(
            id=override.id,
            month=override.month,
            year=override.year,
            starting_capital=override.starting_capital,
            updated_at=override.updated_at,
        )

    def to_model(self) -> MonthlyStartingCapitalOverride:
        return MonthlyStartingCapitalOverride(
            month=self.month,
            year=self.year,
            starting_capital=self.starting_capital,
            updated_at=self.updated_at,
        )
