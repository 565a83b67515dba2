"""
Run output models — the locked result contract.

``ResultRow`` is the schema-locked output record.  Its ten fields are
declared in canonical column order and serialised by alias, so
``row.to_dict()`` enumerates exactly::

    Rank, Ticker, Company Name, Sector, Current Price, Predicted Price,
    Predicted 1-Day % Growth, 3-Month, 6-Month, 12-Month

Consumers rely on that enumeration order, not just key presence, so never
reorder the field declarations below.

``RunResult`` is one complete model run: 10 ranked rows plus the appended
fixed ticker (row 11, ``Rank=None``), the TRADE / NO TRADE header and the
sector concentration flag.  Both models are frozen.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MODEL_VERSION = "Stock Check v1.2"

CANONICAL_COLUMNS: tuple[str, ...] = (
    "Rank",
    "Ticker",
    "Company Name",
    "Sector",
    "Current Price",
    "Predicted Price",
    "Predicted 1-Day % Growth",
    "3-Month",
    "6-Month",
    "12-Month",
)

TOP_N = 10
RESULT_ROW_COUNT = TOP_N + 1

TradeHeader = Literal["TRADE", "NO TRADE"]


class DataMode(StrEnum):
    """Where the universe comes from."""

    LIVE = "LIVE"
    """Alpha Vantage daily series; fails rather than fabricating data."""

    MOCK = "MOCK"
    """Seeded deterministic synthetic universe."""


class ResultRow(BaseModel):
    """One locked output row.  Field order IS the column contract."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rank:                    Optional[int]   = Field(alias="Rank")
    ticker:                  str             = Field(alias="Ticker")
    company_name:            str             = Field(alias="Company Name")
    sector:                  str             = Field(alias="Sector")
    current_price:           float           = Field(alias="Current Price")
    predicted_price:         float           = Field(alias="Predicted Price")
    predicted_1d_growth_pct: float           = Field(alias="Predicted 1-Day % Growth")
    trailing_3m:             Optional[float] = Field(alias="3-Month")
    trailing_6m:             Optional[float] = Field(alias="6-Month")
    trailing_12m:            Optional[float] = Field(alias="12-Month")

    def to_dict(self) -> dict[str, Any]:
        """Return the row keyed by canonical column names, in column order."""
        return self.model_dump(by_alias=True)


class RunResult(BaseModel):
    """Complete output of one model run.

    Attributes:
        model_version:   Model identifier, always ``MODEL_VERSION``.
        data_mode:       ``"MOCK"`` or ``"LIVE"``.
        current_date:    Run date, ``YYYY-MM-DD``.
        prediction_date: Date the growth projection targets, ``YYYY-MM-DD``.
        trade_header:    ``"TRADE"`` or ``"NO TRADE"`` from the Top 10 gate.
        sector_warning:  True if one sector holds >= 7 of the Top 10.
        results:         Exactly 11 rows: Rank 1..10, then the append row.
        created_at:      ISO-8601 UTC wall-clock timestamp (not deterministic).
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_version:   str = MODEL_VERSION
    data_mode:       DataMode
    current_date:    str
    prediction_date: str
    trade_header:    TradeHeader
    sector_warning:  bool
    results:         list[ResultRow]
    created_at:      str

    @model_validator(mode="after")
    def validate_result_shape(self) -> "RunResult":
        if len(self.results) != RESULT_ROW_COUNT:
            raise ValueError(
                f"results must contain exactly {RESULT_ROW_COUNT} rows, "
                f"got {len(self.results)}."
            )
        ranks = [r.rank for r in self.results]
        expected = list(range(1, TOP_N + 1)) + [None]
        if ranks != expected:
            raise ValueError(f"Rank column must be {expected}, got {ranks}.")
        return self

    @property
    def top10(self) -> list[ResultRow]:
        return self.results[:TOP_N]

    @property
    def appended(self) -> ResultRow:
        return self.results[TOP_N]

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with rows keyed by canonical column names."""
        payload = self.model_dump(mode="json", exclude={"results"})
        payload["results"] = [row.to_dict() for row in self.results]
        # Keep the top-level key order stable: results before created_at.
        created_at = payload.pop("created_at")
        payload["created_at"] = created_at
        return payload
