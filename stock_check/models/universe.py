"""
Universe entity models.

``UniverseEntity`` is one candidate ticker as produced by the synthetic
generator (MOCK) or the Alpha Vantage adapter (LIVE).  ``ScoredEntity``
couples an entity with its projection; it is built as a new record and never
mutates the entity it wraps.

``inputs`` is the raw per-factor signal mapping (see
``stock_check.factors.normalize.INPUT_FIELDS``).  Values are not validated
here: non-finite or missing inputs are legal and normalize to the neutral
midpoint.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrailingReturns(BaseModel):
    """Trailing percentage returns over 3, 6 and 12 months.

    Serialised with the ``"3m"`` / ``"6m"`` / ``"12m"`` keys used by
    upstream payloads and saved runs.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    m3:  Optional[float] = Field(default=None, alias="3m")
    m6:  Optional[float] = Field(default=None, alias="6m")
    m12: Optional[float] = Field(default=None, alias="12m")

    def is_complete(self) -> bool:
        """True if all three horizons are finite numbers."""
        return all(
            v is not None and math.isfinite(v) for v in (self.m3, self.m6, self.m12)
        )


class UniverseEntity(BaseModel):
    """One candidate ticker with its raw factor inputs.

    Attributes:
        ticker:        Upper-case symbol, e.g. ``"MSFT"``.
        company_name:  Display name (LIVE: the ticker itself).
        sector:        Sector label (LIVE: ``"Unknown"``).
        current_price: Latest price; must be finite and > 0.
        inputs:        Raw factor input mapping (field name -> number).
        trailing:      3/6/12-month trailing returns in percent.
    """

    model_config = ConfigDict(frozen=True)

    ticker:        str
    company_name:  str
    sector:        str
    current_price: float
    inputs:        dict[str, Any]
    trailing:      TrailingReturns = TrailingReturns()

    @field_validator("ticker")
    @classmethod
    def validate_ticker(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("ticker must not be empty.")
        return v

    @field_validator("current_price")
    @classmethod
    def validate_current_price(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError(f"current_price must be finite and > 0, got {v}.")
        return v


class ScoredEntity(BaseModel):
    """A ``UniverseEntity`` with its one-day projection.

    Attributes:
        entity:                  The scored entity (unchanged).
        predicted_1d_growth_pct: Composite growth in percent points, 3 dp.
        predicted_price:         ``current_price * (1 + growth/100)``, 2 dp.
    """

    model_config = ConfigDict(frozen=True)

    entity:                  UniverseEntity
    predicted_1d_growth_pct: float
    predicted_price:         float

    @property
    def ticker(self) -> str:
        return self.entity.ticker

    @property
    def sector(self) -> str:
        return self.entity.sector
