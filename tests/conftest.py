"""
Shared pytest fixtures for the Stock Check test suite.

Provides:
  - ``clean_env``: removes STOCK_CHECK_* overrides and the Alpha Vantage key
    so tests never see the developer's shell environment.
  - ``mock_run``: one MOCK run (seed 42, size 1200) shared by the session.
  - ``inputs_at_level`` / ``make_entity``: builders for entities whose
    normalized factors all sit at a chosen level in [0, 1].
"""

from __future__ import annotations

from typing import Callable

import pytest

from stock_check.factors.normalize import NORMALIZATION_RULES, NormPolicy
from stock_check.models.run import RunResult
from stock_check.models.universe import TrailingReturns, UniverseEntity
from stock_check.pipeline.run import run_model

_ENV_VARS = (
    "STOCK_CHECK_DATA_MODE",
    "STOCK_CHECK_MOCK_SEED",
    "STOCK_CHECK_MOCK_UNIVERSE_SIZE",
    "STOCK_CHECK_LOG_LEVEL",
    "STOCK_CHECK_DEBUG",
    "ALPHA_VANTAGE_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ── Entity builders ───────────────────────────────────────────────────────────

def inputs_at_level(level: float) -> dict[str, float]:
    """Raw inputs that normalize to exactly ``level`` for every factor.

    The composite growth of such an entity is ``-0.5 + 2 * level``.
    """
    inputs: dict[str, float] = {}
    for rule in NORMALIZATION_RULES:
        lo, hi = rule.bound_lo, rule.bound_hi
        if rule.policy == NormPolicy.CENTERED:
            inputs[rule.input_field] = (2.0 * level - 1.0) * abs(hi)
        elif rule.policy == NormPolicy.INVERTED:
            inputs[rule.input_field] = lo + (1.0 - level) * (hi - lo)
        else:
            inputs[rule.input_field] = lo + level * (hi - lo)
    return inputs


def make_entity(
    ticker: str = "AAA",
    level: float = 0.5,
    sector: str = "Technology",
    price: float = 100.0,
) -> UniverseEntity:
    return UniverseEntity(
        ticker=ticker,
        company_name=f"{ticker} Holdings",
        sector=sector,
        current_price=price,
        inputs=inputs_at_level(level),
        trailing=TrailingReturns(m3=1.0, m6=2.0, m12=3.0),
    )


@pytest.fixture
def entity_factory() -> Callable[..., UniverseEntity]:
    return make_entity


# ── Shared MOCK run ───────────────────────────────────────────────────────────

MOCK_CONFIG = {"data_mode": "MOCK", "mock_seed": 42, "mock_universe_size": 1200}


@pytest.fixture(scope="session")
def mock_run() -> RunResult:
    """MOCK run: seed 42, size 1200, 2026-01-01 → 2026-01-02."""
    return run_model(MOCK_CONFIG, "2026-01-01", "2026-01-02")
