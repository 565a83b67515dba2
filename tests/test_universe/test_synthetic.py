"""
Tests for stock_check/universe/synthetic.py.

What we test
------------
make_ticker() / company_name():
  - Positional base-26 encoding, 3 letters then 4.
  - Suffix chosen by first letter.
  - Out-of-range index raises ValueError.

generate_universe():
  - Same (seed, size) → deep-equal lists; different seeds differ.
  - Exactly ``size`` entities with unique tickers in index order.
  - Every entity carries all 43 raw input fields.
  - Prices in [2, 800]; sectors from SECTORS; trailing returns in bounds.
  - Macro inputs are shared across the whole universe.
  - size below 1000 raises ValueError.
"""

from __future__ import annotations

import pytest

from stock_check.factors.normalize import INPUT_FIELDS
from stock_check.universe.synthetic import (
    MAX_UNIVERSE_SIZE,
    SECTORS,
    company_name,
    generate_universe,
    make_ticker,
)

_MACRO_FIELDS = (
    "market_breadth", "vix_direction_5d", "treasury_yield_trend_10y",
    "dollar_index_trend_dxy", "fed_liquidity_proxy",
    "economic_surprise_index", "risk_on_off_composite",
)


@pytest.fixture(scope="module")
def universe():
    return generate_universe(42, 1000)


# ── Naming ────────────────────────────────────────────────────────────────────


class TestMakeTicker:
    @pytest.mark.parametrize(
        "index,expected",
        [(0, "AAA"), (1, "AAB"), (25, "AAZ"), (26, "ABA"), (675, "AZZ"),
         (676, "BAA"), (17575, "ZZZ"), (17576, "AAAA"), (17577, "AAAB")],
    )
    def test_encoding(self, index: int, expected: str) -> None:
        assert make_ticker(index) == expected

    def test_last_index(self) -> None:
        assert make_ticker(MAX_UNIVERSE_SIZE - 1) == "ZZZZ"

    @pytest.mark.parametrize("index", [-1, MAX_UNIVERSE_SIZE])
    def test_out_of_range(self, index: int) -> None:
        with pytest.raises(ValueError):
            make_ticker(index)


def test_company_name_suffix() -> None:
    assert company_name("AAA") == "AAA Systems"     # ord('A') % 8 == 1
    assert company_name("BCD") == "BCD Labs"        # ord('B') % 8 == 2
    assert company_name("HXY") == "HXY Holdings"    # ord('H') % 8 == 0


# ── generate_universe ─────────────────────────────────────────────────────────


def test_deterministic(universe) -> None:
    assert generate_universe(42, 1000) == universe


def test_different_seed_differs(universe) -> None:
    other = generate_universe(43, 1000)
    assert [e.current_price for e in other] != [e.current_price for e in universe]


def test_size_and_unique_tickers(universe) -> None:
    assert len(universe) == 1000
    tickers = [e.ticker for e in universe]
    assert len(set(tickers)) == 1000
    assert tickers[:3] == ["AAA", "AAB", "AAC"]


def test_all_input_fields_present(universe) -> None:
    for entity in universe[:50]:
        assert set(entity.inputs) == set(INPUT_FIELDS)


def test_value_bounds(universe) -> None:
    for e in universe:
        assert 2.0 <= e.current_price <= 800.0
        assert e.sector in SECTORS
        assert -40.0 <= e.trailing.m3 <= 80.0
        assert -60.0 <= e.trailing.m6 <= 140.0
        assert -80.0 <= e.trailing.m12 <= 260.0
        assert 5.0 <= e.inputs["rsi"] <= 95.0
        assert 0.4 <= e.inputs["volume_surge_ratio"] <= 3.0


def test_macro_shared_across_universe(universe) -> None:
    first = {f: universe[0].inputs[f] for f in _MACRO_FIELDS}
    for e in universe:
        assert {f: e.inputs[f] for f in _MACRO_FIELDS} == first


def test_sector_diversity(universe) -> None:
    assert len({e.sector for e in universe}) == len(SECTORS)


def test_prefix_stable_across_sizes(universe) -> None:
    # Entities are drawn in index order, so a larger universe extends a smaller one.
    bigger = generate_universe(42, 1010)
    assert bigger[:1000] == universe


def test_size_below_minimum_raises() -> None:
    with pytest.raises(ValueError):
        generate_universe(42, 999)
