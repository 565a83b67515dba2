"""
Tests for stock_check/ranking/ranker.py.

Entities are built with ``entity_factory`` (see conftest): every factor of
an entity built at ``level`` normalizes to ``level``, so its growth is
``-0.5 + 2 * level`` percent.

What we test
------------
rank_universe():
  - Top 10 sorted descending by rounded growth; ranks 1..10 then None.
  - Ties keep universe order (stable sort).
  - Append ticker present → duplicated as row 11 even if already ranked.
  - Append ticker absent → deterministic placeholder ("Intel Corporation").
  - Fewer than 10 entities → ValueError.
  - Entities are never mutated; prices and growth rounded as displayed.

Gate:
  - trade_header_for thresholds (mean >= 0.5 AND sample stdev >= 0.6).
  - mean_and_dispersion edge cases (empty, single value).
  - sector_concentration at 6 vs 7 of one sector.
"""

from __future__ import annotations

import pytest

from stock_check.ranking.ranker import (
    PLACEHOLDER_PRICE,
    mean_and_dispersion,
    placeholder_entity,
    rank_universe,
    score_entity,
    sector_concentration,
    trade_header_for,
)


@pytest.fixture
def ladder(entity_factory):
    """Twelve entities with strictly increasing growth: T00 worst, T11 best."""
    return [entity_factory(f"T{i:02d}", level=0.2 + 0.05 * i) for i in range(12)]


# ── Scoring ───────────────────────────────────────────────────────────────────


class TestScoreEntity:
    def test_growth_and_price(self, entity_factory) -> None:
        scored = score_entity(entity_factory("AAA", level=0.75, price=100.0))
        assert scored.predicted_1d_growth_pct == pytest.approx(1.0)
        assert scored.predicted_price == 101.0

    def test_does_not_mutate_entity(self, entity_factory) -> None:
        entity = entity_factory("AAA", level=0.6)
        before = entity.model_dump()
        score_entity(entity)
        assert entity.model_dump() == before


# ── rank_universe ─────────────────────────────────────────────────────────────


class TestRankUniverse:
    def test_top10_sorted_descending(self, ladder) -> None:
        outcome = rank_universe(ladder)
        assert [s.ticker for s in outcome.top10] == [f"T{i:02d}" for i in range(11, 1, -1)]
        growths = [s.predicted_1d_growth_pct for s in outcome.top10]
        assert growths == sorted(growths, reverse=True)
        assert outcome.universe_size == 12

    def test_rows_ranks_and_length(self, ladder) -> None:
        rows = rank_universe(ladder).to_rows()
        assert len(rows) == 11
        assert [r.rank for r in rows] == list(range(1, 11)) + [None]

    def test_ties_keep_universe_order(self, entity_factory) -> None:
        flat = [entity_factory(f"E{i:02d}", level=0.5) for i in range(15)]
        outcome = rank_universe(flat)
        assert [s.ticker for s in outcome.top10] == [f"E{i:02d}" for i in range(10)]

    def test_placeholder_when_append_ticker_absent(self, ladder) -> None:
        outcome = rank_universe(ladder)
        row = outcome.to_rows()[-1]
        assert row.ticker == "INTC"
        assert row.company_name == "Intel Corporation"
        assert row.sector == "Technology"
        assert row.current_price == PLACEHOLDER_PRICE
        assert row.rank is None

    def test_present_append_ticker_is_duplicated(self, ladder, entity_factory) -> None:
        universe = ladder + [entity_factory("INTC", level=0.95, sector="Technology")]
        rows = rank_universe(universe).to_rows()
        assert rows[0].ticker == "INTC"
        assert rows[-1].ticker == "INTC"
        assert rows[-1].rank is None
        assert rows[-1].predicted_1d_growth_pct == rows[0].predicted_1d_growth_pct

    def test_present_append_ticker_outside_top10(self, ladder, entity_factory) -> None:
        universe = [entity_factory("INTC", level=0.0)] + ladder
        outcome = rank_universe(universe)
        assert "INTC" not in [s.ticker for s in outcome.top10]
        assert outcome.appended.ticker == "INTC"
        assert outcome.appended.entity.company_name == "INTC Holdings"

    def test_custom_append_ticker(self, ladder) -> None:
        outcome = rank_universe(ladder, append_ticker=" spy ")
        assert outcome.appended.ticker == "SPY"
        assert outcome.appended.sector == "Unknown"

    def test_too_small_universe_raises(self, entity_factory) -> None:
        with pytest.raises(ValueError):
            rank_universe([entity_factory(f"E{i}") for i in range(9)])

    def test_sector_warning_from_top10(self, entity_factory) -> None:
        universe = [
            entity_factory(f"E{i:02d}", level=0.9 - 0.01 * i,
                           sector="Energy" if i < 7 else "Utilities")
            for i in range(12)
        ]
        assert rank_universe(universe).sector_warning is True


def test_placeholder_is_deterministic() -> None:
    assert placeholder_entity() == placeholder_entity()
    assert score_entity(placeholder_entity()) == score_entity(placeholder_entity())


# ── Gate ──────────────────────────────────────────────────────────────────────


class TestTradeHeader:
    def test_trade_at_both_thresholds(self) -> None:
        # mean exactly 0.5, sample stdev ≈ 1.054
        assert trade_header_for([1.5] * 5 + [-0.5] * 5) == "TRADE"

    def test_no_dispersion(self) -> None:
        assert trade_header_for([1.0] * 10) == "NO TRADE"

    def test_low_mean(self) -> None:
        assert trade_header_for([1.4] * 5 + [-0.6] * 5) == "NO TRADE"

    def test_empty_and_single(self) -> None:
        assert trade_header_for([]) == "NO TRADE"
        assert trade_header_for([5.0]) == "NO TRADE"


def test_mean_and_dispersion_edges() -> None:
    assert mean_and_dispersion([]) == (0.0, 0.0)
    assert mean_and_dispersion([2.0]) == (2.0, 0.0)
    avg, disp = mean_and_dispersion([1.0, 3.0])
    assert avg == 2.0
    assert disp == pytest.approx(1.41421356, rel=1e-6)


class TestSectorConcentration:
    def test_seven_of_one_sector_warns(self) -> None:
        assert sector_concentration(["Technology"] * 7 + ["Energy"] * 3) is True

    def test_six_does_not_warn(self) -> None:
        assert sector_concentration(["Technology"] * 6 + ["Energy"] * 4) is False

    def test_empty(self) -> None:
        assert sector_concentration([]) is False
