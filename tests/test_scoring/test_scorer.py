"""
Tests for stock_check/scoring/scorer.py.

What we test
------------
score_growth_pct():
  - All-neutral vector → +0.5%; all-ones → +1.5%; all-zeros → -0.5%.
  - Missing / non-finite keys count as 0.5 (never skipped).
  - Values outside [0, 1] are clamped before weighting.

factor_contributions():
  - One entry per factor, in registry order.
  - Deltas sum back to the composite score.

project_price() / round_growth():
  - Price projection and rounding precision.
"""

from __future__ import annotations

import math

import pytest

from stock_check.factors.normalize import normalize_inputs
from stock_check.factors.registry import factor_keys
from stock_check.scoring.scorer import (
    factor_contributions,
    project_price,
    round_growth,
    score_growth_pct,
)


def _vector(value: float) -> dict[str, float]:
    return {k: value for k in factor_keys()}


class TestScoreGrowthPct:
    def test_neutral_vector(self) -> None:
        assert score_growth_pct(_vector(0.5)) == pytest.approx(0.5)

    def test_range_endpoints(self) -> None:
        assert score_growth_pct(_vector(1.0)) == pytest.approx(1.5)
        assert score_growth_pct(_vector(0.0)) == pytest.approx(-0.5)

    def test_empty_mapping_counts_as_neutral(self) -> None:
        assert score_growth_pct({}) == pytest.approx(0.5)

    def test_single_factor_moves_score_by_its_weight(self) -> None:
        # momentum_5d weighs 2%: 0.5 → 1.0 adds 2 * 0.5 * 0.02 = 0.02
        assert score_growth_pct({"momentum_5d": 1.0}) == pytest.approx(0.52)

    def test_non_finite_counts_as_neutral(self) -> None:
        assert score_growth_pct({"momentum_5d": math.nan}) == pytest.approx(0.5)
        assert score_growth_pct({"momentum_5d": "x"}) == pytest.approx(0.5)

    def test_out_of_range_is_clamped(self) -> None:
        assert score_growth_pct({"momentum_5d": 5.0}) == pytest.approx(0.52)
        assert score_growth_pct({"momentum_5d": -5.0}) == pytest.approx(0.48)

    def test_composes_with_normalizer(self) -> None:
        assert score_growth_pct(normalize_inputs({})) == pytest.approx(0.5)


class TestFactorContributions:
    def test_one_per_factor_in_order(self) -> None:
        contribs = factor_contributions({})
        assert [c.key for c in contribs] == factor_keys()
        assert all(c.growth_delta_pct == pytest.approx(0.0) for c in contribs)

    def test_deltas_reconstruct_score(self) -> None:
        normalized = {k: (i % 5) / 4 for i, k in enumerate(factor_keys())}
        total = 0.5 + sum(c.growth_delta_pct for c in factor_contributions(normalized))
        assert total == pytest.approx(score_growth_pct(normalized))


def test_project_price() -> None:
    assert project_price(100.0, 1.0) == 101.0
    assert project_price(40.0, -0.5) == 39.8


def test_round_growth() -> None:
    assert round_growth(0.1236) == 0.124
    assert round_growth(-0.49951) == -0.5
