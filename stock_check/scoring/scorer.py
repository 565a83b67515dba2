"""
Composite scoring: normalized factor vector → projected 1-day growth (%).

Score formula
-------------
    avg01  = Σ(clamp(n[f.key], 0, 1) × f.weight_pct) / Σ f.weight_pct
    growth = GROWTH_FLOOR_PCT + avg01 × GROWTH_SPAN_PCT

so ``growth`` lies in [-0.5, +1.5] percentage points and an all-neutral
vector (every factor 0.5) projects +0.5%.

Every factor in the registry participates.  A key that is missing from the
vector, or holds a non-finite value, counts as 0.5; it is never skipped
(skipping would silently re-weight the remaining factors).

Price projection
----------------
    predicted_price = current_price × (1 + growth / 100)

Growth is reported rounded to 3 dp and price to 2 dp; ranking sorts on the
rounded growth.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from stock_check.factors.normalize import NEUTRAL, clamp
from stock_check.factors.registry import FACTORS

GROWTH_FLOOR_PCT = -0.5
GROWTH_SPAN_PCT = 2.0

GROWTH_DECIMALS = 3
PRICE_DECIMALS = 2


@dataclass(frozen=True)
class FactorContribution:
    """One factor's share of a composite score.

    Attributes:
        key:              Factor key.
        name:             Factor display name.
        group:            Factor group label.
        weight_pct:       Factor weight (percent of composite).
        normalized:       Value used in the sum, in [0, 1] (0.5 if missing).
        growth_delta_pct: Percentage points this factor moves growth away
            from the all-neutral +0.5%.  Summing all deltas and adding 0.5
            reproduces ``score_growth_pct``.
    """

    key: str
    name: str
    group: str
    weight_pct: float
    normalized: float
    growth_delta_pct: float


def _effective_value(normalized: Mapping[str, Any], key: str) -> float:
    value = normalized.get(key)
    try:
        v = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return NEUTRAL
    if isinstance(value, bool) or not math.isfinite(v):
        return NEUTRAL
    return clamp(v, 0.0, 1.0)


def score_growth_pct(normalized: Mapping[str, Any]) -> float:
    """Compute the unrounded projected 1-day growth in percentage points.

    Args:
        normalized: Factor key → value mapping, as returned by
            ``normalize_inputs()``.

    Returns:
        Growth in [-0.5, +1.5].
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for factor in FACTORS:
        weighted_sum += _effective_value(normalized, factor.key) * factor.weight_pct
        total_weight += factor.weight_pct

    avg01 = weighted_sum / total_weight if total_weight else NEUTRAL
    return GROWTH_FLOOR_PCT + avg01 * GROWTH_SPAN_PCT


def factor_contributions(normalized: Mapping[str, Any]) -> list[FactorContribution]:
    """Break a composite score down by factor, in registry order."""
    total_weight = math.fsum(f.weight_pct for f in FACTORS)
    result: list[FactorContribution] = []
    for factor in FACTORS:
        v = _effective_value(normalized, factor.key)
        delta = GROWTH_SPAN_PCT * (v - NEUTRAL) * factor.weight_pct / total_weight
        result.append(
            FactorContribution(
                key=factor.key,
                name=factor.name,
                group=factor.group,
                weight_pct=factor.weight_pct,
                normalized=v,
                growth_delta_pct=delta,
            )
        )
    return result


def project_price(current_price: float, growth_pct: float) -> float:
    """Apply ``growth_pct`` to ``current_price``, rounded to 2 dp."""
    return round(current_price * (1.0 + growth_pct / 100.0), PRICE_DECIMALS)


def round_growth(growth_pct: float) -> float:
    return round(growth_pct, GROWTH_DECIMALS)
