"""
Raw-input → normalized factor vector.

Each factor reads exactly one raw input field and maps it onto [0, 1] with
one of three policies:

  LINEAR    ``[lo, hi] → [0, 1]`` with clamping.
  CENTERED  ``[-|b|, +|b|] → [0, 1]``; a raw 0 lands on 0.5.
  INVERTED  ``1 - LINEAR`` for signals where a lower raw value is better
            (distance from high, Bollinger width, downside deviation,
            rising VIX, a strengthening dollar).

Malformed input is never an error.  Missing fields, ``None``, booleans,
non-numeric strings, NaN and ±inf all normalize to the neutral 0.5, as do
degenerate bounds (``lo == hi`` or non-finite).  The output is always a
read-only mapping with all 43 factor keys.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from stock_check.factors.registry import FACTORS

NEUTRAL = 0.5


class NormPolicy(StrEnum):
    LINEAR = "linear"
    CENTERED = "centered"
    INVERTED = "inverted"


@dataclass(frozen=True)
class NormalizationRule:
    """How one factor is derived from one raw input field.

    For ``CENTERED`` only ``bound_hi`` is used (as the half-width).
    """

    factor_key: str
    input_field: str
    policy: NormPolicy
    bound_lo: float
    bound_hi: float


# ── Scalers ───────────────────────────────────────────────────────────────────


def _to_float(value: Any) -> Optional[float]:
    """Finite float or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def norm_linear(value: Any, lo: float, hi: float) -> float:
    """Scale ``value`` from ``[lo, hi]`` onto [0, 1], clamped."""
    v = _to_float(value)
    if v is None:
        return NEUTRAL
    if not (math.isfinite(lo) and math.isfinite(hi)) or hi == lo:
        return NEUTRAL
    return clamp((v - lo) / (hi - lo), 0.0, 1.0)


def norm_centered(value: Any, bound: float) -> float:
    """Scale ``value`` from ``[-|bound|, +|bound|]`` onto [0, 1]."""
    v = _to_float(value)
    if v is None:
        return NEUTRAL
    hi = abs(bound)
    lo = -hi
    return norm_linear(clamp(v, lo, hi), lo, hi)


def norm_inverted(value: Any, lo: float, hi: float) -> float:
    """``1 - norm_linear``; malformed input still yields 0.5."""
    return 1.0 - norm_linear(value, lo, hi)


# ── Rule table ────────────────────────────────────────────────────────────────

_L, _C, _I = NormPolicy.LINEAR, NormPolicy.CENTERED, NormPolicy.INVERTED

NORMALIZATION_RULES: tuple[NormalizationRule, ...] = (
    # I
    NormalizationRule("momentum_5d",               "momentum_5d_pct",               _C, -8.0,   8.0),
    NormalizationRule("momentum_10d",              "momentum_10d_pct",              _C, -12.0,  12.0),
    NormalizationRule("momentum_20d",              "momentum_20d_pct",              _C, -18.0,  18.0),
    NormalizationRule("trend_pos_50dma",           "trend_pos_50dma_pct",           _C, -25.0,  25.0),
    NormalizationRule("trend_pos_200dma",          "trend_pos_200dma_pct",          _C, -40.0,  40.0),
    NormalizationRule("rsi_compression",           "rsi",                           _L, 0.0,    100.0),
    NormalizationRule("macd_slope",                "macd_slope",                    _C, -3.0,   3.0),
    NormalizationRule("breakout_velocity",         "breakout_velocity",             _I, -30.0,  30.0),
    # II
    NormalizationRule("eps_yoy_growth",            "eps_yoy_growth_pct",            _C, -150.0, 150.0),
    NormalizationRule("eps_qoq_accel",             "eps_qoq_accel_pct",             _C, -100.0, 100.0),
    NormalizationRule("rev_yoy_growth",            "rev_yoy_growth_pct",            _C, -120.0, 120.0),
    NormalizationRule("rev_qoq_accel",             "rev_qoq_accel_pct",             _C, -100.0, 100.0),
    NormalizationRule("earnings_surprise",         "earnings_surprise_pct",         _C, -30.0,  30.0),
    NormalizationRule("forward_guidance_revision", "forward_guidance_revision",     _C, -6.0,   6.0),
    # III
    NormalizationRule("call_put_ratio",            "call_put_ratio",                _L, 0.2,    3.5),
    NormalizationRule("unusual_options_activity",  "unusual_options_z",             _C, -5.0,   5.0),
    NormalizationRule("open_interest_expansion",   "open_interest_expansion_pct",   _C, -70.0,  70.0),
    NormalizationRule("dark_pool_flow_bias",       "dark_pool_flow_bias",           _C, -3.5,   3.5),
    NormalizationRule("block_trade_accumulation",  "block_trade_accumulation",      _C, -3.5,   3.5),
    # IV
    NormalizationRule("iv_rank",                   "iv_rank_pct",                   _L, 0.0,    100.0),
    NormalizationRule("iv_skew",                   "iv_skew",                       _C, -2.5,   2.5),
    NormalizationRule("volatility_compression",    "vol_compression",               _I, 0.05,   1.2),
    NormalizationRule("atr_expansion",             "atr_expansion",                 _L, 0.3,    2.8),
    # V
    NormalizationRule("rel_strength_spy",          "rel_strength_spy_20d",          _C, -25.0,  25.0),
    NormalizationRule("rel_strength_sector_etf",   "rel_strength_sector_etf",       _C, -30.0,  30.0),
    NormalizationRule("sector_momentum_rank",      "sector_momentum_rank",          _L, 0.0,    100.0),
    NormalizationRule("cross_sector_rotation",     "cross_sector_capital_rotation", _C, -3.5,   3.5),
    # VI
    NormalizationRule("volume_surge_ratio",        "volume_surge_ratio",            _L, 0.4,    3.0),
    NormalizationRule("institutional_ownership_change", "inst_ownership_change_qoq", _C, -7.0,  7.0),
    NormalizationRule("insider_buying_activity",   "insider_buying_activity",       _C, -6.0,   6.0),
    NormalizationRule("short_interest_compression", "short_interest_compression",   _C, -3.5,   3.5),
    # VII
    NormalizationRule("beta_adjustment",           "beta_adjustment",               _C, -3.5,   3.5),
    NormalizationRule("downside_deviation",        "downside_deviation_30d",        _I, 0.4,    4.0),
    NormalizationRule("price_gap_frequency",       "price_gap_frequency",           _C, -3.5,   3.5),
    NormalizationRule("accumulation_distribution", "accumulation_distribution",     _C, -3.5,   3.5),
    NormalizationRule("acceleration_curve_fit",    "acceleration_curve_fit",        _C, -3.5,   3.5),
    # VIII
    NormalizationRule("market_breadth",            "market_breadth",                _L, 0.3,    1.8),
    NormalizationRule("vix_direction",             "vix_direction_5d",              _I, -3.5,   3.5),
    NormalizationRule("treasury_yield_trend",      "treasury_yield_trend_10y",      _C, -3.5,   3.5),
    NormalizationRule("dollar_index_trend",        "dollar_index_trend_dxy",        _I, -3.5,   3.5),
    NormalizationRule("fed_liquidity_proxy",       "fed_liquidity_proxy",           _C, -2.5,   2.5),
    NormalizationRule("economic_surprise_index",   "economic_surprise_index",       _C, -5.0,   5.0),
    NormalizationRule("risk_on_off_composite",     "risk_on_off_composite",         _C, -5.0,   5.0),
)

# Raw input field names, in factor order.
INPUT_FIELDS: tuple[str, ...] = tuple(r.input_field for r in NORMALIZATION_RULES)

if tuple(r.factor_key for r in NORMALIZATION_RULES) != tuple(f.key for f in FACTORS):
    raise RuntimeError("NORMALIZATION_RULES must cover FACTORS one-to-one, in order.")


def apply_rule(rule: NormalizationRule, value: Any) -> float:
    """Normalize a single raw value with ``rule``."""
    if rule.policy == NormPolicy.CENTERED:
        return norm_centered(value, rule.bound_hi)
    if rule.policy == NormPolicy.INVERTED:
        return norm_inverted(value, rule.bound_lo, rule.bound_hi)
    return norm_linear(value, rule.bound_lo, rule.bound_hi)


def normalize_inputs(raw: Optional[Mapping[str, Any]]) -> Mapping[str, float]:
    """Map a raw input vector onto the 43 normalized factor values.

    Args:
        raw: Raw input mapping keyed by ``INPUT_FIELDS``.  ``None`` or a
            partial mapping is accepted; absent fields are neutral.

    Returns:
        Read-only mapping of factor key → value in [0, 1], in factor order.
    """
    source: Mapping[str, Any] = raw or {}
    values = {
        rule.factor_key: apply_rule(rule, source.get(rule.input_field))
        for rule in NORMALIZATION_RULES
    }
    return MappingProxyType(values)
