"""
Factor registry for the Stock Check v1.2 composite model.

This module is the single source of truth for the 43 factors that make up the
composite growth score.  The normalizer produces one value per ``Factor.key``
and the scorer weights them by ``Factor.weight_pct``; both iterate this
registry, so its order is the factor order everywhere.

The table is locked: ids run 1..43 in declaration order and weights sum to
exactly 100.0.  ``validate_registry()`` asserts both and runs at import time.

Groups
------
I     Momentum & Price Structure             18%
II    Earnings & Revenue Acceleration        16%
III   Options & Flow Signals                 14%
IV    Volatility Structure                   10%
V     Relative Strength & Sector Rotation    12%
VI    Liquidity & Institutional Behavior     10%
VII   Risk Compression & Acceleration        10%
VIII  Macro Overlay Inputs                   10%
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Factor:
    """One locked factor.

    Attributes:
        id:         Ordinal 1..43, equal to position in ``FACTORS`` + 1.
        key:        Stable snake_case identifier, e.g. ``"momentum_5d"``.
        name:       Display name.
        definition: One-line description of what the factor measures.
        weight_pct: Weight in percent of the composite (all sum to 100).
        group:      Roman-numeral group label (``"I"`` .. ``"VIII"``).
    """

    id: int
    key: str
    name: str
    definition: str
    weight_pct: float
    group: str


GROUP_NAMES: dict[str, str] = {
    "I":    "Momentum & Price Structure",
    "II":   "Earnings & Revenue Acceleration",
    "III":  "Options & Flow Signals",
    "IV":   "Volatility Structure",
    "V":    "Relative Strength & Sector Rotation",
    "VI":   "Liquidity & Institutional Behavior",
    "VII":  "Risk Compression & Acceleration",
    "VIII": "Macro Overlay Inputs",
}


# ── Registry ──────────────────────────────────────────────────────────────────

FACTORS: tuple[Factor, ...] = (

    # ── I. Momentum & Price Structure ──────────────────────────────────────
    Factor(1,  "momentum_5d",      "5-Day Momentum",          "% change over 5 trading days", 2.0, "I"),
    Factor(2,  "momentum_10d",     "10-Day Momentum",         "% change over 10 days",        2.0, "I"),
    Factor(3,  "momentum_20d",     "20-Day Momentum",         "% change over 20 days",        2.0, "I"),
    Factor(4,  "trend_pos_50dma",  "50-Day Trend Position",   "% above/below 50DMA",          2.5, "I"),
    Factor(5,  "trend_pos_200dma", "200-Day Trend Position",  "% above/below 200DMA",         2.5, "I"),
    Factor(6,  "rsi_compression",  "RSI Compression",         "RSI normalized 0–100",         2.0, "I"),
    Factor(7,  "macd_slope",       "MACD Slope",              "Rate of change of MACD",       2.0, "I"),
    Factor(8,  "breakout_velocity", "Breakout Velocity",      "Distance from 30-day high",    3.0, "I"),

    # ── II. Earnings & Revenue Acceleration ────────────────────────────────
    Factor(9,  "eps_yoy_growth",            "EPS YoY Growth",            "Year-over-year EPS growth",   3.0, "II"),
    Factor(10, "eps_qoq_accel",             "EPS QoQ Acceleration",      "Sequential EPS acceleration", 3.0, "II"),
    Factor(11, "rev_yoy_growth",            "Revenue YoY Growth",        "Revenue growth YoY",          3.0, "II"),
    Factor(12, "rev_qoq_accel",             "Revenue QoQ Acceleration",  "Sequential revenue change",   3.0, "II"),
    Factor(13, "earnings_surprise",         "Earnings Surprise",         "% beat vs estimates",         2.0, "II"),
    Factor(14, "forward_guidance_revision", "Forward Guidance Revision", "Net analyst revisions",       2.0, "II"),

    # ── III. Options & Flow Signals ────────────────────────────────────────
    Factor(15, "call_put_ratio",           "Call/Put Volume Ratio",    "Bullish flow bias",        3.0, "III"),
    Factor(16, "unusual_options_activity", "Unusual Options Activity", "Z-score abnormal flow",    3.0, "III"),
    Factor(17, "open_interest_expansion",  "Open Interest Expansion",  "OI growth %",              2.0, "III"),
    Factor(18, "dark_pool_flow_bias",      "Dark Pool Flow Bias",      "Institutional net prints", 3.0, "III"),
    Factor(19, "block_trade_accumulation", "Block Trade Accumulation", "Large trade clustering",   3.0, "III"),

    # ── IV. Volatility Structure ───────────────────────────────────────────
    Factor(20, "iv_rank",                "Implied Volatility Rank", "IV percentile",    2.5, "IV"),
    Factor(21, "iv_skew",                "IV Skew",                 "Call vs put skew", 2.0, "IV"),
    Factor(22, "volatility_compression", "Volatility Compression",  "Bollinger width",  2.5, "IV"),
    Factor(23, "atr_expansion",          "ATR Expansion",           "ATR vs baseline",  3.0, "IV"),

    # ── V. Relative Strength & Sector Rotation ─────────────────────────────
    Factor(24, "rel_strength_spy",        "Relative Strength vs SPY",        "20-day relative return",      3.0, "V"),
    Factor(25, "rel_strength_sector_etf", "Relative Strength vs Sector ETF", "Relative sector performance", 3.0, "V"),
    Factor(26, "sector_momentum_rank",    "Sector Momentum Rank",            "Sector percentile",           3.0, "V"),
    Factor(27, "cross_sector_rotation",   "Cross-Sector Capital Rotation",   "ETF flow signals",            3.0, "V"),

    # ── VI. Liquidity & Institutional Behavior ─────────────────────────────
    Factor(28, "volume_surge_ratio",             "Volume Surge Ratio",             "Volume vs 30-day avg",     3.0, "VI"),
    Factor(29, "institutional_ownership_change", "Institutional Ownership Change", "QoQ change",               2.5, "VI"),
    Factor(30, "insider_buying_activity",        "Insider Buying Activity",        "Net insider accumulation", 2.5, "VI"),
    Factor(31, "short_interest_compression",     "Short Interest Compression",     "Days-to-cover trend",      2.0, "VI"),

    # ── VII. Risk Compression & Acceleration ───────────────────────────────
    Factor(32, "beta_adjustment",           "Beta Adjustment",           "Risk-normalized return",  2.0, "VII"),
    Factor(33, "downside_deviation",        "Downside Deviation",        "30-day downside risk",    2.0, "VII"),
    Factor(34, "price_gap_frequency",       "Price Gap Frequency",       "Positive gaps",           2.0, "VII"),
    Factor(35, "accumulation_distribution", "Accumulation/Distribution", "Money flow trend",        2.0, "VII"),
    Factor(36, "acceleration_curve_fit",    "Acceleration Curve Fit",    "2nd derivative momentum", 2.0, "VII"),

    # ── VIII. Macro Overlay Inputs ─────────────────────────────────────────
    Factor(37, "market_breadth",          "Market Breadth",               "Adv/Decline ratio",    2.0, "VIII"),
    Factor(38, "vix_direction",           "VIX Direction",                "5-day VIX trend",      2.0, "VIII"),
    Factor(39, "treasury_yield_trend",    "Treasury Yield Trend",         "10Y trend",            2.0, "VIII"),
    Factor(40, "dollar_index_trend",      "Dollar Index Trend",           "DXY trend",            1.5, "VIII"),
    Factor(41, "fed_liquidity_proxy",     "Fed Liquidity Proxy",          "Balance sheet change", 1.5, "VIII"),
    Factor(42, "economic_surprise_index", "Economic Surprise Index",      "Macro surprise",       0.5, "VIII"),
    Factor(43, "risk_on_off_composite",   "Risk-On / Risk-Off Composite", "Cross-asset signal",   0.5, "VIII"),
)

FACTOR_COUNT = 43
WEIGHT_TOTAL_PCT = 100.0


# ── Query helpers ─────────────────────────────────────────────────────────────


def factor_keys(group: str | None = None) -> list[str]:
    """Return factor keys in registry order, optionally filtered to a group."""
    if group is None:
        return [f.key for f in FACTORS]
    return [f.key for f in FACTORS if f.group == group]


def get_factor(key: str) -> Factor:
    """Return the Factor for ``key``.

    Raises:
        KeyError: If ``key`` is not in the registry.
    """
    for factor in FACTORS:
        if factor.key == key:
            return factor
    raise KeyError(f"Factor '{key}' not found in FACTORS.")


def factor_groups() -> list[str]:
    """Return unique group labels in registry order (no duplicates)."""
    seen: set[str] = set()
    result: list[str] = []
    for f in FACTORS:
        if f.group not in seen:
            seen.add(f.group)
            result.append(f.group)
    return result


def group_weight_pct(group: str) -> float:
    """Sum of weights for one group."""
    return math.fsum(f.weight_pct for f in FACTORS if f.group == group)


def total_weight_pct() -> float:
    """Sum of all factor weights (always 100.0 for the locked table)."""
    return math.fsum(f.weight_pct for f in FACTORS)


def validate_registry() -> None:
    """Assert the locked-table invariants.

    Raises:
        ValueError: If ids are not 1..43 in order, keys repeat, or the
            weights do not sum to 100.
    """
    ids = [f.id for f in FACTORS]
    if ids != list(range(1, FACTOR_COUNT + 1)):
        raise ValueError(f"Factor ids must be 1..{FACTOR_COUNT} in order, got {ids}.")
    keys = [f.key for f in FACTORS]
    if len(set(keys)) != len(keys):
        raise ValueError("Factor keys must be unique.")
    total = total_weight_pct()
    if abs(total - WEIGHT_TOTAL_PCT) > 1e-6:
        raise ValueError(f"Factor weights must sum to {WEIGHT_TOTAL_PCT}, got {total}.")


validate_registry()
