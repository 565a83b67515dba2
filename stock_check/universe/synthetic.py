"""
Deterministic synthetic universe (MOCK mode).

``generate_universe(seed, size)`` returns ``size`` ``UniverseEntity`` records
whose prices, factor inputs and trailing returns are drawn from one
``RandomStream``.  The same ``(seed, size)`` always yields deep-equal lists;
nothing depends on wall-clock time or global random state.

Draw order
----------
The order of draws IS the output contract (changing it changes every entity
after the change), so it is fixed:

  1. Macro overlay, once per run, shared by every entity:
     breadth, VIX, 10Y, DXY, Fed liquidity, economic surprise, risk-on/off.
  2. Per entity, in index order:
     sector, price, momentum & price structure, earnings, options flow,
     volatility, liquidity, relative strength, risk, trailing returns.

Distributions are Irwin–Hall approximations clamped to plausible bounds
(``RandomStream.bounded``); prices are log-distributed in [2, 800].

Tickers
-------
Positional base-26, most significant letter first: indices 0..17575 map to
``AAA``..``ZZZ``, later indices to ``AAAA``, ``AAAB``, ...  Every symbol in
a universe is therefore distinct.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

from stock_check.config import MIN_MOCK_UNIVERSE_SIZE
from stock_check.models.universe import TrailingReturns, UniverseEntity
from stock_check.universe.prng import RandomStream

SECTORS: tuple[str, ...] = (
    "Technology",
    "Healthcare",
    "Financials",
    "Consumer Discretionary",
    "Consumer Staples",
    "Industrials",
    "Energy",
    "Materials",
    "Utilities",
    "Real Estate",
    "Communication Services",
)

COMPANY_SUFFIXES: tuple[str, ...] = (
    "Holdings", "Systems", "Labs", "Technologies",
    "Group", "Industries", "Networks", "Partners",
)

_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_THREE_LETTER_COUNT = 26 ** 3
MAX_UNIVERSE_SIZE = _THREE_LETTER_COUNT + 26 ** 4


# ── Naming ────────────────────────────────────────────────────────────────────


def make_ticker(index: int) -> str:
    """Return the symbol for universe position ``index``.

    Raises:
        ValueError: If ``index`` is negative or beyond ``MAX_UNIVERSE_SIZE``.
    """
    if index < 0 or index >= MAX_UNIVERSE_SIZE:
        raise ValueError(f"ticker index must be in [0, {MAX_UNIVERSE_SIZE}), got {index}.")
    if index < _THREE_LETTER_COUNT:
        value, width = index, 3
    else:
        value, width = index - _THREE_LETTER_COUNT, 4

    letters: list[str] = []
    for _ in range(width):
        value, digit = divmod(value, 26)
        letters.append(_LETTERS[digit])
    return "".join(reversed(letters))


def company_name(ticker: str) -> str:
    """``"<TICKER> <suffix>"`` with the suffix chosen by the first letter."""
    return f"{ticker} {COMPANY_SUFFIXES[ord(ticker[0]) % len(COMPANY_SUFFIXES)]}"


# ── Macro overlay ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MacroDraw:
    """Market-wide inputs drawn once per run."""

    market_breadth: float
    vix_direction_5d: float
    treasury_yield_trend_10y: float
    dollar_index_trend_dxy: float
    fed_liquidity_proxy: float
    economic_surprise_index: float
    risk_on_off_composite: float


def draw_macro(rng: RandomStream) -> MacroDraw:
    return MacroDraw(
        market_breadth=rng.bounded(1.0, 0.25, 0.3, 1.8),
        vix_direction_5d=rng.bounded(0.0, 0.8, -3.0, 3.0),
        treasury_yield_trend_10y=rng.bounded(0.0, 0.7, -3.0, 3.0),
        dollar_index_trend_dxy=rng.bounded(0.0, 0.6, -3.0, 3.0),
        fed_liquidity_proxy=rng.bounded(0.0, 0.5, -2.0, 2.0),
        economic_surprise_index=rng.bounded(0.0, 1.0, -4.0, 4.0),
        risk_on_off_composite=rng.bounded(0.0, 1.0, -4.0, 4.0),
    )


# ── Per-entity draws ──────────────────────────────────────────────────────────


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _draw_price(rng: RandomStream) -> float:
    return _clamp(math.exp(rng.bounded(3.2, 0.65, 1.0, 6.0)), 2.0, 800.0)


def _draw_trailing(rng: RandomStream) -> TrailingReturns:
    m3 = rng.bounded(8.0, 18.0, -40.0, 80.0)
    m6 = _clamp(m3 + rng.bounded(4.0, 14.0, -50.0, 90.0), -60.0, 140.0)
    m12 = _clamp(m6 + rng.bounded(6.0, 20.0, -80.0, 180.0), -80.0, 260.0)
    return TrailingReturns(m3=m3, m6=m6, m12=m12)


def _draw_inputs(rng: RandomStream, macro: MacroDraw) -> dict[str, float]:
    inputs: dict[str, float] = {}

    # Momentum & price structure
    mom5 = rng.bounded(0.4, 1.2, -5.0, 6.0)
    mom10 = _clamp(mom5 + rng.bounded(0.2, 1.0, -4.0, 6.0), -8.0, 10.0)
    mom20 = _clamp(mom10 + rng.bounded(0.3, 1.2, -6.0, 10.0), -12.0, 16.0)
    inputs["momentum_5d_pct"] = mom5
    inputs["momentum_10d_pct"] = mom10
    inputs["momentum_20d_pct"] = mom20
    inputs["trend_pos_50dma_pct"] = rng.bounded(1.2, 3.0, -12.0, 18.0)
    inputs["trend_pos_200dma_pct"] = rng.bounded(2.0, 5.0, -25.0, 30.0)
    inputs["rsi"] = rng.bounded(52.0, 12.0, 5.0, 95.0)
    inputs["macd_slope"] = rng.bounded(0.0, 0.9, -3.0, 3.0)
    inputs["breakout_velocity"] = rng.bounded(-2.0, 4.0, -25.0, 12.0)

    # Earnings & revenue
    inputs["eps_yoy_growth_pct"] = rng.bounded(10.0, 25.0, -60.0, 120.0)
    inputs["eps_qoq_accel_pct"] = rng.bounded(2.0, 10.0, -40.0, 80.0)
    inputs["rev_yoy_growth_pct"] = rng.bounded(8.0, 18.0, -40.0, 90.0)
    inputs["rev_qoq_accel_pct"] = rng.bounded(1.5, 8.0, -35.0, 70.0)
    inputs["earnings_surprise_pct"] = rng.bounded(1.0, 5.5, -20.0, 25.0)
    inputs["forward_guidance_revision"] = rng.bounded(0.0, 1.0, -4.0, 5.0)

    # Options & flow
    inputs["call_put_ratio"] = rng.bounded(1.2, 0.45, 0.2, 3.5)
    inputs["unusual_options_z"] = rng.bounded(0.0, 1.0, -2.5, 4.0)
    inputs["open_interest_expansion_pct"] = rng.bounded(4.0, 12.0, -20.0, 60.0)
    inputs["dark_pool_flow_bias"] = rng.bounded(0.0, 1.0, -3.0, 3.0)
    inputs["block_trade_accumulation"] = rng.bounded(0.0, 1.0, -3.0, 3.0)

    # Volatility structure
    inputs["iv_rank_pct"] = rng.bounded(55.0, 20.0, 1.0, 99.0)
    inputs["iv_skew"] = rng.bounded(0.0, 0.6, -2.0, 2.0)
    inputs["vol_compression"] = rng.bounded(0.35, 0.18, 0.05, 1.2)
    inputs["atr_expansion"] = rng.bounded(1.0, 0.35, 0.3, 2.8)

    # Liquidity & institutional behaviour
    inputs["volume_surge_ratio"] = _clamp(1.0 + rng.bounded(0.0, 0.35, -0.4, 1.2), 0.4, 3.0)
    inputs["inst_ownership_change_qoq"] = rng.bounded(0.2, 1.2, -4.0, 6.0)
    inputs["insider_buying_activity"] = rng.bounded(0.1, 1.0, -3.0, 5.0)
    inputs["short_interest_compression"] = rng.bounded(0.0, 0.8, -3.0, 3.0)

    # Relative strength & sector rotation
    rs_spy = rng.bounded(1.0, 4.0, -18.0, 22.0)
    inputs["rel_strength_spy_20d"] = rs_spy
    inputs["rel_strength_sector_etf"] = _clamp(rs_spy + rng.bounded(0.0, 2.2, -14.0, 16.0), -25.0, 30.0)
    inputs["sector_momentum_rank"] = rng.bounded(55.0, 18.0, 1.0, 99.0)
    inputs["cross_sector_capital_rotation"] = rng.bounded(0.0, 1.0, -3.0, 3.0)

    # Risk compression & acceleration
    inputs["beta_adjustment"] = rng.bounded(0.0, 0.9, -3.0, 3.0)
    inputs["downside_deviation_30d"] = rng.bounded(1.4, 0.45, 0.4, 4.0)
    inputs["price_gap_frequency"] = rng.bounded(0.0, 1.0, -3.0, 3.0)
    inputs["accumulation_distribution"] = rng.bounded(0.0, 1.0, -3.0, 3.0)
    inputs["acceleration_curve_fit"] = rng.bounded(0.0, 1.0, -3.0, 3.0)

    # Macro overlay (shared)
    inputs.update(asdict(macro))
    return inputs


def generate_universe(seed: int, size: int) -> list[UniverseEntity]:
    """Generate a deterministic synthetic universe.

    Args:
        seed: Integer seed; reduced modulo 2**32.
        size: Number of entities, at least ``MIN_MOCK_UNIVERSE_SIZE``.

    Returns:
        ``size`` entities in index order (tickers ``AAA``, ``AAB``, ...).

    Raises:
        ValueError: If ``size`` is out of range.
    """
    if size < MIN_MOCK_UNIVERSE_SIZE or size > MAX_UNIVERSE_SIZE:
        raise ValueError(
            f"size must be in [{MIN_MOCK_UNIVERSE_SIZE}, {MAX_UNIVERSE_SIZE}], got {size}."
        )

    rng = RandomStream(seed)
    macro = draw_macro(rng)

    universe: list[UniverseEntity] = []
    for index in range(size):
        ticker = make_ticker(index)
        sector = rng.pick(SECTORS)
        price = _draw_price(rng)
        inputs = _draw_inputs(rng, macro)
        trailing = _draw_trailing(rng)
        universe.append(
            UniverseEntity(
                ticker=ticker,
                company_name=company_name(ticker),
                sector=sector,
                current_price=price,
                inputs=inputs,
                trailing=trailing,
            )
        )
    return universe
