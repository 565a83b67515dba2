"""
Ranking engine: scores a universe, selects the Top 10, appends the fixed
ticker and computes the decision gate.

Usage flow
----------
1. score_entity(entity) / score_universe(entities)
   -> ScoredEntity  (growth rounded to 3 dp, price to 2 dp)

2. rank_universe(entities, append_ticker="INTC")
   -> RankingOutcome  (top10, appended row, gate metrics)

3. RankingOutcome.to_rows()
   -> list[ResultRow]  (11 locked rows: Rank 1..10, then Rank=None)

Ordering
--------
Entities are sorted descending by the *rounded* growth with a stable sort,
so ties keep their universe order and the displayed values are exactly the
sorted values.

Append row
----------
The append ticker is looked up in the scored universe (first match).  If it
is absent a deterministic placeholder is scored instead.  The row is
appended unconditionally, so a ticker already in the Top 10 appears twice.

Decision gate
-------------
    TRADE    iff  mean(top10 growth) >= 0.5  and  sample stdev >= 0.6
    sector warning iff one sector holds >= 7 of the Top 10
"""

from __future__ import annotations

import statistics
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Sequence

from stock_check.factors.normalize import normalize_inputs
from stock_check.models.run import TOP_N, ResultRow, TradeHeader
from stock_check.models.universe import ScoredEntity, TrailingReturns, UniverseEntity
from stock_check.scoring.scorer import project_price, round_growth, score_growth_pct

DEFAULT_APPEND_TICKER = "INTC"

TRADE_MIN_AVG_GROWTH_PCT = 0.5
TRADE_MIN_DISPERSION_PCT = 0.6
SECTOR_WARNING_MIN_COUNT = 7

# Used only when the append ticker is not in the universe.
PLACEHOLDER_PRICE = 40.0
PLACEHOLDER_TRAILING = TrailingReturns(m3=3.5, m6=6.0, m12=12.0)
PLACEHOLDER_INPUTS: dict[str, float] = {
    "momentum_5d_pct": 0.3,
    "momentum_10d_pct": 0.5,
    "momentum_20d_pct": 1.0,
    "trend_pos_50dma_pct": 1.5,
    "trend_pos_200dma_pct": -2.0,
    "rsi": 51.0,
    "macd_slope": 0.1,
    "breakout_velocity": -1.5,

    "eps_yoy_growth_pct": 6.0,
    "eps_qoq_accel_pct": 2.0,
    "rev_yoy_growth_pct": 4.0,
    "rev_qoq_accel_pct": 1.0,
    "earnings_surprise_pct": 0.5,
    "forward_guidance_revision": 0.1,

    "call_put_ratio": 1.1,
    "unusual_options_z": 0.2,
    "open_interest_expansion_pct": 3.0,
    "dark_pool_flow_bias": 0.1,
    "block_trade_accumulation": 0.1,

    "iv_rank_pct": 45.0,
    "iv_skew": 0.0,
    "vol_compression": 0.35,
    "atr_expansion": 1.0,

    "rel_strength_spy_20d": 0.2,
    "rel_strength_sector_etf": 0.3,
    "sector_momentum_rank": 55.0,
    "cross_sector_capital_rotation": 0.0,

    "volume_surge_ratio": 1.0,
    "inst_ownership_change_qoq": 0.1,
    "insider_buying_activity": 0.0,
    "short_interest_compression": 0.0,

    "beta_adjustment": 0.0,
    "downside_deviation_30d": 1.2,
    "price_gap_frequency": 0.0,
    "accumulation_distribution": 0.0,
    "acceleration_curve_fit": 0.0,

    "market_breadth": 1.0,
    "vix_direction_5d": 0.0,
    "treasury_yield_trend_10y": 0.0,
    "dollar_index_trend_dxy": 0.0,
    "fed_liquidity_proxy": 0.0,
    "economic_surprise_index": 0.0,
    "risk_on_off_composite": 0.0,
}


@dataclass(frozen=True)
class RankingOutcome:
    """Result of ranking one universe.

    Attributes:
        top10:          The 10 highest-growth entities, best first.
        appended:       The append-ticker entity (may duplicate a Top 10 row).
        avg_top10:      Mean rounded growth of the Top 10.
        dispersion:     Sample standard deviation of the Top 10 growth.
        trade_header:   ``"TRADE"`` or ``"NO TRADE"``.
        sector_warning: True if one sector holds >= 7 of the Top 10.
        universe_size:  Number of entities ranked.
    """

    top10: tuple[ScoredEntity, ...]
    appended: ScoredEntity
    avg_top10: float
    dispersion: float
    trade_header: TradeHeader
    sector_warning: bool
    universe_size: int

    def to_rows(self) -> list[ResultRow]:
        rows = [_to_row(rank, s) for rank, s in enumerate(self.top10, start=1)]
        rows.append(_to_row(None, self.appended))
        return rows


# ── Scoring ───────────────────────────────────────────────────────────────────


def score_entity(entity: UniverseEntity) -> ScoredEntity:
    """Normalize, score and price-project one entity (never mutates it)."""
    growth = score_growth_pct(normalize_inputs(entity.inputs))
    return ScoredEntity(
        entity=entity,
        predicted_1d_growth_pct=round_growth(growth),
        predicted_price=project_price(entity.current_price, growth),
    )


def score_universe(entities: Iterable[UniverseEntity]) -> list[ScoredEntity]:
    return [score_entity(e) for e in entities]


def placeholder_entity(ticker: str = DEFAULT_APPEND_TICKER) -> UniverseEntity:
    """Deterministic stand-in for an append ticker missing from the universe."""
    if ticker == DEFAULT_APPEND_TICKER:
        name, sector = "Intel Corporation", "Technology"
    else:
        name, sector = ticker, "Unknown"
    return UniverseEntity(
        ticker=ticker,
        company_name=name,
        sector=sector,
        current_price=PLACEHOLDER_PRICE,
        inputs=dict(PLACEHOLDER_INPUTS),
        trailing=PLACEHOLDER_TRAILING,
    )


# ── Gate metrics ──────────────────────────────────────────────────────────────


def mean_and_dispersion(growths: Sequence[float]) -> tuple[float, float]:
    """Mean (0 if empty) and sample stdev (0 if fewer than 2 values)."""
    avg = statistics.fmean(growths) if growths else 0.0
    disp = statistics.stdev(growths) if len(growths) >= 2 else 0.0
    return avg, disp


def trade_header_for(growths: Sequence[float]) -> TradeHeader:
    """Return ``"TRADE"`` iff mean >= 0.5 and sample stdev >= 0.6."""
    avg, disp = mean_and_dispersion(growths)
    if avg >= TRADE_MIN_AVG_GROWTH_PCT and disp >= TRADE_MIN_DISPERSION_PCT:
        return "TRADE"
    return "NO TRADE"


def sector_concentration(sectors: Iterable[str]) -> bool:
    """True if any sector appears at least ``SECTOR_WARNING_MIN_COUNT`` times."""
    counts = Counter(s or "Unknown" for s in sectors)
    return bool(counts) and max(counts.values()) >= SECTOR_WARNING_MIN_COUNT


# ── Ranking ───────────────────────────────────────────────────────────────────


def _to_row(rank: int | None, scored: ScoredEntity) -> ResultRow:
    e = scored.entity
    return ResultRow(
        rank=rank,
        ticker=e.ticker,
        company_name=e.company_name,
        sector=e.sector,
        current_price=round(e.current_price, 2),
        predicted_price=scored.predicted_price,
        predicted_1d_growth_pct=scored.predicted_1d_growth_pct,
        trailing_3m=e.trailing.m3,
        trailing_6m=e.trailing.m6,
        trailing_12m=e.trailing.m12,
    )


def rank_universe(
    entities: Sequence[UniverseEntity],
    append_ticker: str = DEFAULT_APPEND_TICKER,
) -> RankingOutcome:
    """Score, sort and select the Top 10, then append ``append_ticker``.

    Args:
        entities:      The full universe, in source order.
        append_ticker: Symbol always emitted as row 11.

    Returns:
        ``RankingOutcome`` with gate metrics computed from the Top 10.

    Raises:
        ValueError: If the universe has fewer than 10 entities.
    """
    if len(entities) < TOP_N:
        raise ValueError(f"universe must contain at least {TOP_N} entities, got {len(entities)}.")

    scored = score_universe(entities)
    ranked = sorted(scored, key=lambda s: s.predicted_1d_growth_pct, reverse=True)
    top10 = tuple(ranked[:TOP_N])

    append_ticker = append_ticker.strip().upper()
    appended = next((s for s in scored if s.ticker == append_ticker), None)
    if appended is None:
        appended = score_entity(placeholder_entity(append_ticker))

    growths = [s.predicted_1d_growth_pct for s in top10]
    avg, disp = mean_and_dispersion(growths)

    return RankingOutcome(
        top10=top10,
        appended=appended,
        avg_top10=avg,
        dispersion=disp,
        trade_header=trade_header_for(growths),
        sector_warning=sector_concentration(s.sector for s in top10),
        universe_size=len(scored),
    )
