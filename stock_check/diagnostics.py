"""
Diagnostics for a saved run payload.

``run_diagnostics(payload)`` re-checks a ``RunResult.to_payload()`` dict
(typically loaded back from JSON) against the output contract and returns
one ``DiagnosticCheck`` per rule.  It never raises on a malformed payload;
a broken payload simply fails the relevant checks.

Checks
------
factor_matrix      43 factors, weights total 100%.
row_count          Exactly 11 result rows.
column_order       Every row has the canonical keys in canonical order.
ranking_integrity  Top 10 sorted descending by predicted growth.
rank_column        Ranks 1..10 then null.
append_row         Last row is the append ticker with a null rank.
trade_logic        ``trade_header`` matches a recomputation from the Top 10.
sector_warning     ``sector_warning`` matches a recomputation from the Top 10.
finite_values      Prices and growth are finite numbers in every row.

This is the backend for the ``diagnose`` CLI command.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from stock_check.factors.registry import FACTOR_COUNT, FACTORS, total_weight_pct
from stock_check.models.run import CANONICAL_COLUMNS, RESULT_ROW_COUNT, TOP_N
from stock_check.ranking.ranker import (
    DEFAULT_APPEND_TICKER,
    mean_and_dispersion,
    sector_concentration,
    trade_header_for,
)

GROWTH_COL = "Predicted 1-Day % Growth"


@dataclass(frozen=True)
class DiagnosticCheck:
    """Outcome of one diagnostic rule."""

    name: str
    passed: bool
    details: str


def _num(value: Any) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return math.nan
    return num


def _rows(payload: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    results = payload.get("results")
    if not isinstance(results, list):
        return []
    return [r for r in results if isinstance(r, Mapping)]


def check_factor_matrix() -> DiagnosticCheck:
    total = total_weight_pct()
    ok = len(FACTORS) == FACTOR_COUNT and abs(total - 100.0) <= 1e-6
    return DiagnosticCheck("factor_matrix", ok, f"count={len(FACTORS)} weight_total={total:.6f}")


def check_row_count(rows: list[Mapping[str, Any]]) -> DiagnosticCheck:
    ok = len(rows) == RESULT_ROW_COUNT
    return DiagnosticCheck("row_count", ok, f"expected={RESULT_ROW_COUNT} got={len(rows)}")


def check_column_order(rows: list[Mapping[str, Any]]) -> DiagnosticCheck:
    bad = [i for i, r in enumerate(rows) if tuple(r.keys()) != CANONICAL_COLUMNS]
    ok = bool(rows) and not bad
    details = "Canonical order preserved." if ok else f"Column order mismatch in rows {bad or 'n/a'}."
    return DiagnosticCheck("column_order", ok, details)


def check_ranking_integrity(rows: list[Mapping[str, Any]]) -> DiagnosticCheck:
    growths = [_num(r.get(GROWTH_COL)) for r in rows[:TOP_N]]
    ok = all(growths[i] >= growths[i + 1] for i in range(len(growths) - 1))
    return DiagnosticCheck(
        "ranking_integrity", ok,
        "Top 10 sorted descending." if ok else "Top 10 not sorted.",
    )


def check_rank_column(rows: list[Mapping[str, Any]]) -> DiagnosticCheck:
    ranks = [r.get("Rank") for r in rows]
    expected = list(range(1, TOP_N + 1)) + [None]
    ok = ranks == expected
    return DiagnosticCheck("rank_column", ok, f"ranks={ranks}")


def check_append_row(rows: list[Mapping[str, Any]], append_ticker: str) -> DiagnosticCheck:
    last = rows[-1] if rows else {}
    ok = last.get("Ticker") == append_ticker and last.get("Rank") is None
    return DiagnosticCheck(
        "append_row", ok,
        f"{append_ticker} present as final unranked row." if ok
        else f"{append_ticker} missing from final row (got {last.get('Ticker')!r}).",
    )


def check_trade_logic(payload: Mapping[str, Any], rows: list[Mapping[str, Any]]) -> DiagnosticCheck:
    growths = [_num(r.get(GROWTH_COL)) for r in rows[:TOP_N]]
    expected = trade_header_for(growths)
    avg, disp = mean_and_dispersion(growths)
    got = str(payload.get("trade_header", "")).upper()
    return DiagnosticCheck(
        "trade_logic", got == expected,
        f"expected={expected} (avg_top10={avg:.3f}%, dispersion={disp:.3f}%) got={got or 'n/a'}",
    )


def check_sector_warning(payload: Mapping[str, Any], rows: list[Mapping[str, Any]]) -> DiagnosticCheck:
    expected = sector_concentration(str(r.get("Sector") or "") for r in rows[:TOP_N])
    got = payload.get("sector_warning")
    return DiagnosticCheck("sector_warning", got is expected, f"expected={expected} got={got}")


def check_finite_values(rows: list[Mapping[str, Any]]) -> DiagnosticCheck:
    cols = ("Current Price", "Predicted Price", GROWTH_COL)
    bad = [
        r.get("Ticker") for r in rows
        if not all(math.isfinite(_num(r.get(c))) for c in cols)
    ]
    ok = bool(rows) and not bad
    return DiagnosticCheck(
        "finite_values", ok,
        "Prices and growth present." if ok else f"Missing/invalid values for {bad or 'all rows'}.",
    )


def run_diagnostics(
    payload: Mapping[str, Any],
    append_ticker: str = DEFAULT_APPEND_TICKER,
) -> list[DiagnosticCheck]:
    """Run every check against a saved run payload.

    Args:
        payload:       Dict shaped like ``RunResult.to_payload()``.
        append_ticker: Expected symbol of the final row.

    Returns:
        Checks in a fixed order.
    """
    rows = _rows(payload)
    return [
        check_factor_matrix(),
        check_row_count(rows),
        check_column_order(rows),
        check_ranking_integrity(rows),
        check_rank_column(rows),
        check_append_row(rows, append_ticker),
        check_trade_logic(payload, rows),
        check_sector_warning(payload, rows),
        check_finite_values(rows),
    ]
