"""Tests for stock_check.reporting.formatters."""

from __future__ import annotations

from stock_check.diagnostics import DiagnosticCheck
from stock_check.factors.registry import FACTORS
from stock_check.reporting.formatters import (
    format_diagnostics,
    format_factor_table,
    format_run_table,
)


# ── format_run_table ──────────────────────────────────────────────────────────


def test_run_table_banner_and_rows(mock_run) -> None:
    payload = mock_run.to_payload()
    out = format_run_table(payload)

    assert "Stock Check v1.2" in out
    assert f"[{payload['trade_header']}]" in out
    assert "Prediction date: 2026-01-02" in out
    for row in payload["results"]:
        assert row["Ticker"] in out
    # Appended row shows a dash rank
    assert "  --  INTC" in out


def test_run_table_sector_warning_line() -> None:
    payload = {"trade_header": "NO TRADE", "sector_warning": True, "results": []}
    assert "[SECTOR WARNING]" in format_run_table(payload)
    payload["sector_warning"] = False
    assert "[SECTOR WARNING]" not in format_run_table(payload)


def test_run_table_tolerates_missing_values() -> None:
    payload = {
        "trade_header": "NO TRADE",
        "results": [{"Rank": 1, "Ticker": "AAA", "3-Month": None, "Current Price": "x"}],
    }
    out = format_run_table(payload)
    assert "n/a" in out
    assert "AAA" in out


# ── format_factor_table ───────────────────────────────────────────────────────


def test_factor_table_lists_all_groups_and_total() -> None:
    out = format_factor_table(FACTORS)
    assert "[I] " in out and "[VIII] " in out
    assert "(18.0%)" in out
    assert "Factors: 43" in out
    assert out.rstrip().endswith("Weight total: 100.0%")


# ── format_diagnostics ────────────────────────────────────────────────────────


def test_diagnostics_summary() -> None:
    checks = [
        DiagnosticCheck("row_count", True, "expected=11 got=11"),
        DiagnosticCheck("append_row", False, "INTC missing"),
    ]
    out = format_diagnostics(checks)
    assert "[PASS] row_count" in out
    assert "[FAIL] append_row" in out
    assert "1/2 checks passed." in out
