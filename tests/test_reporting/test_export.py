"""Tests for stock_check.reporting.export."""

from __future__ import annotations

import csv
import json
from pathlib import Path

from stock_check.models.run import CANONICAL_COLUMNS
from stock_check.reporting.export import (
    default_output_name,
    export_results_csv,
    export_run_json,
    load_run_payload,
)


# ── export_run_json ───────────────────────────────────────────────────────────


def test_export_run_json_round_trips_payload(tmp_path: Path, mock_run) -> None:
    """The written file reloads to exactly the run payload."""
    out = tmp_path / "nested" / "run.json"
    result = export_run_json(mock_run, out)

    assert result == out
    assert out.exists()
    assert load_run_payload(out) == mock_run.to_payload()


def test_export_run_json_preserves_column_order(tmp_path: Path, mock_run) -> None:
    """Row keys survive serialisation in canonical order."""
    out = export_run_json(mock_run, tmp_path / "run.json")
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert tuple(payload["results"][0]) == CANONICAL_COLUMNS
    assert payload["results"][-1]["Rank"] is None


# ── export_results_csv ────────────────────────────────────────────────────────


def test_export_results_csv_header_and_rows(tmp_path: Path, mock_run) -> None:
    """Header is the canonical column list; 11 data rows follow."""
    out = export_results_csv(mock_run, tmp_path / "run.csv")

    with out.open(encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        rows = list(reader)
        assert tuple(reader.fieldnames or ()) == CANONICAL_COLUMNS

    assert len(rows) == 11
    assert rows[0]["Rank"] == "1"
    assert rows[-1]["Rank"] == ""
    assert rows[-1]["Ticker"] == "INTC"


def test_export_results_csv_values_match_rows(tmp_path: Path, mock_run) -> None:
    out = export_results_csv(mock_run, tmp_path / "run.csv")
    with out.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    first = mock_run.results[0]
    assert rows[0]["Ticker"] == first.ticker
    assert float(rows[0]["Predicted 1-Day % Growth"]) == first.predicted_1d_growth_pct


# ── default_output_name ───────────────────────────────────────────────────────


def test_default_output_name(mock_run) -> None:
    assert default_output_name(mock_run, "json") == "stock_check_mock_2026-01-01.json"
