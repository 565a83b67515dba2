"""
Export helpers for saved runs.

All functions write to disk and return the written ``Path``.  JSON exports
carry the full ``RunResult`` payload; CSV exports carry only the 11 result
rows, with the canonical column order as the header, so they load directly
in Excel or pandas.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from stock_check.models.run import CANONICAL_COLUMNS, RunResult


def export_run_json(result: RunResult, path: Path) -> Path:
    """Write ``result.to_payload()`` as pretty-printed JSON.

    Args:
        result: Completed run.
        path:   Destination file path (parent dirs created if missing).

    Returns:
        ``path`` as written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.to_payload(), indent=2), encoding="utf-8")
    return path


def export_results_csv(result: RunResult, path: Path) -> Path:
    """Write the 11 result rows as UTF-8 CSV in canonical column order.

    The appended row's empty Rank is written as an empty cell.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(CANONICAL_COLUMNS))
        writer.writeheader()
        writer.writerows(row.to_dict() for row in result.results)
    return path


def load_run_payload(path: Path) -> dict[str, Any]:
    """Read a payload previously written by ``export_run_json``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    return json.loads(Path(path).read_text(encoding="utf-8"))


def default_output_name(result: RunResult, suffix: str) -> str:
    """``stock_check_<mode>_<current_date>.<suffix>``."""
    return f"stock_check_{result.data_mode.value.lower()}_{result.current_date}.{suffix}"
