"""
ASCII terminal formatters for CLI commands.

All formatters accept parsed payload dicts / record lists and return plain
multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Decision banner
---------------
Every run table starts with the decision gate so readers see it first::

  [TRADE] avg_top10 >= 0.5% and dispersion >= 0.6%
  [NO TRADE] gate not met
  [SECTOR WARNING] one sector holds >= 7 of the Top 10
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from stock_check.diagnostics import DiagnosticCheck
from stock_check.factors.registry import GROUP_NAMES, Factor, group_weight_pct


def _fmt_num(value: Any, decimals: int, suffix: str = "") -> str:
    if value is None:
        return "n/a"
    try:
        return f"{float(value):.{decimals}f}{suffix}"
    except (TypeError, ValueError):
        return str(value)


# ── Run results ───────────────────────────────────────────────────────────────


def format_run_table(payload: Mapping[str, Any]) -> str:
    """Format a ``RunResult.to_payload()`` dict as an ASCII table.

    Rows appear in payload order; the appended row shows ``--`` as its rank.
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== {payload.get('model_version', 'Stock Check')} ===")
    lines.append(f"  Mode:            {payload.get('data_mode')}")
    lines.append(f"  Current date:    {payload.get('current_date')}")
    lines.append(f"  Prediction date: {payload.get('prediction_date')}")
    lines.append(f"  Created at:      {payload.get('created_at')}")
    lines.append("")
    lines.append(f"  [{payload.get('trade_header')}]")
    if payload.get("sector_warning"):
        lines.append("  [SECTOR WARNING] one sector holds >= 7 of the Top 10")

    header = (
        f"    {'Rank':>4}  {'Ticker':<6}  {'Company':<24}  {'Sector':<22}  "
        f"{'Current':>9}  {'Predicted':>9}  {'1D %':>7}  "
        f"{'3M %':>8}  {'6M %':>8}  {'12M %':>8}"
    )
    lines.append("")
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))

    for row in payload.get("results") or []:
        rank = row.get("Rank")
        lines.append(
            f"    {rank if rank is not None else '--':>4}  "
            f"{str(row.get('Ticker', ''))[:6]:<6}  "
            f"{str(row.get('Company Name', ''))[:24]:<24}  "
            f"{str(row.get('Sector', ''))[:22]:<22}  "
            f"{_fmt_num(row.get('Current Price'), 2):>9}  "
            f"{_fmt_num(row.get('Predicted Price'), 2):>9}  "
            f"{_fmt_num(row.get('Predicted 1-Day % Growth'), 3):>7}  "
            f"{_fmt_num(row.get('3-Month'), 2):>8}  "
            f"{_fmt_num(row.get('6-Month'), 2):>8}  "
            f"{_fmt_num(row.get('12-Month'), 2):>8}"
        )
    return "\n".join(lines)


# ── Factor table ──────────────────────────────────────────────────────────────


def format_factor_table(factors: Sequence[Factor]) -> str:
    """Format the factor registry grouped by group label."""
    lines: list[str] = []
    current_group = None
    for f in factors:
        if f.group != current_group:
            current_group = f.group
            lines.append("")
            lines.append(
                f"  [{f.group}] {GROUP_NAMES.get(f.group, '')} "
                f"({group_weight_pct(f.group):.1f}%)"
            )
        lines.append(f"    {f.id:>2}  {f.name:<32}  {f.weight_pct:>4.1f}%  {f.definition}")
    total = sum(f.weight_pct for f in factors)
    lines.append("")
    lines.append(f"  Factors: {len(factors)}   Weight total: {total:.1f}%")
    return "\n".join(lines)


# ── Diagnostics ───────────────────────────────────────────────────────────────


def format_diagnostics(checks: Sequence[DiagnosticCheck]) -> str:
    lines = [""]
    for check in checks:
        tag = "[PASS]" if check.passed else "[FAIL]"
        lines.append(f"  {tag} {check.name:<18} {check.details}")
    passed = sum(1 for c in checks if c.passed)
    lines.append("")
    lines.append(f"  {passed}/{len(checks)} checks passed.")
    return "\n".join(lines)
