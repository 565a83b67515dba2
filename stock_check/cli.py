"""
Stock Check — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (model run, diagnostics, factor listing).
  5. Report result to stdout.

Install and run::

    pip install -e .
    stock-check --help
    stock-check validate-config
    stock-check factors
    stock-check run --mode MOCK --seed 42 --size 1200 --current-date 2026-01-01
    stock-check run --mode LIVE --output data/outputs/run.json
    stock-check run --mode MOCK --save
    stock-check explain AAA --seed 42
    stock-check diagnose data/outputs/run.json
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="stock-check",
    help="Stock Check v1.2 — 43-factor next-day growth ranker.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from stock_check.config import load_config
    from stock_check.errors import ConfigInvalidError

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ConfigInvalidError as exc:
        typer.echo("[ERROR] Run config is invalid:", err=True)
        for issue in exc.issues:
            typer.echo(f"  - {issue}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from stock_check.utils.logging import configure_logging
    configure_logging(config.logging)


def _run_mapping(config, mode: Optional[str], seed: Optional[int], size: Optional[int]) -> dict:
    """Config ``[run]`` section with CLI overrides applied."""
    mapping = config.run.model_dump(mode="json")
    if mode is not None:
        mapping["data_mode"] = mode
    if seed is not None:
        mapping["mock_seed"] = seed
    if size is not None:
        mapping["mock_universe_size"] = size
    return mapping


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    import os

    config = _load_config_or_exit(config_path)

    key_set = bool(os.environ.get(config.live.api_key_env, "").strip())

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Data mode:        {config.run.data_mode.value}")
    typer.echo(f"  Mock seed:        {config.run.mock_seed}")
    typer.echo(f"  Mock universe:    {config.run.mock_universe_size}")
    typer.echo(f"  Live tickers:     {', '.join(config.live.tickers)}")
    typer.echo(f"  Live endpoint:    {config.live.base_url}")
    typer.echo(f"  API key ({config.live.api_key_env}): {'set' if key_set else 'NOT SET'}")
    typer.echo(f"  Append ticker:    {config.ranking.append_ticker}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(mode="json"), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("factors")
def factors() -> None:
    """Print the locked 43-factor table grouped by category."""
    from stock_check.factors.registry import FACTORS
    from stock_check.reporting.formatters import format_factor_table

    typer.echo(format_factor_table(FACTORS))


@app.command("run")
def run(
    mode: Optional[str] = typer.Option(
        None,
        "--mode",
        help="Data mode: MOCK or LIVE (default: config [run].data_mode).",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="MOCK seed override.",
    ),
    size: Optional[int] = typer.Option(
        None,
        "--size",
        help="MOCK universe size override (>= 1000).",
    ),
    current_date: Optional[str] = typer.Option(
        None,
        "--current-date",
        help="Run date YYYY-MM-DD (default: today).",
    ),
    prediction_date: Optional[str] = typer.Option(
        None,
        "--prediction-date",
        help="Prediction date YYYY-MM-DD (default: current date + 1 day).",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        help="Write the full run payload as JSON to this path.",
    ),
    csv_path: Optional[str] = typer.Option(
        None,
        "--csv",
        help="Write the 11 result rows as CSV to this path.",
    ),
    save: bool = typer.Option(
        False,
        "--save",
        help="Also write JSON and CSV to [output] output_dir under default names.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Run the model and print the Top 10 + appended ticker.

    \b
    MOCK mode is fully deterministic for a given seed and size.
    LIVE mode needs ALPHA_VANTAGE_API_KEY (in the environment or .env)
    and fails rather than substituting synthetic data.
    """
    from stock_check.errors import ConfigInvalidError, StockCheckError
    from stock_check.pipeline.run import run_model
    from stock_check.reporting.export import (
        default_output_name,
        export_results_csv,
        export_run_json,
    )
    from stock_check.reporting.formatters import format_run_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    run_date = current_date or date.today().isoformat()
    mapping = _run_mapping(config, mode, seed, size)

    typer.echo(
        f"run | mode={str(mapping.get('data_mode')).upper()} | current={run_date}"
        f" | prediction={prediction_date or 'next day'}"
    )

    try:
        result = run_model(
            mapping,
            run_date,
            prediction_date,
            live_config=config.live,
            append_ticker=config.ranking.append_ticker,
        )
    except ConfigInvalidError as exc:
        typer.echo("[ERROR] Run config is invalid:", err=True)
        for issue in exc.issues:
            typer.echo(f"  - {issue}", err=True)
        raise typer.Exit(code=1)
    except StockCheckError as exc:
        typer.echo(f"[ERROR] {exc.code}: {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_run_table(result.to_payload()))

    if output:
        written = export_run_json(result, Path(output))
        typer.echo(f"\n  JSON written: {written}")
    if csv_path:
        written = export_results_csv(result, Path(csv_path))
        typer.echo(f"  CSV written:  {written}")
    if save:
        out_dir = Path(config.output.output_dir)
        written = export_run_json(result, out_dir / default_output_name(result, "json"))
        typer.echo(f"\n  Saved JSON: {written}")
        written = export_results_csv(result, out_dir / default_output_name(result, "csv"))
        typer.echo(f"  Saved CSV:  {written}")

    typer.echo("")
    typer.echo("[OK] Run complete.")


@app.command("explain")
def explain(
    ticker: str = typer.Argument(..., help="Ticker to explain (must be in the MOCK universe)."),
    seed: Optional[int] = typer.Option(None, "--seed", help="MOCK seed override."),
    size: Optional[int] = typer.Option(None, "--size", help="MOCK universe size override."),
    top: int = typer.Option(10, "--top", help="Show this many largest contributions."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Break one MOCK ticker's projected growth down by factor."""
    from stock_check.config import RunConfig
    from stock_check.errors import ConfigInvalidError
    from stock_check.factors.normalize import normalize_inputs
    from stock_check.ranking.ranker import score_entity
    from stock_check.scoring.scorer import factor_contributions
    from stock_check.universe.synthetic import generate_universe

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        run_config = RunConfig.from_mapping(_run_mapping(config, "MOCK", seed, size))
    except ConfigInvalidError as exc:
        for issue in exc.issues:
            typer.echo(f"[ERROR] {issue}", err=True)
        raise typer.Exit(code=1)

    universe = generate_universe(run_config.mock_seed, run_config.mock_universe_size)
    symbol = ticker.strip().upper()
    entity = next((e for e in universe if e.ticker == symbol), None)
    if entity is None:
        typer.echo(
            f"[ERROR] {symbol} not in MOCK universe "
            f"(seed={run_config.mock_seed}, size={run_config.mock_universe_size}).",
            err=True,
        )
        raise typer.Exit(code=1)

    scored = score_entity(entity)
    contributions = sorted(
        factor_contributions(normalize_inputs(entity.inputs)),
        key=lambda c: abs(c.growth_delta_pct),
        reverse=True,
    )

    typer.echo(f"{entity.ticker} | {entity.company_name} | {entity.sector}")
    typer.echo(
        f"  Current: {entity.current_price:.2f}  Predicted: {scored.predicted_price:.2f}  "
        f"Growth: {scored.predicted_1d_growth_pct:+.3f}%"
    )
    typer.echo("")
    typer.echo(f"  {'Factor':<32}  {'Grp':>4}  {'Weight':>6}  {'Norm':>5}  {'Delta %':>8}")
    for c in contributions[:top]:
        typer.echo(
            f"  {c.name:<32}  {c.group:>4}  {c.weight_pct:>5.1f}%  "
            f"{c.normalized:>5.2f}  {c.growth_delta_pct:>+8.4f}"
        )


@app.command("diagnose")
def diagnose(
    payload_path: str = typer.Argument(..., help="Path to a saved run JSON (from run --output)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Re-check a saved run against the output contract.

    Exits with code 1 if any check fails.
    """
    from stock_check.diagnostics import run_diagnostics
    from stock_check.reporting.export import load_run_payload
    from stock_check.reporting.formatters import format_diagnostics

    config = _load_config_or_exit(config_path)

    try:
        payload = load_run_payload(Path(payload_path))
    except FileNotFoundError:
        typer.echo(f"[ERROR] File not found: {payload_path}", err=True)
        raise typer.Exit(code=1)
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] Not valid JSON: {exc}", err=True)
        raise typer.Exit(code=1)

    if not isinstance(payload, dict):
        typer.echo("[ERROR] Run payload must be a JSON object.", err=True)
        raise typer.Exit(code=1)

    checks = run_diagnostics(payload, append_ticker=config.ranking.append_ticker)
    typer.echo(format_diagnostics(checks))

    if not all(c.passed for c in checks):
        raise typer.Exit(code=1)
    typer.echo("[OK] All checks passed.")


if __name__ == "__main__":
    app()
