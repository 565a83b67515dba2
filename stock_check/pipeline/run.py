"""
Model run orchestration.

One run is a fixed, self-contained sequence:

  Step 1 — Validate:  Coerce the run config (``ConfigInvalidError`` on issues)
                      and the run dates.
  Step 2 — Universe:  MOCK → ``generate_universe(seed, size)``;
                      LIVE → ``fetch_live_universe(live_config)``.
  Step 3 — Rank:      ``rank_universe()`` scores, sorts, selects the Top 10,
                      appends the fixed ticker and computes the gate.
  Step 4 — Assemble:  Build the frozen ``RunResult`` (11 locked rows).

Failure handling
----------------
Every failure is logged with the run slug and re-raised; a partial
``RunResult`` is never returned.  LIVE failures are never replaced by MOCK
data.

Runs are independent: no state survives between calls and the only
non-deterministic field of a MOCK result is ``created_at``.

Usage::

    result = run_model({"data_mode": "MOCK", "mock_seed": 42,
                        "mock_universe_size": 1200},
                       "2026-01-01", "2026-01-02")
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Mapping, Optional, Union
from uuid import uuid4

import httpx

from stock_check.config import LiveConfig, RunConfig
from stock_check.models.run import MODEL_VERSION, DataMode, RunResult
from stock_check.models.universe import UniverseEntity
from stock_check.ranking.ranker import DEFAULT_APPEND_TICKER, RankingOutcome, rank_universe
from stock_check.universe.live import fetch_live_universe
from stock_check.universe.synthetic import generate_universe
from stock_check.utils.time_utils import next_calendar_day, parse_iso_date, utcnow_iso

logger = logging.getLogger(__name__)

RunConfigLike = Union[RunConfig, Mapping[str, Any]]
DateLike = Union[date, str]


def _coerce_run_config(run_config: RunConfigLike) -> RunConfig:
    if isinstance(run_config, RunConfig):
        return run_config
    return RunConfig.from_mapping(run_config)


def _coerce_date(value: DateLike, field_name: str) -> date:
    if isinstance(value, date):
        return value
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"{field_name} must be a YYYY-MM-DD date, got {value!r}.")
    return parsed


class ModelRunner:
    """Runs the model end to end for one invocation.

    Args:
        live_config:   LIVE adapter settings (defaults to ``LiveConfig()``).
        append_ticker: Symbol always emitted as row 11.
        client:        Optional ``httpx.AsyncClient`` for the LIVE adapter.
        api_key:       Optional explicit Alpha Vantage key.
    """

    def __init__(
        self,
        live_config: Optional[LiveConfig] = None,
        append_ticker: str = DEFAULT_APPEND_TICKER,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
    ) -> None:
        self.live_config = live_config or LiveConfig()
        self.append_ticker = append_ticker
        self.client = client
        self.api_key = api_key

    async def load_universe(self, run_config: RunConfig) -> list[UniverseEntity]:
        if run_config.data_mode == DataMode.MOCK:
            return generate_universe(run_config.mock_seed, run_config.mock_universe_size)
        return await fetch_live_universe(self.live_config, client=self.client, api_key=self.api_key)

    async def run(
        self,
        run_config: RunConfigLike,
        current_date: DateLike,
        prediction_date: Optional[DateLike] = None,
    ) -> RunResult:
        """Execute one model run.

        Args:
            run_config:      ``RunConfig`` or a loose mapping.
            current_date:    Run date (``date`` or ``YYYY-MM-DD``).
            prediction_date: Target date; defaults to the next calendar day.

        Returns:
            The frozen ``RunResult``.

        Raises:
            ConfigInvalidError: Run config has validation issues.
            ValueError: A run date is malformed.
            StockCheckError: Any coded LIVE failure, transport errors included.
        """
        run_slug = str(uuid4())
        created_at = utcnow_iso()
        try:
            config = _coerce_run_config(run_config)
            run_date = _coerce_date(current_date, "current_date")
            target_date = (
                _coerce_date(prediction_date, "prediction_date")
                if prediction_date is not None
                else next_calendar_day(run_date)
            )
            logger.info(
                "Model run [%s] starting | mode=%s | current=%s | prediction=%s | run_slug=%s",
                MODEL_VERSION, config.data_mode.value, run_date, target_date, run_slug,
                extra={"run_slug": run_slug},
            )

            universe = await self.load_universe(config)
            outcome = rank_universe(universe, append_ticker=self.append_ticker)
            result = self._assemble(config, run_date, target_date, outcome, created_at)

        except Exception as exc:
            logger.error(
                "Model run FAILED: %s [%s] | run_slug=%s",
                exc, getattr(exc, "code", type(exc).__name__), run_slug,
                extra={"run_slug": run_slug},
            )
            raise

        logger.info(
            "Model run completed | universe=%d | header=%s | avg=%.3f | dispersion=%.3f "
            "| sector_warning=%s | run_slug=%s",
            outcome.universe_size, outcome.trade_header, outcome.avg_top10,
            outcome.dispersion, outcome.sector_warning, run_slug,
            extra={"run_slug": run_slug},
        )
        return result

    @staticmethod
    def _assemble(
        config: RunConfig,
        run_date: date,
        target_date: date,
        outcome: RankingOutcome,
        created_at: str,
    ) -> RunResult:
        return RunResult(
            model_version=MODEL_VERSION,
            data_mode=config.data_mode,
            current_date=run_date.isoformat(),
            prediction_date=target_date.isoformat(),
            trade_header=outcome.trade_header,
            sector_warning=outcome.sector_warning,
            results=outcome.to_rows(),
            created_at=created_at,
        )


async def run_model_async(
    run_config: RunConfigLike,
    current_date: DateLike,
    prediction_date: Optional[DateLike] = None,
    *,
    live_config: Optional[LiveConfig] = None,
    append_ticker: str = DEFAULT_APPEND_TICKER,
    client: Optional[httpx.AsyncClient] = None,
    api_key: Optional[str] = None,
) -> RunResult:
    """Async entry point; see ``ModelRunner.run``."""
    runner = ModelRunner(
        live_config=live_config,
        append_ticker=append_ticker,
        client=client,
        api_key=api_key,
    )
    return await runner.run(run_config, current_date, prediction_date)


def run_model(
    run_config: RunConfigLike,
    current_date: DateLike,
    prediction_date: Optional[DateLike] = None,
    *,
    live_config: Optional[LiveConfig] = None,
    append_ticker: str = DEFAULT_APPEND_TICKER,
    client: Optional[httpx.AsyncClient] = None,
    api_key: Optional[str] = None,
) -> RunResult:
    """Synchronous entry point wrapping ``run_model_async`` with ``asyncio.run``.

    Must not be called from inside a running event loop.
    """
    return asyncio.run(
        run_model_async(
            run_config,
            current_date,
            prediction_date,
            live_config=live_config,
            append_ticker=append_ticker,
            client=client,
            api_key=api_key,
        )
    )
