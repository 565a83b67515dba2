"""
LIVE universe adapter — Alpha Vantage ``TIME_SERIES_DAILY_ADJUSTED``.

``fetch_live_universe(live_config)`` fetches one daily series per configured
ticker, sequentially, and turns each into a ``UniverseEntity``:

  current_price  latest ``4. close``
  trailing       3/6/12-month % return vs. the most recent bar on or before
                 (latest date - N months), rounded to 3 dp
  company_name   the ticker (not provided by this endpoint)
  sector         ``"Unknown"`` (not provided by this endpoint)
  inputs         ``NEUTRAL_FACTOR_INPUTS``

The adapter never invents market data.  Anything it cannot obtain raises a
coded ``StockCheckError`` and the run fails; there is no MOCK fallback.

Request contract
----------------
    GET {base_url}?function=TIME_SERIES_DAILY_ADJUSTED&symbol=MSFT
                   &outputsize=compact|full&apikey=...

``compact`` returns ~100 bars, usually too short for the 6/12-month
horizons; when any horizon is unresolved the ticker is re-fetched once with
``outputsize=full``.  ``base_url`` may point at a caching proxy that accepts
the same query string.

Response sentinels
------------------
A body carrying ``Note``, ``Information`` or ``Error Message`` is an upstream
error (``ALPHAVANTAGE_RATE_LIMIT`` when the ``Note`` mentions call
frequency).  A non-JSON body is ``ALPHAVANTAGE_BAD_RESPONSE``.  A body
without ``Time Series (Daily)`` or without a positive latest close is
``ALPHAVANTAGE_MISSING_DATA``.

The HTTP status is not an error signal on its own: a proxy's
``500 {"error": ...}`` has no series and fails as missing data.  Transport
failures (connection refused, timeouts) become ``ALPHAVANTAGE_ERROR``, so
every LIVE failure carries a code.

The API key is read from the environment variable named by
``LiveConfig.api_key_env`` (default ``ALPHA_VANTAGE_API_KEY``) at fetch time.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping, Optional

import httpx
from pydantic import ValidationError

from stock_check.config import LiveConfig
from stock_check.errors import (
    ALPHAVANTAGE_MISSING_DATA,
    ALPHAVANTAGE_RATE_LIMIT,
    LiveMissingDataError,
    LiveNotConfiguredError,
    UpstreamBadResponseError,
    UpstreamError,
)
from stock_check.models.universe import TrailingReturns, UniverseEntity
from stock_check.utils.logging import redact_api_key
from stock_check.utils.time_utils import parse_iso_date, subtract_months, utcnow_iso

logger = logging.getLogger(__name__)

SERIES_KEY = "Time Series (Daily)"
META_KEY = "Meta Data"
CLOSE_KEY = "4. close"
LAST_REFRESHED_KEY = "3. Last Refreshed"
ERROR_SENTINELS: tuple[str, ...] = ("Note", "Information", "Error Message")

TRAILING_HORIZONS_MONTHS: tuple[int, ...] = (3, 6, 12)
UNKNOWN_SECTOR = "Unknown"

# Explicit neutral defaults, not market data: every field sits at the
# midpoint of its normalization range, or at its "no signal" level.
NEUTRAL_FACTOR_INPUTS: Mapping[str, float] = MappingProxyType({
    "momentum_5d_pct": 0.0,
    "momentum_10d_pct": 0.0,
    "momentum_20d_pct": 0.0,
    "trend_pos_50dma_pct": 0.0,
    "trend_pos_200dma_pct": 0.0,
    "rsi": 50.0,
    "macd_slope": 0.0,
    "breakout_velocity": 0.0,

    "eps_yoy_growth_pct": 0.0,
    "eps_qoq_accel_pct": 0.0,
    "rev_yoy_growth_pct": 0.0,
    "rev_qoq_accel_pct": 0.0,
    "earnings_surprise_pct": 0.0,
    "forward_guidance_revision": 0.0,

    "call_put_ratio": 1.0,
    "unusual_options_z": 0.0,
    "open_interest_expansion_pct": 0.0,
    "dark_pool_flow_bias": 0.0,
    "block_trade_accumulation": 0.0,

    "iv_rank_pct": 50.0,
    "iv_skew": 0.0,
    "vol_compression": 0.35,
    "atr_expansion": 1.0,

    "rel_strength_spy_20d": 0.0,
    "rel_strength_sector_etf": 0.0,
    "sector_momentum_rank": 50.0,
    "cross_sector_capital_rotation": 0.0,

    "volume_surge_ratio": 1.0,
    "inst_ownership_change_qoq": 0.0,
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
})


# ── Series parsing ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DailySeries:
    """Parsed daily closes for one ticker.

    Attributes:
        ticker:         Requested symbol.
        closes:         Bar date → close, newest first.  Bars with an
            unparseable date are dropped; a bar whose close is missing,
            non-numeric or non-positive is kept with ``None`` so that a
            lookup landing on it fails instead of skipping to an older bar.
        last_refreshed: ``Meta Data / 3. Last Refreshed`` if present.
        outputsize:     ``"compact"`` or ``"full"``.
    """

    ticker: str
    closes: dict[date, Optional[float]]
    last_refreshed: Optional[str]
    outputsize: str

    @property
    def latest_date(self) -> Optional[date]:
        return next(iter(self.closes), None)


def _as_positive_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) and num > 0 else None


def raise_for_sentinels(ticker: str, payload: Mapping[str, Any]) -> None:
    """Raise ``UpstreamError`` if ``payload`` is an Alpha Vantage error body."""
    if not any(payload.get(key) for key in ERROR_SENTINELS):
        return

    message = next(
        (str(payload[key]) for key in ERROR_SENTINELS if payload.get(key)),
        f"Alpha Vantage error for {ticker}.",
    )
    note = payload.get("Note")
    if isinstance(note, str) and "frequency" in note.lower():
        raise UpstreamError(message, code=ALPHAVANTAGE_RATE_LIMIT, details=dict(payload))
    raise UpstreamError(message, details=dict(payload))


def parse_daily_series(ticker: str, payload: Mapping[str, Any], outputsize: str) -> DailySeries:
    """Extract dated closes from a ``TIME_SERIES_DAILY_ADJUSTED`` body.

    Raises:
        UpstreamError: For sentinel bodies, or (``ALPHAVANTAGE_MISSING_DATA``)
            when the daily series is absent.
    """
    raise_for_sentinels(ticker, payload)

    series = payload.get(SERIES_KEY)
    if not isinstance(series, Mapping):
        raise UpstreamError(
            f"Alpha Vantage missing {SERIES_KEY} for {ticker}.",
            code=ALPHAVANTAGE_MISSING_DATA,
            details=dict(payload),
        )

    bars: list[tuple[date, Optional[float]]] = []
    for raw_date, bar in series.items():
        bar_date = parse_iso_date(raw_date)
        if bar_date is None:
            continue
        close = _as_positive_float(bar.get(CLOSE_KEY)) if isinstance(bar, Mapping) else None
        bars.append((bar_date, close))
    bars.sort(key=lambda item: item[0], reverse=True)

    meta = payload.get(META_KEY)
    last_refreshed = meta.get(LAST_REFRESHED_KEY) if isinstance(meta, Mapping) else None
    return DailySeries(
        ticker=ticker,
        closes=dict(bars),
        last_refreshed=str(last_refreshed) if last_refreshed else None,
        outputsize=outputsize,
    )


def latest_close(series: DailySeries) -> float:
    """Return the close of the newest bar, which must be positive.

    Raises:
        UpstreamError: ``ALPHAVANTAGE_MISSING_DATA`` if absent or non-positive.
    """
    latest = series.latest_date
    close = series.closes.get(latest) if latest is not None else None
    if close is None:
        raise UpstreamError(
            f"Alpha Vantage missing latest close for {series.ticker} ({series.outputsize}).",
            code=ALPHAVANTAGE_MISSING_DATA,
        )
    return close


def trailing_return_pct(series: DailySeries, current_close: float, months: int) -> Optional[float]:
    """Percent return from the bar ``months`` back to ``current_close``.

    Uses the most recent bar dated on or before (latest date - months).

    Returns:
        Return in percent, rounded to 3 dp, or ``None`` if there is no such
        bar or its close is invalid.
    """
    latest = series.latest_date
    if latest is None:
        return None
    target = subtract_months(latest, months)
    chosen = next((d for d in series.closes if d <= target), None)
    if chosen is None:
        return None
    close = series.closes[chosen]
    if close is None:
        return None
    return round((current_close - close) / close * 100.0, 3)


def compute_trailing(series: DailySeries, current_close: float) -> dict[str, Optional[float]]:
    """All horizons, keyed ``"3m"`` / ``"6m"`` / ``"12m"``."""
    return {
        f"{months}m": trailing_return_pct(series, current_close, months)
        for months in TRAILING_HORIZONS_MONTHS
    }


# ── HTTP client ───────────────────────────────────────────────────────────────


class AlphaVantageClient:
    """Thin async wrapper over one ``httpx.AsyncClient``.

    Args:
        http:   Open async client (caller owns its lifetime).
        config: LIVE settings (base URL, function name).
        api_key: Resolved Alpha Vantage key.
    """

    SOURCE = "AlphaVantage"

    def __init__(self, http: httpx.AsyncClient, config: LiveConfig, api_key: str) -> None:
        self._http = http
        self._config = config
        self._api_key = api_key

    async def fetch_daily(self, ticker: str, outputsize: str = "compact") -> DailySeries:
        """Fetch and parse one daily series.

        The body is interpreted whatever the HTTP status: upstream errors are
        signalled by sentinel fields, and a non-2xx body without one still
        fails as a missing series.

        Raises:
            UpstreamError: Transport failure, sentinel body or missing series.
            UpstreamBadResponseError: Body is not a JSON object.
        """
        fetched_at = utcnow_iso()
        try:
            resp = await self._http.get(
                self._config.base_url,
                params={
                    "function": self._config.function,
                    "symbol": ticker,
                    "outputsize": outputsize,
                    "apikey": self._api_key,
                },
            )
        except httpx.HTTPError as exc:
            reason = redact_api_key(str(exc))
            raise UpstreamError(
                f"Alpha Vantage request failed for {ticker}: {reason}",
                details=reason,
            ) from exc

        if resp.is_error:
            logger.warning(
                "LIVE fetch for %s returned HTTP %d; checking body for sentinels.",
                ticker, resp.status_code,
            )
        try:
            payload = resp.json()
        except ValueError as exc:
            raise UpstreamBadResponseError(
                "Alpha Vantage returned a non-JSON response.",
                details=resp.text[:5000],
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamBadResponseError(
                "Alpha Vantage returned a non-object JSON response.",
                details=payload,
            )

        series = parse_daily_series(ticker, payload, outputsize)
        logger.info(
            "LIVE fetch at=%s source=%s.%s(%s) ticker=%s last_refreshed=%s",
            fetched_at, self.SOURCE, self._config.function, outputsize,
            ticker, series.last_refreshed or "n/a",
        )
        return series


# ── Universe assembly ─────────────────────────────────────────────────────────


def resolve_api_key(config: LiveConfig, api_key: Optional[str] = None) -> str:
    """Return the API key, explicit argument first, then the environment.

    Raises:
        LiveNotConfiguredError: If no non-empty key is available.
    """
    key = (api_key or os.environ.get(config.api_key_env) or "").strip()
    if not key:
        raise LiveNotConfiguredError(config.api_key_env)
    return key


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def validate_live_rows(rows: list[dict[str, Any]]) -> None:
    """Check every assembled row before it becomes an entity.

    Raises:
        LiveMissingDataError: If ``rows`` is empty or any row lacks a ticker,
            a finite price, finite 3m/6m/12m returns or an inputs mapping.
    """
    if not rows:
        raise LiveMissingDataError("LIVE data missing: universe is empty.")

    for row in rows:
        ticker = row.get("ticker")
        if not ticker or not isinstance(ticker, str):
            raise LiveMissingDataError("LIVE data missing: row without ticker.", details=row)
        if not _is_finite_number(row.get("current_price")):
            raise LiveMissingDataError(
                f"LIVE data missing: current_price for {ticker} is missing/invalid.",
                details=row,
            )
        trailing = row.get("trailing") or {}
        if not all(_is_finite_number(trailing.get(k)) for k in ("3m", "6m", "12m")):
            raise LiveMissingDataError(
                f"LIVE data missing: trailing returns (3m/6m/12m) for {ticker} are missing/invalid.",
                details=row,
            )
        if not isinstance(row.get("inputs"), Mapping):
            raise LiveMissingDataError(
                f"LIVE data missing: factor inputs missing for {ticker}.",
                details=row,
            )


async def _fetch_ticker_row(av: AlphaVantageClient, ticker: str) -> dict[str, Any]:
    series = await av.fetch_daily(ticker, "compact")
    close = latest_close(series)
    trailing = compute_trailing(series, close)

    if any(v is None for v in trailing.values()):
        logger.info("Compact series too short for %s; refetching full history.", ticker)
        series = await av.fetch_daily(ticker, "full")
        close = latest_close(series)
        trailing = compute_trailing(series, close)

    return {
        "ticker": ticker,
        "company_name": ticker,
        "sector": UNKNOWN_SECTOR,
        "current_price": close,
        "inputs": dict(NEUTRAL_FACTOR_INPUTS),
        "trailing": trailing,
    }


async def fetch_live_universe(
    live_config: Optional[LiveConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
    api_key: Optional[str] = None,
) -> list[UniverseEntity]:
    """Fetch the LIVE universe, one ticker at a time.

    Args:
        live_config: LIVE settings; defaults to ``LiveConfig()``.
        client:      Optional open ``httpx.AsyncClient`` (tests inject one
            with a ``MockTransport``).  When omitted, one is created for
            this call and closed afterwards.
        api_key:     Explicit key; overrides the environment variable.

    Returns:
        One entity per configured ticker, in configured order.

    Raises:
        LiveNotConfiguredError: No API key.
        UpstreamError / UpstreamBadResponseError: Upstream failures,
            including transport errors and non-2xx responses.
        LiveMissingDataError: Incomplete rows after fetching.
    """
    config = live_config or LiveConfig()
    key = resolve_api_key(config, api_key)

    logger.info("Fetching LIVE universe: %d tickers from %s", len(config.tickers), config.base_url)

    rows: list[dict[str, Any]] = []
    if client is None:
        async with httpx.AsyncClient(timeout=config.timeout_seconds) as http:
            av = AlphaVantageClient(http, config, key)
            for ticker in config.tickers:
                rows.append(await _fetch_ticker_row(av, ticker))
    else:
        av = AlphaVantageClient(client, config, key)
        for ticker in config.tickers:
            rows.append(await _fetch_ticker_row(av, ticker))

    validate_live_rows(rows)

    try:
        return [
            UniverseEntity(
                ticker=row["ticker"],
                company_name=row["company_name"],
                sector=row["sector"],
                current_price=row["current_price"],
                inputs=row["inputs"],
                trailing=TrailingReturns.model_validate(row["trailing"]),
            )
            for row in rows
        ]
    except ValidationError as exc:
        raise LiveMissingDataError(f"LIVE data invalid: {exc}") from exc
