"""
Failure taxonomy for model runs.

Every failure that aborts a run is a ``StockCheckError`` carrying a stable,
machine-readable ``code`` (shown to users and asserted in tests) plus an
optional ``details`` payload (e.g. the upstream JSON body that triggered it).

Codes
-----
CONFIG_INVALID              Run config failed validation; run never attempted.
LIVE_NOT_CONFIGURED         LIVE mode requested but no API key is available.
LIVE_MISSING_DATA           LIVE universe empty or a row lacks a required field.
ALPHAVANTAGE_ERROR          Upstream returned an error payload.
ALPHAVANTAGE_RATE_LIMIT     Upstream returned a call-frequency ``Note``.
ALPHAVANTAGE_MISSING_DATA   Upstream payload lacks the daily time series / close.
ALPHAVANTAGE_BAD_RESPONSE   Upstream body was not parseable JSON.

None of these are retried by the core; retry policy belongs to the caller.
Malformed factor inputs are NOT errors; the normalizer degrades them to the
neutral midpoint instead.
"""

from __future__ import annotations

from typing import Any, Optional

CONFIG_INVALID            = "CONFIG_INVALID"
LIVE_NOT_CONFIGURED       = "LIVE_NOT_CONFIGURED"
LIVE_MISSING_DATA         = "LIVE_MISSING_DATA"
ALPHAVANTAGE_ERROR        = "ALPHAVANTAGE_ERROR"
ALPHAVANTAGE_RATE_LIMIT   = "ALPHAVANTAGE_RATE_LIMIT"
ALPHAVANTAGE_MISSING_DATA = "ALPHAVANTAGE_MISSING_DATA"
ALPHAVANTAGE_BAD_RESPONSE = "ALPHAVANTAGE_BAD_RESPONSE"


class StockCheckError(RuntimeError):
    """Base class for all coded run failures.

    Attributes:
        code:    Stable error code string (one of the module constants).
        details: Optional context (upstream payload, offending row, ...).
    """

    code: str = "STOCK_CHECK_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.details = details


class ConfigInvalidError(StockCheckError):
    """Raised when a run config has validation issues.

    Attributes:
        issues: Human-readable issue strings from ``validate_run_config()``.
    """

    code = CONFIG_INVALID

    def __init__(self, issues: list[str]) -> None:
        self.issues = list(issues)
        super().__init__("Invalid run config: " + "; ".join(self.issues))


class LiveNotConfiguredError(StockCheckError):
    """Raised when LIVE mode is requested without credentials."""

    code = LIVE_NOT_CONFIGURED

    def __init__(self, env_var: str) -> None:
        self.env_var = env_var
        super().__init__(
            f"LIVE data is not configured: set {env_var} in the environment "
            "or .env to enable the Alpha Vantage adapter."
        )


class LiveMissingDataError(StockCheckError):
    """Raised when the LIVE universe is empty or a row is incomplete."""

    code = LIVE_MISSING_DATA


class UpstreamError(StockCheckError):
    """Raised for upstream error, rate-limit and missing-series payloads."""

    code = ALPHAVANTAGE_ERROR


class UpstreamBadResponseError(StockCheckError):
    """Raised when the upstream body cannot be parsed as JSON."""

    code = ALPHAVANTAGE_BAD_RESPONSE
