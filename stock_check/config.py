"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``STOCK_CHECK_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The run section is special: it is the user-editable model config
(``data_mode``, ``mock_seed``, ``mock_universe_size``) and may arrive as a
plain mapping from a saved run or a UI form.  ``validate_run_config()``
returns human-readable issues for such a mapping, and
``RunConfig.from_mapping()`` refuses to build a config while any remain.

The Alpha Vantage API key is never stored in config; ``LiveConfig`` only
names the environment variable that holds it.
"""

from __future__ import annotations

import math
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from stock_check.errors import ConfigInvalidError
from stock_check.models.run import DataMode

MIN_MOCK_UNIVERSE_SIZE = 1000
DEFAULT_MOCK_SEED = 1
DEFAULT_MOCK_UNIVERSE_SIZE = 1000
MIN_LIVE_TICKERS = 10

DEFAULT_LIVE_TICKERS: list[str] = [
    "AAPL", "MSFT", "AMZN", "GOOGL", "META", "TSLA",
    "NVDA", "JPM", "UNH", "XOM", "INTC",
]


# ── Run config validation ─────────────────────────────────────────────────────


def _as_number(value: Any) -> Optional[float]:
    """Coerce ``value`` to a finite float, or ``None``.  Booleans are rejected."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return num if math.isfinite(num) else None


def _as_integer(value: Any) -> Optional[int]:
    """Coerce ``value`` to an int if it is integer-valued, else ``None``."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    num = _as_number(value)
    if num is None or not num.is_integer():
        return None
    return int(num)


def _normalise_mode(value: Any) -> str:
    return str(value or DataMode.LIVE.value).strip().upper()


def validate_run_config(config: Mapping[str, Any]) -> list[str]:
    """Return validation issues for a run-config mapping (empty if valid).

    ``data_mode`` defaults to LIVE and is case-insensitive.  Seed and size
    are only checked in MOCK mode, where an absent key is reported as not
    an integer.  The field defaults apply only to a directly built
    ``RunConfig``.

    Args:
        config: Mapping with ``data_mode`` and optional ``mock_seed`` /
            ``mock_universe_size``.

    Returns:
        Human-readable issue strings, in a stable order.
    """
    issues: list[str] = []
    mode = _normalise_mode(config.get("data_mode"))
    if mode not in (DataMode.LIVE.value, DataMode.MOCK.value):
        issues.append("data_mode must be 'MOCK' or 'LIVE'.")

    if mode == DataMode.MOCK.value:
        seed = config.get("mock_seed")
        size = config.get("mock_universe_size")

        if _as_integer(seed) is None:
            issues.append("mock_seed must be an integer.")
        if _as_integer(size) is None:
            issues.append("mock_universe_size must be an integer.")
        size_num = _as_number(size)
        if size_num is not None and size_num < MIN_MOCK_UNIVERSE_SIZE:
            issues.append(f"mock_universe_size must be ≥ {MIN_MOCK_UNIVERSE_SIZE}.")

    return issues


# ── Sub-config models ─────────────────────────────────────────────────────────


class RunConfig(BaseModel):
    """User-editable model run settings."""

    model_config = ConfigDict(frozen=True)

    data_mode: DataMode = DataMode.LIVE
    mock_seed: int = DEFAULT_MOCK_SEED
    mock_universe_size: int = DEFAULT_MOCK_UNIVERSE_SIZE

    @model_validator(mode="after")
    def validate_mock_size(self) -> "RunConfig":
        if (
            self.data_mode == DataMode.MOCK
            and self.mock_universe_size < MIN_MOCK_UNIVERSE_SIZE
        ):
            raise ValueError(
                f"mock_universe_size must be >= {MIN_MOCK_UNIVERSE_SIZE} in MOCK mode, "
                f"got {self.mock_universe_size}."
            )
        return self

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "RunConfig":
        """Build a ``RunConfig`` from a loose mapping.

        Raises:
            ConfigInvalidError: If ``validate_run_config()`` reports issues.
        """
        issues = validate_run_config(config)
        if issues:
            raise ConfigInvalidError(issues)

        kwargs: dict[str, Any] = {"data_mode": DataMode(_normalise_mode(config.get("data_mode")))}
        # In LIVE mode seed/size are ignored; keep any that are well-formed.
        seed = _as_integer(config.get("mock_seed"))
        size = _as_integer(config.get("mock_universe_size"))
        if seed is not None:
            kwargs["mock_seed"] = seed
        if size is not None and size >= MIN_MOCK_UNIVERSE_SIZE:
            kwargs["mock_universe_size"] = size
        return cls(**kwargs)


class LiveConfig(BaseModel):
    """Alpha Vantage adapter settings.

    ``base_url`` may point at a caching proxy that speaks the same
    query-string contract.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://www.alphavantage.co/query"
    api_key_env: str = "ALPHA_VANTAGE_API_KEY"
    function: str = "TIME_SERIES_DAILY_ADJUSTED"
    tickers: list[str] = DEFAULT_LIVE_TICKERS
    timeout_seconds: float = 30.0

    @field_validator("tickers")
    @classmethod
    def validate_tickers(cls, v: list[str]) -> list[str]:
        cleaned = [t.strip().upper() for t in v if t and t.strip()]
        if len(cleaned) < MIN_LIVE_TICKERS:
            raise ValueError(
                f"live.tickers must contain at least {MIN_LIVE_TICKERS} symbols "
                f"to fill the Top 10, got {len(cleaned)}."
            )
        return cleaned

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {v}.")
        return v


class RankingConfig(BaseModel):
    """Ranking settings.  Top-N size and gate thresholds are fixed constants."""

    model_config = ConfigDict(frozen=True)

    append_ticker: str = "INTC"

    @field_validator("append_ticker")
    @classmethod
    def validate_append_ticker(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("append_ticker must not be empty.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: Optional[str] = None
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class OutputConfig(BaseModel):
    """Where exported runs are written."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "data/outputs"


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    CLI commands receive an ``AppConfig`` instance constructed by
    ``load_config()``, which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    run: RunConfig = RunConfig()
    live: LiveConfig = LiveConfig()
    ranking: RankingConfig = RankingConfig()
    logging: LoggingConfig = LoggingConfig()
    output: OutputConfig = OutputConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        ConfigInvalidError: If the merged ``[run]`` section has issues.
        pydantic.ValidationError: If other merged values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply STOCK_CHECK_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply STOCK_CHECK_* env vars to the raw config dict.

    Supported overrides:
      STOCK_CHECK_DATA_MODE           → raw["run"]["data_mode"]
      STOCK_CHECK_MOCK_SEED           → raw["run"]["mock_seed"]
      STOCK_CHECK_MOCK_UNIVERSE_SIZE  → raw["run"]["mock_universe_size"]
      STOCK_CHECK_LOG_LEVEL           → raw["logging"]["level"]
      STOCK_CHECK_DEBUG               → raw["debug"]
    """
    if data_mode := os.environ.get("STOCK_CHECK_DATA_MODE"):
        raw.setdefault("run", {})["data_mode"] = data_mode

    if seed := os.environ.get("STOCK_CHECK_MOCK_SEED"):
        raw.setdefault("run", {})["mock_seed"] = seed

    if size := os.environ.get("STOCK_CHECK_MOCK_UNIVERSE_SIZE"):
        raw.setdefault("run", {})["mock_universe_size"] = size

    if log_level := os.environ.get("STOCK_CHECK_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("STOCK_CHECK_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        run=RunConfig.from_mapping(raw.get("run", {})),
        live=LiveConfig(**raw.get("live", {})),
        ranking=RankingConfig(**raw.get("ranking", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        output=OutputConfig(**raw.get("output", {})),
        debug=raw.get("debug", False),
    )
