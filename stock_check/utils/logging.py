"""
Logging setup for Stock Check.

``configure_logging(config)`` is called once per CLI command, after the
config is loaded and before a model run.  Library modules only ever call
``logging.getLogger(__name__)``.

Things specific to this project:

  - Handlers write to stderr.  stdout carries the result table, so
    ``stock-check run > table.txt`` stays clean.
  - Every orchestrator line carries the run slug, and the LIVE adapter logs
    one line per upstream fetch (ticker, outputsize, last refreshed).  With
    ``log_file`` set, the file is the audit trail of where LIVE prices and
    trailing returns came from.
  - The Alpha Vantage key travels as the ``apikey`` query parameter, so it
    can surface in URLs quoted by transport errors.  Every handler masks it.

JSON format (``json_format = true`` under [logging]) emits one object per
line, with ``extra=`` keys such as ``run_slug`` lifted to the top level::

    {"ts": "2026-01-02T14:30:00Z", "level": "INFO", "logger": "stock_check.pipeline.run",
     "msg": "Model run completed ...", "run_slug": "..."}
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stock_check.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Third-party loggers that log every request URL (apikey included) at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")

_API_KEY_RE = re.compile(r"(apikey=)[^&\s\"']+", re.IGNORECASE)

# Attributes present on every LogRecord; anything else came from extra=.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def redact_api_key(text: str) -> str:
    """Replace the value of any ``apikey=`` query parameter with ``***``."""
    return _API_KEY_RE.sub(r"\1***", text)


class _ApiKeyFilter(logging.Filter):
    """Mask Alpha Vantage keys in the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact_api_key(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg``, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = redact_api_key(self.formatException(record.exc_info))
        for key, val in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                payload[key] = val
        return json.dumps(payload, default=str)


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Replaces any handlers installed by an earlier call, so each CLI command
    (and each test) starts from the configured state.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    formatter: logging.Formatter
    if config.json_format:
        formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    key_filter = _ApiKeyFilter()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(key_filter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
