"""Tests for stock_check.utils.time_utils and stock_check.utils.logging."""

from __future__ import annotations

import json
import logging
from datetime import date

import pytest

from stock_check.config import LoggingConfig
from stock_check.utils.logging import _JsonFormatter, configure_logging, redact_api_key
from stock_check.utils.time_utils import (
    next_calendar_day,
    parse_iso_date,
    subtract_months,
    utcnow,
    utcnow_iso,
)


# ── Dates ─────────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "value,months,expected",
    [
        (date(2025, 6, 30), 3, date(2025, 3, 30)),
        (date(2025, 5, 31), 3, date(2025, 2, 28)),
        (date(2024, 5, 31), 3, date(2024, 2, 29)),
        (date(2025, 1, 15), 1, date(2024, 12, 15)),
        (date(2025, 3, 31), 12, date(2024, 3, 31)),
        (date(2025, 8, 31), 6, date(2025, 2, 28)),
        (date(2025, 8, 31), 0, date(2025, 8, 31)),
    ],
)
def test_subtract_months(value: date, months: int, expected: date) -> None:
    assert subtract_months(value, months) == expected


def test_subtract_months_negative_raises() -> None:
    with pytest.raises(ValueError):
        subtract_months(date(2025, 1, 1), -1)


def test_parse_iso_date() -> None:
    assert parse_iso_date("2026-01-02") == date(2026, 1, 2)
    assert parse_iso_date(" 2026-01-02 ") == date(2026, 1, 2)
    assert parse_iso_date("not a date") is None
    assert parse_iso_date("2026-02-30") is None


@pytest.mark.parametrize(
    "value", ["20260101", "2026-W01-1", "2026-1-2", "2026-01-02T00:00", "2026/01/02", ""],
)
def test_parse_iso_date_rejects_other_iso_forms(value: str) -> None:
    assert parse_iso_date(value) is None


def test_next_calendar_day_crosses_year() -> None:
    assert next_calendar_day(date(2025, 12, 31)) == date(2026, 1, 1)


def test_utcnow_is_aware() -> None:
    assert utcnow().tzinfo is not None
    assert utcnow_iso().endswith("Z")


# ── Logging ───────────────────────────────────────────────────────────────────


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_with_file(tmp_path, restore_root_logger) -> None:
    log_file = tmp_path / "logs" / "run.log"
    configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))

    logging.getLogger("stock_check.test").info("hello %s", "file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "hello file" in log_file.read_text(encoding="utf-8")
    assert logging.getLogger("httpx").level == logging.WARNING


def test_json_formatter_includes_extra() -> None:
    record = logging.LogRecord("stock_check", logging.INFO, __file__, 1, "msg %d", (7,), None)
    record.run_slug = "abc"
    line = json.loads(_JsonFormatter().format(record))
    assert line["msg"] == "msg 7"
    assert line["level"] == "INFO"
    assert line["run_slug"] == "abc"
    assert line["ts"].endswith("Z")


def test_redact_api_key() -> None:
    url = "https://www.alphavantage.co/query?function=X&symbol=MSFT&apikey=SECRET123&outputsize=full"
    assert redact_api_key(url) == (
        "https://www.alphavantage.co/query?function=X&symbol=MSFT&apikey=***&outputsize=full"
    )
    assert redact_api_key("no key here") == "no key here"


def test_log_file_masks_api_key(tmp_path, restore_root_logger) -> None:
    log_file = tmp_path / "run.log"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))

    logging.getLogger("stock_check.test").warning(
        "GET %s failed", "https://example.test/query?apikey=SECRET123", extra={"run_slug": "r1"}
    )
    for handler in logging.getLogger().handlers:
        handler.flush()

    line = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert line["msg"] == "GET https://example.test/query?apikey=*** failed"
    assert line["run_slug"] == "r1"
    assert "SECRET123" not in log_file.read_text(encoding="utf-8")
