from __future__ import annotations

import logging

from xml2excel.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    setup_logging,
)


def _record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord("x", level, __file__, 1, msg, None, None)


def test_labels() -> None:
    fmt = LabeledFormatter()
    assert fmt.format(_record(logging.INFO, "hello")) == "INFO hello"
    assert fmt.format(_record(logging.WARNING, "careful")) == "WARN careful"
    assert fmt.format(_record(logging.ERROR, "bad")) == "ERROR bad"
    assert fmt.format(_record(SUMMARY_LEVEL, "files=1/1")) == "SUMMARY files=1/1"


def test_setup_is_idempotent() -> None:
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert len(first.handlers) == 1
    assert first.propagate is False


def test_module_loggers_reach_app_handler(capsys) -> None:
    setup_logging()
    logging.getLogger(f"{APP_LOGGER_NAME}.services.converter").warning("child message")
    assert "WARN child message" in capsys.readouterr().out


def test_log_summary(capsys) -> None:
    log_summary("files=0/0 success=0")
    assert "SUMMARY files=0/0 success=0" in capsys.readouterr().out


def test_reset_logging() -> None:
    setup_logging()
    reset_logging()
    logger = logging.getLogger(APP_LOGGER_NAME)
    assert logger.handlers == []
    assert logger.propagate is True
    assert get_logger() is logger
