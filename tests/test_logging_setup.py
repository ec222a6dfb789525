# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from schedule_dashboard.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_levels() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("schedule_dashboard.schedule.dashboard", logging.DEBUG))
    assert not f.filter(_record("schedule_dashboard.backend.api", logging.INFO))
    assert f.filter(_record("schedule_dashboard.backend.api", logging.WARNING))
    assert not f.filter(_record("httpx", logging.WARNING))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert f.filter(_record("asyncio", logging.ERROR))


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def test_setup_logging_writes_the_file_log(tmp_path, restore_root_logger) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs")
    setup_logging(log_dir=tmp_path / "logs")  # no duplicate handlers

    assert len(restore_root_logger.handlers) == 2
    logging.getLogger("schedule_dashboard.backend.api").debug("GET /schedule/date/2024-02-15 -> 200")
    for h in restore_root_logger.handlers:
        h.flush()

    assert log_file == tmp_path / "logs" / "schedule-dashboard.log"
    assert "GET /schedule/date/2024-02-15 -> 200" in log_file.read_text("utf-8")
    assert logging.getLogger("httpx").level == logging.WARNING
