# src/schedule_dashboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "schedule-dashboard.log"

_QUIET_LIBRARIES = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console only: dashboard logs pass, request/response chatter from the
    backend package needs WARNING, everything else (captured warnings and
    third-party loggers) needs ERROR. The log file gets all of it.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("schedule_dashboard."):
            return record.levelno >= logging.ERROR
        if name.startswith("schedule_dashboard.backend."):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/schedule",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route the root logger to stderr (filtered) and to LOG_FILE_NAME under log_dir.

    Replaces any handlers already on the root logger, so calling it again
    does not duplicate output. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    to_file = logging.FileHandler(str(log_file), encoding="utf-8")
    to_file.setLevel(file_level)
    to_file.setFormatter(fmt)
    root.addHandler(to_file)

    # warnings.warn(...) ends up under the "py.warnings" logger
    logging.captureWarnings(True)

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
