# src/taskboard_client/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_APP_LOGGER = "taskboard_client"
_LOG_FILE_NAME = "taskboard.log"
_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Decides what reaches the terminal next to the REPL prompt.

    Application records pass at the handler level, except the console
    connector, which prints its own output and only surfaces WARNING+.
    Everything else (httpx, asyncio, py.warnings) needs ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == _APP_LOGGER or name.startswith(_APP_LOGGER + "."):
            if name.startswith(_APP_LOGGER + ".connectors."):
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


class _ConsoleFormatter(logging.Formatter):
    """One line per record: tracebacks go to the log file only."""

    def format(self, record: logging.LogRecord) -> str:
        if record.exc_info or record.exc_text or record.stack_info:
            record = logging.makeLogRecord(record.__dict__)
            record.exc_info = None
            record.exc_text = None
            record.stack_info = None
        return super().format(record)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_ConsoleFormatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    handler.addFilter(_ConsoleNoiseFilter())
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskboard",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all logging to stderr (filtered, no tracebacks) and to
    `<log_dir>/taskboard.log` (everything at `file_level`).

    Replaces whatever handlers the root logger had, so calling it again
    does not duplicate output. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / _LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for existing in list(root.handlers):
        root.removeHandler(existing)

    root.addHandler(_console_handler(console_level))
    root.addHandler(_file_handler(log_file, file_level))

    logging.captureWarnings(True)
    return log_file
