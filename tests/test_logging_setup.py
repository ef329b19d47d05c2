# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskboard_client.logging_setup import setup_logging


@pytest.fixture()
def root_logging():
    """setup_logging replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)
    logging.captureWarnings(False)


def test_console_is_one_line_per_record_and_file_keeps_tracebacks(
        tmp_path: Path, capsys: pytest.CaptureFixture[str], root_logging: logging.Logger
) -> None:
    log_file = setup_logging(log_dir=tmp_path, console_level=logging.DEBUG)
    log = logging.getLogger("taskboard_client.session.controller")

    try:
        raise ConnectionError("connection refused")
    except ConnectionError as e:
        log.warning("Failed to load current user: %s", e)
        log.debug("Session check traceback", exc_info=True)
    logging.getLogger("httpx").warning("third-party chatter")
    logging.getLogger("taskboard_client.connectors.console_connector").info("Console connector started.")
    for handler in root_logging.handlers:
        handler.flush()

    console = capsys.readouterr().err
    assert "Failed to load current user: connection refused" in console
    assert "Session check traceback" in console
    assert "Traceback" not in console
    assert "third-party chatter" not in console
    assert "Console connector started." not in console

    written = log_file.read_text(encoding="utf-8")
    assert log_file == tmp_path / "taskboard.log"
    assert "Traceback" in written
    assert "ConnectionError: connection refused" in written
    assert "third-party chatter" in written


def test_setup_twice_does_not_duplicate_handlers(tmp_path: Path, root_logging: logging.Logger) -> None:
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)

    assert len(root_logging.handlers) == 2
