# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard_client.controller import TaskboardController

from .fakes import FakeTaskServer, default_server


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the controller.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        api_url="http://taskboard.test",
        timeout_seconds=5.0,
        verify_tls=True,
        data_dir=tmp_path,
    )


@pytest.fixture()
def server() -> FakeTaskServer:
    return default_server()


@pytest.fixture()
def controller(settings: SimpleNamespace, server: FakeTaskServer) -> TaskboardController:
    """
    Controller wired to the in-memory fake server.

    NOTE: the real TaskboardApi/httpx stack is used; only the transport is fake.
    """
    return TaskboardController(settings, transport=server.transport())
