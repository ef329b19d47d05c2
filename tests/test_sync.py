# tests/test_sync.py

from __future__ import annotations

import asyncio

import httpx
import pytest

from taskboard_client.api.errors import SESSION_EXPIRED_MESSAGE
from taskboard_client.core.models import Filter, TaskStatus

from .fakes import FakeTaskServer, login


@pytest.mark.asyncio
async def test_failed_fetch_keeps_existing_collection(controller, server: FakeTaskServer) -> None:
    server.add_task("Keep me")
    await login(controller)
    assert [t.title for t in controller.state.tasks] == ["Keep me"]

    server.fail("GET", "/api/tasks", 503, {"message": "Service unavailable"})
    ok = await controller.sync.refresh_tasks()

    assert ok is False
    assert [t.title for t in controller.state.tasks] == ["Keep me"]
    assert controller.state.error == "Service unavailable"
    assert controller.state.tasks_loading is False


@pytest.mark.asyncio
async def test_successful_fetch_clears_previous_error(controller, server: FakeTaskServer) -> None:
    await login(controller)
    server.fail("GET", "/api/users", 500)
    await controller.sync.refresh_users()
    assert controller.state.error == "500 Internal Server Error"

    server.add_task("Fresh")
    assert await controller.sync.refresh_tasks() is True

    assert controller.state.error is None
    assert [t.title for t in controller.state.tasks] == ["Fresh"]


@pytest.mark.asyncio
async def test_network_failure_uses_fallback_message(controller, server: FakeTaskServer) -> None:
    await login(controller)
    server.fail("GET", "/api/users", httpx.ReadTimeout("slow"))

    assert await controller.sync.refresh_users() is False
    assert controller.state.error == "Failed to load users."
    assert [u.id for u in controller.state.users] == [1, 2]


@pytest.mark.asyncio
async def test_unauthorized_fetch_resets_everything(controller, server: FakeTaskServer) -> None:
    server.add_task("T1", status="in_progress")
    await login(controller)
    controller.set_filter(Filter.IN_PROGRESS)
    controller.request_delete(controller.state.tasks[0])

    server.expire_session()
    ok = await controller.sync.refresh_tasks()

    state = controller.state
    assert ok is False
    assert state.identity is None
    assert state.tasks == [] and state.users == []
    assert state.pending_deletion is None
    assert state.busy is None
    assert state.filter == Filter.ALL
    assert state.auth_error == SESSION_EXPIRED_MESSAGE
    # Session expiry is not reported as a workspace error.
    assert state.error is None


@pytest.mark.asyncio
async def test_loading_flags_are_independent(controller, server: FakeTaskServer) -> None:
    await login(controller)
    gate = server.hold("GET", "/api/users")

    pending = asyncio.create_task(controller.refresh())
    await gate.entered.wait()

    assert controller.state.users_loading is True
    assert controller.state.is_loading is True

    gate.release.set()
    await pending

    assert controller.state.is_loading is False


@pytest.mark.asyncio
async def test_tasks_decoded_in_server_order(controller, server: FakeTaskServer) -> None:
    server.add_task("c", status="done", task_id=30)
    server.add_task("a", status="todo", task_id=10, assignee_id=1, description="first")
    server.add_task("b", status="in_progress", task_id=20)
    await login(controller)

    tasks = controller.state.tasks
    assert [t.id for t in tasks] == [30, 10, 20]
    assert tasks[0].status == TaskStatus.DONE
    assert tasks[1].assignee_id == 1 and tasks[1].assignee is not None
    assert tasks[1].description == "first"
    assert tasks[2].assignee is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "late_outcome",
    [None, (401, {"message": "Not authenticated"}), (500, {"message": "Database unavailable"})],
)
async def test_fetch_from_previous_session_leaves_new_session_alone(
        controller, server: FakeTaskServer, late_outcome
) -> None:
    server.add_task("Shared")
    await login(controller)
    gate = server.hold("GET", "/api/tasks")
    late = asyncio.create_task(controller.sync.refresh_tasks())
    await gate.entered.wait()

    await controller.logout()
    assert await controller.login("bob@example.com", "hunter22")
    fresh = controller.state.tasks
    if late_outcome is not None:
        server.fail("GET", "/api/tasks", *late_outcome)
    gate.release.set()

    assert await late is False
    assert controller.state.identity.name == "Bob"
    assert controller.state.tasks is fresh
    assert controller.state.error is None
    assert controller.state.auth_error is None
