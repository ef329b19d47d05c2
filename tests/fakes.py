# tests/fakes.py

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

_TASK_PATH = re.compile(r"^/api/tasks/(\d+)$")

TS = "2024-03-05T10:00:00.000Z"


@dataclass(slots=True)
class Gate:
    """Holds one matching request in flight until `release` is set."""

    entered: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)


class FakeTaskServer:
    """
    In-memory task service mounted through httpx.MockTransport.

    - Session is tracked server-side (one logged-in user at a time).
    - `fail(...)` queues canned error responses (or exceptions) per route.
    - `hold(...)` suspends a request until the test releases it.
    - `requests` logs (method, path) for every call.
    """

    def __init__(self) -> None:
        self.users: list[dict[str, Any]] = []
        self.passwords: dict[str, str] = {}
        self.tasks: list[dict[str, Any]] = []
        self.session_user_id: int | None = None
        self.requests: list[tuple[str, str]] = []
        self.bodies: list[dict[str, Any] | None] = []
        self._failures: dict[tuple[str, str], list[Any]] = {}
        self._gates: dict[tuple[str, str], Gate] = {}
        self._next_user_id = 1
        self._next_task_id = 1

    # ---- setup helpers ----

    def add_user(self, name: str, email: str, password: str) -> dict[str, Any]:
        user = {"id": self._next_user_id, "name": name, "email": email, "createdAt": TS, "updatedAt": TS}
        self._next_user_id += 1
        self.users.append(user)
        self.passwords[email] = password
        return user

    def add_task(
            self,
            title: str,
            *,
            status: str = "todo",
            description: str | None = None,
            assignee_id: int | None = None,
            task_id: int | None = None,
    ) -> dict[str, Any]:
        if task_id is None:
            task_id = self._next_task_id
        self._next_task_id = max(self._next_task_id, task_id + 1)
        task = {
            "id": task_id,
            "title": title,
            "description": description,
            "status": status,
            "assigneeId": assignee_id,
            "createdAt": TS,
            "updatedAt": TS,
        }
        self.tasks.append(task)
        return task

    def fail(self, method: str, path: str, status: int | Exception, body: Any = None, times: int = 1) -> None:
        self._failures.setdefault((method, path), []).extend([(status, body)] * times)

    def hold(self, method: str, path: str) -> Gate:
        gate = Gate()
        self._gates[(method, path)] = gate
        return gate

    def expire_session(self) -> None:
        self.session_user_id = None

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r == (method, path))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # ---- wire view ----

    def _user(self, user_id: int | None) -> dict[str, Any] | None:
        for u in self.users:
            if u["id"] == user_id:
                return u
        return None

    def task_json(self, task: dict[str, Any]) -> dict[str, Any]:
        out = dict(task)
        out["assignee"] = self._user(task["assigneeId"])
        return out

    def task_list(self) -> list[dict[str, Any]]:
        return [self.task_json(t) for t in self.tasks]

    # ---- handler ----

    async def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        key = (method, path)
        body = json.loads(request.content) if request.content else None
        self.requests.append(key)
        self.bodies.append(body)

        gate = self._gates.pop(key, None)
        if gate is not None:
            gate.entered.set()
            await gate.release.wait()

        queued = self._failures.get(key)
        if queued:
            status, fail_body = queued.pop(0)
            if isinstance(status, Exception):
                raise status
            if fail_body is None:
                return httpx.Response(status)
            if isinstance(fail_body, (bytes, str)):
                return httpx.Response(status, content=fail_body)
            return httpx.Response(status, json=fail_body)

        return self._route(method, path, body)

    def _unauthorized(self) -> httpx.Response:
        return httpx.Response(401, json={"message": "Not authenticated"})

    def _route(self, method: str, path: str, body: dict[str, Any] | None) -> httpx.Response:
        if path == "/api/auth/login" and method == "POST":
            email = (body or {}).get("email")
            if self.passwords.get(email) != (body or {}).get("password"):
                return httpx.Response(401, json={"message": "Invalid email or password"})
            user = next(u for u in self.users if u["email"] == email)
            self.session_user_id = user["id"]
            return httpx.Response(200, json={"user": user})

        if path == "/api/auth/register" and method == "POST":
            data = body or {}
            if data.get("email") in self.passwords:
                return httpx.Response(400, json={"errors": [{"msg": "Email already registered"}]})
            user = self.add_user(data["name"], data["email"], data["password"])
            self.session_user_id = user["id"]
            return httpx.Response(201, json={"user": user})

        if path == "/api/auth/logout" and method == "POST":
            self.session_user_id = None
            return httpx.Response(204)

        if self.session_user_id is None:
            return self._unauthorized()

        if path == "/api/auth/me" and method == "GET":
            return httpx.Response(200, json={"user": self._user(self.session_user_id)})

        if path == "/api/users" and method == "GET":
            return httpx.Response(200, json=list(self.users))

        if path == "/api/tasks" and method == "GET":
            return httpx.Response(200, json=self.task_list())

        if path == "/api/tasks" and method == "POST":
            data = body or {}
            task = self.add_task(
                data["title"],
                status=data.get("status") or "todo",
                description=data.get("description"),
                assignee_id=data.get("assigneeId"),
            )
            return httpx.Response(201, json=self.task_json(task))

        m = _TASK_PATH.match(path)
        if m:
            task_id = int(m.group(1))
            task = next((t for t in self.tasks if t["id"] == task_id), None)
            if task is None:
                return httpx.Response(404, json={"message": "Task not found"})
            if method == "PUT":
                data = body or {}
                task.update(
                    title=data["title"],
                    description=data.get("description"),
                    assigneeId=data.get("assigneeId"),
                    status=data.get("status") or task["status"],
                    updatedAt="2024-03-06T10:00:00.000Z",
                )
                return httpx.Response(200, json=self.task_json(task))
            if method == "PATCH":
                task.update(status=(body or {})["status"], updatedAt="2024-03-06T10:00:00.000Z")
                return httpx.Response(200, json=self.task_json(task))
            if method == "DELETE":
                self.tasks.remove(task)
                return httpx.Response(204)

        return httpx.Response(404, json={"message": f"No route for {method} {path}"})


def default_server() -> FakeTaskServer:
    server = FakeTaskServer()
    server.add_user("A", "a@b.com", "secret1")
    server.add_user("Bob", "bob@example.com", "hunter22")
    return server


async def login(controller, email: str = "a@b.com", password: str = "secret1") -> None:
    """Start the controller and log in as the default user."""
    await controller.start()
    assert await controller.login(email, password), controller.state.auth_error
