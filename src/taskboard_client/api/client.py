# src/taskboard_client/api/client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.models import Identity, Task, TaskPayload, TaskStatus
from .errors import TaskboardApiError, raise_for_status

logger = logging.getLogger(__name__)


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise TaskboardApiError(response.status_code, "Malformed response from server.") from e


def _user_from_auth(response: httpx.Response) -> Identity:
    data = _json_body(response)
    if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
        raise TaskboardApiError(response.status_code, "Malformed response from server.")
    try:
        return Identity.from_json(data["user"])
    except (KeyError, TypeError, ValueError) as e:
        raise TaskboardApiError(response.status_code, "Malformed response from server.") from e


def _task_or_none(response: httpx.Response) -> Task | None:
    # Mutations are followed by a full refresh; the echoed task is informational only.
    if not response.content:
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict) or "id" not in data:
        return None
    return Task.from_json(data)


class TaskboardApi:
    """
    Async client for the task service.

    - One httpx.AsyncClient per session; its cookie jar carries the session cookie
      on every call (the "credentials included" contract).
    - 401 -> UnauthorizedError, other non-2xx -> TaskboardApiError.
    - Transport problems propagate as httpx.HTTPError.
    """

    def __init__(self, settings, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        base_url = str(getattr(settings, "api_url", "") or "").rstrip("/")
        if not base_url:
            raise RuntimeError("API URL is not set. Set TASKBOARD_API_URL in your .env.")

        timeout = float(getattr(settings, "timeout_seconds", 15.0))
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            verify=bool(getattr(settings, "verify_tls", True)),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, url)
        response = await self._client.request(method, url, **kwargs)
        if not response.is_success:
            logger.debug("%s %s -> %s", method, url, response.status_code)
        raise_for_status(response)
        return response

    # ---- auth ----

    async def me(self) -> Identity:
        return _user_from_auth(await self._request("GET", "/api/auth/me"))

    async def login(self, email: str, password: str) -> Identity:
        response = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        return _user_from_auth(response)

    async def register(self, name: str, email: str, password: str, confirm_password: str) -> Identity:
        response = await self._request(
            "POST",
            "/api/auth/register",
            json={
                "name": name,
                "email": email,
                "password": password,
                "confirmPassword": confirm_password,
            },
        )
        return _user_from_auth(response)

    async def logout(self) -> None:
        await self._request("POST", "/api/auth/logout")

    # ---- collections ----

    async def list_users(self) -> list[Identity]:
        response = await self._request("GET", "/api/users")
        data = _json_body(response)
        if not isinstance(data, list):
            raise TaskboardApiError(response.status_code, "Malformed user list from server.")
        return [Identity.from_json(u) for u in data if isinstance(u, dict)]

    async def list_tasks(self) -> list[Task]:
        response = await self._request("GET", "/api/tasks", params={"status": "all"})
        data = _json_body(response)
        if not isinstance(data, list):
            raise TaskboardApiError(response.status_code, "Malformed task list from server.")
        return [Task.from_json(t) for t in data if isinstance(t, dict)]

    # ---- mutations ----

    async def create_task(self, payload: TaskPayload) -> Task | None:
        response = await self._request("POST", "/api/tasks", json=payload.to_json())
        return _task_or_none(response)

    async def update_task(self, task_id: int, payload: TaskPayload) -> Task | None:
        response = await self._request("PUT", f"/api/tasks/{task_id}", json=payload.to_json())
        return _task_or_none(response)

    async def patch_task_status(self, task_id: int, status: TaskStatus) -> Task | None:
        response = await self._request(
            "PATCH", f"/api/tasks/{task_id}", json={"status": TaskStatus(status).value}
        )
        return _task_or_none(response)

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/api/tasks/{task_id}")
