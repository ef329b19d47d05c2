# src/taskboard_client/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the controller components.

Components depend on Protocols instead of the concrete httpx client,
so tests can swap the transport or the whole API object.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from .models import Identity, Task, TaskPayload, TaskStatus

SessionHook = Callable[[], Awaitable[None]]
# Awaited when the identity goes from absent to present.

ExpireHook = Callable[[], None]
# Called by any component that got a 401 from an authenticated call.


class TaskboardApiPort(Protocol):
    async def me(self) -> Identity: ...
    async def login(self, email: str, password: str) -> Identity: ...
    async def register(
            self,
            name: str,
            email: str,
            password: str,
            confirm_password: str,
    ) -> Identity: ...
    async def logout(self) -> None: ...

    async def list_users(self) -> list[Identity]: ...
    async def list_tasks(self) -> list[Task]: ...

    async def create_task(self, payload: TaskPayload) -> Task | None: ...
    async def update_task(self, task_id: int, payload: TaskPayload) -> Task | None: ...
    async def patch_task_status(self, task_id: int, status: TaskStatus) -> Task | None: ...
    async def delete_task(self, task_id: int) -> None: ...

    async def aclose(self) -> None: ...
