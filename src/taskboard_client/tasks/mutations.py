# src/taskboard_client/tasks/mutations.py

from __future__ import annotations

"""
Task mutation coordinator.

Every mutation goes through the same sequence:
  acquire busy marker -> remote call -> full task refresh (success only) -> release marker

The busy marker is one slot for the whole controller: while any mutation is in
flight, every other mutation is rejected, even on an unrelated task.
Transition legality is not checked here; the board decides which moves it offers.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..api.errors import TaskboardApiError, UnauthorizedError
from ..core.models import BusyMarker, Task, TaskPayload, TaskStatus
from ..core.ports import ExpireHook, TaskboardApiPort
from ..core.state import AppState
from .sync import CollectionSynchronizer

logger = logging.getLogger(__name__)


class TaskMutationCoordinator:
    def __init__(
            self,
            state: AppState,
            api: TaskboardApiPort,
            synchronizer: CollectionSynchronizer,
            *,
            on_unauthorized: ExpireHook,
    ) -> None:
        self._state = state
        self._api = api
        self._sync = synchronizer
        self._on_unauthorized = on_unauthorized

    async def _run(
            self,
            *,
            target_id: int | None,
            action: str,
            fallback_message: str,
            call: Callable[[], Awaitable[Any]],
            close_form_on_success: bool = False,
    ) -> bool:
        if self._state.busy is not None:
            logger.info(
                "%s rejected: mutation already in flight (busy task_id=%s)",
                action,
                self._state.busy.task_id,
            )
            return False

        generation = self._state.session_generation
        marker = BusyMarker(task_id=target_id)
        self._state.busy = marker
        self._state.error = None
        try:
            try:
                await call()
            except UnauthorizedError:
                if self._state.session_generation == generation:
                    self._on_unauthorized()
                return False
            except TaskboardApiError as e:
                logger.warning("%s failed task_id=%s: %s", action, target_id, e.message)
                if self._state.session_generation == generation:
                    self._state.error = e.message
                return False
            except Exception as e:
                logger.warning("%s failed task_id=%s: %s", action, target_id, e)
                logger.debug("%s traceback", action, exc_info=True)
                if self._state.session_generation == generation:
                    self._state.error = fallback_message
                return False

            logger.info("%s succeeded task_id=%s", action, target_id)
            if self._state.session_generation != generation:
                return False
            await self._sync.refresh_tasks()
            if close_form_on_success:
                self._state.close_form()
            return True
        finally:
            # A session reset (or a later session) may own the slot by now.
            if self._state.busy is marker:
                self._state.busy = None

    async def create(self, payload: TaskPayload) -> bool:
        body = payload.with_default_status(TaskStatus.TODO)
        return await self._run(
            target_id=None,
            action="create",
            fallback_message="Failed to create task.",
            call=lambda: self._api.create_task(body),
            close_form_on_success=True,
        )

    async def update(self, task: Task, payload: TaskPayload) -> bool:
        body = payload.with_default_status(task.status)
        return await self._run(
            target_id=task.id,
            action="update",
            fallback_message="Failed to update task.",
            call=lambda: self._api.update_task(task.id, body),
            close_form_on_success=True,
        )

    async def set_status(self, task: Task, status: TaskStatus) -> bool:
        next_status = TaskStatus(status)
        return await self._run(
            target_id=task.id,
            action=f"status->{next_status.value}",
            fallback_message="Failed to update task.",
            call=lambda: self._api.patch_task_status(task.id, next_status),
        )

    async def delete(self, task: Task) -> bool:
        return await self._run(
            target_id=task.id,
            action="delete",
            fallback_message="Failed to delete task.",
            call=lambda: self._api.delete_task(task.id),
        )
