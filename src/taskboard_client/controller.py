# src/taskboard_client/controller.py

"""
Session and task state controller.

Wires one AppState to the API and the components that own its fields:

    SessionController        identity, auth errors, session reset/expiry
    CollectionSynchronizer   tasks/users lists and their loading flags
    TaskMutationCoordinator  create/update/status/delete + busy marker
    WorkflowCoordinator      task form and two-phase delete
    categorize()             kanban view derived from the task list

Hosts call the methods below and render `state`.
"""

from __future__ import annotations

import logging

import httpx

from .api.client import TaskboardApi
from .core.models import AuthMode, Filter, Task, TaskStatus
from .core.ports import TaskboardApiPort
from .core.state import AppState, create_initial_state
from .session.controller import SessionController
from .tasks.kanban import KanbanBoard, categorize
from .tasks.mutations import TaskMutationCoordinator
from .tasks.sync import CollectionSynchronizer
from .workflow.modal import WorkflowCoordinator

logger = logging.getLogger(__name__)


class TaskboardController:
    def __init__(
            self,
            settings,
            *,
            api: TaskboardApiPort | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.state: AppState = create_initial_state(settings)
        self.api: TaskboardApiPort = api if api is not None else TaskboardApi(settings, transport=transport)

        self.sync = CollectionSynchronizer(self.state, self.api, on_unauthorized=self._expire)
        self.session = SessionController(self.state, self.api, on_session_started=self.sync.refresh_all)
        self.mutations = TaskMutationCoordinator(
            self.state, self.api, self.sync, on_unauthorized=self._expire
        )
        self.workflow = WorkflowCoordinator(self.state, self.mutations)

    def _expire(self) -> None:
        self.session.expire()

    async def start(self) -> None:
        await self.session.check_session()

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> TaskboardController:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ---- session ----

    async def login(self, email: str, password: str) -> bool:
        return await self.session.login(email, password)

    async def register(self, name: str, email: str, password: str, confirm_password: str) -> bool:
        return await self.session.register(name, email, password, confirm_password)

    async def logout(self) -> None:
        await self.session.logout()

    def reset_session(self, message: str | None = None) -> None:
        self.session.reset_session(message)

    def set_auth_mode(self, mode: AuthMode) -> None:
        self.session.set_auth_mode(mode)

    # ---- collections / view ----

    async def refresh(self) -> None:
        if self.state.identity is None:
            return
        await self.sync.refresh_all()

    def set_filter(self, value: Filter) -> None:
        self.state.filter = Filter(value)

    def dismiss_error(self) -> None:
        self.state.error = None

    def board(self) -> KanbanBoard:
        return categorize(self.state.tasks, self.state.filter)

    def find_task(self, task_id: int) -> Task | None:
        for task in self.state.tasks:
            if task.id == task_id:
                return task
        return None

    # ---- mutations ----

    async def change_status(self, task: Task, status: TaskStatus) -> bool:
        return await self.mutations.set_status(task, status)

    def open_create_form(self) -> bool:
        return self.workflow.open_create_form()

    def open_edit_form(self, task: Task) -> bool:
        return self.workflow.open_edit_form(task)

    def close_form(self) -> None:
        self.workflow.close_form()

    def update_draft(self, **fields) -> None:
        self.workflow.update_draft(**fields)

    async def submit_form(self) -> bool:
        return await self.workflow.submit_form()

    def request_delete(self, task: Task) -> bool:
        return self.workflow.request_delete(task)

    async def confirm_delete(self) -> bool:
        return await self.workflow.confirm_delete()

    def cancel_delete(self) -> bool:
        return self.workflow.cancel_delete()
