# src/taskboard_client/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from .models import (
    ActiveForm,
    AuthMode,
    BusyMarker,
    Filter,
    FormDraft,
    Identity,
    Task,
)


class DeletionPhase(StrEnum):
    IDLE = "idle"
    STAGED = "staged"
    CONFIRMING = "confirming"


@dataclass
class AppState:
    """
    All mutable client state for one session.

    Components write only the fields they own; hosts read it to render.
    """

    settings: object

    # ---- Session ----
    identity: Identity | None = None
    auth_mode: AuthMode = AuthMode.LOGIN
    auth_error: str | None = None
    auth_local_error: str | None = None
    auth_submitting: bool = False
    session_loading: bool = True
    # Bumped on every reset; work started under an older value is stale.
    session_generation: int = 0

    # ---- Collections ----
    tasks: list[Task] = field(default_factory=list)
    users: list[Identity] = field(default_factory=list)
    tasks_loading: bool = False
    users_loading: bool = False
    error: str | None = None

    # ---- Workspace ----
    filter: Filter = Filter.ALL
    busy: BusyMarker | None = None
    active_form: ActiveForm | None = None
    form_draft: FormDraft | None = None
    form_error: str | None = None
    pending_deletion: Task | None = None

    @property
    def is_loading(self) -> bool:
        return self.tasks_loading or self.users_loading

    @property
    def show_loader(self) -> bool:
        return self.is_loading and not self.tasks

    @property
    def total_tasks(self) -> int:
        return len(self.tasks)

    @property
    def busy_task_id(self) -> int | None:
        return None if self.busy is None else self.busy.task_id

    def is_task_busy(self, task_id: int) -> bool:
        return self.busy is not None and self.busy.task_id == task_id

    @property
    def deletion_phase(self) -> DeletionPhase:
        if self.pending_deletion is None:
            return DeletionPhase.IDLE
        if self.is_task_busy(self.pending_deletion.id):
            return DeletionPhase.CONFIRMING
        return DeletionPhase.STAGED

    @property
    def scroll_locked(self) -> bool:
        """Background scrolling is suppressed while a modal workflow is shown."""
        return self.active_form is not None or self.pending_deletion is not None

    def close_form(self) -> None:
        self.active_form = None
        self.form_draft = None
        self.form_error = None

    def clear_session(self, message: str | None = None) -> None:
        """Drop everything tied to the current identity."""
        self.session_generation += 1
        self.close_form()
        self.tasks = []
        self.users = []
        self.busy = None
        self.pending_deletion = None
        self.identity = None
        self.error = None
        self.filter = Filter.ALL
        self.auth_mode = AuthMode.LOGIN
        self.auth_local_error = None
        self.auth_error = message


def create_initial_state(settings: object) -> AppState:
    """Fresh state: no identity yet, session check pending."""
    return AppState(settings=settings)
