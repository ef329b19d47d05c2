# src/taskboard_client/workflow/modal.py

from __future__ import annotations

"""
Modal workflows: the task form and the delete confirmation.

At most one of them is open at a time. Deletion is two-phase:

    idle --request_delete--> staged --confirm_delete--> confirming
    confirming --success--> idle
    confirming --failure--> staged
    staged --cancel_delete--> idle       (cancel is ignored while confirming)
"""

import logging

from ..core.models import ActiveForm, FormDraft, FormMode, Task, TaskStatus
from ..core.state import AppState, DeletionPhase
from ..tasks.mutations import TaskMutationCoordinator
from .validation import ValidationError, validate_task_form

logger = logging.getLogger(__name__)

_DRAFT_FIELDS = {"title", "description", "assignee_id", "status"}


class WorkflowCoordinator:
    def __init__(self, state: AppState, mutations: TaskMutationCoordinator) -> None:
        self._state = state
        self._mutations = mutations

    # ---- task form ----

    def open_create_form(self) -> bool:
        if self._state.pending_deletion is not None:
            logger.debug("open_create_form refused: deletion pending")
            return False
        self._state.active_form = ActiveForm(mode=FormMode.CREATE)
        self._state.form_draft = FormDraft.for_task(None)
        self._state.form_error = None
        return True

    def open_edit_form(self, task: Task) -> bool:
        if self._state.pending_deletion is not None:
            logger.debug("open_edit_form refused: deletion pending")
            return False
        if self._state.is_task_busy(task.id):
            logger.debug("open_edit_form refused: task %s is busy", task.id)
            return False
        self._state.active_form = ActiveForm(mode=FormMode.EDIT, task=task)
        self._state.form_draft = FormDraft.for_task(task)
        self._state.form_error = None
        return True

    def close_form(self) -> None:
        self._state.close_form()

    def update_draft(self, **fields) -> None:
        """Apply field edits; any input clears the form error."""
        draft = self._state.form_draft
        if draft is None:
            raise RuntimeError("No task form is open.")
        unknown = set(fields) - _DRAFT_FIELDS
        if unknown:
            raise ValueError(f"Unknown form field(s): {', '.join(sorted(unknown))}")

        self._state.form_error = None
        self._state.error = None
        if "title" in fields:
            draft.title = str(fields["title"])
        if "description" in fields:
            draft.description = str(fields["description"] or "")
        if "assignee_id" in fields:
            raw = fields["assignee_id"]
            draft.assignee_id = None if raw in (None, "") else int(raw)
        if "status" in fields:
            draft.status = TaskStatus(fields["status"])

    async def submit_form(self) -> bool:
        form = self._state.active_form
        draft = self._state.form_draft
        if form is None or draft is None:
            return False

        try:
            payload = validate_task_form(draft)
        except ValidationError as e:
            self._state.form_error = e.message
            return False
        self._state.form_error = None

        if form.mode == FormMode.EDIT and form.task is not None:
            return await self._mutations.update(form.task, payload)
        return await self._mutations.create(payload)

    # ---- delete confirmation ----

    def request_delete(self, task: Task) -> bool:
        """Stage a task for confirmation. No network call."""
        if self._state.active_form is not None:
            logger.debug("request_delete refused: task form is open")
            return False
        if self._state.deletion_phase == DeletionPhase.CONFIRMING:
            logger.debug("request_delete refused: a deletion is being confirmed")
            return False
        self._state.pending_deletion = task
        return True

    async def confirm_delete(self) -> bool:
        task = self._state.pending_deletion
        if task is None:
            return False
        ok = await self._mutations.delete(task)
        if ok and self._state.pending_deletion is task:
            self._state.pending_deletion = None
        return ok

    def cancel_delete(self) -> bool:
        pending = self._state.pending_deletion
        if pending is None:
            return False
        if self._state.is_task_busy(pending.id):
            logger.debug("cancel_delete ignored: deletion of task %s in flight", pending.id)
            return False
        self._state.pending_deletion = None
        return True
