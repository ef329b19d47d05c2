# src/taskboard_client/core/models.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class TaskStatus(StrEnum):
    """Three-stage task workflow, in board order."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def from_wire(cls, raw: Any) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(str(raw))
        except ValueError:
            logger.warning("Unknown task status %r, treating as todo", raw)
            return cls.TODO


class Filter(StrEnum):
    """Board view selector. Highlights a column, never hides tasks."""

    ALL = "all"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class AuthMode(StrEnum):
    LOGIN = "login"
    REGISTER = "register"


class FormMode(StrEnum):
    CREATE = "create"
    EDIT = "edit"


def _opt_str(raw: Any) -> str | None:
    return None if raw is None else str(raw)


def _opt_int(raw: Any) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True, slots=True)
class Identity:
    """An authenticated user record (also used for the assignee list)."""

    id: int
    name: str
    email: str
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Identity:
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            created_at=_opt_str(data.get("createdAt")),
            updated_at=_opt_str(data.get("updatedAt")),
        )


@dataclass(frozen=True, slots=True)
class Task:
    """
    Server-owned task record.

    `assignee` is display data denormalized from `assignee_id`; the client never edits it.
    """

    id: int
    title: str
    description: str | None
    status: TaskStatus
    assignee_id: int | None
    created_at: str
    updated_at: str
    assignee: Identity | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Task:
        # Older servers send the assignee id as "userId".
        raw_assignee_id = data.get("assigneeId", data.get("userId"))
        assignee_id = _opt_int(raw_assignee_id)

        assignee: Identity | None = None
        raw_assignee = data.get("assignee")
        if isinstance(raw_assignee, dict):
            try:
                assignee = Identity.from_json(raw_assignee)
            except (KeyError, TypeError, ValueError):
                assignee = None
        if assignee is not None and assignee.id != assignee_id:
            logger.debug(
                "Dropping assignee id=%s that disagrees with assignee_id=%s on task %s",
                assignee.id,
                assignee_id,
                data.get("id"),
            )
            assignee = None

        return cls(
            id=int(data["id"]),
            title=str(data.get("title") or ""),
            description=_opt_str(data.get("description")),
            status=TaskStatus.from_wire(data.get("status")),
            assignee_id=assignee_id,
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            assignee=assignee,
        )


@dataclass(frozen=True, slots=True)
class TaskPayload:
    """Body for create (POST) and full update (PUT)."""

    title: str
    description: str | None = None
    assignee_id: int | None = None
    status: TaskStatus | None = None

    def with_default_status(self, status: TaskStatus) -> TaskPayload:
        if self.status is not None:
            return self
        return TaskPayload(
            title=self.title,
            description=self.description,
            assignee_id=self.assignee_id,
            status=status,
        )

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "assigneeId": self.assignee_id,
        }
        if self.status is not None:
            body["status"] = self.status.value
        return body


@dataclass(slots=True)
class FormDraft:
    """Editable fields of the task form."""

    title: str = ""
    description: str = ""
    assignee_id: int | None = None
    status: TaskStatus = TaskStatus.TODO

    @classmethod
    def for_task(cls, task: Task | None) -> FormDraft:
        if task is None:
            return cls()
        return cls(
            title=task.title,
            description=task.description or "",
            assignee_id=task.assignee_id,
            status=task.status,
        )

    def to_payload(self) -> TaskPayload:
        return TaskPayload(
            title=self.title.strip(),
            description=self.description.strip(),
            assignee_id=self.assignee_id,
            status=self.status,
        )


@dataclass(frozen=True, slots=True)
class ActiveForm:
    mode: FormMode
    task: Task | None = None


@dataclass(frozen=True, slots=True)
class BusyMarker:
    """The single in-flight mutation slot. `task_id` is None for create."""

    task_id: int | None = None
