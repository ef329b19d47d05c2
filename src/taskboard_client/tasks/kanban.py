# src/taskboard_client/tasks/kanban.py

"""
Kanban board view of the task collection.

Pure and synchronous: tasks are split into the three status columns in server
order. The active filter only mutes the other columns; it never moves or hides
a task, so column counts stay the same under every filter.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from ..core.models import Filter, Task, TaskStatus


@dataclass(frozen=True, slots=True)
class StatusAction:
    label: str
    next_status: TaskStatus


@dataclass(frozen=True, slots=True)
class ColumnSpec:
    status: TaskStatus
    title: str
    actions: tuple[StatusAction, ...]


# Board order and the moves the board offers from each column.
COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec(
        TaskStatus.TODO,
        "To Do",
        (StatusAction("Mark in progress", TaskStatus.IN_PROGRESS),),
    ),
    ColumnSpec(
        TaskStatus.IN_PROGRESS,
        "In Progress",
        (
            StatusAction("Mark completed", TaskStatus.DONE),
            StatusAction("Move to To Do", TaskStatus.TODO),
        ),
    ),
    ColumnSpec(
        TaskStatus.DONE,
        "Done",
        (StatusAction("Reopen", TaskStatus.IN_PROGRESS),),
    ),
)

_SPEC_BY_STATUS = {c.status: c for c in COLUMNS}


@dataclass(frozen=True, slots=True)
class KanbanColumn:
    status: TaskStatus
    title: str
    tasks: tuple[Task, ...]
    muted: bool
    actions: tuple[StatusAction, ...]

    @property
    def count(self) -> int:
        return len(self.tasks)


@dataclass(frozen=True, slots=True)
class KanbanBoard:
    columns: tuple[KanbanColumn, ...]
    active_filter: Filter

    @property
    def total(self) -> int:
        return sum(c.count for c in self.columns)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def column(self, status: TaskStatus) -> KanbanColumn:
        for c in self.columns:
            if c.status == status:
                return c
        raise KeyError(status)


def categorize(tasks: Iterable[Task], active_filter: Filter = Filter.ALL) -> KanbanBoard:
    active_filter = Filter(active_filter)
    groups: dict[TaskStatus, list[Task]] = {c.status: [] for c in COLUMNS}
    for task in tasks:
        groups[task.status].append(task)

    columns = tuple(
        KanbanColumn(
            status=spec.status,
            title=spec.title,
            tasks=tuple(groups[spec.status]),
            muted=active_filter != Filter.ALL and active_filter.value != spec.status.value,
            actions=spec.actions,
        )
        for spec in COLUMNS
    )
    return KanbanBoard(columns=columns, active_filter=active_filter)


def allowed_transitions(status: TaskStatus) -> Sequence[StatusAction]:
    return _SPEC_BY_STATUS[TaskStatus(status)].actions


def is_transition_offered(current: TaskStatus, next_status: TaskStatus) -> bool:
    return any(a.next_status == next_status for a in allowed_transitions(current))


def assignee_label(task: Task) -> str:
    return task.assignee.name if task.assignee is not None else "Unassigned"


def format_updated_at(raw: str) -> str:
    """Short "Mon D" label; empty when the timestamp cannot be parsed."""
    if not raw:
        return ""
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return ""
    return f"{dt.strftime('%b')} {dt.day}"
