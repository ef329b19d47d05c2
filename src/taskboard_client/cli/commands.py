# src/taskboard_client/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable
from typing import cast

from ..controller import TaskboardController
from ..core.models import AuthMode, Filter, FormMode, TaskStatus
from ..core.state import DeletionPhase
from ..tasks.kanban import (
    KanbanBoard,
    allowed_transitions,
    assignee_label,
    format_updated_at,
    is_transition_offered,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[TaskboardController, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[TaskboardController, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /board, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        ctl: TaskboardController,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(ctl, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(ctl, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering helpers ----


def render_board(ctl: TaskboardController, board: KanbanBoard) -> str:
    state = ctl.state
    if state.show_loader:
        return "Loading tasks..."

    lines: list[str] = []
    for column in board.columns:
        marker = " (muted)" if column.muted else ""
        lines.append(f"== {column.title} [{column.count}]{marker}")
        if not column.tasks:
            lines.append("   No tasks.")
            continue
        for task in column.tasks:
            busy = " (working...)" if state.is_task_busy(task.id) else ""
            updated = format_updated_at(task.updated_at)
            updated_s = f" | Updated {updated}" if updated else ""
            lines.append(f"  #{task.id} {task.title} | {assignee_label(task)}{updated_s}{busy}")
            if task.description:
                lines.append(f"      {task.description}")
    if board.is_empty:
        lines.append("No tasks yet. Create one with /new to get started.")
    return "\n".join(lines)


def render_form(ctl: TaskboardController) -> str:
    state = ctl.state
    form = state.active_form
    draft = state.form_draft
    if form is None or draft is None:
        return "No task form is open."
    heading = "Add Task" if form.mode == FormMode.CREATE else f"Edit Task #{form.task.id if form.task else '?'}"
    assignee = "Unassigned"
    if draft.assignee_id is not None:
        names = {u.id: u.name for u in state.users}
        assignee = names.get(draft.assignee_id, f"user #{draft.assignee_id}")
    lines = [
        f"[{heading}]",
        f"  title:       {draft.title}",
        f"  description: {draft.description}",
        f"  assignee:    {assignee}",
        f"  status:      {draft.status.value}",
        "Use /set <field> <value>, then /save or /close.",
    ]
    if state.form_error:
        lines.append(f"! {state.form_error}")
    return "\n".join(lines)


def _workspace_error(ctl: TaskboardController) -> str:
    return f"\n! {ctl.state.error} (use /dismiss to hide)" if ctl.state.error else ""


def _auth_error(ctl: TaskboardController) -> str:
    return ctl.state.auth_local_error or ctl.state.auth_error or "Request failed."


def _session_lost(ctl: TaskboardController) -> str | None:
    """Any call, including the refresh after a success, can end the session."""
    if ctl.state.identity is None:
        return f"! {ctl.state.auth_error or 'Logged out.'}"
    return None


def _require_session(ctl: TaskboardController) -> str | None:
    if ctl.state.session_loading:
        return "Checking your session..."
    if ctl.state.identity is None:
        return "You are not logged in. Use /login <email> <password> or /register."
    return None


def _parse_task_id(ctl: TaskboardController, raw: str):
    try:
        task_id = int(raw.lstrip("#"))
    except ValueError:
        return None, f"Not a task id: {raw}"
    task = ctl.find_task(task_id)
    if task is None:
        return None, f"No task #{task_id} on the board."
    return task, None


# ---- commands ----


async def cmd_help(ctl: TaskboardController, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(ctl: TaskboardController, args: list[str]) -> str:
    state = ctl.state
    who = f"{state.identity.name} <{state.identity.email}>" if state.identity else "not logged in"
    busy = "idle" if state.busy is None else f"task #{state.busy.task_id}" if state.busy.task_id else "creating"
    return (
        "Status:\n"
        f"  API: {getattr(ctl.settings, 'api_url', '?')}\n"
        f"  User: {who}\n"
        f"  Tasks: {'Loading...' if state.is_loading else f'{state.total_tasks} total'}\n"
        f"  Filter: {state.filter.value}\n"
        f"  Mutation: {busy}\n"
        f"  Deletion: {state.deletion_phase.value}"
    )


async def cmd_login(ctl: TaskboardController, args: list[str]) -> str:
    if ctl.state.identity is not None:
        return f"Already logged in as {ctl.state.identity.name}."
    if len(args) != 2:
        ctl.session.clear_auth_error()
        return "Usage: /login <email> <password>"
    if ctl.state.auth_mode != AuthMode.LOGIN:
        ctl.set_auth_mode(AuthMode.LOGIN)
    ok = await ctl.login(args[0], args[1])
    if ok and ctl.state.identity is not None:
        return f"Welcome back, {ctl.state.identity.name}.\n" + render_board(ctl, ctl.board())
    return f"! {_auth_error(ctl)}"


async def cmd_register(ctl: TaskboardController, args: list[str]) -> str:
    if ctl.state.identity is not None:
        return f"Already logged in as {ctl.state.identity.name}."
    if len(args) != 4:
        ctl.session.clear_auth_error()
        return 'Usage: /register "<name>" <email> <password> <confirm password>'
    if ctl.state.auth_mode != AuthMode.REGISTER:
        ctl.set_auth_mode(AuthMode.REGISTER)
    ok = await ctl.register(*args)
    if ok and ctl.state.identity is not None:
        return f"Account created. Hello, {ctl.state.identity.name}.\n" + render_board(ctl, ctl.board())
    return f"! {_auth_error(ctl)}"


async def cmd_mode(ctl: TaskboardController, args: list[str]) -> str:
    if not args:
        return f"Auth mode: {ctl.state.auth_mode.value}. Use /mode login | /mode register."
    try:
        mode = AuthMode(args[0].lower())
    except ValueError:
        return "Usage: /mode login | /mode register"
    ctl.set_auth_mode(mode)
    return f"Auth mode: {mode.value}."


async def cmd_logout(ctl: TaskboardController, args: list[str]) -> str:
    if ctl.state.identity is None:
        return "You are not logged in."
    await ctl.logout()
    return "Logged out."


async def cmd_board(ctl: TaskboardController, args: list[str]) -> str:
    blocked = _require_session(ctl)
    if blocked:
        return blocked
    return render_board(ctl, ctl.board()) + _workspace_error(ctl)


async def cmd_filter(ctl: TaskboardController, args: list[str]) -> str:
    blocked = _require_session(ctl)
    if blocked:
        return blocked
    if not args:
        return f"Filter: {ctl.state.filter.value}. Use /filter all|todo|in_progress|done."
    try:
        value = Filter(args[0].lower())
    except ValueError:
        return "Usage: /filter all|todo|in_progress|done"
    ctl.set_filter(value)
    return render_board(ctl, ctl.board())


async def cmd_users(ctl: TaskboardController, args: list[str]) -> str:
    blocked = _require_session(ctl)
    if blocked:
        return blocked
    if ctl.state.users_loading:
        return "Loading users..."
    if not ctl.state.users:
        return "No users."
    return "\n".join(f"  #{u.id} {u.name} <{u.email}>" for u in ctl.state.users)


async def cmd_refresh(ctl: TaskboardController, args: list[str], emit: CommandEmitter | None = None) -> str:
    blocked = _require_session(ctl)
    if blocked:
        return blocked
    if emit:
        emit("Refreshing...")
    await ctl.refresh()
    if ctl.state.identity is None:
        return f"! {ctl.state.auth_error or 'Logged out.'}"
    return render_board(ctl, ctl.board()) + _workspace_error(ctl)


async def cmd_new(ctl: TaskboardController, args: list[str]) -> str:
    blocked = _require_session(ctl)
    if blocked:
        return blocked
    if ctl.state.users_loading:
        return "Users are still loading, try again in a moment."
    if not ctl.open_create_form():
        return "Finish or cancel the pending deletion first."
    return render_form(ctl)


async def cmd_edit(ctl: TaskboardController, args: list[str]) -> str:
    blocked = _require_session(ctl)
    if blocked:
        return blocked
    if len(args) != 1:
        return "Usage: /edit <task id>"
    task, err = _parse_task_id(ctl, args[0])
    if err:
        return err
    if not ctl.open_edit_form(task):
        return "This task cannot be edited right now."
    return render_form(ctl)


async def cmd_set(ctl: TaskboardController, args: list[str]) -> str:
    if ctl.state.active_form is None:
        return "No task form is open. Use /new or /edit <id>."
    if len(args) < 1:
        return "Usage: /set title|description|assignee|status <value>"
    field_name = args[0].lower()
    value = " ".join(args[1:])
    try:
        if field_name == "title":
            ctl.update_draft(title=value)
        elif field_name == "description":
            ctl.update_draft(description=value)
        elif field_name == "assignee":
            raw = value.lstrip("#").strip()
            ctl.update_draft(assignee_id=None if raw.lower() in ("", "none", "unassigned") else int(raw))
        elif field_name == "status":
            ctl.update_draft(status=TaskStatus(value.lower()))
        else:
            return "Unknown field. Fields: title, description, assignee, status."
    except ValueError:
        return f"Invalid value for {field_name}: {value!r}"
    return render_form(ctl)


async def cmd_save(ctl: TaskboardController, args: list[str]) -> str:
    if ctl.state.active_form is None:
        return "No task form is open."
    saved = await ctl.submit_form()
    lost = _session_lost(ctl)
    if lost:
        return lost
    if saved:
        return "Saved.\n" + render_board(ctl, ctl.board()) + _workspace_error(ctl)
    if ctl.state.form_error:
        return render_form(ctl)
    if ctl.state.error:
        return f"! {ctl.state.error}"
    return "Another change is still being saved, try again in a moment."


async def cmd_close(ctl: TaskboardController, args: list[str]) -> str:
    ctl.close_form()
    return "Form closed."


async def cmd_move(ctl: TaskboardController, args: list[str]) -> str:
    blocked = _require_session(ctl)
    if blocked:
        return blocked
    if len(args) != 2:
        return "Usage: /move <task id> todo|in_progress|done"
    task, err = _parse_task_id(ctl, args[0])
    if err:
        return err
    try:
        next_status = TaskStatus(args[1].lower())
    except ValueError:
        return "Status must be one of: todo, in_progress, done."
    if not is_transition_offered(task.status, next_status):
        offered = ", ".join(f"{a.label} ({a.next_status.value})" for a in allowed_transitions(task.status))
        return f"Task #{task.id} is {task.status.value}; available moves: {offered}."
    moved = await ctl.change_status(task, next_status)
    lost = _session_lost(ctl)
    if lost:
        return lost
    if moved:
        return render_board(ctl, ctl.board()) + _workspace_error(ctl)
    return f"! {ctl.state.error}" if ctl.state.error else "Another change is in progress, try again."


async def cmd_delete(ctl: TaskboardController, args: list[str]) -> str:
    blocked = _require_session(ctl)
    if blocked:
        return blocked
    if len(args) != 1:
        return "Usage: /delete <task id>"
    task, err = _parse_task_id(ctl, args[0])
    if err:
        return err
    if ctl.state.is_task_busy(task.id) or not ctl.request_delete(task):
        return "Close the open form or wait for the current deletion first."
    return (
        f'Delete this task? Are you sure you want to delete "{task.title}"? '
        "This action cannot be undone.\nUse /confirm or /cancel."
    )


async def cmd_confirm(ctl: TaskboardController, args: list[str]) -> str:
    if ctl.state.deletion_phase == DeletionPhase.IDLE:
        return "Nothing to confirm."
    deleted = await ctl.confirm_delete()
    lost = _session_lost(ctl)
    if lost:
        return lost
    if deleted:
        return "Deleted.\n" + render_board(ctl, ctl.board()) + _workspace_error(ctl)
    return f"! {ctl.state.error or 'Delete did not go through.'} Use /confirm to retry or /cancel."


async def cmd_cancel(ctl: TaskboardController, args: list[str]) -> str:
    if ctl.state.deletion_phase == DeletionPhase.IDLE:
        return "Nothing to cancel."
    if not ctl.cancel_delete():
        return "Deleting... please wait."
    return "Deletion cancelled."


async def cmd_dismiss(ctl: TaskboardController, args: list[str]) -> str:
    ctl.dismiss_error()
    return "Dismissed."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session, loading and mutation status.")
registry.register("login", cmd_login, help_text="Log in: /login <email> <password>.")
registry.register(
    "register", cmd_register, help_text='Create account: /register "<name>" <email> <password> <confirm>.'
)
registry.register("mode", cmd_mode, help_text="Switch auth screen: /mode login | /mode register.")
registry.register("logout", cmd_logout, help_text="Log out and clear local state.")
registry.register("board", cmd_board, help_text="Show the kanban board.", aliases=["b"])
registry.register("filter", cmd_filter, help_text="Highlight a column: /filter all|todo|in_progress|done.")
registry.register("users", cmd_users, help_text="List users available as assignees.")
registry.register("refresh", cmd_refresh, help_text="Re-fetch tasks and users.")
registry.register("new", cmd_new, help_text="Open the Add Task form.")
registry.register("edit", cmd_edit, help_text="Open the Edit Task form: /edit <id>.")
registry.register("set", cmd_set, help_text="Edit a form field: /set title|description|assignee|status <value>.")
registry.register("save", cmd_save, help_text="Submit the open task form.")
registry.register("close", cmd_close, help_text="Close the task form without saving.")
registry.register("move", cmd_move, help_text="Change status: /move <id> todo|in_progress|done.")
registry.register("delete", cmd_delete, help_text="Stage a task for deletion: /delete <id>.")
registry.register("confirm", cmd_confirm, help_text="Confirm the staged deletion.")
registry.register("cancel", cmd_cancel, help_text="Cancel the staged deletion.")
registry.register("dismiss", cmd_dismiss, help_text="Hide the current error message.")
