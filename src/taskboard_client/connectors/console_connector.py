# src/taskboard_client/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import queue
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from ..cli.commands import CommandRegistry
from ..cli.commands import registry as command_registry
from ..controller import TaskboardController
from ..core.state import DeletionPhase

logger = logging.getLogger(__name__)


class LineReader(Protocol):
    async def readline(self, prompt: str) -> str: ...  # raises EOFError at end of input


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _prompt(ctl: TaskboardController) -> str:
    state = ctl.state
    if state.identity is None:
        return f"[{state.auth_mode.value}] >>> "
    if state.deletion_phase != DeletionPhase.IDLE:
        return f"[{state.identity.name} | confirm delete] >>> "
    if state.active_form is not None:
        return f"[{state.identity.name} | {state.active_form.mode.value} task] >>> "
    return f"[{state.identity.name}] >>> "


def _settle(fut: asyncio.Future[str], line: str | None, exc: BaseException | None) -> None:
    if fut.done():  # reader was cancelled while input() was blocked
        return
    if exc is not None:
        fut.set_exception(exc)
    else:
        fut.set_result(line)


class StdinLineReader:
    """
    Blocking `input()` on a dedicated daemon thread.

    A thread stuck in `input()` cannot be interrupted. Running it outside the
    default executor means `asyncio.run` never waits for it on shutdown, so
    Ctrl-C exits without another Enter. A line typed after a cancelled read is
    discarded.
    """

    def __init__(self, input_fn: Callable[[str], str] = input) -> None:
        self._input = input_fn
        self._requests: queue.Queue[tuple[str, asyncio.AbstractEventLoop, asyncio.Future[str]]] = queue.Queue()
        self._thread: threading.Thread | None = None

    @property
    def thread(self) -> threading.Thread | None:
        return self._thread

    def _worker(self) -> None:
        while True:
            prompt, loop, fut = self._requests.get()
            line: str | None = None
            exc: BaseException | None = None
            try:
                line = self._input(prompt)
            except Exception as e:  # EOFError, closed stdin
                exc = e
            try:
                loop.call_soon_threadsafe(_settle, fut, line, exc)
            except RuntimeError:
                # Event loop already closed: nobody is waiting any more.
                return

    async def readline(self, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[str] = loop.create_future()
        if self._thread is None:
            self._thread = threading.Thread(target=self._worker, name="console-stdin", daemon=True)
            self._thread.start()
        self._requests.put((prompt, loop, fut))
        return await fut


async def run_console_loop(
        ctl: TaskboardController,
        *,
        registry: CommandRegistry = command_registry,
        reader: LineReader | None = None,
) -> None:
    logger.info("Console connector started.")
    if reader is None:
        reader = StdinLineReader()

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    if ctl.state.identity is None:
        _print_ts("Sign in to manage tasks with your team. Use /login, /register or /help. Use /exit to quit.")
        if ctl.state.auth_error:
            _print_ts(f"! {ctl.state.auth_error}")
    else:
        _print_ts(f"Welcome back, {ctl.state.identity.name}. Use /board or /help. Use /exit to quit.")

    while True:
        try:
            line = (await reader.readline(_prompt(ctl))).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except asyncio.CancelledError:
            # Ctrl-C under asyncio.run cancels the main task.
            logger.info("Console interrupted, exiting.")
            print()
            raise

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = await registry.handle(ctl, line, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list them."

        _print_ts(response)

    logger.info("Console connector finished.")
