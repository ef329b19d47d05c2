# src/taskboard_client/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the controller (composition root), checks the
existing session, then runs the console REPL until /exit or EOF.
"""

from __future__ import annotations

import asyncio
import logging

from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..controller import TaskboardController
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    ctl = TaskboardController(settings)
    try:
        await ctl.start()
        await run_console_loop(ctl)
    finally:
        try:
            await ctl.aclose()
        except Exception:
            logger.debug("HTTP client close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskboard")
    setup_logging(log_dir=log_dir, console_level=console_level)

    # keep noisy libs readable
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info("Starting %s against %s...", settings.app_name, settings.api_url)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")

    logger.info("Bye.")


if __name__ == "__main__":
    main()
