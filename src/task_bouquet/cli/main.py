# src/task_bouquet/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, performs the initial board load, then:
- starts the silent refresh scheduler in the background,
- runs the console REPL (optional) until /exit or Ctrl+C.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..board.scheduler import run_refresh_scheduler
from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import render_load_error, run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def run(settings) -> None:
    state = create_initial_state(settings=settings)
    engine = state.engine

    if not await engine.load_all():
        print(render_load_error(state))
    else:
        s = engine.summary()
        logger.info("Board loaded: %d tasks, %d categories", s.total_tasks, s.categories)

    refresher = asyncio.create_task(
        run_refresh_scheduler(engine, interval_seconds=settings.refresh_interval_seconds)
    )

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Some platforms (Windows) don't support loop signal handlers.
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop.set)

    try:
        if settings.console_enabled:
            console = asyncio.create_task(run_console_loop(state))
            stopper = asyncio.create_task(stop.wait())
            await asyncio.wait({console, stopper}, return_when=asyncio.FIRST_COMPLETED)
            stopper.cancel()
            # The blocking input() thread cannot be interrupted; we just stop waiting for it.
            console.cancel()
        else:
            logger.info("Console disabled. Refreshing in the background only. Press Ctrl+C to stop.")
            await stop.wait()
    finally:
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher
        await shutdown_state(state)
        logger.info("Bye.")


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s... (log file: %s)", settings.app_name, log_file)

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")


if __name__ == "__main__":
    main()
