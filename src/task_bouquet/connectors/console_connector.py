# src/task_bouquet/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = ">>> board: "


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def render_load_error(state: AppState) -> str:
    """Full-screen style message for a failed initial/manual load."""
    err = state.engine.error or "unknown error"
    return (
        "Could not load the board.\n"
        f"  {err}\n"
        "Check BOUQUET_API_BASE_URL / credentials, then use /refresh to try again."
    )


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue[str | None]) -> None:
    """
    Read stdin on a daemon thread and hand lines to the event loop.

    input() blocks and cannot be interrupted; a daemon thread lets the process
    exit on Ctrl+C without waiting for one more line. None marks EOF.
    """

    def reader() -> None:
        while True:
            try:
                line: str | None = input(PROMPT)
            except (EOFError, KeyboardInterrupt):
                line = None
            try:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            except RuntimeError:
                # Loop already closed (app is shutting down).
                return
            if line is None:
                return

    threading.Thread(target=reader, name="console-stdin", daemon=True).start()


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        _print_ts(text)

    lines: asyncio.Queue[str | None] = asyncio.Queue()
    _start_stdin_reader(asyncio.get_running_loop(), lines)

    while True:
        raw = await lines.get()
        if raw is None:
            logger.info("Console EOF received, exiting.")
            break
        user_input = raw.strip()

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            _print_ts("Commands start with '/'. Try /help.")
            continue

        try:
            reply = await command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            _print_ts(reply)

        if state.engine.blocking_error:
            _print_ts(render_load_error(state))
            # shown once; the error message itself stays until the next good load
            state.engine.blocking_error = False

    logger.info("Console connector finished.")
