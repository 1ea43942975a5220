# src/task_bouquet/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the HTTP gateway, the alert notifier and the board engine into AppState,
- closes the shared HTTP client on shutdown.
"""

from __future__ import annotations

import contextlib
import logging

import httpx

from ..board.engine import BoardEngine
from ..config import get_settings
from ..core.ports import AlertNotifier
from ..core.state import AppState
from ..gateway.http_gateway import HttpBoardGateway, build_http_client
from ..gateway.notifier import HttpAlertNotifier, LogOnlyNotifier

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, transport: httpx.AsyncBaseTransport | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    client = build_http_client(settings, transport=transport)
    gateway = HttpBoardGateway(client)

    notifier: AlertNotifier
    if getattr(settings, "alerts_enabled", True):
        notifier = HttpAlertNotifier(client)
    else:
        notifier = LogOnlyNotifier()

    engine = BoardEngine(
        gateway,
        notifier,
        alert_days_threshold=int(getattr(settings, "alert_days_threshold", 3)),
    )
    logger.info("Board client ready api=%s alerts=%s", settings.api_base_url, type(notifier).__name__)

    return AppState(
        settings=settings,
        gateway=gateway,
        notifier=notifier,
        engine=engine,
        http_client=client,
    )


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    state.engine.close()

    try:
        await state.engine.drain_alerts()
    except Exception:
        logger.exception("Failed to drain pending alerts.")

    client = state.http_client
    if client is not None:
        with contextlib.suppress(Exception):
            await client.aclose()
