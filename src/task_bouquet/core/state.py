# src/task_bouquet/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..board.engine import BoardEngine
from .ports import AlertNotifier, BoardGateway


@dataclass
class AppState:
    # Settings are stored on the state so commands/connectors don't re-read config.
    settings: Any

    gateway: BoardGateway
    notifier: AlertNotifier | None
    engine: BoardEngine

    # Owned HTTP client (httpx.AsyncClient) when the real gateway is wired; None in tests.
    http_client: Any = None
