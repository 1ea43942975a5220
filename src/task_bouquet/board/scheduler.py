# src/task_bouquet/board/scheduler.py

from __future__ import annotations

"""
Refresh scheduler.

A small polling loop that re-syncs the board snapshot from the service on a
fixed interval. It runs silent refreshes: the loading flag is left alone and
failures only set the engine's error message.

In-flight manual refreshes are neither cancelled nor de-duplicated; refresh is
idempotent and the last response wins.
"""

import asyncio
import logging
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL_SECONDS = 30.0


class Refreshable(Protocol):
    @property
    def closed(self) -> bool: ...

    async def refresh(self, *, silent: bool = False) -> bool: ...


async def run_refresh_scheduler(
        engine: Refreshable,
        *,
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL_SECONDS,
) -> None:
    """
    Every interval_seconds:
    - call engine.refresh(silent=True)
    - log the outcome; never let an unexpected error kill the loop

    The first refresh happens one interval after start (the initial load is
    the caller's job). Stops when cancelled or when the engine is closed.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        await asyncio.sleep(sleep_s)

        if engine.closed:
            logger.info("Engine closed; refresh scheduler stopping")
            return

        try:
            ok = await engine.refresh(silent=True)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Silent refresh crashed")
            continue

        if ok:
            logger.debug("Silent refresh ok")
        else:
            logger.info("Silent refresh failed; keeping stale board data")
