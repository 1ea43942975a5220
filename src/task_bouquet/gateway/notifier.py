# src/task_bouquet/gateway/notifier.py

from __future__ import annotations

import logging

import httpx

from ..core.ports import AlertPayload

logger = logging.getLogger(__name__)

NOTIFY_PATH = "alerts/notify"


def log_alert_preview(payload: AlertPayload) -> None:
    logger.info("[Alert Preview] %s %s", payload.get("title"), payload.get("due"))


class HttpAlertNotifier:
    """
    Best-effort POST of an alert to the notification endpoint.

    Never raises, never retries: a non-2xx response or a transport error
    degrades to a local "[Alert Preview]" log line.
    """

    def __init__(self, client: httpx.AsyncClient, *, path: str = NOTIFY_PATH) -> None:
        self._client = client
        self._path = path

    async def notify(self, payload: AlertPayload) -> bool:
        try:
            response = await self._client.post(self._path, json=payload)
        except httpx.HTTPError:
            logger.debug("Alert delivery failed task_id=%s", payload.get("taskId"), exc_info=True)
            log_alert_preview(payload)
            return False

        if not response.is_success:
            logger.debug("Alert delivery rejected task_id=%s status=%s", payload.get("taskId"), response.status_code)
            log_alert_preview(payload)
            return False

        logger.debug("Alert delivered task_id=%s", payload.get("taskId"))
        return True


class LogOnlyNotifier:
    """Notifier used when alert delivery is disabled: only the local preview line."""

    async def notify(self, payload: AlertPayload) -> bool:
        log_alert_preview(payload)
        return False
