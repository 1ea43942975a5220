# src/task_bouquet/gateway/http_gateway.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..board.models import Category, Member, NewCategory, NewMember, NewTask, Task, TaskStatus
from ..core.ports import GatewayError
from . import wire

logger = logging.getLogger(__name__)


def make_timeout(seconds: float) -> httpx.Timeout:
    seconds = max(1.0, float(seconds))
    return httpx.Timeout(connect=min(5.0, seconds), read=seconds, write=seconds, pool=seconds)


def make_auth(username: str | None, password: str | None) -> httpx.BasicAuth | None:
    if not username:
        return None
    return httpx.BasicAuth(username, password or "")


def build_http_client(settings, *, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """
    One AsyncClient shared by the gateway and the alert notifier.

    `transport` is only for tests (httpx.MockTransport).
    """
    base_url = str(getattr(settings, "api_base_url", "") or "").rstrip("/")
    if not base_url:
        raise RuntimeError("API base URL is not set. Set BOUQUET_API_BASE_URL in your .env.")

    return httpx.AsyncClient(
        base_url=base_url + "/",
        auth=make_auth(getattr(settings, "api_username", None), getattr(settings, "api_password", None)),
        timeout=make_timeout(getattr(settings, "http_timeout_seconds", 10.0)),
        headers={"Accept": "application/json"},
        transport=transport,
    )


class HttpBoardGateway:
    """
    BoardGateway over the persistence service's REST API.

    Every non-2xx response and every transport error becomes a GatewayError
    carrying a short human-readable message ("Failed to create task").
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- low-level helpers ----

    async def _request(self, method: str, path: str, failure: str, *, json: Any = None) -> httpx.Response:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s: %s %s transport error: %s", failure, method, path, e)
            raise GatewayError(failure) from e

        if not response.is_success:
            logger.warning("%s: %s %s -> HTTP %s", failure, method, path, response.status_code)
            raise GatewayError(failure)
        return response

    async def _json(self, method: str, path: str, failure: str, *, json: Any = None) -> Any:
        response = await self._request(method, path, failure, json=json)
        try:
            return response.json()
        except ValueError as e:
            logger.warning("%s: %s %s returned invalid JSON", failure, method, path)
            raise GatewayError(failure) from e

    async def _list(self, path: str, failure: str) -> list[dict[str, Any]]:
        data = await self._json("GET", path, failure)
        if not isinstance(data, list):
            logger.warning("%s: GET %s returned %s, expected a list", failure, path, type(data).__name__)
            raise GatewayError(failure)
        return [d for d in data if isinstance(d, dict)]

    async def _object(self, method: str, path: str, failure: str, *, json: Any = None) -> dict[str, Any]:
        data = await self._json(method, path, failure, json=json)
        if not isinstance(data, dict):
            raise GatewayError(failure)
        return data

    # ---- categories ----

    async def list_categories(self) -> list[Category]:
        rows = await self._list("wedding-categories", "Failed to fetch categories")
        return [wire.category_from_wire(r) for r in rows]

    async def create_category(self, new: NewCategory) -> Category:
        data = await self._object(
            "POST", "wedding-categories", "Failed to create category", json=wire.new_category_to_wire(new)
        )
        return wire.category_from_wire(data)

    async def delete_category(self, category_id: str) -> None:
        await self._request("DELETE", f"wedding-categories/{category_id}", "Failed to delete category")

    # ---- members ----

    async def list_members(self) -> list[Member]:
        rows = await self._list("wedding-members", "Failed to fetch members")
        return [wire.member_from_wire(r) for r in rows]

    async def create_member(self, new: NewMember) -> Member:
        data = await self._object(
            "POST", "wedding-members", "Failed to create member", json=wire.new_member_to_wire(new)
        )
        return wire.member_from_wire(data)

    async def update_member(self, member_id: str, new: NewMember) -> Member:
        data = await self._object(
            "PUT", f"wedding-members/{member_id}", "Failed to update member", json=wire.new_member_to_wire(new)
        )
        return wire.member_from_wire(data)

    async def delete_member(self, member_id: str) -> None:
        await self._request("DELETE", f"wedding-members/{member_id}", "Failed to delete member")

    # ---- tasks ----

    async def list_tasks(self) -> list[Task]:
        rows = await self._list("wedding-tasks", "Failed to fetch tasks")
        return [wire.task_from_wire(r) for r in rows]

    async def create_task(self, new: NewTask) -> Task:
        data = await self._object(
            "POST", "wedding-tasks", "Failed to create task", json=wire.new_task_to_wire(new)
        )
        return wire.task_from_wire(data)

    async def update_task(
            self,
            task_id: str,
            *,
            status: TaskStatus | None = None,
            assignee_ids: list[str] | None = None,
    ) -> Task:
        body = wire.task_update_to_wire(status=status, assignee_ids=assignee_ids)
        data = await self._object("PUT", f"wedding-tasks/{task_id}", "Failed to update task", json=body)
        return wire.task_from_wire(data)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"wedding-tasks/{task_id}", "Failed to delete task")
