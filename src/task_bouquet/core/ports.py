# src/task_bouquet/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the board engine.

The engine depends on Protocols instead of concrete implementations.
This keeps the HTTP gateway / notifier swappable and makes testing easier.
"""

from typing import Any, Protocol

from ..board.models import Category, Member, NewCategory, NewMember, NewTask, Task, TaskStatus

AlertPayload = dict[str, Any]
# {"taskId", "title", "due", "status", "assignees": [{"name", "contactEmail", "contactLineId"}]}


class GatewayError(RuntimeError):
    """A persistence-service call failed (non-2xx or transport). The message is user-facing."""


class BoardGateway(Protocol):
    """
    Translation boundary to the persistence service.

    Every method either returns in-memory entities or raises GatewayError.
    Wire-shaped dicts never cross this boundary.
    """

    async def list_categories(self) -> list[Category]: ...
    async def create_category(self, new: NewCategory) -> Category: ...
    async def delete_category(self, category_id: str) -> None: ...

    async def list_members(self) -> list[Member]: ...
    async def create_member(self, new: NewMember) -> Member: ...
    async def update_member(self, member_id: str, new: NewMember) -> Member: ...
    async def delete_member(self, member_id: str) -> None: ...

    async def list_tasks(self) -> list[Task]: ...
    async def create_task(self, new: NewTask) -> Task: ...
    async def update_task(
            self,
            task_id: str,
            *,
            status: TaskStatus | None = None,
            assignee_ids: list[str] | None = None,
    ) -> Task: ...
    async def delete_task(self, task_id: str) -> None: ...


class AlertNotifier(Protocol):
    """
    Best-effort side channel for due-date alerts.

    Implementations must not raise and must not retry; failures are logged.
    """

    async def notify(self, payload: AlertPayload) -> bool: ...
