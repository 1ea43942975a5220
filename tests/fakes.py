# tests/fakes.py

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field, replace

from task_bouquet.board.models import (
    Category,
    Member,
    NewCategory,
    NewMember,
    NewTask,
    Task,
    TaskStatus,
)
from task_bouquet.core.ports import AlertPayload, BoardGateway, GatewayError


class FakeGateway(BoardGateway):
    """
    In-memory BoardGateway used by engine tests.

    - Hands out numeric string ids, like the real service after mapping
    - Validates foreign keys the way the service does
    - `fail` holds method names that should raise GatewayError
    - `gate`, when set, makes every call wait until the event is set
    """

    def __init__(
        self,
        *,
        categories: list[Category] | None = None,
        members: list[Member] | None = None,
        tasks: list[Task] | None = None,
    ) -> None:
        self.categories = {c.id: c for c in categories or []}
        self.members = {m.id: m for m in members or []}
        self.tasks = {t.id: t for t in tasks or []}
        self.fail: set[str] = set()
        self.fail_delete_ids: set[str] = set()
        self.gate: asyncio.Event | None = None
        self.calls: list[str] = []
        self._ids = itertools.count(100)

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self.gate is not None:
            await self.gate.wait()
        if name in self.fail:
            raise GatewayError(f"Failed to {name}")

    def _next_id(self) -> str:
        return str(next(self._ids))

    # ---- categories ----

    async def list_categories(self) -> list[Category]:
        await self._enter("list_categories")
        return list(self.categories.values())

    async def create_category(self, new: NewCategory) -> Category:
        await self._enter("create_category")
        c = Category(id=self._next_id(), name=new.name, accent=new.accent, emoji=new.emoji)
        self.categories[c.id] = c
        return c

    async def delete_category(self, category_id: str) -> None:
        await self._enter("delete_category")
        if self.categories.pop(category_id, None) is None:
            raise GatewayError("Failed to delete category")
        self.tasks = {k: t for k, t in self.tasks.items() if t.category_id != category_id}

    # ---- members ----

    async def list_members(self) -> list[Member]:
        await self._enter("list_members")
        return list(self.members.values())

    async def create_member(self, new: NewMember) -> Member:
        await self._enter("create_member")
        m = Member(
            id=self._next_id(),
            name=new.name,
            role=new.role,
            contact_email=new.contact_email,
            contact_chat_handle=new.contact_chat_handle,
        )
        self.members[m.id] = m
        return m

    async def update_member(self, member_id: str, new: NewMember) -> Member:
        await self._enter("update_member")
        if member_id not in self.members:
            raise GatewayError("Failed to update member")
        # None means "leave as is", like the service's partial update.
        old = self.members[member_id]
        m = Member(
            id=member_id,
            name=new.name,
            role=old.role if new.role is None else new.role,
            contact_email=old.contact_email if new.contact_email is None else new.contact_email,
            contact_chat_handle=old.contact_chat_handle if new.contact_chat_handle is None else new.contact_chat_handle,
        )
        self.members[member_id] = m
        return m

    async def delete_member(self, member_id: str) -> None:
        await self._enter("delete_member")
        if self.members.pop(member_id, None) is None:
            raise GatewayError("Failed to delete member")

    # ---- tasks ----

    async def list_tasks(self) -> list[Task]:
        await self._enter("list_tasks")
        return list(self.tasks.values())

    async def create_task(self, new: NewTask) -> Task:
        await self._enter("create_task")
        if new.category_id not in self.categories:
            raise GatewayError("Failed to create task")
        if any(a not in self.members for a in new.assignee_ids):
            raise GatewayError("Failed to create task")
        t = Task(
            id=self._next_id(),
            title=new.title,
            category_id=new.category_id,
            emoji=new.emoji,
            status=TaskStatus.NOT_STARTED,
            due=new.due,
            notes=new.notes,
            assignee_ids=tuple(new.assignee_ids),
        )
        self.tasks[t.id] = t
        return t

    async def update_task(
        self,
        task_id: str,
        *,
        status: TaskStatus | None = None,
        assignee_ids: list[str] | None = None,
    ) -> Task:
        await self._enter("update_task")
        t = self.tasks.get(task_id)
        if t is None:
            raise GatewayError("Failed to update task")
        if assignee_ids is not None and any(a not in self.members for a in assignee_ids):
            raise GatewayError("Failed to update task")
        t = replace(
            t,
            status=t.status if status is None else status,
            assignee_ids=t.assignee_ids if assignee_ids is None else tuple(assignee_ids),
        )
        self.tasks[task_id] = t
        return t

    async def delete_task(self, task_id: str) -> None:
        await self._enter("delete_task")
        if task_id in self.fail_delete_ids:
            raise GatewayError("Failed to delete task")
        if self.tasks.pop(task_id, None) is None:
            raise GatewayError("Failed to delete task")


@dataclass(slots=True)
class RecordingNotifier:
    """AlertNotifier fake: records payloads, answers with `result`."""

    sent: list[AlertPayload] = field(default_factory=list)
    result: bool = True

    async def notify(self, payload: AlertPayload) -> bool:
        self.sent.append(payload)
        return self.result
