# src/task_bouquet/board/engine.py

"""
Board state engine.

Owns the in-memory snapshot {categories, members, tasks} and is the only place
that changes it. Commands:
- validate locally (silent no-op on blank / duplicate / unknown category),
- await the gateway,
- fold the server's authoritative response into the snapshot.

Nothing is applied before the server confirms. Responses are folded in as
they land; there is no ordering token, so two in-flight updates of the same
task can finish out of order and the later-landing one wins.

After every snapshot change the engine scans for due-soon / overdue tasks and
hands each newly seen one to the alert notifier exactly once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from ..core.ports import AlertNotifier, BoardGateway, GatewayError
from . import transitions as tr
from . import views
from .alerts import AlertTracker, build_alert_payload
from .models import (
    AccentToken,
    BoardSnapshot,
    Category,
    Member,
    NewCategory,
    NewMember,
    NewTask,
    Task,
    TaskStatus,
)

logger = logging.getLogger(__name__)


class BoardEngine:
    def __init__(
        self,
        gateway: BoardGateway,
        notifier: AlertNotifier | None = None,
        *,
        alert_days_threshold: int = views.ALERT_DAYS_THRESHOLD,
        clock: Callable[[], datetime] = datetime.now,
        snapshot: BoardSnapshot | None = None,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._threshold = int(alert_days_threshold)
        self._clock = clock
        self._snapshot = snapshot or BoardSnapshot()

        self._alerts = AlertTracker()
        self._pending_alerts: set[asyncio.Task[bool]] = set()

        self.loading = False
        self.error: str | None = None
        # True when a non-silent load failed: the view should show a full error screen.
        self.blocking_error = False
        self._closed = False

    # ---- snapshot access ----

    @property
    def snapshot(self) -> BoardSnapshot:
        return self._snapshot

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._snapshot.categories

    @property
    def members(self) -> tuple[Member, ...]:
        return self._snapshot.members

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._snapshot.tasks

    @property
    def alerts(self) -> AlertTracker:
        return self._alerts

    @property
    def closed(self) -> bool:
        return self._closed

    def find_task(self, task_id: str) -> Task | None:
        for t in self._snapshot.tasks:
            if t.id == task_id:
                return t
        return None

    # ---- derived views ----

    def now(self) -> datetime:
        return self._clock()

    def summary(self) -> views.BoardSummary:
        return views.board_summary(self.tasks, self.categories)

    def tasks_by_status(self) -> views.StatusBuckets:
        return views.tasks_by_status(self.tasks)

    def due_soon(self) -> list[Task]:
        return views.due_soon_tasks(self.tasks, now=self.now(), threshold_days=self._threshold)

    def overdue(self) -> list[Task]:
        return views.overdue_tasks(self.tasks, now=self.now())

    def calendar_events(self) -> list[views.CalendarEvent]:
        return views.calendar_events(self.tasks, self.members)

    def category_stats(self) -> list[views.CategoryStat]:
        return views.category_stats(self.categories, self.tasks)

    def members_map(self) -> dict[str, Member]:
        return views.members_map(self.members)

    # ---- internal helpers ----

    def _commit(
        self,
        *,
        categories: Iterable[Category] | None = None,
        members: Iterable[Member] | None = None,
        tasks: Iterable[Task] | None = None,
    ) -> None:
        snap = self._snapshot
        self._snapshot = BoardSnapshot(
            categories=snap.categories if categories is None else tuple(categories),
            members=snap.members if members is None else tuple(members),
            tasks=snap.tasks if tasks is None else tuple(tasks),
        )
        self._scan_alerts()

    def _fail(self, err: GatewayError) -> None:
        self.error = str(err) or "Request failed"
        logger.warning("Board command failed: %s", self.error)

    def clear_error(self) -> None:
        self.error = None
        self.blocking_error = False

    def close(self) -> None:
        """Stop folding responses into the snapshot. In-flight requests are not cancelled."""
        self._closed = True

    # ---- alerting ----

    def _scan_alerts(self) -> None:
        if self._notifier is None or self._closed:
            return

        fresh = self._alerts.claim([*self.due_soon(), *self.overdue()])
        if not fresh:
            return

        by_id = self.members_map()
        for task in fresh:
            payload = build_alert_payload(task, by_id)
            logger.info("Due-date alert task_id=%s due=%s", task.id, task.due)
            job = asyncio.ensure_future(self._notifier.notify(payload))
            self._pending_alerts.add(job)
            job.add_done_callback(self._alert_done)

    def _alert_done(self, job: asyncio.Task[bool]) -> None:
        self._pending_alerts.discard(job)
        if job.cancelled():
            return
        exc = job.exception()
        if exc is not None:
            # Notifiers should not raise; if one does, it still must not escape.
            logger.error("Alert notifier raised", exc_info=exc)

    async def drain_alerts(self) -> None:
        """Wait for every in-flight alert delivery (tests, shutdown)."""
        while self._pending_alerts:
            pending = list(self._pending_alerts)
            await asyncio.gather(*pending, return_exceptions=True)
            self._pending_alerts.difference_update(pending)

    # ---- loading ----

    async def load_all(self) -> bool:
        return await self.refresh(silent=False)

    async def refresh(self, *, silent: bool = False) -> bool:
        """
        Fetch categories, members and tasks in parallel and swap the snapshot
        atomically. On any failure the snapshot stays as it was.

        silent=True (timer refresh) leaves `loading` alone and keeps stale data
        on screen; a failed non-silent load sets `blocking_error`.
        """
        if not silent:
            self.loading = True
            self.clear_error()

        try:
            categories, members, tasks = await asyncio.gather(
                self._gateway.list_categories(),
                self._gateway.list_members(),
                self._gateway.list_tasks(),
            )
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
                self.blocking_error = not silent
            return False
        finally:
            if not silent:
                self.loading = False

        if self._closed:
            return False

        self.clear_error()
        self._commit(categories=categories, members=members, tasks=tasks)
        logger.debug(
            "Board refreshed (silent=%s): %d categories, %d members, %d tasks",
            silent,
            len(categories),
            len(members),
            len(tasks),
        )
        return True

    # ---- categories ----

    async def add_category(self, name: str, accent: AccentToken | str, emoji: str) -> Category | None:
        name = (name or "").strip()
        if not tr.can_add_category(self.categories, name):
            return None

        new = NewCategory(name=name, accent=AccentToken(accent), emoji=emoji)
        try:
            created = await self._gateway.create_category(new)
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
            return None

        if self._closed:
            return None

        if any(c.id == created.id for c in self.categories):
            categories = [created if c.id == created.id else c for c in self.categories]
        else:
            categories = tr.add_category_to_list(self.categories, created)
        self._commit(categories=categories)
        logger.info("Category added id=%s name=%s", created.id, created.name)
        return created

    async def remove_category(self, category_id: str) -> bool:
        """
        Delete a category. The service cascades to its tasks; a silent refresh
        afterwards brings the task list back in line.
        """
        try:
            await self._gateway.delete_category(category_id)
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
            return False

        if self._closed:
            return False

        self._commit(categories=tr.remove_category_from_list(self.categories, category_id))
        logger.info("Category removed id=%s", category_id)
        await self.refresh(silent=True)
        return True

    # ---- members ----

    async def add_member(
        self,
        name: str,
        role: str | None = None,
        email: str | None = None,
        chat_handle: str | None = None,
    ) -> Member | None:
        name = (name or "").strip()
        if not tr.can_add_member(self.members, name):
            return None

        new = NewMember(
            name=name,
            role=tr.clean_optional(role),
            contact_email=tr.clean_optional(email),
            contact_chat_handle=tr.clean_optional(chat_handle),
        )
        try:
            created = await self._gateway.create_member(new)
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
            return None

        if self._closed:
            return None

        if any(m.id == created.id for m in self.members):
            members = [created if m.id == created.id else m for m in self.members]
        else:
            members = tr.add_member_to_list(self.members, created)
        self._commit(members=members)
        logger.info("Member added id=%s name=%s", created.id, created.name)
        return created

    async def update_member(
        self,
        member_id: str,
        name: str,
        role: str | None = None,
        email: str | None = None,
        chat_handle: str | None = None,
    ) -> Member | None:
        name = (name or "").strip()
        if not tr.can_rename_member(self.members, member_id, name):
            return None

        new = NewMember(
            name=name,
            role=tr.clean_optional(role),
            contact_email=tr.clean_optional(email),
            contact_chat_handle=tr.clean_optional(chat_handle),
        )
        try:
            updated = await self._gateway.update_member(member_id, new)
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
            return None

        if self._closed:
            return None

        self._commit(members=tr.update_member_in_list(self.members, updated))
        logger.info("Member updated id=%s", member_id)
        return updated

    async def remove_member(self, member_id: str) -> bool:
        try:
            await self._gateway.delete_member(member_id)
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
            return False

        if self._closed:
            return False

        members, tasks = tr.remove_member_from_list(self.members, self.tasks, member_id)
        self._commit(members=members, tasks=tasks)
        logger.info("Member removed id=%s", member_id)
        return True

    # ---- tasks ----

    async def add_task(
        self,
        title: str,
        category_id: str,
        emoji: str,
        notes: str | None = None,
        due: str | None = None,
        assignee_ids: Iterable[str] = (),
    ) -> Task | None:
        title = (title or "").strip()
        if not tr.can_add_task(self.categories, title, category_id):
            return None

        new = NewTask(
            title=title,
            category_id=category_id,
            emoji=emoji,
            notes=tr.clean_optional(notes),
            due=tr.clean_optional(due),
            assignee_ids=tr.resolvable_assignees(self.members, assignee_ids),
        )
        try:
            created = await self._gateway.create_task(new)
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
            return None

        if self._closed:
            return None

        if self.find_task(created.id) is not None:
            tasks = tr.replace_task_in_list(self.tasks, created)
        else:
            # Server-created; the category was checked before the call.
            tasks = [*self.tasks, created]
        self._commit(tasks=tasks)
        logger.info("Task added id=%s category=%s", created.id, created.category_id)
        return created

    async def _update_task(
        self,
        task_id: str,
        *,
        status: TaskStatus | None = None,
        assignee_ids: list[str] | None = None,
    ) -> Task | None:
        try:
            updated = await self._gateway.update_task(task_id, status=status, assignee_ids=assignee_ids)
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
            return None

        if self._closed:
            return None

        self._commit(tasks=tr.replace_task_in_list(self.tasks, updated))
        return updated

    async def update_task_status(self, task_id: str, status: TaskStatus | str) -> Task | None:
        status = TaskStatus(status)
        updated = await self._update_task(task_id, status=status)
        if updated is not None:
            logger.info("Task %s -> %s", task_id, updated.status.value)
        return updated

    async def toggle_task(self, task_id: str) -> Task | None:
        task = self.find_task(task_id)
        if task is None:
            return None
        updated = await self._update_task(task_id, status=tr.toggled_status(task))
        if updated is not None:
            logger.info("Task %s toggled -> %s", task_id, updated.status.value)
        return updated

    async def assign_members(self, task_id: str, assignee_ids: Iterable[str]) -> Task | None:
        # No local existence check; the service validates the ids.
        return await self._update_task(task_id, assignee_ids=list(tr.unique_ids(assignee_ids)))

    async def remove_task(self, task_id: str) -> bool:
        try:
            await self._gateway.delete_task(task_id)
        except GatewayError as e:
            if not self._closed:
                self._fail(e)
            return False

        if self._closed:
            return False

        self._commit(tasks=tr.remove_task_from_list(self.tasks, task_id))
        logger.info("Task removed id=%s", task_id)
        return True

    async def clear_completed(self) -> int:
        """
        Delete every completed task concurrently. Tasks whose delete went
        through leave the snapshot even if others failed.
        """
        done = [t.id for t in self.tasks if t.is_done]
        if not done:
            return 0

        results = await asyncio.gather(
            *(self._gateway.delete_task(task_id) for task_id in done),
            return_exceptions=True,
        )

        removed: set[str] = set()
        failure: GatewayError | None = None
        unexpected: BaseException | None = None
        for task_id, result in zip(done, results):
            if isinstance(result, GatewayError):
                failure = failure or result
            elif isinstance(result, BaseException):
                unexpected = unexpected or result
            else:
                removed.add(task_id)

        if self._closed:
            if unexpected is not None:
                raise unexpected
            return 0

        if failure is not None:
            self._fail(failure)

        # Deletes that went through are gone server-side; drop them before re-raising.
        if removed:
            self._commit(tasks=[t for t in self.tasks if t.id not in removed])
        if unexpected is not None:
            raise unexpected
        logger.info("Cleared %d completed task(s), %d failed", len(removed), len(done) - len(removed))
        return len(removed)
