# src/task_bouquet/board/views.py

"""
Derived, non-persisted views over a board snapshot.

All functions are pure and cheap; callers recompute them on every read rather
than caching. `now` is injectable so due-date logic is testable.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal

from .models import STATUS_WEIGHTS, Category, Member, Task, TaskStatus

logger = logging.getLogger(__name__)

ALERT_DAYS_THRESHOLD = 3
UNASSIGNED_MEMBER_LABEL = "メンバー未設定"
UNCATEGORIZED_LABEL = "uncategorized"

_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class StatusBuckets:
    not_started: list[Task]
    in_progress: list[Task]
    done: list[Task]


@dataclass(frozen=True, slots=True)
class CalendarEvent:
    task_id: str
    title: str
    due: str
    status: TaskStatus
    assignees: list[str]


@dataclass(frozen=True, slots=True)
class BoardSummary:
    total_tasks: int
    completed_tasks: int
    categories: int
    average_progress: int


@dataclass(frozen=True, slots=True)
class CategoryStat:
    category: Category
    total: int


def parse_due(raw: str | None) -> date | None:
    """Parse a YYYY-MM-DD due string. Garbage yields None instead of raising."""
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        logger.debug("Unparseable due date: %r", raw)
        return None


def _days_until(due: date, now: datetime) -> float:
    due_at = datetime.combine(due, time.min, tzinfo=now.tzinfo)
    return (due_at - now).total_seconds() / _SECONDS_PER_DAY


def tasks_by_status(tasks: Sequence[Task]) -> StatusBuckets:
    return StatusBuckets(
        not_started=[t for t in tasks if t.status == TaskStatus.NOT_STARTED],
        in_progress=[t for t in tasks if t.status == TaskStatus.IN_PROGRESS],
        done=[t for t in tasks if t.status == TaskStatus.DONE],
    )


def due_soon_tasks(
    tasks: Sequence[Task],
    *,
    now: datetime | None = None,
    threshold_days: int = ALERT_DAYS_THRESHOLD,
) -> list[Task]:
    """Open tasks due between now and `threshold_days` from now (both ends inclusive)."""
    now = now or datetime.now()
    out: list[Task] = []
    for t in tasks:
        if t.is_done:
            continue
        due = parse_due(t.due)
        if due is None:
            continue
        days = _days_until(due, now)
        if 0 <= days <= threshold_days:
            out.append(t)
    return out


def overdue_tasks(tasks: Sequence[Task], *, now: datetime | None = None) -> list[Task]:
    """Open tasks whose due date is strictly in the past."""
    now = now or datetime.now()
    out: list[Task] = []
    for t in tasks:
        if t.is_done:
            continue
        due = parse_due(t.due)
        if due is None:
            continue
        if _days_until(due, now) < 0:
            out.append(t)
    return out


def members_map(members: Sequence[Member]) -> dict[str, Member]:
    return {m.id: m for m in members}


def calendar_events(tasks: Sequence[Task], members: Sequence[Member]) -> list[CalendarEvent]:
    """Project every task with a due value; the raw due string is passed through untouched."""
    by_id = members_map(members)
    out: list[CalendarEvent] = []
    for t in tasks:
        if not t.due:
            continue
        names = [
            by_id[a].name if a in by_id else UNASSIGNED_MEMBER_LABEL
            for a in t.assignee_ids
        ]
        out.append(
            CalendarEvent(task_id=t.id, title=t.title, due=t.due, status=t.status, assignees=names)
        )
    return out


def average_progress(tasks: Sequence[Task]) -> int:
    if not tasks:
        return 0
    total = sum(STATUS_WEIGHTS[t.status] for t in tasks)
    # Half-up, not banker's rounding.
    return int((Decimal(total) / Decimal(len(tasks))).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def board_summary(tasks: Sequence[Task], categories: Sequence[Category]) -> BoardSummary:
    return BoardSummary(
        total_tasks=len(tasks),
        completed_tasks=sum(1 for t in tasks if t.is_done),
        categories=len(categories),
        average_progress=average_progress(tasks),
    )


def category_stats(categories: Sequence[Category], tasks: Sequence[Task]) -> list[CategoryStat]:
    return [
        CategoryStat(category=c, total=sum(1 for t in tasks if t.category_id == c.id))
        for c in categories
    ]


def category_for(task: Task, categories: Sequence[Category]) -> Category | None:
    """Resolve a task's category; None means the task is orphaned (uncategorized)."""
    for c in categories:
        if c.id == task.category_id:
            return c
    return None
