# tests/test_views.py

from __future__ import annotations

from datetime import datetime

from task_bouquet.board import transitions as tr
from task_bouquet.board import views
from task_bouquet.board.models import Task, TaskStatus

from .conftest import FIXED_NOW


def _task(task_id: str, due: str | None, status: TaskStatus = TaskStatus.NOT_STARTED) -> Task:
    return Task(id=task_id, title=task_id, category_id="cat-a", emoji="", status=status, due=due)


def test_due_soon_window_is_inclusive() -> None:
    now = datetime(2026, 2, 10, 0, 0, 0)
    ts = [
        _task("today", "2026-02-10"),  # 0 days
        _task("edge", "2026-02-13"),  # exactly 3 days
        _task("later", "2026-02-14"),  # 4 days
    ]
    assert [t.id for t in views.due_soon_tasks(ts, now=now)] == ["today", "edge"]


def test_threshold_is_configurable() -> None:
    now = datetime(2026, 2, 10, 0, 0, 0)
    ts = [_task("a", "2026-02-14")]
    assert views.due_soon_tasks(ts, now=now, threshold_days=3) == []
    assert [t.id for t in views.due_soon_tasks(ts, now=now, threshold_days=4)] == ["a"]


def test_overdue_is_strictly_past() -> None:
    now = datetime(2026, 2, 10, 9, 0, 0)
    ts = [_task("yesterday", "2026-02-09"), _task("today", "2026-02-11")]
    assert [t.id for t in views.overdue_tasks(ts, now=now)] == ["yesterday"]


def test_due_soon_and_overdue_are_disjoint() -> None:
    now = datetime(2026, 2, 10, 12, 0, 0)
    ts = [_task(f"t{d}", f"2026-02-{d:02d}") for d in range(1, 20)]
    soon = {t.id for t in views.due_soon_tasks(ts, now=now)}
    late = {t.id for t in views.overdue_tasks(ts, now=now)}
    assert soon
    assert late
    assert not soon & late


def test_done_or_undated_tasks_are_never_alerted() -> None:
    ts = [
        _task("no-due", None),
        _task("done-late", "2020-01-01", TaskStatus.DONE),
        _task("done-soon", "2026-02-09", TaskStatus.DONE),
    ]
    assert views.due_soon_tasks(ts, now=FIXED_NOW) == []
    assert views.overdue_tasks(ts, now=FIXED_NOW) == []


def test_bad_due_date_fails_open_but_stays_on_calendar() -> None:
    ts = [_task("bad", "someday"), _task("worse", "2026-13-45")]
    assert views.due_soon_tasks(ts, now=FIXED_NOW) == []
    assert views.overdue_tasks(ts, now=FIXED_NOW) == []

    events = views.calendar_events(ts, [])
    assert [e.due for e in events] == ["someday", "2026-13-45"]


def test_status_buckets_keep_snapshot_order() -> None:
    ts = [
        _task("a", None, TaskStatus.DONE),
        _task("b", None),
        _task("c", None, TaskStatus.DONE),
        _task("d", None, TaskStatus.IN_PROGRESS),
    ]
    buckets = views.tasks_by_status(ts)
    assert [t.id for t in buckets.done] == ["a", "c"]
    assert [t.id for t in buckets.not_started] == ["b"]
    assert [t.id for t in buckets.in_progress] == ["d"]


def test_average_progress() -> None:
    assert views.average_progress([]) == 0
    ts = [_task("a", None, TaskStatus.DONE), _task("b", None, TaskStatus.IN_PROGRESS), _task("c", None)]
    assert views.average_progress(ts) == 50
    # 150 / 2 = 75, 50 / 4 = 12.5 -> 13 (half-up)
    assert views.average_progress(ts[:2]) == 75
    assert views.average_progress([ts[1], ts[2], ts[2], ts[2]]) == 13


def test_summary(tasks, categories) -> None:
    s = views.board_summary(tasks, categories)
    assert s.total_tasks == 2
    assert s.completed_tasks == 1
    assert s.categories == 2
    assert s.average_progress == 75


def test_summary_of_empty_board() -> None:
    s = views.board_summary([], [])
    assert (s.total_tasks, s.completed_tasks, s.categories, s.average_progress) == (0, 0, 0, 0)


def test_calendar_events_resolve_names(tasks, members) -> None:
    ghost = Task(id="t3", title="ghost", category_id="cat-a", emoji="", due="2026-03-01", assignee_ids=("gone",))
    events = views.calendar_events([*tasks, ghost, _task("undated", None)], members)
    assert [e.task_id for e in events] == ["task-1", "task-2", "t3"]
    assert events[0].assignees == ["はな"]
    assert events[2].assignees == [views.UNASSIGNED_MEMBER_LABEL]


def test_orphaned_task_is_uncategorized(categories) -> None:
    orphan = Task(id="o", title="o", category_id="deleted", emoji="")
    assert views.category_for(orphan, categories) is None
    stats = views.category_stats(categories, [orphan])
    assert [s.total for s in stats] == [0, 0]


def test_marking_done_clears_due_sets(tasks) -> None:
    assert [t.id for t in views.due_soon_tasks(tasks, now=FIXED_NOW)] == ["task-1"]

    updated = tr.update_task_status_in_list(tasks, "task-1", TaskStatus.DONE)
    target = next(t for t in updated if t.id == "task-1")
    assert target.status == TaskStatus.DONE
    assert target.is_done is True

    assert views.due_soon_tasks(updated, now=FIXED_NOW) == []
    assert views.overdue_tasks(updated, now=FIXED_NOW) == []
