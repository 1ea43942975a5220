# src/task_bouquet/board/transitions.py

"""
Pure board transitions.

Every function takes the current lists and returns new lists; inputs are never
mutated. Invalid inputs (blank names, duplicates, unknown categories) are
silent no-ops that hand back an equal list.

The engine uses the `can_*` predicates before talking to the service, and the
`*_in_list` / `*_to_list` functions to fold server responses in.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from .models import Category, Member, Task, TaskStatus


def clean_optional(value: str | None) -> str | None:
    """Trim a free-text field; empty becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def unique_ids(ids: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates, keep first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for i in ids:
        if i in seen:
            continue
        seen.add(i)
        out.append(i)
    return tuple(out)


# ---- validation predicates ----


def can_add_category(categories: Sequence[Category], name: str) -> bool:
    name = (name or "").strip()
    if not name:
        return False
    return not any(c.name == name for c in categories)


def can_add_member(members: Sequence[Member], name: str) -> bool:
    name = (name or "").strip()
    if not name:
        return False
    return not any(m.name == name for m in members)


def can_rename_member(members: Sequence[Member], member_id: str, name: str) -> bool:
    name = (name or "").strip()
    if not name:
        return False
    return not any(m.name == name and m.id != member_id for m in members)


def can_add_task(categories: Sequence[Category], title: str, category_id: str) -> bool:
    if not (title or "").strip() or not category_id:
        return False
    return any(c.id == category_id for c in categories)


def resolvable_assignees(members: Sequence[Member], assignee_ids: Iterable[str]) -> tuple[str, ...]:
    """Keep only ids that resolve to a current member (unknown ids are dropped)."""
    known = {m.id for m in members}
    return unique_ids(i for i in assignee_ids if i in known)


# ---- categories ----


def add_category_to_list(categories: Sequence[Category], category: Category) -> list[Category]:
    if not can_add_category(categories, category.name):
        return list(categories)
    return [*categories, category]


def remove_category_from_list(categories: Sequence[Category], category_id: str) -> list[Category]:
    return [c for c in categories if c.id != category_id]


# ---- members ----


def add_member_to_list(members: Sequence[Member], member: Member) -> list[Member]:
    if not can_add_member(members, member.name):
        return list(members)
    return [*members, member]


def update_member_in_list(members: Sequence[Member], member: Member) -> list[Member]:
    if not can_rename_member(members, member.id, member.name):
        return list(members)
    return [member if m.id == member.id else m for m in members]


def remove_member_from_list(
    members: Sequence[Member],
    tasks: Sequence[Task],
    member_id: str,
) -> tuple[list[Member], list[Task]]:
    """Drop a member and strip it from every task so no task points at a missing member."""
    kept = [m for m in members if m.id != member_id]
    stripped = [
        replace(t, assignee_ids=tuple(a for a in t.assignee_ids if a != member_id))
        if member_id in t.assignee_ids
        else t
        for t in tasks
    ]
    return kept, stripped


# ---- tasks ----


def add_task_to_list(
    tasks: Sequence[Task],
    categories: Sequence[Category],
    task: Task,
) -> list[Task]:
    if not can_add_task(categories, task.title, task.category_id):
        return list(tasks)
    return [*tasks, task]


def replace_task_in_list(tasks: Sequence[Task], task: Task) -> list[Task]:
    return [task if t.id == task.id else t for t in tasks]


def toggled_status(task: Task) -> TaskStatus:
    # Un-completing goes back to not_started, never in_progress.
    return TaskStatus.NOT_STARTED if task.is_done else TaskStatus.DONE


def toggle_task_in_list(tasks: Sequence[Task], task_id: str) -> list[Task]:
    return [replace(t, status=toggled_status(t)) if t.id == task_id else t for t in tasks]


def update_task_status_in_list(
    tasks: Sequence[Task],
    task_id: str,
    status: TaskStatus,
) -> list[Task]:
    return [replace(t, status=TaskStatus(status)) if t.id == task_id else t for t in tasks]


def assign_members_to_task(
    tasks: Sequence[Task],
    task_id: str,
    assignee_ids: Iterable[str],
) -> list[Task]:
    ids = unique_ids(assignee_ids)
    return [replace(t, assignee_ids=ids) if t.id == task_id else t for t in tasks]


def clear_completed_tasks(tasks: Sequence[Task]) -> list[Task]:
    return [t for t in tasks if not t.is_done]


def remove_task_from_list(tasks: Sequence[Task], task_id: str) -> list[Task]:
    return [t for t in tasks if t.id != task_id]
