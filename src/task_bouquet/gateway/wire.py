# src/task_bouquet/gateway/wire.py

"""
Wire <-> in-memory mapping for the persistence service.

Wire shapes: snake_case keys, numeric ids, tasks embed their category object,
`due` may be a full ISO timestamp. In-memory shapes: string ids, flat
`category_id` / `assignee_ids`, date-only `due`.

This is the only module that knows both shapes.
"""

from __future__ import annotations

from typing import Any

from ..board.models import AccentToken, Category, Member, NewCategory, NewMember, NewTask, Task, TaskStatus
from ..board.transitions import unique_ids

WireObject = dict[str, Any]


def _id_to_str(raw: Any) -> str:
    return "" if raw is None else str(raw)


def _id_to_wire(raw: str) -> int | str:
    # Service ids are integers; anything else is passed through and left for the service to reject.
    try:
        return int(raw)
    except (TypeError, ValueError):
        return raw


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw)
    return s if s.strip() else None


def due_to_date_only(raw: Any) -> str | None:
    """'2026-02-10T00:00:00.000000Z' -> '2026-02-10'."""
    if not raw:
        return None
    return str(raw).split("T", 1)[0]


# ---- read (wire -> memory) ----


def category_from_wire(data: WireObject) -> Category:
    return Category(
        id=_id_to_str(data.get("id")),
        name=str(data.get("name") or ""),
        accent=AccentToken.from_wire(data.get("accent")),
        emoji=str(data.get("emoji") or "🌸"),
    )


def member_from_wire(data: WireObject) -> Member:
    return Member(
        id=_id_to_str(data.get("id")),
        name=str(data.get("name") or ""),
        role=_opt_str(data.get("role")),
        contact_email=_opt_str(data.get("contact_email")),
        contact_chat_handle=_opt_str(data.get("contact_line_id")),
    )


def task_from_wire(data: WireObject) -> Task:
    category_id = data.get("category_id")
    if category_id is None and isinstance(data.get("category"), dict):
        category_id = data["category"].get("id")

    return Task(
        id=_id_to_str(data.get("id")),
        title=str(data.get("title") or ""),
        category_id=_id_to_str(category_id),
        emoji=str(data.get("emoji") or ""),
        # `is_done` on the wire is redundant with status; status wins.
        status=TaskStatus.from_wire(data.get("status")),
        due=due_to_date_only(data.get("due")),
        notes=_opt_str(data.get("notes")),
        assignee_ids=unique_ids(_id_to_str(a) for a in (data.get("assignee_ids") or [])),
    )


# ---- write (memory -> wire) ----


def new_category_to_wire(new: NewCategory) -> WireObject:
    return {"name": new.name, "accent": str(new.accent), "emoji": new.emoji}


def new_member_to_wire(new: NewMember) -> WireObject:
    # Omitted keys are left as they are by the service; null would clear them.
    body: WireObject = {"name": new.name}
    if new.role is not None:
        body["role"] = new.role
    if new.contact_email is not None:
        body["contact_email"] = new.contact_email
    if new.contact_chat_handle is not None:
        body["contact_line_id"] = new.contact_chat_handle
    return body


def new_task_to_wire(new: NewTask) -> WireObject:
    return {
        "title": new.title,
        "category_id": _id_to_wire(new.category_id),
        "emoji": new.emoji,
        "notes": new.notes,
        "due": new.due,
        "assignee_ids": [_id_to_wire(a) for a in new.assignee_ids],
    }


def task_update_to_wire(
    *,
    status: TaskStatus | None = None,
    assignee_ids: list[str] | None = None,
) -> WireObject:
    body: WireObject = {}
    if status is not None:
        status = TaskStatus(status)
        body["status"] = status.value
        body["is_done"] = status == TaskStatus.DONE
    if assignee_ids is not None:
        body["assignee_ids"] = [_id_to_wire(a) for a in unique_ids(assignee_ids)]
    return body
