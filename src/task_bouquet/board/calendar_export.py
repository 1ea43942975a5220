# src/task_bouquet/board/calendar_export.py

"""
Calendar export for single tasks.

Builds an all-day style event from a task and renders it as an iCalendar
(.ics) document. The event starts and ends at 09:00 local time on the due
date, written in UTC basic format.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

PRODID = "-//TaskBouquet//Wedding Task Management//EN"
EVENT_TITLE_PREFIX = "【結婚準備】"
EVENT_LOCATION = "結婚準備タスク"
EVENT_FOOTER = "Created by タスクブーケ"
EVENT_HOUR = time(9, 0)

_FILENAME_UNSAFE = re.compile(r"[^a-zA-Z0-9\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")


@dataclass(frozen=True, slots=True)
class ExportEvent:
    title: str
    start_date: str
    description: str = ""
    end_date: str | None = None
    location: str = ""


def calendar_event_from_task(
    task_title: str,
    task_due: str | None = None,
    task_notes: str | None = None,
    category_name: str | None = None,
    *,
    today: date | None = None,
) -> ExportEvent:
    lines = []
    if task_notes:
        lines.append(f"メモ: {task_notes}")
    if category_name:
        lines.append(f"カテゴリ: {category_name}")
    lines.append(EVENT_FOOTER)

    start = task_due or (today or date.today()).isoformat()
    return ExportEvent(
        title=f"{EVENT_TITLE_PREFIX}{task_title}",
        description="\n".join(lines),
        start_date=start,
        location=EVENT_LOCATION,
    )


def _ics_timestamp(raw_date: str) -> str:
    day = date.fromisoformat(raw_date[:10])
    local = datetime.combine(day, EVENT_HOUR).astimezone()
    return local.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def render_ics(event: ExportEvent, *, uid: str) -> str:
    """Raises ValueError if the event's dates are not YYYY-MM-DD."""
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "BEGIN:VEVENT",
        f"DTSTART:{_ics_timestamp(event.start_date)}",
        f"DTEND:{_ics_timestamp(event.end_date or event.start_date)}",
        f"SUMMARY:{_escape_text(event.title)}",
        f"DESCRIPTION:{_escape_text(event.description)}",
        f"LOCATION:{_escape_text(event.location)}",
        f"UID:{uid}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines)


def ics_filename(title: str) -> str:
    return f"{_FILENAME_UNSAFE.sub('_', title)}.ics"
