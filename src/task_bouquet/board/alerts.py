# src/task_bouquet/board/alerts.py

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from ..core.ports import AlertPayload
from .models import Member, Task

logger = logging.getLogger(__name__)


def build_alert_payload(task: Task, members: Mapping[str, Member]) -> AlertPayload:
    """Notification body; assignees that no longer resolve are left out."""
    assignees = [members[a] for a in task.assignee_ids if a in members]
    return {
        "taskId": task.id,
        "title": task.title,
        "due": task.due,
        "status": task.status.value,
        "assignees": [
            {
                "name": m.name,
                "contactEmail": m.contact_email,
                "contactLineId": m.contact_chat_handle,
            }
            for m in assignees
        ],
    }


class AlertTracker:
    """
    Remembers which tasks have already been alerted.

    Per task id the state only moves unnotified -> notified. The set lives as
    long as this object; a data refresh does not reset it.
    """

    def __init__(self) -> None:
        self._alerted: set[str] = set()

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._alerted

    def __len__(self) -> int:
        return len(self._alerted)

    def claim(self, candidates: Iterable[Task]) -> list[Task]:
        """
        Mark every not-yet-alerted candidate as alerted and return those.

        A task listed twice in `candidates` (e.g. once as due-soon, once as
        overdue) is claimed only once.
        """
        fresh: list[Task] = []
        for task in candidates:
            if task.id in self._alerted:
                continue
            self._alerted.add(task.id)
            fresh.append(task)
        if fresh:
            logger.debug("Alert claim: %s", [t.id for t in fresh])
        return fresh
