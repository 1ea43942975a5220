# src/task_bouquet/board/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class TaskStatus(StrEnum):
    """Task progress as stored by the persistence service."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def from_wire(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED


class AccentToken(StrEnum):
    BLUSH = "blush"
    MINT = "mint"
    LAVENDER = "lavender"
    SUNNY = "sunny"
    SKY = "sky"

    @classmethod
    def from_wire(cls, raw: str | None) -> AccentToken:
        if not raw:
            return cls.BLUSH
        try:
            return cls(raw)
        except ValueError:
            return cls.BLUSH


ACCENT_LABELS: dict[AccentToken, str] = {
    AccentToken.BLUSH: "ブーケピンク",
    AccentToken.MINT: "ミントグリーン",
    AccentToken.LAVENDER: "ラベンダー",
    AccentToken.SUNNY: "シャンパンゴールド",
    AccentToken.SKY: "サムシングブルー",
}

EMOJI_PALETTE: tuple[str, ...] = ("💐", "💍", "🎀", "🎂", "💌", "🥂", "🌸", "📸", "👗")

# Progress weight per status, used by the board summary.
STATUS_WEIGHTS: dict[TaskStatus, int] = {
    TaskStatus.DONE: 100,
    TaskStatus.IN_PROGRESS: 50,
    TaskStatus.NOT_STARTED: 0,
}


@dataclass(frozen=True, slots=True)
class Category:
    id: str
    name: str
    accent: AccentToken
    emoji: str = "🌸"


@dataclass(frozen=True, slots=True)
class Member:
    id: str
    name: str
    role: str | None = None
    contact_email: str | None = None
    contact_chat_handle: str | None = None


@dataclass(frozen=True, slots=True)
class Task:
    """
    One board task.

    `is_done` is derived from `status` so the two can never disagree.
    `due` is kept as the raw date string (YYYY-MM-DD); it may be unparseable
    and consumers must cope with that.
    """

    id: str
    title: str
    category_id: str
    emoji: str
    status: TaskStatus = TaskStatus.NOT_STARTED
    due: str | None = None
    notes: str | None = None
    assignee_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE


@dataclass(frozen=True, slots=True)
class NewCategory:
    name: str
    accent: AccentToken
    emoji: str


@dataclass(frozen=True, slots=True)
class NewMember:
    name: str
    role: str | None = None
    contact_email: str | None = None
    contact_chat_handle: str | None = None


@dataclass(frozen=True, slots=True)
class NewTask:
    title: str
    category_id: str
    emoji: str
    notes: str | None = None
    due: str | None = None
    assignee_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class BoardSnapshot:
    """The engine's in-memory mirror of the persistence service."""

    categories: tuple[Category, ...] = ()
    members: tuple[Member, ...] = ()
    tasks: tuple[Task, ...] = ()
