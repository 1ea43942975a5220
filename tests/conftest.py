# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from task_bouquet.board.engine import BoardEngine
from task_bouquet.board.models import AccentToken, BoardSnapshot, Category, Member, Task, TaskStatus
from task_bouquet.core.state import AppState

from .fakes import FakeGateway, RecordingNotifier

# 1.5 days before task-1 is due, well after task-2's due date.
FIXED_NOW = datetime(2026, 2, 8, 12, 0, 0)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="task-bouquet-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        api_base_url="http://board.test/api",
        api_username="wedding",
        api_password="secret",
        http_timeout_seconds=5.0,
        refresh_interval_seconds=0.01,
        alert_days_threshold=3,
        alerts_enabled=True,
        console_enabled=False,
    )


@pytest.fixture()
def categories() -> list[Category]:
    return [
        Category(id="cat-a", name="前撮り", accent=AccentToken.SKY, emoji="📸"),
        Category(id="cat-b", name="会場装飾", accent=AccentToken.BLUSH, emoji="🎀"),
    ]


@pytest.fixture()
def members() -> list[Member]:
    return [
        Member(id="m1", name="はな", role="新婦", contact_email="hana@example.com", contact_chat_handle="@hana_wedding"),
        Member(id="m2", name="だいち", role="新郎", contact_email="daichi@example.com"),
    ]


@pytest.fixture()
def tasks() -> list[Task]:
    return [
        Task(
            id="task-1",
            title="前撮りのスケジュール調整",
            category_id="cat-a",
            emoji="📸",
            status=TaskStatus.IN_PROGRESS,
            due="2026-02-10",
            assignee_ids=("m1",),
        ),
        Task(
            id="task-2",
            title="会場装飾の打ち合わせ",
            category_id="cat-b",
            emoji="🎀",
            status=TaskStatus.DONE,
            due="2026-01-20",
            assignee_ids=("m2",),
        ),
    ]


@pytest.fixture()
def gateway(categories, members, tasks) -> FakeGateway:
    return FakeGateway(categories=categories, members=members, tasks=tasks)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def engine(gateway, notifier, categories, members, tasks) -> BoardEngine:
    """Engine pre-seeded with the same data the fake service holds."""
    return BoardEngine(
        gateway,
        notifier,
        clock=lambda: FIXED_NOW,
        snapshot=BoardSnapshot(categories=tuple(categories), members=tuple(members), tasks=tuple(tasks)),
    )


@pytest.fixture()
def state(settings, gateway, notifier, engine) -> AppState:
    """AppState wired with deterministic fakes."""
    return AppState(settings=settings, gateway=gateway, notifier=notifier, engine=engine)
