# tests/test_alerts.py

from __future__ import annotations

import logging

import httpx
import pytest

from task_bouquet.board.alerts import AlertTracker, build_alert_payload
from task_bouquet.board.engine import BoardEngine
from task_bouquet.board.models import Task
from task_bouquet.board.views import members_map
from task_bouquet.gateway.notifier import HttpAlertNotifier, LogOnlyNotifier

from .conftest import FIXED_NOW


def test_tracker_claims_each_task_once(tasks) -> None:
    tracker = AlertTracker()
    assert [t.id for t in tracker.claim(tasks)] == ["task-1", "task-2"]
    assert tracker.claim(tasks) == []
    assert "task-1" in tracker
    assert len(tracker) == 2


def test_tracker_dedupes_within_one_scan(tasks) -> None:
    tracker = AlertTracker()
    assert [t.id for t in tracker.claim([tasks[0], tasks[0]])] == ["task-1"]


def test_payload_shape(tasks, members) -> None:
    payload = build_alert_payload(tasks[0], members_map(members))
    assert payload == {
        "taskId": "task-1",
        "title": "前撮りのスケジュール調整",
        "due": "2026-02-10",
        "status": "in_progress",
        "assignees": [
            {"name": "はな", "contactEmail": "hana@example.com", "contactLineId": "@hana_wedding"},
        ],
    }


def test_payload_skips_unknown_assignees(members) -> None:
    task = Task(id="t", title="t", category_id="cat-a", emoji="", due="2026-02-09", assignee_ids=("gone", "m2"))
    payload = build_alert_payload(task, members_map(members))
    assert [a["name"] for a in payload["assignees"]] == ["だいち"]
    assert payload["assignees"][0]["contactLineId"] is None


@pytest.mark.asyncio
async def test_engine_alerts_at_most_once_across_refreshes(engine, notifier) -> None:
    assert await engine.refresh(silent=True)
    await engine.drain_alerts()
    assert [p["taskId"] for p in notifier.sent] == ["task-1"]

    assert await engine.refresh(silent=True)
    assert await engine.refresh()
    await engine.drain_alerts()
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_new_overdue_task_is_alerted(engine, notifier) -> None:
    await engine.refresh(silent=True)
    task = await engine.add_task("招待状の発送", "cat-b", "💌", due="2026-02-01", assignee_ids=["m2"])
    await engine.drain_alerts()

    assert task is not None
    assert [p["taskId"] for p in notifier.sent] == ["task-1", task.id]
    assert task.id in engine.alerts


@pytest.mark.asyncio
async def test_done_task_is_not_alerted(engine, notifier) -> None:
    await engine.update_task_status("task-1", "done")
    await engine.drain_alerts()
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_notifier_failure_does_not_touch_board(engine, notifier) -> None:
    notifier.result = False
    assert await engine.refresh(silent=True)
    await engine.drain_alerts()

    assert len(notifier.sent) == 1
    assert engine.error is None
    assert "task-1" in engine.alerts


@pytest.mark.asyncio
async def test_engine_without_notifier_never_alerts(gateway) -> None:
    engine = BoardEngine(gateway, clock=lambda: FIXED_NOW)
    await engine.load_all()
    await engine.drain_alerts()
    assert len(engine.alerts) == 0


# ---- HTTP notifier ----


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="http://board.test/api/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_http_notifier_posts_payload(tasks, members) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    payload = build_alert_payload(tasks[0], members_map(members))
    async with _client(handler) as client:
        assert await HttpAlertNotifier(client).notify(payload) is True

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/alerts/notify"


@pytest.mark.asyncio
async def test_http_notifier_server_error_degrades_to_preview(tasks, members, caplog) -> None:
    payload = build_alert_payload(tasks[0], members_map(members))
    caplog.set_level(logging.INFO, logger="task_bouquet.gateway.notifier")

    async with _client(lambda request: httpx.Response(500)) as client:
        assert await HttpAlertNotifier(client).notify(payload) is False

    assert "[Alert Preview]" in caplog.text


@pytest.mark.asyncio
async def test_http_notifier_transport_error_does_not_raise(tasks, members) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    payload = build_alert_payload(tasks[0], members_map(members))
    async with _client(handler) as client:
        assert await HttpAlertNotifier(client).notify(payload) is False


@pytest.mark.asyncio
async def test_log_only_notifier(tasks, members, caplog) -> None:
    caplog.set_level(logging.INFO, logger="task_bouquet.gateway.notifier")
    assert await LogOnlyNotifier().notify(build_alert_payload(tasks[0], members_map(members))) is False
    assert "前撮りのスケジュール調整" in caplog.text
