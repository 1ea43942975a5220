# src/task_bouquet/cli/commands.py

from __future__ import annotations

import inspect
import logging
import uuid
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import cast

from ..board import views
from ..board.calendar_export import calendar_event_from_task, ics_filename, render_ics
from ..board.models import ACCENT_LABELS, AccentToken, Task, TaskStatus
from ..core.state import AppState

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

NO_CHANGE = "Nothing changed."


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering helpers ----


def _status_mark(task: Task) -> str:
    if task.status == TaskStatus.DONE:
        return "[x]"
    if task.status == TaskStatus.IN_PROGRESS:
        return "[~]"
    return "[ ]"


def render_task_line(state: AppState, task: Task) -> str:
    engine = state.engine
    by_id = engine.members_map()
    names = [by_id[a].name if a in by_id else views.UNASSIGNED_MEMBER_LABEL for a in task.assignee_ids]
    line = f"{_status_mark(task)} {task.id} {task.emoji} {task.title}"
    if task.due:
        line += f" (due {task.due})"
    if names:
        line += f" @ {', '.join(names)}"
    return line


def _with_error(state: AppState, text: str) -> str:
    err = state.engine.error
    return f"{text}\n[error] {err}" if err else text


def _split_options(args: list[str]) -> tuple[list[str], dict[str, str], list[str]]:
    """
    Split args into (plain words, key:value options, @mentions).

    "/add 3 Book the venue due:2026-05-01 @1 @2" ->
    (["Book", "the", "venue"], {"due": "2026-05-01"}, ["1", "2"])
    """
    words: list[str] = []
    opts: dict[str, str] = {}
    mentions: list[str] = []
    for a in args:
        if a.startswith("@") and len(a) > 1:
            mentions.append(a[1:])
            continue
        key, sep, value = a.partition(":")
        if sep and key.lower() in {"due", "note", "role", "email", "line"}:
            opts[key.lower()] = value
            continue
        words.append(a)
    return words, opts, mentions


# ---- read-only commands ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_summary(state: AppState, args: list[str]) -> str:
    engine = state.engine
    s = engine.summary()
    lines = [
        "Board summary:",
        f"  Tasks: {s.completed_tasks}/{s.total_tasks} done",
        f"  Categories: {s.categories}",
        f"  Average progress: {s.average_progress}%",
        f"  Due soon: {len(engine.due_soon())}, overdue: {len(engine.overdue())}",
    ]
    if engine.error:
        lines.append(f"  Last error: {engine.error}")
    return "\n".join(lines)


async def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks              -> all tasks grouped by category
    /tasks in_progress  -> only one status
    """
    engine = state.engine
    tasks = list(engine.tasks)

    if args:
        try:
            wanted = TaskStatus(args[0].lower())
        except ValueError:
            return "Usage: /tasks [not_started|in_progress|done]"
        tasks = [t for t in tasks if t.status == wanted]

    if not tasks:
        return "No tasks."

    groups: dict[str, list[Task]] = {}
    for t in tasks:
        category = views.category_for(t, engine.categories)
        label = f"{category.emoji} {category.name}" if category else views.UNCATEGORIZED_LABEL
        groups.setdefault(label, []).append(t)

    lines: list[str] = []
    for label, items in groups.items():
        lines.append(f"{label}:")
        lines.extend(f"  {render_task_line(state, t)}" for t in items)
    return "\n".join(lines)


async def cmd_due(state: AppState, args: list[str]) -> str:
    engine = state.engine
    soon = engine.due_soon()
    late = engine.overdue()
    if not soon and not late:
        return "Nothing due soon."
    lines: list[str] = []
    if late:
        lines.append("Overdue:")
        lines.extend(f"  {render_task_line(state, t)}" for t in late)
    if soon:
        lines.append("Due soon:")
        lines.extend(f"  {render_task_line(state, t)}" for t in soon)
    return "\n".join(lines)


async def cmd_categories(state: AppState, args: list[str]) -> str:
    stats = state.engine.category_stats()
    if not stats:
        return "No categories."
    lines = ["Categories:"]
    for st in stats:
        c = st.category
        lines.append(f"  {c.id} {c.emoji} {c.name} [{ACCENT_LABELS[c.accent]}] tasks={st.total}")
    return "\n".join(lines)


async def cmd_members(state: AppState, args: list[str]) -> str:
    members = state.engine.members
    if not members:
        return "No members."
    lines = ["Members:"]
    for m in members:
        extra = [x for x in (m.role, m.contact_email, m.contact_chat_handle) if x]
        suffix = f" ({', '.join(extra)})" if extra else ""
        lines.append(f"  {m.id} {m.name}{suffix}")
    return "\n".join(lines)


async def cmd_calendar(state: AppState, args: list[str]) -> str:
    events = sorted(state.engine.calendar_events(), key=lambda e: e.due)
    if not events:
        return "No tasks with a due date."
    lines = ["Calendar:"]
    for e in events:
        who = f" @ {', '.join(e.assignees)}" if e.assignees else ""
        lines.append(f"  {e.due} {e.title} [{e.status.value}]{who}")
    return "\n".join(lines)


# ---- task commands ----


async def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <category_id> <title...> [due:YYYY-MM-DD] [note:text] [@member_id ...]"""
    words, opts, mentions = _split_options(args)
    if len(words) < 2:
        return "Usage: /add <category_id> <title...> [due:YYYY-MM-DD] [note:text] [@member_id ...]"

    engine = state.engine
    category_id, title = words[0], " ".join(words[1:])
    category = next((c for c in engine.categories if c.id == category_id), None)
    emoji = category.emoji if category else "🌸"

    task = await engine.add_task(
        title,
        category_id,
        emoji,
        notes=opts.get("note"),
        due=opts.get("due"),
        assignee_ids=mentions,
    )
    if task is None:
        return _with_error(state, f"{NO_CHANGE} (blank title or unknown category?)")
    return f"Added: {render_task_line(state, task)}"


async def cmd_status(state: AppState, args: list[str]) -> str:
    """/status <task_id> <not_started|in_progress|done>"""
    if len(args) != 2:
        return "Usage: /status <task_id> <not_started|in_progress|done>"
    try:
        status = TaskStatus(args[1].lower())
    except ValueError:
        return "Status must be one of: not_started, in_progress, done."

    task = await state.engine.update_task_status(args[0], status)
    if task is None:
        return _with_error(state, NO_CHANGE)
    return render_task_line(state, task)


async def cmd_toggle(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /toggle <task_id>"
    task = await state.engine.toggle_task(args[0])
    if task is None:
        return _with_error(state, f"{NO_CHANGE} (unknown task?)")
    return render_task_line(state, task)


async def cmd_assign(state: AppState, args: list[str]) -> str:
    """/assign <task_id> [member_id ...]  (no ids clears the assignees)"""
    if not args:
        return "Usage: /assign <task_id> [member_id ...]"
    ids = [a.lstrip("@") for a in args[1:]]
    task = await state.engine.assign_members(args[0], ids)
    if task is None:
        return _with_error(state, NO_CHANGE)
    return render_task_line(state, task)


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /rm <task_id>"
    if await state.engine.remove_task(args[0]):
        return f"Removed task {args[0]}."
    return _with_error(state, NO_CHANGE)


async def cmd_clear(state: AppState, args: list[str]) -> str:
    n = await state.engine.clear_completed()
    return _with_error(state, f"Cleared {n} completed task(s).")


# ---- category / member commands ----


async def cmd_category(state: AppState, args: list[str]) -> str:
    """
    /category add <accent> <emoji> <name...>
    /category rm <category_id>
    """
    usage = "Usage: /category add <accent> <emoji> <name...> | /category rm <category_id>"
    if not args:
        return usage

    sub = args[0].lower()
    engine = state.engine

    if sub == "add":
        if len(args) < 4:
            return usage
        try:
            accent = AccentToken(args[1].lower())
        except ValueError:
            return "Accent must be one of: " + ", ".join(a.value for a in AccentToken)
        category = await engine.add_category(" ".join(args[3:]), accent, args[2])
        if category is None:
            return _with_error(state, f"{NO_CHANGE} (blank or duplicate name?)")
        return f"Added category {category.id} {category.emoji} {category.name}."

    if sub == "rm" and len(args) == 2:
        if await engine.remove_category(args[1]):
            return f"Removed category {args[1]} (its tasks were removed by the service)."
        return _with_error(state, NO_CHANGE)

    return usage


async def cmd_member(state: AppState, args: list[str]) -> str:
    """
    /member add <name...> [role:x] [email:x] [line:x]
    /member edit <member_id> <name...> [role:x] [email:x] [line:x]
    /member rm <member_id>
    """
    usage = (
        "Usage:\n"
        "  /member add <name...> [role:x] [email:x] [line:x]\n"
        "  /member edit <member_id> <name...> [role:x] [email:x] [line:x]\n"
        "  /member rm <member_id>"
    )
    if not args:
        return usage

    sub = args[0].lower()
    engine = state.engine
    words, opts, _ = _split_options(args[1:])

    if sub == "add":
        member = await engine.add_member(
            " ".join(words), opts.get("role"), opts.get("email"), opts.get("line")
        )
        if member is None:
            return _with_error(state, f"{NO_CHANGE} (blank or duplicate name?)")
        return f"Added member {member.id} {member.name}."

    if sub == "edit" and len(words) >= 2:
        member = await engine.update_member(
            words[0], " ".join(words[1:]), opts.get("role"), opts.get("email"), opts.get("line")
        )
        if member is None:
            return _with_error(state, f"{NO_CHANGE} (blank or duplicate name?)")
        return f"Updated member {member.id} {member.name}."

    if sub == "rm" and len(args) == 2:
        if await engine.remove_member(args[1]):
            return f"Removed member {args[1]}."
        return _with_error(state, NO_CHANGE)

    return usage


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    if await state.engine.load_all():
        return "Board reloaded."
    return _with_error(state, "Reload failed; showing the last known board.")


async def cmd_ics(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/ics <task_id> -> write an .ics file for the task under <data_dir>/exports"""
    if len(args) != 1:
        return "Usage: /ics <task_id>"

    engine = state.engine
    task = engine.find_task(args[0])
    if task is None:
        return f"Unknown task: {args[0]}"

    category = views.category_for(task, engine.categories)
    event = calendar_event_from_task(
        task.title, task.due, task.notes, category.name if category else None, today=engine.now().date()
    )
    try:
        body = render_ics(event, uid=f"task-{task.id}-{uuid.uuid4().hex}@taskbouquet")
    except ValueError:
        return f"Task {task.id} has an invalid due date: {task.due!r}"

    out_dir = Path(getattr(state.settings, "data_dir", ".local/bouquet")) / "exports"
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / ics_filename(task.title)
    if emit:
        emit(f"Writing {path} ...")
    path.write_text(body, encoding="utf-8", newline="")
    logger.debug("ICS written task_id=%s path=%s", task.id, path)
    return f"Saved {path}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("summary", cmd_summary, help_text="Board totals, progress and due counts.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [status].", aliases=["ls"])
registry.register("due", cmd_due, help_text="Show due-soon and overdue tasks.")
registry.register("categories", cmd_categories, help_text="List categories with task counts.")
registry.register("members", cmd_members, help_text="List members.")
registry.register("calendar", cmd_calendar, help_text="Tasks with a due date, by date.")
registry.register(
    "add", cmd_add, help_text="Add task: /add <category_id> <title> [due:YYYY-MM-DD] [note:x] [@member]."
)
registry.register("status", cmd_status, help_text="Set status: /status <task_id> <status>.")
registry.register("toggle", cmd_toggle, help_text="Toggle completion: /toggle <task_id>.", aliases=["t"])
registry.register("assign", cmd_assign, help_text="Replace assignees: /assign <task_id> [member_id ...].")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <task_id>.")
registry.register("clear", cmd_clear, help_text="Delete all completed tasks.")
registry.register("category", cmd_category, help_text="Manage categories: /category add|rm ...")
registry.register("member", cmd_member, help_text="Manage members: /member add|edit|rm ...")
registry.register("refresh", cmd_refresh, help_text="Reload the board from the service.")
registry.register("ics", cmd_ics, help_text="Export a task as .ics: /ics <task_id>.")
