# src/taskhub/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.errors import ValidationError
from ..core.state import AppState
from ..hierarchy.models import Project, Task, TaskGroup, TaskGroupRef, TaskStatus
from ..hierarchy.tasks import as_parent

CommandHandler = Callable[[AppState, list[str], str], str]

logger = logging.getLogger(__name__)

_STATUS_ALIASES = {
    "todo": TaskStatus.TODO,
    "progress": TaskStatus.IN_PROGRESS,
    "inprogress": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.COMPLETED,
    "completed": TaskStatus.COMPLETED,
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, ...)."""

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

    def handle(self, state: AppState, line: str, user_id: str | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        HierarchyError from the managers propagates to the caller.
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

        if user_id is None:
            user_id = state.identity.current_user_id()
        return handler(state, args, user_id)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing / formatting ----


def _parse_date(raw: str) -> float:
    try:
        return datetime.strptime(raw, "%Y-%m-%d").timestamp()
    except ValueError:
        raise ValidationError(f"Invalid date {raw!r} (use YYYY-MM-DD)") from None


def _fmt_date(ts: float | None) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d")


def _parse_parent(raw: str):
    """p:<id> / g:<id>; a bare id is a project."""
    if raw.startswith("g:"):
        return TaskGroupRef(raw[2:])
    if raw.startswith("p:"):
        return as_parent(raw[2:])
    return as_parent(raw)


def _parse_status(raw: str) -> TaskStatus:
    key = raw.lower().replace("_", "").replace("-", "")
    if key in _STATUS_ALIASES:
        return _STATUS_ALIASES[key]
    return TaskStatus.parse(raw)


def _fmt_group(g: TaskGroup) -> str:
    icon = f"{g.icon} " if g.icon else ""
    return f"{icon}{g.name} [{g.id}] {g.color}"


def _fmt_project(p: Project) -> str:
    return (
        f"{p.name} [{p.id}] {_fmt_date(p.start_date)}..{_fmt_date(p.end_date)} "
        f"group={p.task_group_id}"
    )


def _fmt_task(t: Task) -> str:
    mark = "x" if t.is_completed else " "
    due = f" due {_fmt_date(t.due_date)}" if t.due_date is not None else ""
    if t.due_time:
        due += f" {t.due_time}"
    return f"[{mark}] {t.title} [{t.id}] ({t.status}, {t.priority}){due} <- {t.parent.type}:{t.parent.id}"


def _lines(title: str, items: list[str]) -> str:
    if not items:
        return f"{title}: none."
    return "\n".join([f"{title}:", *(f"  {i}" for i in items)])


# ---- commands ----


def cmd_help(state: AppState, args: list[str], user_id: str) -> str:
    return registry.build_help()


def cmd_groups(state: AppState, args: list[str], user_id: str) -> str:
    """
    /groups                      -> list with task counts
    /groups add <name> [icon] [color]
    /groups show <id>
    /groups rename <id> <name>
    /groups rm <id>
    """
    mgr = state.task_groups
    if not args:
        rows = [
            f"{_fmt_group(s.group)} tasks={s.task_count} done={s.completion_percentage}%"
            for s in mgr.list(user_id)
        ]
        return _lines("Task groups", rows)

    sub, rest = args[0].lower(), args[1:]
    if sub == "add" and rest:
        icon = rest[1] if len(rest) > 1 else None
        color = rest[2] if len(rest) > 2 else None
        return f"Created {_fmt_group(mgr.create(user_id, rest[0], icon=icon, color=color))}"
    if sub == "show" and len(rest) == 1:
        detail = mgr.get(rest[0], user_id)
        head = (
            f"{_fmt_group(detail.group)} tasks={detail.task_count} "
            f"done={detail.completion_percentage}%"
        )
        return _lines(head, [_fmt_task(t) for t in detail.tasks])
    if sub == "rename" and len(rest) >= 2:
        return f"Renamed {_fmt_group(mgr.update(rest[0], user_id, name=' '.join(rest[1:])))}"
    if sub == "rm" and len(rest) == 1:
        mgr.delete(rest[0], user_id)
        return "Task group deleted."
    return "Usage: /groups [add <name> [icon] [color] | show <id> | rename <id> <name> | rm <id>]"


def cmd_projects(state: AppState, args: list[str], user_id: str) -> str:
    """
    /projects                                   -> list with task counts
    /projects add <start> <end> <name...>       -> dates as YYYY-MM-DD, group auto-created
    /projects show <id>
    /projects move <id> <group_id>
    /projects rm <id>
    """
    mgr = state.projects
    if not args:
        rows = [f"{_fmt_project(s.project)} tasks={s.task_count}" for s in mgr.list(user_id)]
        return _lines("Projects", rows)

    sub, rest = args[0].lower(), args[1:]
    if sub == "add" and len(rest) >= 3:
        project = mgr.create(
            user_id,
            name=" ".join(rest[2:]),
            start_date=_parse_date(rest[0]),
            end_date=_parse_date(rest[1]),
        )
        return f"Created {_fmt_project(project)}"
    if sub == "show" and len(rest) == 1:
        detail = mgr.get(rest[0], user_id)
        head = f"{_fmt_project(detail.project)} tasks={detail.task_count}"
        return _lines(head, [_fmt_task(t) for t in detail.tasks])
    if sub == "move" and len(rest) == 2:
        return f"Moved {_fmt_project(mgr.update(rest[0], user_id, task_group_id=rest[1]))}"
    if sub == "rm" and len(rest) == 1:
        removed = mgr.delete(rest[0], user_id)
        return f"Project deleted ({removed} task(s) removed from its group)."
    return "Usage: /projects [add <start> <end> <name> | show <id> | move <id> <group_id> | rm <id>]"


def cmd_tasks(state: AppState, args: list[str], user_id: str) -> str:
    """
    /tasks                          -> all tasks
    /tasks add <parent> <title...>  -> parent: <id> | p:<id> | g:<id>
    /tasks today
    /tasks status <todo|progress|done>
    /tasks set <id> <todo|progress|done>
    /tasks move <id> <parent>
    /tasks show <id>
    /tasks rm <id>
    """
    mgr = state.tasks
    if not args:
        return _lines("Tasks", [_fmt_task(t) for t in mgr.list_all(user_id)])

    sub, rest = args[0].lower(), args[1:]
    if sub == "add" and len(rest) >= 2:
        task = mgr.create(user_id, title=" ".join(rest[1:]), parent=_parse_parent(rest[0]))
        return f"Created {_fmt_task(task)}"
    if sub == "today" and not rest:
        return _lines("Due today", [_fmt_task(t) for t in mgr.list_due_today(user_id)])
    if sub == "status" and len(rest) == 1:
        status = _parse_status(rest[0])
        return _lines(status.value, [_fmt_task(t) for t in mgr.list_by_status(user_id, status)])
    if sub == "set" and len(rest) == 2:
        return f"Updated {_fmt_task(mgr.update(rest[0], user_id, status=_parse_status(rest[1])))}"
    if sub == "move" and len(rest) == 2:
        return f"Moved {_fmt_task(mgr.update(rest[0], user_id, parent=_parse_parent(rest[1])))}"
    if sub == "show" and len(rest) == 1:
        return _fmt_task(mgr.get(rest[0], user_id))
    if sub == "rm" and len(rest) == 1:
        mgr.delete(rest[0], user_id)
        return "Task deleted."
    return (
        "Usage: /tasks [add <parent> <title> | today | status <s> | set <id> <s> | "
        "move <id> <parent> | show <id> | rm <id>]"
    )


def cmd_stats(state: AppState, args: list[str], user_id: str) -> str:
    s = state.tasks.stats(user_id)
    return (
        "Task stats:\n"
        f"  Total: {s.total}\n"
        f"  Completed: {s.completed}\n"
        f"  In progress: {s.in_progress}\n"
        f"  To do: {s.todo}\n"
        f"  Completion: {s.completion_percentage}%"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "groups", cmd_groups, help_text="Task groups: /groups [add | show | rename | rm].", aliases=["g"]
)
registry.register(
    "projects", cmd_projects, help_text="Projects: /projects [add | show | move | rm].", aliases=["p"]
)
registry.register(
    "tasks",
    cmd_tasks,
    help_text="Tasks: /tasks [add | today | status | set | move | show | rm].",
    aliases=["t"],
)
registry.register("stats", cmd_stats, help_text="Completion statistics for your tasks.")
