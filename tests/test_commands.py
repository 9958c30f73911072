# tests/test_commands.py

from __future__ import annotations

from taskhub.cli.commands import CommandRegistry
from taskhub.cli.console import run_line
from taskhub.core.errors import StoreError

from .conftest import OTHER_USER, USER


def test_command_registry_routes_with_identity(state) -> None:
    reg = CommandRegistry()
    seen: list[tuple[list[str], str]] = []

    def handler(state, args, user_id):
        seen.append((args, user_id))
        return "ok"

    reg.register("a", handler, "a", aliases=["x"])

    assert reg.handle(state, "/a one two") == "ok"
    assert reg.handle(state, "/X", user_id="someone") == "ok"
    assert seen == [(["one", "two"], USER), ([], "someone")]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_console_project_flow(state) -> None:
    out = run_line(state, "/projects add 2026-01-01 2026-02-01 Moving house")
    assert out.startswith("Created Moving house")

    [summary] = state.projects.list(USER)
    project = summary.project

    out = run_line(state, f"/tasks add p:{project.id} Pack boxes")
    assert "Pack boxes" in out

    out = run_line(state, f"/projects rm {project.id}")
    assert out.startswith("Refused:")
    assert "1 task(s)" in out

    [task] = state.tasks.list_all(USER)
    out = run_line(state, f"/tasks set {task.id} done")
    assert "[x] Pack boxes" in out

    out = run_line(state, "/stats")
    assert "Completion: 100%" in out


def test_console_group_flow(state) -> None:
    run_line(state, "/groups add Errands")
    [summary] = state.task_groups.list(USER)
    gid = summary.group.id

    run_line(state, f"/tasks add g:{gid} Buy milk")
    out = run_line(state, f"/groups show {gid}")
    assert "Buy milk" in out
    assert "tasks=1" in out

    out = run_line(state, f"/groups rm {gid}")
    assert "1 task(s) belong to this group" in out


def test_console_hides_foreign_records(state) -> None:
    theirs = state.task_groups.create(OTHER_USER, "Private")
    assert run_line(state, f"/groups show {theirs.id}") == "Task group not found"


def test_console_reports_validation_and_plain_text(state) -> None:
    assert run_line(state, "/projects add 2026-02-01 2026-01-01 Backwards").startswith("Refused:")
    assert run_line(state, "/projects add someday 2026-01-01 X").startswith("Refused:")
    assert run_line(state, "/tasks status blocked").startswith("Refused:")
    assert "Commands start with" in run_line(state, "just text")


def test_console_store_failure_is_generic(state, monkeypatch) -> None:
    def boom(owner_id):
        raise StoreError()

    monkeypatch.setattr(state.tasks, "stats", boom)
    assert run_line(state, "/stats") == "Storage error. See the log file for details."
