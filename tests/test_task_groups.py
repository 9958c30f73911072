# tests/test_task_groups.py

from __future__ import annotations

import pytest

from taskhub.core.errors import Conflict, NotFound, ValidationError
from taskhub.hierarchy.models import TaskGroupRef, TaskStatus

from .conftest import OTHER_USER, USER


def _dates() -> dict[str, float]:
    return {"start_date": 1_700_000_000.0, "end_date": 1_700_900_000.0}


def test_create_defaults_color_and_trims_name(state) -> None:
    group = state.task_groups.create(USER, "  Work  ", icon="W")
    assert group.name == "Work"
    assert group.icon == "W"
    assert group.color == "#6C5DD3"
    assert group.owner_id == USER
    assert len(group.id) == 24


def test_create_rejects_bad_color_and_long_name(state) -> None:
    with pytest.raises(ValidationError):
        state.task_groups.create(USER, "Work", color="blue")
    with pytest.raises(ValidationError):
        state.task_groups.create(USER, "x" * 51)
    with pytest.raises(ValidationError):
        state.task_groups.create(USER, "   ")


def test_delete_empty_group_succeeds(state) -> None:
    group = state.task_groups.create(USER, "Empty")
    state.task_groups.delete(group.id, USER)
    with pytest.raises(NotFound):
        state.task_groups.get(group.id, USER)


def test_delete_refused_while_project_references_group(state) -> None:
    group = state.task_groups.create(USER, "Shared")
    state.projects.create(USER, name="P", task_group_id=group.id, **_dates())

    with pytest.raises(Conflict) as exc:
        state.task_groups.delete(group.id, USER)
    assert exc.value.blocking_count == 1
    assert "1 project(s)" in exc.value.message
    assert state.task_groups.get_group(group.id, USER).id == group.id


def test_delete_refused_while_tasks_parented_to_group(state) -> None:
    group = state.task_groups.create(USER, "Inbox")
    state.tasks.create(USER, title="a", parent=TaskGroupRef(group.id))
    state.tasks.create(USER, title="b", parent=TaskGroupRef(group.id))

    with pytest.raises(Conflict) as exc:
        state.task_groups.delete(group.id, USER)
    assert exc.value.blocking_count == 2
    assert "2 task(s)" in exc.value.message


def test_project_guard_is_checked_before_task_guard(state) -> None:
    group = state.task_groups.create(USER, "Both")
    state.projects.create(USER, name="P", task_group_id=group.id, **_dates())
    state.tasks.create(USER, title="a", parent=TaskGroupRef(group.id))

    with pytest.raises(Conflict) as exc:
        state.task_groups.delete(group.id, USER)
    assert "project(s)" in exc.value.message


def test_list_reports_direct_task_counts_and_percentage(state) -> None:
    group = state.task_groups.create(USER, "Inbox")
    other = state.task_groups.create(USER, "Other")
    t1 = state.tasks.create(USER, title="a", parent=TaskGroupRef(group.id))
    state.tasks.create(USER, title="b", parent=TaskGroupRef(group.id))
    state.tasks.create(USER, title="c", parent=TaskGroupRef(group.id))
    state.tasks.update(t1.id, USER, status=TaskStatus.COMPLETED)

    # a project referencing the group does not add its direct tasks to the group
    project = state.projects.create(USER, name="P", task_group_id=group.id, **_dates())
    state.tasks.create(USER, title="direct", parent=project.id)

    by_id = {s.group.id: s for s in state.task_groups.list(USER)}
    assert by_id[group.id].task_count == 3
    assert by_id[group.id].completion_percentage == 33
    assert by_id[other.id].task_count == 0
    assert by_id[other.id].completion_percentage == 0


def test_get_detail_lists_group_tasks(state) -> None:
    group = state.task_groups.create(USER, "Inbox")
    task = state.tasks.create(USER, title="a", parent=TaskGroupRef(group.id), status="Completed")

    detail = state.task_groups.get(group.id, USER)
    assert [t.id for t in detail.tasks] == [task.id]
    assert detail.task_count == 1
    assert detail.completion_percentage == 100


def test_update_only_touches_given_fields(state) -> None:
    group = state.task_groups.create(USER, "Inbox", icon="I", color="#112233")
    updated = state.task_groups.update(group.id, USER, name="Renamed")
    assert updated.name == "Renamed"
    assert updated.icon == "I"
    assert updated.color == "#112233"

    with pytest.raises(ValidationError):
        state.task_groups.update(group.id, USER, color="#12")


def test_foreign_group_is_indistinguishable_from_missing(state) -> None:
    group = state.task_groups.create(OTHER_USER, "Private")

    for op in (
        lambda: state.task_groups.get(group.id, USER),
        lambda: state.task_groups.update(group.id, USER, name="mine"),
        lambda: state.task_groups.delete(group.id, USER),
    ):
        with pytest.raises(NotFound) as exc:
            op()
        assert exc.value.message == "Task group not found"

    assert state.task_groups.list(USER) == []
    assert state.task_groups.get_group(group.id, OTHER_USER).name == "Private"


def test_malformed_id_is_validation_error(state) -> None:
    with pytest.raises(ValidationError):
        state.task_groups.get("not-an-id", USER)
