# tests/test_projects.py

from __future__ import annotations

import pytest

from taskhub.core.errors import Conflict, NotFound, StoreError, ValidationError
from taskhub.core.ports import PROJECTS, TASKS
from taskhub.hierarchy.models import ProjectRef, TaskGroupRef
from taskhub.hierarchy.projects import ProjectManager
from taskhub.hierarchy.tasks import TaskManager

from .conftest import OTHER_USER, USER
from .fakes import FailingStore

START = 1_700_000_000.0
END = 1_700_900_000.0


def _project(state, owner: str = USER, **kw):
    fields = {"name": "Launch", "start_date": START, "end_date": END, **kw}
    return state.projects.create(owner, **fields)


def test_create_without_group_provisions_one(state) -> None:
    project = _project(state, logo="https://img.example/logo.png", color="#ABCDEF")

    group = state.task_groups.get_group(project.task_group_id, USER)
    assert group.owner_id == project.owner_id == USER
    assert group.name == "Launch"
    assert group.icon == "https://img.example/logo.png"
    assert group.color == "#ABCDEF"


def test_provisioned_group_uses_defaults(state) -> None:
    project = _project(state)
    group = state.task_groups.get_group(project.task_group_id, USER)
    assert group.icon == "\N{FILE FOLDER}"
    assert group.color == "#6C5DD3"


def test_create_with_existing_group(state) -> None:
    group = state.task_groups.create(USER, "Work")
    project = _project(state, task_group_id=group.id)
    assert project.task_group_id == group.id
    assert len(state.task_groups.list(USER)) == 1


def test_create_with_foreign_or_missing_group_is_rejected(state) -> None:
    foreign = state.task_groups.create(OTHER_USER, "Theirs")
    with pytest.raises(ValidationError):
        _project(state, task_group_id=foreign.id)
    with pytest.raises(ValidationError):
        _project(state, task_group_id="0" * 24)
    # nothing was written for the caller
    assert state.projects.list(USER) == []
    assert state.task_groups.list(USER) == []


def test_dates_must_be_ordered_on_create(state) -> None:
    with pytest.raises(ValidationError):
        _project(state, start_date=END, end_date=START)
    with pytest.raises(ValidationError):
        _project(state, start_date=START, end_date=START)
    assert state.task_groups.list(USER) == []


def test_dates_checked_against_merged_values_on_update(state) -> None:
    project = _project(state)
    with pytest.raises(ValidationError):
        state.projects.update(project.id, USER, end_date=START - 1)
    with pytest.raises(ValidationError):
        state.projects.update(project.id, USER, start_date=END)

    moved = state.projects.update(project.id, USER, start_date=START + 10, end_date=END + 10)
    assert (moved.start_date, moved.end_date) == (START + 10, END + 10)


def test_update_revalidates_changed_group(state) -> None:
    project = _project(state)
    foreign = state.task_groups.create(OTHER_USER, "Theirs")
    with pytest.raises(ValidationError):
        state.projects.update(project.id, USER, task_group_id=foreign.id)

    mine = state.task_groups.create(USER, "Mine")
    updated = state.projects.update(project.id, USER, task_group_id=mine.id, name="Renamed")
    assert updated.task_group_id == mine.id
    assert updated.name == "Renamed"


def test_delete_blocked_by_direct_task(state) -> None:
    project = _project(state)
    state.tasks.create(USER, title="direct", parent=ProjectRef(project.id))

    with pytest.raises(Conflict) as exc:
        state.projects.delete(project.id, USER)
    assert "1 task(s)" in exc.value.message
    assert exc.value.blocking_count == 1
    assert state.projects.get_project(project.id, USER).id == project.id


def test_delete_cascades_tasks_in_own_group(state) -> None:
    project = _project(state)
    for title in ("a", "b"):
        state.tasks.create(USER, title=title, parent=TaskGroupRef(project.task_group_id))
    unrelated_group = state.task_groups.create(USER, "Elsewhere")
    keep = state.tasks.create(USER, title="keep", parent=TaskGroupRef(unrelated_group.id))

    removed = state.projects.delete(project.id, USER)

    assert removed == 2
    with pytest.raises(NotFound):
        state.projects.get(project.id, USER)
    assert state.tasks.list_for_parent(USER, TaskGroupRef(project.task_group_id)) == []
    assert [t.id for t in state.tasks.list_all(USER)] == [keep.id]
    # the group itself stays; it can now be deleted explicitly
    state.task_groups.delete(project.task_group_id, USER)


def test_task_count_covers_direct_and_group_tasks(state) -> None:
    project = _project(state)
    state.tasks.create(USER, title="direct", parent=project.id)
    state.tasks.create(USER, title="in group", parent=TaskGroupRef(project.task_group_id))
    state.tasks.create(USER, title="in group 2", parent=TaskGroupRef(project.task_group_id))

    [summary] = state.projects.list(USER)
    assert summary.task_count == 3
    assert state.aggregator.project_task_count(project) == 3

    detail = state.projects.get(project.id, USER)
    assert detail.task_count == 3
    assert {t.title for t in detail.tasks} == {"direct", "in group", "in group 2"}


def test_other_users_project_is_not_found(state) -> None:
    theirs = _project(state, owner=OTHER_USER, name="Secret plan", description="classified")

    with pytest.raises(NotFound) as exc:
        state.projects.get(theirs.id, USER)
    assert exc.value.message == "Project not found"
    assert "Secret" not in str(exc.value)
    assert "classified" not in str(exc.value)

    with pytest.raises(NotFound):
        state.projects.delete(theirs.id, USER)
    assert state.projects.get_project(theirs.id, OTHER_USER).name == "Secret plan"


def test_field_validation(state) -> None:
    with pytest.raises(ValidationError):
        _project(state, name="")
    with pytest.raises(ValidationError):
        _project(state, logo="not a url")
    with pytest.raises(ValidationError):
        _project(state, description="d" * 501)


def test_cascade_is_not_atomic() -> None:
    store = FailingStore(fail_on="delete_by_id")
    projects = ProjectManager(store)
    tasks = TaskManager(store)

    project = projects.create(USER, name="P", start_date=START, end_date=END)
    tasks.create(USER, title="g", parent=TaskGroupRef(project.task_group_id))

    store.armed = True
    with pytest.raises(StoreError):
        projects.delete(project.id, USER)

    # group tasks are gone, the project record survived: documented gap, no rollback
    assert store.count_many(TASKS, {"parent_id": project.task_group_id}) == 0
    assert store.find_by_id(PROJECTS, project.id) is not None


def test_non_numeric_dates_are_validation_errors(state) -> None:
    with pytest.raises(ValidationError):
        _project(state, start_date="2026-01-01")
    with pytest.raises(ValidationError):
        _project(state, end_date=float("nan"))
    with pytest.raises(ValidationError):
        _project(state, start_date=True)
    assert state.task_groups.list(USER) == []

    project = _project(state)
    with pytest.raises(ValidationError):
        state.projects.update(project.id, USER, end_date="later")
    assert state.projects.get_project(project.id, USER).end_date == END
