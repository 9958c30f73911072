# src/taskhub/hierarchy/tasks.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Any

from ..core.errors import ValidationError
from ..core.ports import PROJECTS, TASK_GROUPS, TASKS, EntityStore, Range
from .access import load_owned, owns
from .aggregator import completion_percentage
from .models import (
    UNSET,
    ParentRef,
    ProjectRef,
    Task,
    TaskGroupRef,
    TaskPriority,
    TaskStats,
    TaskStatus,
    parent_ref,
)
from .records import parent_fields, task_from_doc
from .validation import (
    check_due_time,
    check_id,
    check_tags,
    check_timestamp,
    optional_text,
    required_text,
)

logger = logging.getLogger(__name__)

TITLE_MAX = 200
DESCRIPTION_MAX = 1000

Clock = Callable[[], float]


def local_day_bounds(now_ts: float) -> tuple[float, float]:
    """[start of the local day, start of the next local day) around now_ts."""
    start = datetime.fromtimestamp(now_ts).replace(hour=0, minute=0, second=0, microsecond=0)
    next_start = start + timedelta(days=1)
    return start.timestamp(), next_start.timestamp()


def as_parent(parent: ParentRef | str | tuple[str, str | None] | None) -> ParentRef:
    """
    Accept a ParentRef, a bare id, or an (id, type) pair.

    A bare id (or a pair with no type) is treated as a Project parent.
    """
    if parent is None or parent == "":
        raise ValidationError("Parent is required")
    if isinstance(parent, (ProjectRef, TaskGroupRef)):
        ref = parent
    elif isinstance(parent, str):
        ref = parent_ref(parent)
    elif isinstance(parent, tuple) and len(parent) == 2:
        ref = parent_ref(*parent)
    else:
        raise ValidationError("Invalid parent reference")
    parent_id = check_id(ref.id, "parent ID")
    if isinstance(ref, TaskGroupRef):
        return TaskGroupRef(parent_id)
    return ProjectRef(parent_id)


class TaskManager:
    """
    Task lifecycle under a polymorphic parent, plus the per-user read queries.

    Completion bookkeeping: is_completed / completed_at are stored next to
    status but always derived from it on create and update.
    """

    def __init__(self, store: EntityStore, *, clock: Clock = time.time) -> None:
        self._store = store
        self._clock = clock

    # ---- helpers ----

    def _check_parent(self, ref: ParentRef, owner_id: str) -> None:
        if isinstance(ref, ProjectRef):
            collection, label = PROJECTS, "Project"
        else:
            collection, label = TASK_GROUPS, "Task group"
        if not owns(self._store, collection, ref.id, owner_id):
            raise ValidationError(f"Parent {label.lower()} does not exist")

    def _find(self, flt: dict[str, Any], order_by: Iterable[str]) -> list[Task]:
        return [task_from_doc(d) for d in self._store.find_many(TASKS, flt, order_by=tuple(order_by))]

    # ---- operations ----

    def create(
        self,
        owner_id: str,
        *,
        title: str,
        parent: ParentRef | str | tuple[str, str | None] | None,
        description: str | None = None,
        status: str | TaskStatus = TaskStatus.TODO,
        priority: str | TaskPriority = TaskPriority.MEDIUM,
        due_date: float | None = None,
        due_time: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Task:
        ref = as_parent(parent)
        status = TaskStatus.parse(status)
        doc: dict[str, Any] = {
            "owner_id": owner_id,
            "title": required_text(title, "Task title", TITLE_MAX),
            "description": optional_text(description, "Description", DESCRIPTION_MAX),
            "status": status.value,
            "priority": TaskPriority.parse(priority).value,
            "due_date": check_timestamp(due_date, "due date") if due_date is not None else None,
            "due_time": check_due_time(due_time),
            "tags": check_tags(tags),
            **parent_fields(ref),
        }
        completed = status is TaskStatus.COMPLETED
        doc["is_completed"] = completed
        doc["completed_at"] = self._clock() if completed else None

        self._check_parent(ref, owner_id)

        task_id = self._store.insert(TASKS, doc)
        logger.info(
            "Task created id=%s parent=%s:%s user=%s", task_id, ref.type, ref.id, owner_id
        )
        return self.get(task_id, owner_id)

    def get(self, task_id: str, owner_id: str) -> Task:
        return task_from_doc(load_owned(self._store, TASKS, task_id, owner_id, entity="Task"))

    def update(
        self,
        task_id: str,
        owner_id: str,
        *,
        title: Any = UNSET,
        description: Any = UNSET,
        status: Any = UNSET,
        priority: Any = UNSET,
        due_date: Any = UNSET,
        due_time: Any = UNSET,
        parent: Any = UNSET,
        tags: Any = UNSET,
        is_completed: Any = UNSET,
        completed_at: Any = UNSET,
    ) -> Task:
        task = self.get(task_id, owner_id)

        fields: dict[str, Any] = {}
        if title is not UNSET:
            fields["title"] = required_text(title, "Task title", TITLE_MAX)
        if description is not UNSET:
            fields["description"] = optional_text(description, "Description", DESCRIPTION_MAX)
        if priority is not UNSET:
            fields["priority"] = TaskPriority.parse(priority).value
        if due_date is not UNSET:
            fields["due_date"] = (
                check_timestamp(due_date, "due date") if due_date is not None else None
            )
        if due_time is not UNSET:
            fields["due_time"] = check_due_time(due_time)
        if tags is not UNSET:
            fields["tags"] = check_tags(tags)
        if is_completed is not UNSET:
            fields["is_completed"] = bool(is_completed)
        if completed_at is not UNSET:
            fields["completed_at"] = (
                check_timestamp(completed_at, "completion time") if completed_at is not None else None
            )

        new_status = task.status
        if status is not UNSET:
            new_status = TaskStatus.parse(status)
            fields["status"] = new_status.value

        # Status wins over any explicit completion fields in the patch. An already
        # completed task keeps (or takes the patched) completion time.
        if new_status is TaskStatus.COMPLETED:
            stamp = None
            if task.is_completed:
                stamp = fields.get("completed_at")
                if stamp is None:
                    stamp = task.completed_at
            fields["is_completed"] = True
            fields["completed_at"] = stamp if stamp is not None else self._clock()
        else:
            fields["is_completed"] = False
            fields["completed_at"] = None

        if parent is not UNSET:
            ref = as_parent(parent)
            if ref != task.parent:
                self._check_parent(ref, owner_id)
            fields.update(parent_fields(ref))

        self._store.update_by_id(TASKS, task.id, fields)
        logger.info("Task updated id=%s fields=%s", task.id, sorted(fields))
        return self.get(task.id, owner_id)

    def delete(self, task_id: str, owner_id: str) -> None:
        task = self.get(task_id, owner_id)
        self._store.delete_by_id(TASKS, task.id)
        logger.info("Task deleted id=%s user=%s", task.id, owner_id)

    # ---- read-side queries ----

    def list_all(self, owner_id: str) -> list[Task]:
        return self._find({"owner_id": owner_id}, ("-created_at",))

    def list_due_today(self, owner_id: str) -> list[Task]:
        start, end = local_day_bounds(self._clock())
        return self._find(
            {"owner_id": owner_id, "due_date": Range(gte=start, lt=end)},
            ("due_time", "due_date"),
        )

    def list_by_status(self, owner_id: str, status: str | TaskStatus) -> list[Task]:
        status = TaskStatus.parse(status)
        return self._find({"owner_id": owner_id, "status": status.value}, ("-created_at",))

    def list_for_parent(self, owner_id: str, parent: ParentRef) -> list[Task]:
        return self._find({"owner_id": owner_id, **parent_fields(parent)}, ("-created_at",))

    def stats(self, owner_id: str) -> TaskStats:
        total = self._store.count_many(TASKS, {"owner_id": owner_id})
        completed = self._store.count_many(TASKS, {"owner_id": owner_id, "is_completed": True})
        in_progress = self._store.count_many(
            TASKS, {"owner_id": owner_id, "status": TaskStatus.IN_PROGRESS.value}
        )
        todo = self._store.count_many(TASKS, {"owner_id": owner_id, "status": TaskStatus.TODO.value})
        return TaskStats(
            total=total,
            completed=completed,
            in_progress=in_progress,
            todo=todo,
            completion_percentage=completion_percentage(completed, total),
        )
