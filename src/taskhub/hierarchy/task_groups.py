# src/taskhub/hierarchy/task_groups.py

from __future__ import annotations

import logging
from typing import Any

from ..core.errors import Conflict
from ..core.ports import PROJECTS, TASK_GROUPS, TASKS, EntityStore
from .access import load_owned
from .aggregator import HierarchyAggregator, completion_percentage
from .models import (
    DEFAULT_COLOR,
    UNSET,
    TaskGroup,
    TaskGroupDetail,
    TaskGroupRef,
    TaskGroupSummary,
)
from .records import parent_fields, task_from_doc, task_group_from_doc
from .validation import check_color, optional_text, required_text

logger = logging.getLogger(__name__)

NAME_MAX = 50
ICON_MAX = 10


class TaskGroupManager:
    """
    TaskGroup lifecycle.

    Delete policy: refuse while anything still points at the group
    (projects via task_group_id, tasks via a TaskGroup parent). Nothing is
    reparented or cascaded; the caller reassigns explicitly.
    """

    def __init__(
        self,
        store: EntityStore,
        aggregator: HierarchyAggregator | None = None,
        *,
        default_color: str = DEFAULT_COLOR,
    ) -> None:
        self._store = store
        self._aggregator = aggregator or HierarchyAggregator(store)
        self._default_color = default_color

    def create(
        self,
        owner_id: str,
        name: str,
        icon: str | None = None,
        color: str | None = None,
    ) -> TaskGroup:
        doc = {
            "owner_id": owner_id,
            "name": required_text(name, "Task group name", NAME_MAX),
            "icon": optional_text(icon, "Icon", ICON_MAX),
            "color": check_color(color) if color else self._default_color,
        }
        group_id = self._store.insert(TASK_GROUPS, doc)
        logger.info("TaskGroup created id=%s user=%s", group_id, owner_id)
        return self.get_group(group_id, owner_id)

    def get_group(self, group_id: str, owner_id: str) -> TaskGroup:
        return task_group_from_doc(
            load_owned(self._store, TASK_GROUPS, group_id, owner_id, entity="Task group")
        )

    def get(self, group_id: str, owner_id: str) -> TaskGroupDetail:
        """Group with its directly-parented tasks and completion figures."""
        group = self.get_group(group_id, owner_id)
        tasks = [
            task_from_doc(d)
            for d in self._store.find_many(
                TASKS,
                {"owner_id": owner_id, **parent_fields(TaskGroupRef(group.id))},
                order_by=("-created_at",),
            )
        ]
        completed = sum(1 for t in tasks if t.is_completed)
        return TaskGroupDetail(
            group=group,
            tasks=tasks,
            task_count=len(tasks),
            completion_percentage=completion_percentage(completed, len(tasks)),
        )

    def list(self, owner_id: str) -> list[TaskGroupSummary]:
        docs = self._store.find_many(TASK_GROUPS, {"owner_id": owner_id}, order_by=("-created_at",))
        out: list[TaskGroupSummary] = []
        for doc in docs:
            group = task_group_from_doc(doc)
            out.append(
                TaskGroupSummary(
                    group=group,
                    task_count=self._aggregator.group_task_count(group.id, owner_id),
                    completion_percentage=self._aggregator.group_completion_percentage(
                        group.id, owner_id
                    ),
                )
            )
        return out

    def update(
        self,
        group_id: str,
        owner_id: str,
        *,
        name: Any = UNSET,
        icon: Any = UNSET,
        color: Any = UNSET,
    ) -> TaskGroup:
        group = self.get_group(group_id, owner_id)

        fields: dict[str, Any] = {}
        if name is not UNSET:
            fields["name"] = required_text(name, "Task group name", NAME_MAX)
        if icon is not UNSET:
            fields["icon"] = optional_text(icon, "Icon", ICON_MAX)
        if color is not UNSET:
            fields["color"] = check_color(color)

        if fields:
            self._store.update_by_id(TASK_GROUPS, group.id, fields)
            logger.info("TaskGroup updated id=%s fields=%s", group.id, sorted(fields))
        return self.get_group(group.id, owner_id)

    def delete(self, group_id: str, owner_id: str) -> None:
        group = self.get_group(group_id, owner_id)

        project_count = self._store.count_many(
            PROJECTS, {"owner_id": owner_id, "task_group_id": group.id}
        )
        if project_count > 0:
            logger.info("TaskGroup delete refused id=%s projects=%d", group.id, project_count)
            raise Conflict(
                f"Cannot delete task group. {project_count} project(s) are using this group.",
                blocking_count=project_count,
            )

        task_count = self._aggregator.group_task_count(group.id, owner_id)
        if task_count > 0:
            logger.info("TaskGroup delete refused id=%s tasks=%d", group.id, task_count)
            raise Conflict(
                f"Cannot delete task group. {task_count} task(s) belong to this group. "
                "Please reassign or delete them first.",
                blocking_count=task_count,
            )

        self._store.delete_by_id(TASK_GROUPS, group.id)
        logger.info("TaskGroup deleted id=%s user=%s", group.id, owner_id)
