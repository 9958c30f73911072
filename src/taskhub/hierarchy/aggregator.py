# src/taskhub/hierarchy/aggregator.py

"""
Read-side statistics across the hierarchy.

Nothing here is cached: every figure is a fresh store count, so it can never
drift from the task records. Definitions:
- a project's task count covers its direct tasks and the tasks in its own group
  (the same scope the project delete-cascade uses)
- a group's count/percentage covers only tasks parented directly to the group
"""

from __future__ import annotations

import math

from ..core.ports import TASKS, EntityStore
from .models import Project, ProjectRef, TaskGroupRef
from .records import parent_fields


def completion_percentage(completed: int, total: int) -> int:
    """round(completed / total * 100) with halves rounded up; 0 for an empty set."""
    if total <= 0:
        return 0
    return int(math.floor(completed / total * 100 + 0.5))


class HierarchyAggregator:
    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def project_task_count(self, project: Project) -> int:
        direct = self._store.count_many(
            TASKS, {"owner_id": project.owner_id, **parent_fields(ProjectRef(project.id))}
        )
        if not project.task_group_id:
            return direct
        in_group = self._store.count_many(
            TASKS,
            {"owner_id": project.owner_id, **parent_fields(TaskGroupRef(project.task_group_id))},
        )
        return direct + in_group

    def group_task_count(self, group_id: str, owner_id: str) -> int:
        return self._store.count_many(
            TASKS, {"owner_id": owner_id, **parent_fields(TaskGroupRef(group_id))}
        )

    def group_completed_count(self, group_id: str, owner_id: str) -> int:
        return self._store.count_many(
            TASKS,
            {"owner_id": owner_id, "is_completed": True, **parent_fields(TaskGroupRef(group_id))},
        )

    def group_completion_percentage(self, group_id: str, owner_id: str) -> int:
        total = self.group_task_count(group_id, owner_id)
        if total == 0:
            return 0
        return completion_percentage(self.group_completed_count(group_id, owner_id), total)
