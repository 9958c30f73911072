# src/taskhub/hierarchy/projects.py

from __future__ import annotations

import logging
from typing import Any

from ..core.errors import Conflict, ValidationError
from ..core.ports import PROJECTS, TASK_GROUPS, TASKS, EntityStore
from .access import load_owned, owns
from .aggregator import HierarchyAggregator
from .models import (
    DEFAULT_COLOR,
    DEFAULT_GROUP_ICON,
    DEFAULT_GROUP_NAME,
    UNSET,
    Project,
    ProjectDetail,
    ProjectRef,
    ProjectSummary,
    TaskGroupRef,
)
from .records import parent_fields, project_from_doc, task_from_doc
from .validation import (
    check_color,
    check_date_order,
    check_id,
    check_logo,
    check_timestamp,
    optional_text,
    required_text,
)

logger = logging.getLogger(__name__)

NAME_MAX = 100
DESCRIPTION_MAX = 500


class ProjectManager:
    """
    Project lifecycle.

    Every project points at a task group it owns. When the caller doesn't name
    one, a dedicated group is provisioned for the project.

    Delete:
    - tasks attached directly to the project block the delete
    - tasks living in the project's own group are removed with it
    The two writes (delete-many tasks, delete project) are separate store calls;
    a failure between them leaves the other half in place.
    """

    def __init__(
        self,
        store: EntityStore,
        aggregator: HierarchyAggregator | None = None,
        *,
        default_color: str = DEFAULT_COLOR,
        default_group_name: str = DEFAULT_GROUP_NAME,
        default_group_icon: str = DEFAULT_GROUP_ICON,
    ) -> None:
        self._store = store
        self._aggregator = aggregator or HierarchyAggregator(store)
        self._default_color = default_color
        self._default_group_name = default_group_name
        self._default_group_icon = default_group_icon

    # ---- helpers ----

    def _check_group_ref(self, group_id: str, owner_id: str) -> str:
        group_id = check_id(group_id, "task group ID")
        if not owns(self._store, TASK_GROUPS, group_id, owner_id):
            raise ValidationError("Task group does not exist")
        return group_id

    def _provision_group(self, owner_id: str, *, name: str, logo: str, color: str) -> str:
        group_id = self._store.insert(
            TASK_GROUPS,
            {
                "owner_id": owner_id,
                "name": name or self._default_group_name,
                "icon": logo or self._default_group_icon,
                "color": color or self._default_color,
            },
        )
        logger.info("TaskGroup auto-provisioned id=%s user=%s", group_id, owner_id)
        return group_id

    # ---- operations ----

    def create(
        self,
        owner_id: str,
        *,
        name: str,
        start_date: float,
        end_date: float,
        description: str | None = None,
        logo: str | None = None,
        color: str | None = None,
        task_group_id: str | None = None,
    ) -> Project:
        name = required_text(name, "Project name", NAME_MAX)
        description = optional_text(description, "Description", DESCRIPTION_MAX)
        logo = check_logo(logo)
        color = check_color(color) if color else self._default_color
        start_date = check_timestamp(start_date, "start date")
        end_date = check_timestamp(end_date, "end date")
        check_date_order(start_date, end_date)

        # All checks pass before the first write.
        if task_group_id:
            group_id = self._check_group_ref(task_group_id, owner_id)
        else:
            group_id = self._provision_group(owner_id, name=name, logo=logo, color=color)

        project_id = self._store.insert(
            PROJECTS,
            {
                "owner_id": owner_id,
                "name": name,
                "description": description,
                "logo": logo,
                "task_group_id": group_id,
                "start_date": start_date,
                "end_date": end_date,
                "color": color,
            },
        )
        logger.info("Project created id=%s group=%s user=%s", project_id, group_id, owner_id)
        return self.get_project(project_id, owner_id)

    def get_project(self, project_id: str, owner_id: str) -> Project:
        return project_from_doc(
            load_owned(self._store, PROJECTS, project_id, owner_id, entity="Project")
        )

    def get(self, project_id: str, owner_id: str) -> ProjectDetail:
        """Project with every task counted towards it (direct + own group)."""
        project = self.get_project(project_id, owner_id)
        docs = self._store.find_many(
            TASKS,
            {"owner_id": owner_id, **parent_fields(ProjectRef(project.id))},
            order_by=("-created_at",),
        )
        if project.task_group_id:
            docs += self._store.find_many(
                TASKS,
                {"owner_id": owner_id, **parent_fields(TaskGroupRef(project.task_group_id))},
                order_by=("-created_at",),
            )
        tasks = sorted((task_from_doc(d) for d in docs), key=lambda t: t.created_at, reverse=True)
        return ProjectDetail(project=project, tasks=tasks, task_count=len(tasks))

    def list(self, owner_id: str) -> list[ProjectSummary]:
        docs = self._store.find_many(PROJECTS, {"owner_id": owner_id}, order_by=("-created_at",))
        out: list[ProjectSummary] = []
        for doc in docs:
            project = project_from_doc(doc)
            out.append(
                ProjectSummary(
                    project=project,
                    task_count=self._aggregator.project_task_count(project),
                )
            )
        return out

    def update(
        self,
        project_id: str,
        owner_id: str,
        *,
        name: Any = UNSET,
        description: Any = UNSET,
        logo: Any = UNSET,
        color: Any = UNSET,
        task_group_id: Any = UNSET,
        start_date: Any = UNSET,
        end_date: Any = UNSET,
    ) -> Project:
        project = self.get_project(project_id, owner_id)

        fields: dict[str, Any] = {}
        if name is not UNSET:
            fields["name"] = required_text(name, "Project name", NAME_MAX)
        if description is not UNSET:
            fields["description"] = optional_text(description, "Description", DESCRIPTION_MAX)
        if logo is not UNSET:
            fields["logo"] = check_logo(logo)
        if color is not UNSET:
            fields["color"] = check_color(color)
        if start_date is not UNSET:
            if start_date is None:
                raise ValidationError("Start date is required")
            fields["start_date"] = check_timestamp(start_date, "start date")
        if end_date is not UNSET:
            if end_date is None:
                raise ValidationError("End date is required")
            fields["end_date"] = check_timestamp(end_date, "end date")

        check_date_order(
            fields.get("start_date", project.start_date),
            fields.get("end_date", project.end_date),
        )

        if task_group_id is not UNSET and task_group_id != project.task_group_id:
            if not task_group_id:
                raise ValidationError("Task group is required")
            fields["task_group_id"] = self._check_group_ref(task_group_id, owner_id)

        if fields:
            self._store.update_by_id(PROJECTS, project.id, fields)
            logger.info("Project updated id=%s fields=%s", project.id, sorted(fields))
        return self.get_project(project.id, owner_id)

    def delete(self, project_id: str, owner_id: str) -> int:
        """Delete the project; returns how many group tasks were cascaded."""
        project = self.get_project(project_id, owner_id)

        direct = self._store.count_many(
            TASKS, {"owner_id": owner_id, **parent_fields(ProjectRef(project.id))}
        )
        if direct > 0:
            logger.info("Project delete refused id=%s direct_tasks=%d", project.id, direct)
            raise Conflict(
                f"Cannot delete project. {direct} task(s) are attached directly to this project. "
                "Please reassign or delete them first.",
                blocking_count=direct,
            )

        removed = 0
        if project.task_group_id:
            removed = self._store.delete_many(
                TASKS,
                {"owner_id": owner_id, **parent_fields(TaskGroupRef(project.task_group_id))},
            )
        self._store.delete_by_id(PROJECTS, project.id)
        logger.info(
            "Project deleted id=%s user=%s cascaded_tasks=%d", project.id, owner_id, removed
        )
        return removed
