# src/taskhub/hierarchy/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError

# Sentinel for "field not present in a patch" (None is a legal value for nullable fields).
UNSET: Any = object()

DEFAULT_COLOR = "#6C5DD3"
DEFAULT_GROUP_NAME = "Default Group"
DEFAULT_GROUP_ICON = "\N{FILE FOLDER}"


class TaskStatus(StrEnum):
    """Task workflow status. Values match the stored/display strings."""

    TODO = "To do"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, raw: str | TaskStatus) -> TaskStatus:
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValidationError(f"Status must be one of: {allowed}") from None


class TaskPriority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, raw: str | TaskPriority) -> TaskPriority:
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValidationError(f"Priority must be one of: {allowed}") from None


class ParentType(StrEnum):
    PROJECT = "Project"
    TASK_GROUP = "TaskGroup"


@dataclass(frozen=True, slots=True)
class ProjectRef:
    """Task attached directly to a project."""

    id: str

    @property
    def type(self) -> ParentType:
        return ParentType.PROJECT


@dataclass(frozen=True, slots=True)
class TaskGroupRef:
    """Task living in a task group."""

    id: str

    @property
    def type(self) -> ParentType:
        return ParentType.TASK_GROUP


ParentRef = ProjectRef | TaskGroupRef


def parent_ref(parent_id: str, parent_type: str | ParentType | None = None) -> ParentRef:
    """
    Build a ParentRef from the stored (id, type) pair.

    A missing type means Project: bare ids sent by older clients were always project ids.
    """
    if parent_type is None or parent_type == "":
        return ProjectRef(parent_id)
    try:
        kind = ParentType(parent_type)
    except ValueError:
        raise ValidationError("Parent type must be either Project or TaskGroup") from None
    if kind is ParentType.TASK_GROUP:
        return TaskGroupRef(parent_id)
    return ProjectRef(parent_id)


@dataclass(slots=True)
class TaskGroup:
    id: str
    owner_id: str
    name: str
    icon: str
    color: str
    created_at: float
    updated_at: float


@dataclass(slots=True)
class Project:
    id: str
    owner_id: str
    name: str
    task_group_id: str
    start_date: float
    end_date: float
    color: str
    created_at: float
    updated_at: float

    description: str = ""
    logo: str = ""


@dataclass(slots=True)
class Task:
    id: str
    owner_id: str
    title: str
    parent: ParentRef
    status: TaskStatus
    priority: TaskPriority
    created_at: float
    updated_at: float

    description: str = ""
    due_date: float | None = None
    due_time: str | None = None
    tags: list[str] = field(default_factory=list)

    # Derived from status; see TaskManager.update.
    is_completed: bool = False
    completed_at: float | None = None


@dataclass(slots=True)
class TaskStats:
    total: int
    completed: int
    in_progress: int
    todo: int
    completion_percentage: int


@dataclass(slots=True)
class TaskGroupSummary:
    group: TaskGroup
    task_count: int
    completion_percentage: int


@dataclass(slots=True)
class TaskGroupDetail:
    group: TaskGroup
    tasks: list[Task]
    task_count: int
    completion_percentage: int


@dataclass(slots=True)
class ProjectSummary:
    project: Project
    task_count: int


@dataclass(slots=True)
class ProjectDetail:
    project: Project
    tasks: list[Task]
    task_count: int
