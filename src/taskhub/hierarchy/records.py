# src/taskhub/hierarchy/records.py

"""Conversion between store documents and hierarchy models."""

from __future__ import annotations

from typing import Any, assert_never

from ..core.ports import Document
from .models import (
    ParentRef,
    Project,
    ProjectRef,
    Task,
    TaskGroup,
    TaskGroupRef,
    TaskPriority,
    TaskStatus,
    parent_ref,
)


def parent_fields(ref: ParentRef) -> dict[str, Any]:
    """Store representation of a parent; also used as an equality filter."""
    if isinstance(ref, ProjectRef):
        return {"parent_id": ref.id, "parent_type": "Project"}
    if isinstance(ref, TaskGroupRef):
        return {"parent_id": ref.id, "parent_type": "TaskGroup"}
    assert_never(ref)


def task_group_from_doc(doc: Document) -> TaskGroup:
    return TaskGroup(
        id=str(doc["id"]),
        owner_id=str(doc["owner_id"]),
        name=str(doc.get("name") or ""),
        icon=str(doc.get("icon") or ""),
        color=str(doc.get("color") or ""),
        created_at=float(doc.get("created_at") or 0.0),
        updated_at=float(doc.get("updated_at") or 0.0),
    )


def project_from_doc(doc: Document) -> Project:
    return Project(
        id=str(doc["id"]),
        owner_id=str(doc["owner_id"]),
        name=str(doc.get("name") or ""),
        task_group_id=str(doc.get("task_group_id") or ""),
        start_date=float(doc.get("start_date") or 0.0),
        end_date=float(doc.get("end_date") or 0.0),
        color=str(doc.get("color") or ""),
        created_at=float(doc.get("created_at") or 0.0),
        updated_at=float(doc.get("updated_at") or 0.0),
        description=str(doc.get("description") or ""),
        logo=str(doc.get("logo") or ""),
    )


def task_from_doc(doc: Document) -> Task:
    due_date = doc.get("due_date")
    completed_at = doc.get("completed_at")
    return Task(
        id=str(doc["id"]),
        owner_id=str(doc["owner_id"]),
        title=str(doc.get("title") or ""),
        parent=parent_ref(str(doc.get("parent_id") or ""), doc.get("parent_type")),
        status=TaskStatus(doc.get("status") or TaskStatus.TODO),
        priority=TaskPriority(doc.get("priority") or TaskPriority.MEDIUM),
        created_at=float(doc.get("created_at") or 0.0),
        updated_at=float(doc.get("updated_at") or 0.0),
        description=str(doc.get("description") or ""),
        due_date=float(due_date) if due_date is not None else None,
        due_time=doc.get("due_time"),
        tags=list(doc.get("tags") or []),
        is_completed=bool(doc.get("is_completed")),
        completed_at=float(completed_at) if completed_at is not None else None,
    )
