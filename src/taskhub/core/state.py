# src/taskhub/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..hierarchy.aggregator import HierarchyAggregator
from ..hierarchy.projects import ProjectManager
from ..hierarchy.task_groups import TaskGroupManager
from ..hierarchy.tasks import TaskManager
from .ports import EntityStore, IdentityContext


@dataclass(frozen=True, slots=True)
class StaticIdentity:
    """Identity for single-user front-ends: the principal comes from configuration."""

    user_id: str

    def current_user_id(self) -> str:
        return self.user_id


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    identity: IdentityContext
    store: EntityStore

    aggregator: HierarchyAggregator
    task_groups: TaskGroupManager
    projects: ProjectManager
    tasks: TaskManager


def build_state(settings, store: EntityStore, identity: IdentityContext) -> AppState:
    """Wire the managers around one store; defaults come from settings when present."""
    aggregator = HierarchyAggregator(store)
    color = getattr(settings, "default_color", None) or "#6C5DD3"
    return AppState(
        settings=settings,
        identity=identity,
        store=store,
        aggregator=aggregator,
        task_groups=TaskGroupManager(store, aggregator, default_color=color),
        projects=ProjectManager(
            store,
            aggregator,
            default_color=color,
            default_group_name=getattr(settings, "default_group_name", None) or "Default Group",
            default_group_icon=getattr(settings, "default_group_icon", None) or "\N{FILE FOLDER}",
        ),
        tasks=TaskManager(store),
    )
