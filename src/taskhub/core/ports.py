# src/taskhub/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The managers depend on Protocols instead of concrete implementations.
This keeps the storage engine and the identity provider swappable and makes testing easier.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

TASK_GROUPS = "task_groups"
PROJECTS = "projects"
TASKS = "tasks"

Document = dict[str, Any]
# Flat record: {"id": "...", "owner_id": "...", <field>: <value>, ...}.


@dataclass(frozen=True, slots=True)
class Range:
    """Half-open range predicate: gte <= value < lt. Rows with NULL never match."""

    gte: float
    lt: float


Filter = Mapping[str, Any]
# Field -> value (equality) or Range. All predicates are ANDed.


class IdentityContext(Protocol):
    """Supplies the already-authenticated principal; the core never checks credentials."""

    def current_user_id(self) -> str: ...


class EntityStore(Protocol):
    """
    Document store keyed by opaque ids.

    No multi-document transactions: every call is its own unit of work.
    Implementations raise StoreError on backend failures.

    order_by: field names, "-" prefix for descending.
    """

    def find_by_id(self, collection: str, doc_id: str) -> Document | None: ...

    def find_many(
            self,
            collection: str,
            flt: Filter,
            *,
            order_by: Sequence[str] = (),
    ) -> list[Document]: ...

    def count_many(self, collection: str, flt: Filter) -> int: ...

    def insert(self, collection: str, doc: Document) -> str: ...

    def update_by_id(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> bool: ...

    def delete_by_id(self, collection: str, doc_id: str) -> bool: ...

    def delete_many(self, collection: str, flt: Filter) -> int: ...
