# src/taskhub/core/errors.py

"""
Typed failures raised by the hierarchy managers.

Callers (console, HTTP layer) map them to user-facing output:
- NotFound: generic message only, same for "missing" and "owned by someone else"
- ValidationError / Conflict: human-readable reason
- StoreError: generic failure, storage details stay in the logs
"""

from __future__ import annotations


class HierarchyError(Exception):
    """Base class for every failure the core reports to its callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(HierarchyError):
    def __init__(self, entity: str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity


class ValidationError(HierarchyError):
    pass


class Conflict(HierarchyError):
    """A delete-guard refused the operation because dependents exist."""

    def __init__(self, message: str, *, blocking_count: int) -> None:
        super().__init__(message)
        self.blocking_count = blocking_count


class StoreError(HierarchyError):
    def __init__(self, message: str = "Storage operation failed") -> None:
        super().__init__(message)
