# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskhub.core.state import AppState, StaticIdentity, build_state
from taskhub.storage.sqlite_store import SQLiteEntityStore

from .fakes import InMemoryEntityStore

USER = "user-1"
OTHER_USER = "user-2"


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the managers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskhub-test",
        user_id=USER,
        data_dir=tmp_path,
        db_path=tmp_path / "taskhub.sqlite3",
        db_timeout=5.0,
        default_color="#6C5DD3",
        default_group_name="Default Group",
        default_group_icon="\N{FILE FOLDER}",
    )


@pytest.fixture()
def memory_store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture()
def sqlite_store(settings: SimpleNamespace) -> SQLiteEntityStore:
    return SQLiteEntityStore(settings.db_path, timeout=settings.db_timeout)


@pytest.fixture(params=["memory", "sqlite"])
def state(request, settings: SimpleNamespace) -> AppState:
    """
    AppState wired over both store implementations.

    The SQLite store is real here because the managers' filters and ordering
    must behave the same against it as against the in-memory fake.
    """
    if request.param == "memory":
        store = InMemoryEntityStore()
    else:
        store = SQLiteEntityStore(settings.db_path, timeout=settings.db_timeout)
    return build_state(settings, store, StaticIdentity(USER))
