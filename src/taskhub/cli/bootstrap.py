# src/taskhub/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite store, the identity and the managers into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState, StaticIdentity, build_state
from ..storage.sqlite_store import SQLiteEntityStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = SQLiteEntityStore(settings.db_path, timeout=getattr(settings, "db_timeout", 30.0))
    state = build_state(settings, store, StaticIdentity(settings.user_id))
    logger.info("State ready user=%s db=%s", settings.user_id, settings.db_path)
    return state
