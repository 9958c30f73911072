# src/taskhub/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKHUB"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Identity (console principal) ----
    user_id: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    db_timeout: float

    # ---- Hierarchy defaults ----
    default_color: str
    default_group_name: str
    default_group_icon: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskhub") or "taskhub"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        user_id = _env(_k("USER_ID"), "local").strip() or "local"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskhub"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "taskhub.sqlite3")
        db_timeout = _env_float(_k("DB_TIMEOUT"), 30.0)

        default_color = _env(_k("DEFAULT_COLOR"), "#6C5DD3")
        default_group_name = _env(_k("DEFAULT_GROUP_NAME"), "Default Group")
        default_group_icon = _env(_k("DEFAULT_GROUP_ICON"), "\N{FILE FOLDER}")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            user_id=user_id,
            data_dir=data_dir,
            db_path=db_path,
            db_timeout=db_timeout,
            default_color=default_color,
            default_group_name=default_group_name,
            default_group_icon=default_group_icon,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
