# src/taskhub/storage/sqlite_store.py

from __future__ import annotations

import contextlib
import json
import logging
import secrets
import sqlite3
import time
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

from ..core.errors import StoreError
from ..core.ports import PROJECTS, TASK_GROUPS, TASKS, Document, Filter, Range

logger = logging.getLogger(__name__)

# Column codecs: how a document value is stored in SQLite.
_TEXT = "text"
_REAL = "real"
_BOOL = "bool"
_JSON = "json"

# collection -> {column: (declaration, codec)}; "id" is implicit.
_SCHEMA: dict[str, dict[str, tuple[str, str]]] = {
    TASK_GROUPS: {
        "owner_id": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "name": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "icon": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "color": ("TEXT NOT NULL DEFAULT '#6C5DD3'", _TEXT),
        "created_at": ("REAL NOT NULL DEFAULT 0", _REAL),
        "updated_at": ("REAL NOT NULL DEFAULT 0", _REAL),
    },
    PROJECTS: {
        "owner_id": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "name": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "description": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "logo": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "task_group_id": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "start_date": ("REAL NOT NULL DEFAULT 0", _REAL),
        "end_date": ("REAL NOT NULL DEFAULT 0", _REAL),
        "color": ("TEXT NOT NULL DEFAULT '#6C5DD3'", _TEXT),
        "created_at": ("REAL NOT NULL DEFAULT 0", _REAL),
        "updated_at": ("REAL NOT NULL DEFAULT 0", _REAL),
    },
    TASKS: {
        "owner_id": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "title": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "description": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "status": ("TEXT NOT NULL DEFAULT 'To do'", _TEXT),
        "priority": ("TEXT NOT NULL DEFAULT 'Medium'", _TEXT),
        "due_date": ("REAL", _REAL),
        "due_time": ("TEXT", _TEXT),
        "parent_id": ("TEXT NOT NULL DEFAULT ''", _TEXT),
        "parent_type": ("TEXT NOT NULL DEFAULT 'Project'", _TEXT),
        "tags": ("TEXT NOT NULL DEFAULT '[]'", _JSON),
        "is_completed": ("INTEGER NOT NULL DEFAULT 0", _BOOL),
        "completed_at": ("REAL", _REAL),
        "created_at": ("REAL NOT NULL DEFAULT 0", _REAL),
        "updated_at": ("REAL NOT NULL DEFAULT 0", _REAL),
    },
}

_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_task_groups_owner ON task_groups(owner_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_projects_owner ON projects(owner_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_projects_group ON projects(task_group_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_parent ON tasks(parent_id, parent_type)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_owner_parent ON tasks(owner_id, parent_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_owner_due ON tasks(owner_id, due_date)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_owner_status ON tasks(owner_id, status)",
)


def new_id() -> str:
    """24 hex chars, same shape as the ids the mobile client already stores."""
    return secrets.token_hex(12)


class SQLiteEntityStore:
    """
    SQLite implementation of the EntityStore port.

    One table per collection with fixed columns; schema is migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection

    There is no cross-call transaction: callers that issue several writes
    (e.g. a cascade delete) get no atomicity across them.
    """

    def __init__(self, db_path: str | Path = "taskhub.sqlite3", *, timeout: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = float(timeout)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteEntityStore ready db=%s", self._db_path)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _session(self, op: str, collection: str) -> Iterator[sqlite3.Cursor]:
        """Open a connection for one call; commit on success, map sqlite errors to StoreError."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            logger.exception("SQLite connect failed op=%s collection=%s", op, collection)
            raise StoreError() from exc
        try:
            cur = conn.cursor()
            yield cur
            conn.commit()
        except sqlite3.Error as exc:
            logger.exception("SQLite %s failed collection=%s", op, collection)
            raise StoreError() from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._session("ensure_schema", "*") as cur:
            for table, columns in _SCHEMA.items():
                cols_sql = ",\n".join(f"{name} {decl}" for name, (decl, _) in columns.items())
                cur.execute(f"CREATE TABLE IF NOT EXISTS {table} (\nid TEXT PRIMARY KEY,\n{cols_sql}\n)")

                # Migrations (safe): add missing columns.
                cur.execute(f"PRAGMA table_info({table})")
                existing = {row["name"] for row in cur.fetchall()}
                for name, (decl, _) in columns.items():
                    if name in existing:
                        continue
                    cur.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
                    logger.info("SQLiteEntityStore migration: added column %s.%s", table, name)

            for stmt in _INDEXES:
                cur.execute(stmt)

    @staticmethod
    def _columns(collection: str) -> dict[str, tuple[str, str]]:
        try:
            return _SCHEMA[collection]
        except KeyError:
            raise ValueError(f"unknown collection: {collection}") from None

    @classmethod
    def _column(cls, collection: str, name: str) -> str:
        if name == "id":
            return name
        if name not in cls._columns(collection):
            raise ValueError(f"unknown field {name!r} for {collection}")
        return name

    @staticmethod
    def _encode(codec: str, value: Any) -> Any:
        if value is None:
            return None
        if codec == _BOOL:
            return 1 if value else 0
        if codec == _JSON:
            return json.dumps(list(value), ensure_ascii=False)
        if codec == _REAL:
            return float(value)
        return str(value)

    @staticmethod
    def _decode(codec: str, value: Any) -> Any:
        if value is None:
            return None
        if codec == _BOOL:
            return bool(value)
        if codec == _JSON:
            try:
                val = json.loads(value)
            except (TypeError, ValueError):
                return []
            return val if isinstance(val, list) else []
        if codec == _REAL:
            return float(value)
        return value

    def _row_to_doc(self, collection: str, row: sqlite3.Row) -> Document:
        doc: Document = {"id": row["id"]}
        for name, (_, codec) in self._columns(collection).items():
            doc[name] = self._decode(codec, row[name])
        return doc

    def _where(self, collection: str, flt: Filter) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        columns = self._columns(collection)
        for name, value in flt.items():
            col = self._column(collection, name)
            codec = columns[col][1] if col != "id" else _TEXT
            if isinstance(value, Range):
                clauses.append(f"{col} IS NOT NULL AND {col} >= ? AND {col} < ?")
                params.extend((float(value.gte), float(value.lt)))
            elif value is None:
                clauses.append(f"{col} IS NULL")
            else:
                clauses.append(f"{col} = ?")
                params.append(self._encode(codec, value))
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def _order(self, collection: str, order_by: Sequence[str]) -> str:
        parts: list[str] = []
        for key in order_by:
            desc = key.startswith("-")
            col = self._column(collection, key.lstrip("-"))
            # NULLs last in both directions
            parts.append(f"{col} IS NULL, {col} {'DESC' if desc else 'ASC'}")
        if parts:
            # insertion order breaks ties, in the direction of the leading key
            parts.append("rowid DESC" if order_by[0].startswith("-") else "rowid ASC")
        return (" ORDER BY " + ", ".join(parts)) if parts else ""

    # ---- public API (EntityStore) ----

    def find_by_id(self, collection: str, doc_id: str) -> Document | None:
        self._columns(collection)
        with self._session("find_by_id", collection) as cur:
            cur.execute(f"SELECT * FROM {collection} WHERE id = ?", (str(doc_id),))
            row = cur.fetchone()
        return self._row_to_doc(collection, row) if row else None

    def find_many(
        self,
        collection: str,
        flt: Filter,
        *,
        order_by: Sequence[str] = (),
    ) -> list[Document]:
        where, params = self._where(collection, flt)
        order = self._order(collection, order_by)
        with self._session("find_many", collection) as cur:
            cur.execute(f"SELECT * FROM {collection}{where}{order}", params)
            rows = cur.fetchall()
        return [self._row_to_doc(collection, r) for r in rows]

    def count_many(self, collection: str, flt: Filter) -> int:
        where, params = self._where(collection, flt)
        with self._session("count_many", collection) as cur:
            cur.execute(f"SELECT COUNT(*) FROM {collection}{where}", params)
            (n,) = cur.fetchone()
        return int(n)

    def insert(self, collection: str, doc: Document) -> str:
        columns = self._columns(collection)
        now = time.time()
        doc_id = str(doc.get("id") or new_id())

        values: dict[str, Any] = {"created_at": now, "updated_at": now}
        for name, value in doc.items():
            if name == "id":
                continue
            values[self._column(collection, name)] = value

        names = ["id", *values.keys()]
        params = [doc_id, *(self._encode(columns[n][1], v) for n, v in values.items())]
        placeholders = ", ".join("?" for _ in names)

        with self._session("insert", collection) as cur:
            cur.execute(
                f"INSERT INTO {collection}({', '.join(names)}) VALUES ({placeholders})",
                params,
            )
        logger.debug("Inserted %s id=%s", collection, doc_id)
        return doc_id

    def update_by_id(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> bool:
        columns = self._columns(collection)
        sets: list[str] = []
        params: list[Any] = []

        for name, value in fields.items():
            if name in ("id", "updated_at"):
                continue
            col = self._column(collection, name)
            sets.append(f"{col} = ?")
            params.append(self._encode(columns[col][1], value))

        sets.append("updated_at = ?")
        params.append(time.time())
        params.append(str(doc_id))

        with self._session("update_by_id", collection) as cur:
            cur.execute(f"UPDATE {collection} SET {', '.join(sets)} WHERE id = ?", params)
            changed = cur.rowcount == 1
        logger.debug("Updated %s id=%s fields=%s changed=%s", collection, doc_id, sorted(fields), changed)
        return changed

    def delete_by_id(self, collection: str, doc_id: str) -> bool:
        self._columns(collection)
        with self._session("delete_by_id", collection) as cur:
            cur.execute(f"DELETE FROM {collection} WHERE id = ?", (str(doc_id),))
            deleted = cur.rowcount == 1
        logger.debug("Deleted %s id=%s deleted=%s", collection, doc_id, deleted)
        return deleted

    def delete_many(self, collection: str, flt: Filter) -> int:
        where, params = self._where(collection, flt)
        if not where:
            raise ValueError("delete_many requires a non-empty filter")
        with self._session("delete_many", collection) as cur:
            cur.execute(f"DELETE FROM {collection}{where}", params)
            n = int(cur.rowcount)
        logger.debug("Deleted %d from %s", n, collection)
        return n
