"""aiosqlite implementation of ``BriefingStore``.

A single long-lived connection is opened per store.  List-valued columns
(tags, concepts, file paths) hold JSON arrays and are matched with
``json_each``; embeddings are float32 BLOBs compared by the registered
``cosine_distance`` SQL function.

``SCHEMA_SQL`` is the reference schema of the tables the core reads.  It
is applied by ``ensure_schema`` for local use and tests; migrating a
production store is the store owner's concern.

Classes
-------
- StoreNotOpenError  — raised when the store is used before ``open()``
- SQLiteStore        — aiosqlite-backed briefing store
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import aiosqlite

from agent_briefing.store.base import BriefingStore, Params, Row
from agent_briefing.store.vectors import cosine_distance, encode_vector

logger = logging.getLogger(__name__)

_DEFAULT_DB_PATH: Path = Path.home() / ".agent-briefing" / "briefing.db"

SIMILARITY_INDEX_NAME = "marks_embedding_idx"

_NOW = "(strftime('%Y-%m-%dT%H:%M:%f', 'now'))"

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS projects (
    id         TEXT PRIMARY KEY,
    name       TEXT NOT NULL,
    path       TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL DEFAULT {_NOW}
);

CREATE TABLE IF NOT EXISTS sessions (
    id         TEXT PRIMARY KEY,
    project_id TEXT,
    status     TEXT DEFAULT 'active',
    started_at TEXT NOT NULL DEFAULT {_NOW},
    ended_at   TEXT
);

CREATE TABLE IF NOT EXISTS agents (
    id              TEXT PRIMARY KEY,
    session_id      TEXT,
    agent_name      TEXT NOT NULL,
    agent_type      TEXT,
    parent_agent_id TEXT,
    status          TEXT DEFAULT 'active',
    context_summary TEXT,
    started_at      TEXT NOT NULL DEFAULT {_NOW},
    completed_at    TEXT
);

CREATE TABLE IF NOT EXISTS context_entries (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT,
    agent_id   TEXT,
    entry_type TEXT NOT NULL,
    content    TEXT NOT NULL,
    tags       TEXT,
    created_at TEXT NOT NULL DEFAULT {_NOW}
);

CREATE TABLE IF NOT EXISTS file_changes (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id  TEXT,
    agent_id    TEXT,
    file_path   TEXT NOT NULL,
    change_type TEXT NOT NULL,
    created_at  TEXT NOT NULL DEFAULT {_NOW}
);

CREATE TABLE IF NOT EXISTS tasks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id  TEXT,
    title       TEXT NOT NULL,
    description TEXT,
    status      TEXT DEFAULT 'pending',
    assigned_to TEXT,
    tags        TEXT,
    created_at  TEXT NOT NULL DEFAULT {_NOW},
    updated_at  TEXT NOT NULL DEFAULT {_NOW}
);

CREATE TABLE IF NOT EXISTS task_comments (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id      INTEGER NOT NULL,
    author       TEXT,
    comment_type TEXT NOT NULL,
    content      TEXT NOT NULL,
    created_at   TEXT NOT NULL DEFAULT {_NOW}
);

CREATE TABLE IF NOT EXISTS messages (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id TEXT NOT NULL,
    session_id TEXT,
    from_name  TEXT NOT NULL,
    to_name    TEXT NOT NULL,
    content    TEXT NOT NULL,
    priority   TEXT DEFAULT 'normal',
    status     TEXT DEFAULT 'pending',
    read_at    TEXT,
    created_at TEXT NOT NULL DEFAULT {_NOW}
);

CREATE TABLE IF NOT EXISTS marks (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id     TEXT NOT NULL,
    agent_id       TEXT,
    project_id     TEXT NOT NULL,
    type           TEXT NOT NULL,
    title          TEXT NOT NULL,
    narrative      TEXT,
    concepts       TEXT,
    files_read     TEXT,
    files_modified TEXT,
    embedding      BLOB,
    promoted_to    TEXT,
    status         TEXT DEFAULT 'active',
    created_at     TEXT NOT NULL DEFAULT {_NOW}
);

CREATE TABLE IF NOT EXISTS activity_log (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT,
    agent_id   TEXT,
    event_type TEXT NOT NULL,
    details    TEXT,
    created_at TEXT NOT NULL DEFAULT {_NOW}
);
"""


class StoreNotOpenError(RuntimeError):
    """Raised when a ``SQLiteStore`` is queried before ``open()``."""


class SQLiteStore(BriefingStore):
    """Briefing store backed by a local SQLite database through aiosqlite.

    Parameters
    ----------
    db_path:
        Path to the SQLite file, or ``":memory:"``.  Defaults to
        ``~/.agent-briefing/briefing.db``.  The parent directory is
        created on ``open()``.
    dimension:
        Embedding dimension enforced by ``update_mark_embedding``.
    """

    def __init__(self, db_path: str | Path | None = None, dimension: int = 1024) -> None:
        if db_path == ":memory:":
            self._db_path: Path | None = None
        else:
            self._db_path = Path(db_path) if db_path is not None else _DEFAULT_DB_PATH
        self._dimension = dimension
        self._conn: aiosqlite.Connection | None = None

    @property
    def dimension(self) -> int:
        return self._dimension

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        if self._conn is not None:
            return
        if self._db_path is None:
            target = ":memory:"
        else:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(self._db_path)
        conn = await aiosqlite.connect(target)
        conn.row_factory = aiosqlite.Row
        if self._db_path is not None:
            await conn.execute("PRAGMA journal_mode=WAL")
        await conn.create_function("cosine_distance", 2, cosine_distance, deterministic=True)
        self._conn = conn
        logger.debug("SQLiteStore: opened %s", target)

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None

    async def ensure_schema(self) -> None:
        """Create the reference tables if they do not exist."""
        conn = self._require_conn()
        await conn.executescript(SCHEMA_SQL)
        await conn.commit()

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StoreNotOpenError("SQLiteStore is not open; call open() first.")
        return self._conn

    # ------------------------------------------------------------------
    # BriefingStore interface
    # ------------------------------------------------------------------

    async def fetch_all(self, sql: str, params: Params = ()) -> list[Row]:
        conn = self._require_conn()
        async with conn.execute(sql, tuple(params)) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def fetch_one(self, sql: str, params: Params = ()) -> Row | None:
        conn = self._require_conn()
        async with conn.execute(sql, tuple(params)) as cursor:
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def execute(self, sql: str, params: Params = ()) -> int:
        conn = self._require_conn()
        cursor = await conn.execute(sql, tuple(params))
        await conn.commit()
        return cursor.rowcount

    async def update_mark_embedding(self, mark_id: int, vector: Sequence[float]) -> None:
        blob = encode_vector(vector, self._dimension)
        await self.execute("UPDATE marks SET embedding = ? WHERE id = ?", (blob, mark_id))

    async def set_mark_promotion(self, mark_id: int, target: str) -> bool:
        updated = await self.execute(
            "UPDATE marks SET promoted_to = ? WHERE id = ? AND promoted_to IS NULL",
            (target, mark_id),
        )
        return updated > 0

    async def similarity_index_exists(self) -> bool:
        row = await self.fetch_one(
            "SELECT 1 AS present FROM sqlite_master WHERE type = 'index' AND name = ?",
            (SIMILARITY_INDEX_NAME,),
        )
        return row is not None

    async def create_similarity_index(self) -> None:
        # Partial index over embedded marks: the similarity scan only visits
        # rows that carry a vector.
        await self.execute(
            f"CREATE INDEX {SIMILARITY_INDEX_NAME} ON marks (project_id, session_id, created_at) "
            "WHERE embedding IS NOT NULL"
        )

    def __repr__(self) -> str:
        target = ":memory:" if self._db_path is None else str(self._db_path)
        return f"SQLiteStore(db_path={target!r})"


__all__ = ["SCHEMA_SQL", "SIMILARITY_INDEX_NAME", "SQLiteStore", "StoreNotOpenError"]
