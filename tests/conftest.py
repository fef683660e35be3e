"""Shared fixtures: an isolated SQLite store per test plus row seeding helpers."""
from __future__ import annotations

import json
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from agent_briefing.config import EmbeddingConfig
from agent_briefing.embedding.gateway import EmbeddingGateway
from agent_briefing.store.sqlite import SQLiteStore

DIM = 4


def ts(n: int) -> str:
    """Deterministic ISO timestamp; larger ``n`` is more recent."""
    return f"2026-01-01T00:{n // 60:02d}:{n % 60:02d}.000"


def _json(values: list[str] | None) -> str | None:
    return json.dumps(values) if values is not None else None


class Seeder:
    """Insert store rows with explicit timestamps."""

    def __init__(self, store: SQLiteStore) -> None:
        self.store = store

    async def session(self, session_id: str, project_id: str, started: int = 0) -> None:
        await self.store.execute(
            "INSERT INTO sessions (id, project_id, started_at) VALUES (?, ?, ?)",
            (session_id, project_id, ts(started)),
        )

    async def agent(
        self,
        agent_id: str,
        session_id: str,
        name: str,
        agent_type: str | None = None,
        parent: str | None = None,
        status: str = "active",
        summary: str | None = None,
        at: int = 0,
    ) -> None:
        completed = ts(at) if status == "completed" else None
        await self.store.execute(
            """
            INSERT INTO agents (id, session_id, agent_name, agent_type, parent_agent_id,
                                status, context_summary, started_at, completed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (agent_id, session_id, name, agent_type, parent, status, summary, ts(at), completed),
        )

    async def note(
        self,
        session_id: str,
        entry_type: str,
        content: str,
        tags: list[str] | None = None,
        agent_id: str | None = None,
        at: int = 0,
    ) -> None:
        await self.store.execute(
            """
            INSERT INTO context_entries (session_id, agent_id, entry_type, content, tags, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (session_id, agent_id, entry_type, content, _json(tags), ts(at)),
        )

    async def task(
        self,
        project_id: str,
        title: str,
        status: str = "pending",
        assigned_to: str | None = None,
        description: str | None = None,
        tags: list[str] | None = None,
        at: int = 0,
    ) -> int:
        await self.store.execute(
            """
            INSERT INTO tasks (project_id, title, description, status, assigned_to, tags, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (project_id, title, description, status, assigned_to, _json(tags), ts(at)),
        )
        row = await self.store.fetch_one("SELECT MAX(id) AS id FROM tasks")
        assert row is not None
        return int(row["id"])

    async def comment(self, task_id: int, content: str, comment_type: str = "plan", at: int = 0) -> None:
        await self.store.execute(
            "INSERT INTO task_comments (task_id, comment_type, content, created_at) VALUES (?, ?, ?, ?)",
            (task_id, comment_type, content, ts(at)),
        )

    async def message(
        self,
        project_id: str,
        to_name: str,
        content: str,
        from_name: str = "lead",
        status: str = "pending",
        priority: str = "normal",
        at: int = 0,
    ) -> None:
        await self.store.execute(
            """
            INSERT INTO messages (project_id, from_name, to_name, content, priority, status, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (project_id, from_name, to_name, content, priority, status, ts(at)),
        )

    async def mark(
        self,
        session_id: str,
        project_id: str,
        title: str,
        mark_type: str = "discovery",
        agent_id: str | None = None,
        concepts: list[str] | None = None,
        files_read: list[str] | None = None,
        files_modified: list[str] | None = None,
        narrative: str | None = None,
        promoted_to: str | None = None,
        status: str | None = "active",
        at: int = 0,
    ) -> int:
        await self.store.execute(
            """
            INSERT INTO marks (session_id, agent_id, project_id, type, title, narrative, concepts,
                               files_read, files_modified, promoted_to, status, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                session_id,
                agent_id,
                project_id,
                mark_type,
                title,
                narrative,
                _json(concepts),
                _json(files_read),
                _json(files_modified),
                promoted_to,
                status,
                ts(at),
            ),
        )
        row = await self.store.fetch_one("SELECT MAX(id) AS id FROM marks")
        assert row is not None
        return int(row["id"])

    async def file_change(self, session_id: str, agent_id: str, path: str) -> None:
        await self.store.execute(
            "INSERT INTO file_changes (session_id, agent_id, file_path, change_type) VALUES (?, ?, ?, 'edit')",
            (session_id, agent_id, path),
        )

    async def activity(self, event_type: str, at: int = 0) -> None:
        await self.store.execute(
            "INSERT INTO activity_log (event_type, created_at) VALUES (?, ?)",
            (event_type, ts(at)),
        )


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "briefing.db"


@pytest_asyncio.fixture()
async def store(db_path: Path) -> AsyncIterator[SQLiteStore]:
    async with SQLiteStore(db_path, dimension=DIM) as opened:
        await opened.ensure_schema()
        yield opened


@pytest.fixture()
def seed(store: SQLiteStore) -> Seeder:
    return Seeder(store)


class FailingStore(SQLiteStore):
    """SQLiteStore whose reads raise when the SQL mentions any ``fail_on`` fragment."""

    def __init__(self, db_path: Path, fail_on: tuple[str, ...] = ()) -> None:
        super().__init__(db_path, dimension=DIM)
        self.fail_on = fail_on

    def _check(self, sql: str) -> None:
        for fragment in self.fail_on:
            if fragment in sql:
                raise RuntimeError(f"store unavailable ({fragment})")

    async def fetch_all(self, sql, params=()):  # type: ignore[override]
        self._check(sql)
        return await super().fetch_all(sql, params)

    async def fetch_one(self, sql, params=()):  # type: ignore[override]
        self._check(sql)
        return await super().fetch_one(sql, params)


@pytest_asyncio.fixture()
async def failing_store(db_path: Path) -> AsyncIterator[FailingStore]:
    async with FailingStore(db_path) as opened:
        await opened.ensure_schema()
        yield opened


# ---------------------------------------------------------------------------
# Embedding gateway backed by httpx.MockTransport
# ---------------------------------------------------------------------------


def embedding_config(**overrides: object) -> EmbeddingConfig:
    values: dict[str, object] = {"account_id": "acct", "api_token": "tok", "dimension": DIM}
    values.update(overrides)
    return EmbeddingConfig(**values)


def ok_response(vectors: list[object]) -> httpx.Response:
    payload = {"success": True, "result": {"shape": [len(vectors), DIM], "data": vectors}}
    return httpx.Response(200, json=payload)


def requested_texts(request: httpx.Request) -> list[str]:
    return list(json.loads(request.content)["text"])


def mock_gateway(handler, **overrides: object) -> EmbeddingGateway:
    """Enabled gateway whose HTTP calls are answered by ``handler``."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EmbeddingGateway(embedding_config(**overrides), client=client)


def constant_gateway(vector: list[float], **overrides: object) -> EmbeddingGateway:
    """Enabled gateway returning ``vector`` for every text."""

    def handler(request: httpx.Request) -> httpx.Response:
        return ok_response([vector for _ in requested_texts(request)])

    return mock_gateway(handler, **overrides)
