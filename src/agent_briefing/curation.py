"""Curation report: what accumulated since the last curation pass.

Feeds a user-facing report, so store failures propagate instead of being
converted to empty values.

Classes
-------
- AgentMemoryFile  — one agent's persisted memory file
- CurationStats    — the report
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

from agent_briefing.queries.promotion import find_promotion_candidates
from agent_briefing.store.base import BriefingStore

DEFAULT_MIN_OCCURRENCES = 3
DEFAULT_MIN_SESSIONS = 2


class AgentMemoryFile(BaseModel):
    name: str
    size_bytes: int
    last_modified: datetime


class CurationStats(BaseModel):
    last_curated: str | None = None
    sessions_since: int = 0
    marks_since: int = 0
    promotion_candidates: int = 0
    agent_memories: list[AgentMemoryFile] = Field(default_factory=list)


def list_agent_memories(memory_dir: Path | None) -> list[AgentMemoryFile]:
    """Return ``<memory_dir>/<agent>/MEMORY.md`` files, sorted by agent name."""
    if memory_dir is None or not memory_dir.is_dir():
        return []
    memories: list[AgentMemoryFile] = []
    for agent_dir in sorted(memory_dir.iterdir()):
        memory_file = agent_dir / "MEMORY.md"
        if not memory_file.is_file():
            continue
        stat = memory_file.stat()
        memories.append(
            AgentMemoryFile(
                name=agent_dir.name,
                size_bytes=stat.st_size,
                last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            )
        )
    return memories


async def _count_since(
    store: BriefingStore, table: str, column: str, project_id: str, since: str | None
) -> int:
    if since is None:
        row = await store.fetch_one(
            f"SELECT COUNT(*) AS count FROM {table} WHERE project_id = ?", (project_id,)
        )
    else:
        row = await store.fetch_one(
            f"SELECT COUNT(*) AS count FROM {table} WHERE project_id = ? AND {column} > ?",
            (project_id, since),
        )
    return int(row["count"]) if row is not None else 0


async def get_curation_stats(
    store: BriefingStore,
    project_id: str,
    memory_dir: Path | None = None,
) -> CurationStats:
    """Summarise sessions, marks and promotion candidates since the last curation."""
    row = await store.fetch_one(
        """
        SELECT created_at FROM activity_log
        WHERE event_type = 'curation_completed'
        ORDER BY created_at DESC, id DESC
        LIMIT 1
        """
    )
    last_curated = str(row["created_at"]) if row is not None else None

    candidates = await find_promotion_candidates(
        store, project_id, DEFAULT_MIN_OCCURRENCES, DEFAULT_MIN_SESSIONS
    )
    return CurationStats(
        last_curated=last_curated,
        sessions_since=await _count_since(store, "sessions", "started_at", project_id, last_curated),
        marks_since=await _count_since(store, "marks", "created_at", project_id, last_curated),
        promotion_candidates=len(candidates),
        agent_memories=list_agent_memories(memory_dir),
    )


__all__ = ["AgentMemoryFile", "CurationStats", "get_curation_stats", "list_agent_memories"]
