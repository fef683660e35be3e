"""Mark retrieval strategies used by the relevance cascade.

Every strategy excludes promoted marks (promotion is one-way) and
resolved marks.  Unlike the catalog queries these functions raise on
store failure; the cascade degrades on it and the assembler isolates it
per section.
"""
from __future__ import annotations

import json

from agent_briefing.queries.types import MarkSummary, safe_query
from agent_briefing.store.base import BriefingStore, Row

# Marks eligible for retrieval.  NULL status predates the lifecycle column.
RETRIEVABLE = "o.promoted_to IS NULL AND (o.status IS NULL OR o.status = 'active')"

_MARK_COLUMNS = "o.id, o.type, o.title, a.agent_name"


def _to_mark(row: Row) -> MarkSummary:
    return MarkSummary(
        id=row["id"],
        type=row["type"],
        title=row["title"],
        agent_name=row.get("agent_name"),
    )


async def get_file_based_marks(
    store: BriefingStore,
    project_id: str,
    files: list[str],
    session_id: str,
    limit: int = 5,
) -> list[MarkSummary]:
    """Marks from other sessions that read or modified any of ``files``.

    An empty file list returns no marks without querying the store.
    """
    if not files:
        return []
    file_list = json.dumps(sorted(set(files)))
    rows = await store.fetch_all(
        f"""
        SELECT {_MARK_COLUMNS}
        FROM marks o
        LEFT JOIN agents a ON o.agent_id = a.id
        WHERE o.project_id = ?
          AND o.session_id != ?
          AND {RETRIEVABLE}
          AND (
            EXISTS (SELECT 1 FROM json_each(o.files_read) AS f
                    WHERE f.value IN (SELECT value FROM json_each(?)))
            OR EXISTS (SELECT 1 FROM json_each(o.files_modified) AS f
                       WHERE f.value IN (SELECT value FROM json_each(?)))
          )
        ORDER BY o.created_at DESC, o.id DESC
        LIMIT ?
        """,
        (project_id, session_id, file_list, file_list, limit),
    )
    return [_to_mark(row) for row in rows]


async def get_sibling_marks(
    store: BriefingStore,
    session_id: str,
    agent_name: str,
    parent_agent_id: str | None,
    limit: int = 5,
) -> list[MarkSummary]:
    """Marks left by other agents of this session.

    With a known parent only agents under the same parent count; without
    one any other agent of the session does.
    """
    parent_clause = "AND a.parent_agent_id = ?" if parent_agent_id else ""
    params: list[object] = [session_id]
    if parent_agent_id:
        params.append(parent_agent_id)
    params.extend([agent_name, limit])
    rows = await store.fetch_all(
        f"""
        SELECT {_MARK_COLUMNS}
        FROM marks o
        JOIN agents a ON o.agent_id = a.id
        WHERE o.session_id = ?
          {parent_clause}
          AND a.agent_name != ?
          AND {RETRIEVABLE}
        ORDER BY o.created_at DESC, o.id DESC
        LIMIT ?
        """,
        params,
    )
    return [_to_mark(row) for row in rows]


async def get_project_marks(
    store: BriefingStore, project_id: str, session_id: str, limit: int = 5
) -> list[MarkSummary]:
    """Most recent marks of the project from any other session."""
    rows = await store.fetch_all(
        f"""
        SELECT {_MARK_COLUMNS}
        FROM marks o
        LEFT JOIN agents a ON o.agent_id = a.id
        WHERE o.project_id = ?
          AND o.session_id != ?
          AND {RETRIEVABLE}
        ORDER BY o.created_at DESC, o.id DESC
        LIMIT ?
        """,
        (project_id, session_id, limit),
    )
    return [_to_mark(row) for row in rows]


async def get_similar_marks(
    store: BriefingStore,
    project_id: str,
    session_id: str,
    query_vector: bytes,
    limit: int = 5,
) -> list[MarkSummary]:
    """Embedded marks of other sessions ranked by cosine distance to ``query_vector``.

    ``query_vector`` is an encoded float32 BLOB bound as a parameter.
    """
    rows = await store.fetch_all(
        f"""
        SELECT id, type, title, agent_name FROM (
            SELECT {_MARK_COLUMNS}, o.created_at,
                   cosine_distance(o.embedding, ?) AS distance
            FROM marks o
            LEFT JOIN agents a ON o.agent_id = a.id
            WHERE o.project_id = ?
              AND o.session_id != ?
              AND {RETRIEVABLE}
              AND o.embedding IS NOT NULL
        )
        WHERE distance IS NOT NULL
        ORDER BY distance ASC, created_at DESC
        LIMIT ?
        """,
        (query_vector, project_id, session_id, limit),
    )
    return [_to_mark(row) for row in rows]


async def get_agent_files(
    store: BriefingStore,
    session_id: str,
    agent_name: str,
    agent_type: str | None = None,
    limit: int = 20,
) -> list[str]:
    """File paths touched in this session by the agent or agents of its role."""

    async def _run() -> list[str]:
        rows = await store.fetch_all(
            """
            SELECT DISTINCT fc.file_path
            FROM file_changes fc
            JOIN agents a ON fc.agent_id = a.id
            WHERE fc.session_id = ?
              AND (a.agent_name = ? OR a.agent_type = ?)
            LIMIT ?
            """,
            (session_id, agent_name, agent_type or agent_name, limit),
        )
        return [str(row["file_path"]) for row in rows]

    return await safe_query("agent-files", _run(), [])


__all__ = [
    "RETRIEVABLE",
    "get_agent_files",
    "get_file_based_marks",
    "get_project_marks",
    "get_sibling_marks",
    "get_similar_marks",
]
