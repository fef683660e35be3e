"""Context entry queries: cross-session, tagged, recent and decision notes."""
from __future__ import annotations

from agent_briefing.queries.types import (
    DECISION_ENTRY_TYPES,
    HIGH_VALUE_ENTRY_TYPES,
    ContextNote,
    json_list,
    safe_query,
)
from agent_briefing.store.base import BriefingStore, Row


def _placeholders(values: tuple[str, ...]) -> str:
    return ", ".join("?" for _ in values)


def _to_note(row: Row) -> ContextNote:
    return ContextNote(
        entry_type=row["entry_type"],
        content=row["content"],
        tags=json_list(row.get("tags")),
        agent_name=row.get("agent_name"),
        session_id=row.get("session_id"),
    )


async def get_cross_session_notes(
    store: BriefingStore, session_id: str, limit: int = 5
) -> list[ContextNote]:
    """High-value notes from other sessions of the same project.

    Only summaries, decisions, blockers and handoffs qualify; the current
    session is excluded.
    """

    async def _run() -> list[ContextNote]:
        rows = await store.fetch_all(
            f"""
            SELECT ce.entry_type, ce.content, ce.tags, ce.session_id, a.agent_name
            FROM context_entries ce
            LEFT JOIN agents a ON ce.agent_id = a.id
            JOIN sessions s ON ce.session_id = s.id
            WHERE s.project_id IN (SELECT project_id FROM sessions WHERE id = ?)
              AND ce.session_id != ?
              AND ce.entry_type IN ({_placeholders(HIGH_VALUE_ENTRY_TYPES)})
            ORDER BY ce.created_at DESC, ce.id DESC
            LIMIT ?
            """,
            (session_id, session_id, *HIGH_VALUE_ENTRY_TYPES, limit),
        )
        return [_to_note(row) for row in rows]

    return await safe_query("cross-session", _run(), [])


async def get_tagged_notes(
    store: BriefingStore,
    session_id: str,
    agent_name: str,
    agent_type: str | None,
    limit: int = 5,
) -> list[ContextNote]:
    """Session notes addressed to this agent.

    A note qualifies when its tags contain the agent name, the agent role or
    ``"all"``, or when it is a decision, blocker or handoff.
    """

    async def _run() -> list[ContextNote]:
        rows = await store.fetch_all(
            f"""
            SELECT ce.entry_type, ce.content, ce.tags, ce.session_id
            FROM context_entries ce
            WHERE ce.session_id = ?
              AND (
                (ce.tags IS NOT NULL AND EXISTS (
                    SELECT 1 FROM json_each(ce.tags) AS tag
                    WHERE tag.value IN (?, ?, 'all')
                ))
                OR ce.entry_type IN ({_placeholders(DECISION_ENTRY_TYPES)})
              )
            ORDER BY ce.created_at DESC, ce.id DESC
            LIMIT ?
            """,
            (session_id, agent_name, agent_type or "", *DECISION_ENTRY_TYPES, limit),
        )
        return [_to_note(row) for row in rows]

    return await safe_query("tagged", _run(), [])


async def get_recent_notes(
    store: BriefingStore, session_id: str, limit: int = 5
) -> list[ContextNote]:
    """Most recent notes of the session, used only as a fallback section."""

    async def _run() -> list[ContextNote]:
        rows = await store.fetch_all(
            """
            SELECT entry_type, content, tags, session_id
            FROM context_entries
            WHERE session_id = ?
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (session_id, limit),
        )
        return [_to_note(row) for row in rows]

    return await safe_query("recent-fallback", _run(), [])


async def get_decisions(
    store: BriefingStore, session_id: str, limit: int = 5
) -> list[ContextNote]:
    """Recent decisions, blockers and handoffs of the session."""

    async def _run() -> list[ContextNote]:
        rows = await store.fetch_all(
            f"""
            SELECT entry_type, content, tags, session_id
            FROM context_entries
            WHERE session_id = ?
              AND entry_type IN ({_placeholders(DECISION_ENTRY_TYPES)})
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (session_id, *DECISION_ENTRY_TYPES, limit),
        )
        return [_to_note(row) for row in rows]

    return await safe_query("decisions", _run(), [])


__all__ = [
    "get_cross_session_notes",
    "get_decisions",
    "get_recent_notes",
    "get_tagged_notes",
]
