"""Pending message queries."""
from __future__ import annotations

from agent_briefing.queries.types import PendingMessage, safe_query
from agent_briefing.store.base import BriefingStore


async def get_pending_messages(
    store: BriefingStore, session_id: str, agent_name: str, limit: int = 5
) -> list[PendingMessage]:
    """Undelivered project messages addressed to ``agent_name``, oldest first."""

    async def _run() -> list[PendingMessage]:
        rows = await store.fetch_all(
            """
            SELECT m.id, m.from_name, m.content, m.priority, m.created_at
            FROM messages m
            JOIN sessions s ON m.project_id = s.project_id
            WHERE s.id = ? AND m.to_name = ? AND m.status = 'pending'
            ORDER BY m.created_at ASC, m.id ASC
            LIMIT ?
            """,
            (session_id, agent_name, limit),
        )
        return [
            PendingMessage(
                id=row["id"],
                from_name=row["from_name"],
                content=row["content"],
                priority=row.get("priority") or "normal",
                created_at=str(row["created_at"]),
            )
            for row in rows
        ]

    return await safe_query("pending-messages", _run(), [])


async def _count(store: BriefingStore, sql: str, params: tuple[str, ...]) -> int:
    row = await store.fetch_one(sql, params)
    return int(row["count"]) if row is not None else 0


async def get_pending_message_count(
    store: BriefingStore, session_id: str, agent_name: str
) -> int:
    """Number of pending project messages addressed to ``agent_name``."""
    return await safe_query(
        "pending-count",
        _count(
            store,
            """
            SELECT COUNT(*) AS count
            FROM messages m
            JOIN sessions s ON m.project_id = s.project_id
            WHERE s.id = ? AND m.to_name = ? AND m.status = 'pending'
            """,
            (session_id, agent_name),
        ),
        0,
    )


async def get_all_pending_message_count(store: BriefingStore, session_id: str) -> int:
    """Number of pending messages anywhere in the session's project."""
    return await safe_query(
        "all-pending-count",
        _count(
            store,
            """
            SELECT COUNT(*) AS count
            FROM messages m
            JOIN sessions s ON m.project_id = s.project_id
            WHERE s.id = ? AND m.status = 'pending'
            """,
            (session_id,),
        ),
        0,
    )


__all__ = [
    "get_all_pending_message_count",
    "get_pending_message_count",
    "get_pending_messages",
]
