"""Agent record queries: siblings, same-role history, completed and active agents."""
from __future__ import annotations

from agent_briefing.queries.types import AgentSummary, safe_query
from agent_briefing.store.base import BriefingStore, Row


def _to_agent(row: Row) -> AgentSummary:
    return AgentSummary(
        name=row["agent_name"],
        agent_type=row.get("agent_type"),
        parent_agent_id=row.get("parent_agent_id"),
        status=row.get("status") or "active",
        summary=row.get("context_summary"),
        session_id=row.get("session_id"),
    )


async def get_sibling_agents(
    store: BriefingStore,
    session_id: str,
    parent_agent_id: str,
    limit: int = 5,
) -> list[AgentSummary]:
    """Completed agents sharing this session and parent, with a summary.

    Most recently completed first.
    """

    async def _run() -> list[AgentSummary]:
        rows = await store.fetch_all(
            """
            SELECT agent_name, agent_type, parent_agent_id, status, context_summary, session_id
            FROM agents
            WHERE session_id = ? AND parent_agent_id = ?
              AND status = 'completed' AND context_summary IS NOT NULL
            ORDER BY completed_at DESC, started_at DESC
            LIMIT ?
            """,
            (session_id, parent_agent_id, limit),
        )
        return [_to_agent(row) for row in rows]

    return await safe_query("siblings", _run(), [])


async def get_same_role_agents(
    store: BriefingStore,
    agent_type: str,
    session_id: str,
    parent_agent_id: str | None,
    limit: int = 3,
) -> list[AgentSummary]:
    """Completed agents of the same role from any session.

    The current session's siblings (same parent) are excluded because they
    are already reported as sibling agents.
    """

    async def _run() -> list[AgentSummary]:
        rows = await store.fetch_all(
            """
            SELECT agent_name, agent_type, parent_agent_id, status, context_summary, session_id
            FROM agents
            WHERE agent_type = ? AND status = 'completed' AND context_summary IS NOT NULL
              AND id NOT IN (
                SELECT id FROM agents WHERE session_id = ? AND parent_agent_id = ?
              )
            ORDER BY completed_at DESC, started_at DESC
            LIMIT ?
            """,
            (agent_type, session_id, parent_agent_id or "", limit),
        )
        return [_to_agent(row) for row in rows]

    return await safe_query("same-role", _run(), [])


async def get_completed_agents(
    store: BriefingStore, session_id: str, limit: int = 5
) -> list[AgentSummary]:
    """Completed agents of the session that left a summary."""

    async def _run() -> list[AgentSummary]:
        rows = await store.fetch_all(
            """
            SELECT agent_name, agent_type, parent_agent_id, status, context_summary, session_id
            FROM agents
            WHERE session_id = ? AND status = 'completed' AND context_summary IS NOT NULL
            ORDER BY completed_at DESC, started_at DESC
            LIMIT ?
            """,
            (session_id, limit),
        )
        return [_to_agent(row) for row in rows]

    return await safe_query("completed-agents", _run(), [])


async def get_active_agents(store: BriefingStore, session_id: str) -> list[AgentSummary]:
    """Agents currently active in the session, most recently started first."""

    async def _run() -> list[AgentSummary]:
        rows = await store.fetch_all(
            """
            SELECT agent_name, agent_type, parent_agent_id, status, context_summary, session_id
            FROM agents
            WHERE session_id = ? AND status = 'active'
            ORDER BY started_at DESC
            """,
            (session_id,),
        )
        return [_to_agent(row) for row in rows]

    return await safe_query("active-agents", _run(), [])


__all__ = [
    "get_active_agents",
    "get_completed_agents",
    "get_same_role_agents",
    "get_sibling_agents",
]
