"""Projection models shared by the source query catalog.

Every query returns one of these fixed-shape models instead of raw store
rows.  ``safe_query`` provides the per-query fault isolation.

Classes
-------
- MarkSummary         — retrieval projection of a mark
- ContextNote         — projection of a context entry
- AgentSummary        — projection of an agent record
- TaskSummary         — projection of a task (with optional plan comment)
- OpenTasks           — open tasks plus backlog count
- PendingMessage      — projection of an undelivered message
- PromotionCandidate  — aggregated concept recurrence (never persisted)
"""
from __future__ import annotations

import json
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Entry types that carry lasting project knowledge.
HIGH_VALUE_ENTRY_TYPES: tuple[str, ...] = ("agent_summary", "decision", "blocker", "handoff")
DECISION_ENTRY_TYPES: tuple[str, ...] = ("decision", "blocker", "handoff")


class MarkSummary(BaseModel):
    id: int
    type: str
    title: str
    agent_name: str | None = None


class ContextNote(BaseModel):
    entry_type: str
    content: str
    tags: list[str] = Field(default_factory=list)
    agent_name: str | None = None
    session_id: str | None = None


class AgentSummary(BaseModel):
    name: str
    agent_type: str | None = None
    parent_agent_id: str | None = None
    status: str = "active"
    summary: str | None = None
    session_id: str | None = None


class TaskSummary(BaseModel):
    id: int | None = None
    title: str
    description: str | None = None
    status: str
    assigned_to: str | None = None
    tags: list[str] = Field(default_factory=list)
    plan_comment: str | None = None


class OpenTasks(BaseModel):
    tasks: list[TaskSummary] = Field(default_factory=list)
    backlog_count: int = 0


class PendingMessage(BaseModel):
    id: int
    from_name: str
    content: str
    priority: str = "normal"
    created_at: str


class PromotionCandidate(BaseModel):
    """A concept recurring across marks and sessions.

    Parameters
    ----------
    concept:
        The concept label.
    count:
        Number of eligible marks carrying the concept.
    session_count:
        Number of distinct sessions those marks came from.
    mark_ids:
        Contributing mark ids, most recent first.
    sample_titles:
        Distinct titles of contributing marks, most recent first.
    types:
        Distinct mark types, most recent first.
    """

    concept: str
    count: int
    session_count: int
    mark_ids: list[int] = Field(default_factory=list)
    sample_titles: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)


def json_list(raw: Any) -> list[str]:
    """Decode a JSON array column into a list of strings.

    NULL becomes an empty list.  A value that is not a JSON array raises
    ``ValueError`` so the owning query is treated as failed.
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        return [str(item) for item in raw]
    decoded = json.loads(raw)
    if decoded is None:
        return []
    if not isinstance(decoded, list):
        raise ValueError(f"expected a JSON array, got {type(decoded).__name__}")
    return [str(item) for item in decoded]


async def safe_query(label: str, query: Awaitable[T], default: T) -> T:
    """Await ``query``; on any failure log it under ``label`` and return ``default``."""
    try:
        return await query
    except Exception as exc:  # noqa: BLE001
        logger.warning("query %s failed: %s", label, exc)
        return default


__all__ = [
    "AgentSummary",
    "ContextNote",
    "DECISION_ENTRY_TYPES",
    "HIGH_VALUE_ENTRY_TYPES",
    "MarkSummary",
    "OpenTasks",
    "PendingMessage",
    "PromotionCandidate",
    "TaskSummary",
    "json_list",
    "safe_query",
]
