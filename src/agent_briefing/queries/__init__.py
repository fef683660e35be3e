"""Source query catalog.

Each query is an independent coroutine taking the store plus scoping
identifiers.  Catalog queries never raise: a failure is logged under the
query's label and becomes an empty result.  Mark strategies raise and are
isolated by their callers.
"""
from __future__ import annotations

from agent_briefing.queries.agents import (
    get_active_agents,
    get_completed_agents,
    get_same_role_agents,
    get_sibling_agents,
)
from agent_briefing.queries.marks import (
    get_agent_files,
    get_file_based_marks,
    get_project_marks,
    get_sibling_marks,
    get_similar_marks,
)
from agent_briefing.queries.messages import (
    get_all_pending_message_count,
    get_pending_message_count,
    get_pending_messages,
)
from agent_briefing.queries.notes import (
    get_cross_session_notes,
    get_decisions,
    get_recent_notes,
    get_tagged_notes,
)
from agent_briefing.queries.promotion import find_promotion_candidates
from agent_briefing.queries.tasks import get_assigned_tasks, get_incomplete_tasks, get_open_tasks
from agent_briefing.queries.types import (
    AgentSummary,
    ContextNote,
    MarkSummary,
    OpenTasks,
    PendingMessage,
    PromotionCandidate,
    TaskSummary,
    safe_query,
)

__all__ = [
    "AgentSummary",
    "ContextNote",
    "MarkSummary",
    "OpenTasks",
    "PendingMessage",
    "PromotionCandidate",
    "TaskSummary",
    "find_promotion_candidates",
    "get_active_agents",
    "get_agent_files",
    "get_all_pending_message_count",
    "get_assigned_tasks",
    "get_completed_agents",
    "get_cross_session_notes",
    "get_decisions",
    "get_file_based_marks",
    "get_incomplete_tasks",
    "get_open_tasks",
    "get_pending_message_count",
    "get_pending_messages",
    "get_project_marks",
    "get_recent_notes",
    "get_same_role_agents",
    "get_sibling_agents",
    "get_sibling_marks",
    "get_similar_marks",
    "get_tagged_notes",
    "safe_query",
]
