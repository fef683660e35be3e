"""Task queries: assigned work, open project tasks and incomplete tasks."""
from __future__ import annotations

from agent_briefing.queries.types import OpenTasks, TaskSummary, json_list, safe_query
from agent_briefing.store.base import BriefingStore, Row

# in_progress > pending > planned > anything else
_ASSIGNED_ORDER = """
    CASE t.status
        WHEN 'in_progress' THEN 1
        WHEN 'pending' THEN 2
        WHEN 'planned' THEN 3
        ELSE 4
    END
"""

# in_progress > needs_review > pending
_OPEN_ORDER = """
    CASE t.status
        WHEN 'in_progress' THEN 1
        WHEN 'needs_review' THEN 2
        WHEN 'pending' THEN 3
        ELSE 4
    END
"""


def _to_task(row: Row) -> TaskSummary:
    return TaskSummary(
        id=row.get("id"),
        title=row["title"],
        description=row.get("description"),
        status=row["status"],
        assigned_to=row.get("assigned_to"),
        tags=json_list(row.get("tags")),
    )


async def _latest_plan_comment(store: BriefingStore, task_id: int) -> str | None:
    row = await store.fetch_one(
        """
        SELECT content FROM task_comments
        WHERE task_id = ? AND comment_type = 'plan'
        ORDER BY created_at DESC, id DESC
        LIMIT 1
        """,
        (task_id,),
    )
    return row["content"] if row is not None else None


async def get_assigned_tasks(
    store: BriefingStore, session_id: str, agent_name: str
) -> list[TaskSummary]:
    """Project tasks assigned to ``agent_name`` that are not completed or ideas.

    Ordered by status priority, then oldest first.  Planned and pending
    tasks carry their latest plan comment when one exists; a failing
    comment lookup leaves the task without one.
    """

    async def _run() -> list[TaskSummary]:
        rows = await store.fetch_all(
            f"""
            SELECT t.id, t.title, t.description, t.status, t.assigned_to, t.tags
            FROM tasks t
            JOIN sessions s ON t.project_id = s.project_id
            WHERE s.id = ? AND t.assigned_to = ?
              AND t.status NOT IN ('completed', 'idea')
            ORDER BY {_ASSIGNED_ORDER}, t.created_at ASC, t.id ASC
            """,
            (session_id, agent_name),
        )
        return [_to_task(row) for row in rows]

    tasks = await safe_query("assigned-tasks", _run(), [])
    for task in tasks:
        if task.status in ("planned", "pending") and task.id is not None:
            task.plan_comment = await safe_query(
                "task-plan-comment", _latest_plan_comment(store, task.id), None
            )
    return tasks


async def get_open_tasks(store: BriefingStore, session_id: str, limit: int = 10) -> OpenTasks:
    """Open project tasks plus the number of backlog (idea/planned) tasks.

    The two lookups are isolated independently: a failing backlog count
    still returns the task list.
    """

    async def _tasks() -> list[TaskSummary]:
        rows = await store.fetch_all(
            f"""
            SELECT t.id, t.title, t.description, t.status, t.assigned_to, t.tags
            FROM tasks t
            JOIN sessions s ON t.project_id = s.project_id
            WHERE s.id = ? AND t.status IN ('pending', 'in_progress', 'needs_review')
            ORDER BY {_OPEN_ORDER}, t.created_at ASC, t.id ASC
            LIMIT ?
            """,
            (session_id, limit),
        )
        return [_to_task(row) for row in rows]

    async def _backlog() -> int:
        row = await store.fetch_one(
            """
            SELECT COUNT(*) AS count
            FROM tasks t
            JOIN sessions s ON t.project_id = s.project_id
            WHERE s.id = ? AND t.status IN ('idea', 'planned')
            """,
            (session_id,),
        )
        return int(row["count"]) if row is not None else 0

    tasks = await safe_query("open-tasks", _tasks(), [])
    backlog = await safe_query("backlog", _backlog(), 0)
    return OpenTasks(tasks=tasks, backlog_count=backlog)


async def get_incomplete_tasks(
    store: BriefingStore, session_id: str, agent_name: str
) -> list[TaskSummary]:
    """Pending or in-progress tasks assigned to ``agent_name``, oldest first."""

    async def _run() -> list[TaskSummary]:
        rows = await store.fetch_all(
            """
            SELECT t.id, t.title, t.description, t.status, t.assigned_to, t.tags
            FROM tasks t
            JOIN sessions s ON t.project_id = s.project_id
            WHERE s.id = ? AND t.assigned_to = ? AND t.status IN ('pending', 'in_progress')
            ORDER BY t.created_at ASC, t.id ASC
            """,
            (session_id, agent_name),
        )
        return [_to_task(row) for row in rows]

    return await safe_query("incomplete-tasks", _run(), [])


__all__ = ["get_assigned_tasks", "get_incomplete_tasks", "get_open_tasks"]
