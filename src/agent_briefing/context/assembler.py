"""Briefing assembly for agent-start and prompt-submission checkpoints.

Sections are produced one at a time in presentation order, because the
order decides which sections survive the character budget.  Each section
is guarded independently: a failing or timed-out section is logged and
omitted, and the briefing entry points never raise.

Classes
-------
- ContextAssembler  — builds agent-start and prompt briefings
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from agent_briefing.config import BriefingConfig
from agent_briefing.context.budget import Section, render_sections
from agent_briefing.context.cascade import (
    FileOverlapStrategy,
    MarkRequest,
    RecencyStrategy,
    first_available,
    get_relevant_marks_rag,
    merge_unique,
)
from agent_briefing.embedding.gateway import EmbeddingGateway
from agent_briefing.queries.agents import (
    get_active_agents,
    get_completed_agents,
    get_same_role_agents,
    get_sibling_agents,
)
from agent_briefing.queries.marks import (
    get_agent_files,
    get_project_marks,
    get_sibling_marks,
)
from agent_briefing.queries.messages import get_all_pending_message_count, get_pending_messages
from agent_briefing.queries.notes import (
    get_cross_session_notes,
    get_decisions,
    get_recent_notes,
    get_tagged_notes,
)
from agent_briefing.queries.tasks import get_assigned_tasks, get_incomplete_tasks, get_open_tasks
from agent_briefing.queries.types import (
    AgentSummary,
    ContextNote,
    MarkSummary,
    OpenTasks,
    PendingMessage,
    TaskSummary,
)
from agent_briefing.store.base import BriefingStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROMPT_HEADER = "[project briefing]"
NO_DATA_SENTINEL = f"{PROMPT_HEADER}\n\n(No active tasks or agents)"


def smart_header(agent_name: str) -> str:
    return f"[agent briefing for {agent_name}]"


# ---------------------------------------------------------------------------
# Line formatting
# ---------------------------------------------------------------------------


def _tags(tags: list[str]) -> str:
    return f" [{', '.join(tags)}]" if tags else ""


def format_task(task: TaskSummary) -> str:
    line = f"- [{task.status}] {task.title}{_tags(task.tags)}"
    if task.description:
        line += f": {task.description[:100]}"
    if task.plan_comment:
        line += f"\n  Plan: {task.plan_comment[:200]}"
    return line


def format_message(message: PendingMessage) -> str:
    return f"- [{message.priority}] From {message.from_name} ({message.created_at}): {message.content}"


def format_agent(agent: AgentSummary) -> str:
    role = f" ({agent.agent_type})" if agent.agent_type else ""
    return f"- {agent.name}{role}: {agent.summary}"


def format_note(note: ContextNote) -> str:
    author = f" (by {note.agent_name})" if note.agent_name else ""
    return f"- [{note.entry_type}] {note.content}{author}"


def format_mark(mark: MarkSummary, with_author: bool = True) -> str:
    author = f" (by {mark.agent_name})" if with_author and mark.agent_name else ""
    return f"- [{mark.type}] {mark.title}{author}"


def task_context_text(agent_name: str, agent_type: str | None, tasks: list[TaskSummary]) -> str:
    """Text describing what the agent is about to work on, for similarity search."""
    descriptions = " | ".join(
        f"{task.title}: {task.description}" if task.description else task.title
        for task in tasks
    )
    return f"{agent_name} {agent_type or ''} {descriptions}".strip()


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------


class ContextAssembler:
    """Assemble budgeted briefings from the source queries and mark cascade.

    Parameters
    ----------
    store:
        The briefing store.
    gateway:
        Optional embedding gateway.  When absent or disabled, past marks
        come from file overlap and project recency.
    config:
        Budget and limits.  Defaults to ``BriefingConfig()``.
    """

    def __init__(
        self,
        store: BriefingStore,
        gateway: EmbeddingGateway | None = None,
        config: BriefingConfig | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.config = config or BriefingConfig()

    async def _guard(self, label: str, work: Awaitable[T], default: T) -> T:
        """Await one section's work; failures and timeouts yield ``default``."""
        timeout = self.config.section_timeout_seconds
        try:
            if timeout is not None:
                return await asyncio.wait_for(work, timeout)
            return await work
        except asyncio.TimeoutError:
            logger.warning("section %s timed out after %.2fs", label, timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning("section %s failed: %s", label, exc)
        return default

    # ------------------------------------------------------------------
    # Agent start
    # ------------------------------------------------------------------

    async def build_smart_context(
        self,
        session_id: str,
        agent_name: str,
        agent_type: str | None = None,
        parent_agent_id: str | None = None,
    ) -> str:
        """Return the agent-start briefing, or ``""`` when nothing qualifies.

        Section order: assigned tasks, pending messages, sibling agents,
        same-role history, tagged notes, cross-session notes, team marks,
        past marks.  Recent notes are used only if all of these are empty.
        """
        try:
            return await self._build_smart_context(
                session_id, agent_name, agent_type, parent_agent_id
            )
        except Exception:  # noqa: BLE001
            logger.exception("agent briefing failed for %r", agent_name)
            return ""

    async def _build_smart_context(
        self,
        session_id: str,
        agent_name: str,
        agent_type: str | None,
        parent_agent_id: str | None,
    ) -> str:
        cfg = self.config
        store = self.store
        sections: list[Section] = []

        tasks = await self._guard(
            "assigned-tasks", get_assigned_tasks(store, session_id, agent_name), []
        )
        sections.append(Section("Your Assigned Tasks", [format_task(t) for t in tasks]))

        messages = await self._guard(
            "pending-messages",
            get_pending_messages(store, session_id, agent_name, cfg.message_limit),
            [],
        )
        sections.append(Section("Pending Messages", [format_message(m) for m in messages]))

        siblings: list[AgentSummary] = []
        if parent_agent_id:
            siblings = await self._guard(
                "siblings",
                get_sibling_agents(store, session_id, parent_agent_id, cfg.sibling_limit),
                [],
            )
        sections.append(Section("Sibling Agents", [format_agent(a) for a in siblings]))

        same_role: list[AgentSummary] = []
        if agent_type:
            same_role = await self._guard(
                "same-role",
                get_same_role_agents(
                    store, agent_type, session_id, parent_agent_id, cfg.same_role_limit
                ),
                [],
            )
        sections.append(Section("Same-Role History", [format_agent(a) for a in same_role]))

        tagged = await self._guard(
            "tagged",
            get_tagged_notes(store, session_id, agent_name, agent_type, cfg.note_limit),
            [],
        )
        sections.append(Section("Tagged Notes", [format_note(n) for n in tagged]))

        cross = await self._guard(
            "cross-session", get_cross_session_notes(store, session_id, cfg.note_limit), []
        )
        sections.append(Section("Cross-Session Notes", [format_note(n) for n in cross]))

        seen: set[int] = set()
        team = await self._guard(
            "team-marks",
            get_sibling_marks(store, session_id, agent_name, parent_agent_id, cfg.mark_limit),
            [],
        )
        team = merge_unique([team], cfg.mark_limit, seen)
        sections.append(Section("Team Marks", [format_mark(m) for m in team]))

        past = await self._guard(
            "past-marks", self._past_marks(session_id, agent_name, agent_type, tasks), []
        )
        past = merge_unique([past], cfg.mark_limit, seen)
        sections.append(Section("Past Marks", [format_mark(m) for m in past]))

        if not any(sections):
            recent = await self._guard(
                "recent-fallback", get_recent_notes(store, session_id, cfg.note_limit), []
            )
            sections = [Section("Recent Notes", [format_note(n) for n in recent])]

        return render_sections(smart_header(agent_name), sections, cfg.max_chars)

    async def _past_marks(
        self,
        session_id: str,
        agent_name: str,
        agent_type: str | None,
        tasks: list[TaskSummary],
    ) -> list[MarkSummary]:
        project_id = await self.store.project_id_for_session(session_id)
        if project_id is None:
            return []
        limit = self.config.mark_limit

        if self.gateway is not None and self.gateway.enabled:
            return await get_relevant_marks_rag(
                self.store,
                self.gateway,
                project_id,
                task_context_text(agent_name, agent_type, tasks),
                session_id,
                limit,
            )

        files = await get_agent_files(
            self.store, session_id, agent_name, agent_type, self.config.agent_file_limit
        )
        request = MarkRequest(
            project_id=project_id, session_id=session_id, limit=limit, files=tuple(files)
        )
        # Each strategy degrades on its own; recency still fills the section.
        file_marks = await first_available([FileOverlapStrategy(self.store)], request)
        project_marks = await first_available([RecencyStrategy(self.store)], request)
        return merge_unique([file_marks, project_marks], limit)

    # ------------------------------------------------------------------
    # Prompt submission
    # ------------------------------------------------------------------

    async def build_prompt_context(self, session_id: str) -> str:
        """Return the prompt briefing, or ``NO_DATA_SENTINEL`` when nothing qualifies."""
        try:
            rendered = await self._build_prompt_context(session_id)
        except Exception:  # noqa: BLE001
            logger.exception("project briefing failed for session %r", session_id)
            rendered = ""
        return rendered or NO_DATA_SENTINEL

    async def _build_prompt_context(self, session_id: str) -> str:
        cfg = self.config
        store = self.store
        sections: list[Section] = []

        active = await self._guard("active-agents", get_active_agents(store, session_id), [])
        sections.append(
            Section(
                "Active Agents",
                [f"- {a.name}" + (f" ({a.agent_type})" if a.agent_type else "") for a in active],
            )
        )

        open_tasks = await self._guard(
            "open-tasks", get_open_tasks(store, session_id, cfg.open_task_limit), OpenTasks()
        )
        task_lines = [
            f"- [{t.status}] {t.title}{_tags(t.tags)}"
            + (f" → {t.assigned_to}" if t.assigned_to else "")
            for t in open_tasks.tasks
        ]
        if open_tasks.backlog_count > 0:
            if task_lines:
                task_lines.append("")
            task_lines.append(f"(+{open_tasks.backlog_count} in backlog)")
        sections.append(Section("Open Tasks", task_lines))

        decisions = await self._guard(
            "decisions", get_decisions(store, session_id, cfg.decision_limit), []
        )
        sections.append(
            Section("Recent Decisions & Blockers", [format_note(d) for d in decisions])
        )

        completed = await self._guard(
            "completed-agents",
            get_completed_agents(store, session_id, cfg.completed_agent_limit),
            [],
        )
        sections.append(
            Section("Completed Agent Summaries", [f"- [{a.name}] {a.summary}" for a in completed])
        )

        pending = await self._guard(
            "all-pending-count", get_all_pending_message_count(store, session_id), 0
        )
        sections.append(
            Section(
                "Pending Messages",
                [f"{pending} unread message(s) in project. Check your messages."]
                if pending > 0
                else [],
            )
        )

        marks = await self._guard("prompt-marks", self._project_marks(session_id), [])
        sections.append(Section("Past Marks", [format_mark(m, with_author=False) for m in marks]))

        return render_sections(PROMPT_HEADER, sections, cfg.max_chars)

    async def _project_marks(self, session_id: str) -> list[MarkSummary]:
        project_id = await self.store.project_id_for_session(session_id)
        if project_id is None:
            return []
        return await get_project_marks(self.store, project_id, session_id, self.config.mark_limit)

    # ------------------------------------------------------------------
    # Agent stop
    # ------------------------------------------------------------------

    async def check_incomplete_tasks(
        self, session_id: str, agent_id: str, agent_name: str
    ) -> str | None:
        """Return a warning listing the agent's unfinished tasks, or None."""
        incomplete = await get_incomplete_tasks(self.store, session_id, agent_name)
        if not incomplete:
            return None
        logger.info(
            "agent %r (%s) stopping with %d incomplete task(s)",
            agent_name,
            agent_id,
            len(incomplete),
        )
        lines = "\n".join(f"- [{t.status}] {t.title}" for t in incomplete)
        return (
            f"[briefing warning] Agent {agent_name} stopping with "
            f"{len(incomplete)} incomplete task(s):\n{lines}"
        )


__all__ = [
    "ContextAssembler",
    "NO_DATA_SENTINEL",
    "PROMPT_HEADER",
    "format_mark",
    "format_task",
    "smart_header",
    "task_context_text",
]
