"""Convenience API: one object owning the store, gateway and assembler.

Example
-------
::

    from agent_briefing import BriefingService

    async with BriefingService("briefing.db") as service:
        text = await service.build_smart_context("sess-1", "frontend")

"""
from __future__ import annotations

from pathlib import Path
from types import TracebackType

from agent_briefing.config import BriefingConfig, EmbeddingConfig
from agent_briefing.context.assembler import ContextAssembler
from agent_briefing.embedding.gateway import EmbeddingGateway
from agent_briefing.embedding.maintenance import (
    BackfillScheduler,
    backfill_embeddings,
    ensure_similarity_index,
)
from agent_briefing.queries.promotion import find_promotion_candidates
from agent_briefing.queries.types import PromotionCandidate
from agent_briefing.store.sqlite import SQLiteStore


class BriefingService:
    """Process-lifetime owner of the briefing collaborators.

    Created at process start, opened with ``start()`` (or ``async with``),
    and torn down with ``close()``, which also stops the background
    backfill if it was started.

    Parameters
    ----------
    db_path:
        SQLite database path.  ``None`` uses the store default.
    config:
        Briefing budget and limits.
    embedding_config:
        Embedding provider settings.  Defaults to the environment.
    create_schema:
        Apply the reference schema on start.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        config: BriefingConfig | None = None,
        embedding_config: EmbeddingConfig | None = None,
        create_schema: bool = False,
    ) -> None:
        self.embedding_config = embedding_config or EmbeddingConfig.from_env()
        self.store = SQLiteStore(db_path, dimension=self.embedding_config.dimension)
        self.gateway = EmbeddingGateway(self.embedding_config)
        self.assembler = ContextAssembler(self.store, self.gateway, config)
        self.scheduler = BackfillScheduler(self.store, self.gateway)
        self._create_schema = create_schema

    def is_embedding_enabled(self) -> bool:
        return self.gateway.enabled

    async def start(self, background_backfill: bool = False) -> None:
        await self.store.open()
        if self._create_schema:
            await self.store.ensure_schema()
        if background_backfill:
            self.scheduler.start()

    async def close(self) -> None:
        await self.scheduler.stop()
        await self.gateway.aclose()
        await self.store.close()

    async def build_smart_context(
        self,
        session_id: str,
        agent_name: str,
        agent_type: str | None = None,
        parent_agent_id: str | None = None,
    ) -> str:
        return await self.assembler.build_smart_context(
            session_id, agent_name, agent_type, parent_agent_id
        )

    async def build_prompt_context(self, session_id: str) -> str:
        return await self.assembler.build_prompt_context(session_id)

    async def check_incomplete_tasks(
        self, session_id: str, agent_id: str, agent_name: str
    ) -> str | None:
        return await self.assembler.check_incomplete_tasks(session_id, agent_id, agent_name)

    async def find_promotion_candidates(
        self, project_id: str, min_occurrences: int = 3, min_distinct_sessions: int = 2
    ) -> list[PromotionCandidate]:
        return await find_promotion_candidates(
            self.store, project_id, min_occurrences, min_distinct_sessions
        )

    async def backfill_embeddings(self) -> int:
        return await backfill_embeddings(self.store, self.gateway)

    async def ensure_similarity_index(self) -> bool:
        return await ensure_similarity_index(self.store, self.embedding_config.min_index_rows)

    async def __aenter__(self) -> BriefingService:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"BriefingService(store={self.store!r}, gateway={self.gateway!r})"
