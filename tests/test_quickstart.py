"""Test that the quickstart API works for agent-briefing."""
from __future__ import annotations

from pathlib import Path

import pytest

from agent_briefing import NO_DATA_SENTINEL, BriefingService, EmbeddingConfig


def test_quickstart_import() -> None:
    import agent_briefing

    assert agent_briefing.__version__ == "0.1.0"
    assert BriefingService is not None


def test_quickstart_embedding_disabled_without_credentials(tmp_path: Path) -> None:
    service = BriefingService(tmp_path / "b.db", embedding_config=EmbeddingConfig())
    assert service.is_embedding_enabled() is False


@pytest.mark.asyncio
async def test_quickstart_briefings_on_fresh_store(tmp_path: Path) -> None:
    async with BriefingService(
        tmp_path / "b.db", embedding_config=EmbeddingConfig(), create_schema=True
    ) as service:
        assert await service.build_smart_context("S1", "frontend") == ""
        assert await service.build_prompt_context("S1") == NO_DATA_SENTINEL
        assert await service.check_incomplete_tasks("S1", "fe", "frontend") is None
        assert await service.find_promotion_candidates("P1") == []
        assert await service.backfill_embeddings() == 0
        assert await service.ensure_similarity_index() is False


@pytest.mark.asyncio
async def test_quickstart_background_backfill_lifecycle(tmp_path: Path) -> None:
    service = BriefingService(
        tmp_path / "b.db", embedding_config=EmbeddingConfig(), create_schema=True
    )
    await service.start(background_backfill=True)
    assert service.scheduler.running
    await service.close()
    assert not service.scheduler.running
