"""Embedding backfill and similarity index maintenance.

Both jobs only ever move a mark's embedding from NULL to a value, or add an
index, so they are safe to re-run and to interleave with live briefing
requests without locking.

Classes
-------
- BackfillScheduler  — explicit start/stop lifecycle for the periodic pass
"""
from __future__ import annotations

import asyncio
import logging

from agent_briefing.embedding.gateway import EmbeddingGateway, build_embedding_text
from agent_briefing.queries.types import json_list
from agent_briefing.store.base import BriefingStore, Row

logger = logging.getLogger(__name__)


async def ensure_similarity_index(store: BriefingStore, min_rows: int = 10) -> bool:
    """Create the similarity index once ``min_rows`` marks are embedded.

    Returns True if the index was created by this call.  Failures are
    logged and swallowed; the next call retries.
    """
    try:
        row = await store.fetch_one(
            "SELECT COUNT(*) AS count FROM marks WHERE embedding IS NOT NULL"
        )
        embedded = int(row["count"]) if row is not None else 0
        if embedded < min_rows:
            return False
        if await store.similarity_index_exists():
            return False
        await store.create_similarity_index()
    except Exception as exc:  # noqa: BLE001
        logger.error("similarity index creation failed: %s", exc)
        return False
    logger.info("similarity index created (%d embeddings)", embedded)
    return True


def _mark_text(row: Row, max_chars: int) -> str:
    try:
        concepts = json_list(row.get("concepts"))
    except ValueError as exc:
        logger.warning(
            "mark %s has malformed concepts, embedding without them: %s", row["id"], exc
        )
        concepts = []
    return build_embedding_text(row["title"], row.get("narrative"), concepts, max_chars)


async def backfill_embeddings(
    store: BriefingStore,
    gateway: EmbeddingGateway,
    batch_size: int | None = None,
) -> int:
    """Embed every mark whose embedding is NULL.  Returns the number embedded.

    Marks are processed in id order and fixed-size batches.  A mark whose
    embedding comes back empty stays NULL and is picked up by a later run.
    """
    if not gateway.enabled:
        return 0

    rows = await store.fetch_all(
        "SELECT id, title, narrative, concepts FROM marks WHERE embedding IS NULL ORDER BY id"
    )
    if not rows:
        return 0

    logger.info("backfilling embeddings for %d mark(s)", len(rows))
    size = batch_size or gateway.config.batch_size
    max_chars = gateway.config.max_text_chars
    count = 0
    for start in range(0, len(rows), size):
        batch = rows[start:start + size]
        texts = [_mark_text(row, max_chars) for row in batch]
        vectors = await gateway.embed(texts)
        for row, vector in zip(batch, vectors):
            if vector is None:
                continue
            await store.update_mark_embedding(int(row["id"]), vector)
            count += 1
    logger.info("backfilled %d embedding(s)", count)
    return count


class BackfillScheduler:
    """Runs backfill and index maintenance at startup and then periodically.

    Parameters
    ----------
    store:
        The briefing store.
    gateway:
        Embedding gateway used for the backfill.
    interval_seconds:
        Delay between passes.  Defaults to the gateway config's
        ``backfill_interval_seconds``.
    """

    def __init__(
        self,
        store: BriefingStore,
        gateway: EmbeddingGateway,
        interval_seconds: float | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._interval = interval_seconds or gateway.config.backfill_interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Run a single backfill pass followed by index maintenance."""
        count = await backfill_embeddings(self._store, self._gateway)
        await ensure_similarity_index(self._store, self._gateway.config.min_index_rows)
        return count

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as exc:  # noqa: BLE001
                logger.error("embedding backfill pass failed: %s", exc)
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Start the periodic loop on the running event loop.  No-op if running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def __repr__(self) -> str:
        return f"BackfillScheduler(interval={self._interval}, running={self.running})"


__all__ = ["BackfillScheduler", "backfill_embeddings", "ensure_similarity_index"]
