"""Embedding subpackage.

Public surface
--------------
- EmbeddingGateway         — batched, time-bounded embedding client
- build_embedding_text     — title/narrative/concepts text builder
- is_embedding_enabled     — credential check
- backfill_embeddings      — embed marks with a NULL embedding
- ensure_similarity_index  — lazy similarity index creation
- BackfillScheduler        — start/stop lifecycle for the periodic pass
"""
from __future__ import annotations

from agent_briefing.embedding.gateway import (
    EmbeddingGateway,
    build_embedding_text,
    is_embedding_enabled,
)
from agent_briefing.embedding.maintenance import (
    BackfillScheduler,
    backfill_embeddings,
    ensure_similarity_index,
)

__all__ = [
    "BackfillScheduler",
    "EmbeddingGateway",
    "backfill_embeddings",
    "build_embedding_text",
    "ensure_similarity_index",
    "is_embedding_enabled",
]
