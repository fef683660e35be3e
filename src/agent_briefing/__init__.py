"""agent-briefing — Budgeted, relevance-ranked briefings for multi-agent sessions.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import agent_briefing
>>> agent_briefing.__version__
'0.1.0'
"""
from __future__ import annotations

# Configuration
from agent_briefing.config import BriefingConfig, EmbeddingConfig

# Store
from agent_briefing.store.base import BriefingStore
from agent_briefing.store.sqlite import SQLiteStore, StoreNotOpenError
from agent_briefing.store.vectors import InvalidEmbeddingError

# Source queries
from agent_briefing.queries.types import (
    AgentSummary,
    ContextNote,
    MarkSummary,
    OpenTasks,
    PendingMessage,
    PromotionCandidate,
    TaskSummary,
)
from agent_briefing.queries.promotion import find_promotion_candidates

# Embedding
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

# Context assembly
from agent_briefing.context.assembler import NO_DATA_SENTINEL, ContextAssembler
from agent_briefing.context.budget import Section, render_sections
from agent_briefing.context.cascade import get_relevant_marks_rag

# Curation
from agent_briefing.curation import CurationStats, get_curation_stats

# Convenience
from agent_briefing.convenience import BriefingService

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Configuration
    "BriefingConfig",
    "EmbeddingConfig",
    # Store
    "BriefingStore",
    "InvalidEmbeddingError",
    "SQLiteStore",
    "StoreNotOpenError",
    # Queries
    "AgentSummary",
    "ContextNote",
    "MarkSummary",
    "OpenTasks",
    "PendingMessage",
    "PromotionCandidate",
    "TaskSummary",
    "find_promotion_candidates",
    # Embedding
    "BackfillScheduler",
    "EmbeddingGateway",
    "backfill_embeddings",
    "build_embedding_text",
    "ensure_similarity_index",
    "is_embedding_enabled",
    # Context
    "ContextAssembler",
    "NO_DATA_SENTINEL",
    "Section",
    "get_relevant_marks_rag",
    "render_sections",
    # Curation
    "CurationStats",
    "get_curation_stats",
    # Convenience
    "BriefingService",
]
