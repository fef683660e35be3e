"""Relevance cascade for mark retrieval.

Strategies are ordered by precision and share one contract: ``attempt``
returns a list of marks or a ``Degraded`` value explaining why the
strategy could not answer.  ``first_available`` runs them in order and
returns the first non-degraded result.  An exception inside a strategy
degrades that strategy only.

Classes
-------
- MarkRequest              — scoping inputs shared by every strategy
- Degraded                 — a strategy's "cannot answer" outcome
- MarkStrategy             — abstract strategy
- FileOverlapStrategy      — marks touching the same files
- VectorSimilarityStrategy — marks nearest to an embedded context text
- RecencyStrategy          — most recent project marks (terminal)
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from agent_briefing.embedding.gateway import EmbeddingGateway
from agent_briefing.queries.marks import (
    get_file_based_marks,
    get_project_marks,
    get_similar_marks,
)
from agent_briefing.queries.types import MarkSummary
from agent_briefing.store.base import BriefingStore
from agent_briefing.store.vectors import encode_vector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkRequest:
    project_id: str
    session_id: str
    limit: int = 5
    context_text: str = ""
    files: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Degraded:
    reason: str


StrategyOutcome = list[MarkSummary] | Degraded


class MarkStrategy(ABC):
    """One way of answering a ``MarkRequest``."""

    name: str = "strategy"

    @abstractmethod
    async def attempt(self, request: MarkRequest) -> StrategyOutcome:
        """Return marks, or ``Degraded`` if this strategy cannot answer."""


class FileOverlapStrategy(MarkStrategy):
    name = "file-overlap"

    def __init__(self, store: BriefingStore) -> None:
        self._store = store

    async def attempt(self, request: MarkRequest) -> StrategyOutcome:
        if not request.files:
            return Degraded("no files to match")
        marks = await get_file_based_marks(
            self._store, request.project_id, list(request.files), request.session_id, request.limit
        )
        return marks if marks else Degraded("no overlapping marks")


class VectorSimilarityStrategy(MarkStrategy):
    name = "vector-similarity"

    def __init__(self, store: BriefingStore, gateway: EmbeddingGateway | None) -> None:
        self._store = store
        self._gateway = gateway

    async def attempt(self, request: MarkRequest) -> StrategyOutcome:
        if self._gateway is None or not self._gateway.enabled:
            return Degraded("embedding disabled")
        if not request.context_text.strip():
            return Degraded("empty context text")
        vector = await self._gateway.embed_one(request.context_text)
        if vector is None:
            return Degraded("embedding unavailable")
        marks = await get_similar_marks(
            self._store,
            request.project_id,
            request.session_id,
            encode_vector(vector, self._gateway.dimension),
            request.limit,
        )
        # An empty similarity result is not evidence that nothing relevant exists.
        return marks if marks else Degraded("no embedded marks")


class RecencyStrategy(MarkStrategy):
    name = "project-recency"

    def __init__(self, store: BriefingStore) -> None:
        self._store = store

    async def attempt(self, request: MarkRequest) -> StrategyOutcome:
        return await get_project_marks(
            self._store, request.project_id, request.session_id, request.limit
        )


async def first_available(
    strategies: Sequence[MarkStrategy], request: MarkRequest
) -> list[MarkSummary]:
    """Return the first non-degraded strategy result, or ``[]`` if all degrade."""
    for strategy in strategies:
        try:
            outcome = await strategy.attempt(request)
        except Exception as exc:  # noqa: BLE001
            outcome = Degraded(f"raised {type(exc).__name__}: {exc}")
        if isinstance(outcome, Degraded):
            logger.info("marks strategy %s degraded: %s", strategy.name, outcome.reason)
            continue
        return outcome
    return []


def merge_unique(
    groups: Iterable[Iterable[MarkSummary]],
    limit: int,
    seen: set[int] | None = None,
) -> list[MarkSummary]:
    """Concatenate mark groups, dropping ids already seen.  Earlier groups win.

    ``seen`` is updated in place so it can be shared across sections.
    """
    seen = seen if seen is not None else set()
    merged: list[MarkSummary] = []
    for group in groups:
        for mark in group:
            if len(merged) >= limit:
                return merged
            if mark.id in seen:
                continue
            seen.add(mark.id)
            merged.append(mark)
    return merged


async def get_relevant_marks_rag(
    store: BriefingStore,
    gateway: EmbeddingGateway | None,
    project_id: str,
    context_text: str,
    session_id: str,
    limit: int = 5,
) -> list[MarkSummary]:
    """Vector-similar marks, falling back to project recency.

    With the gateway disabled this returns exactly what
    ``get_project_marks`` returns for the same inputs.
    """
    request = MarkRequest(
        project_id=project_id, session_id=session_id, limit=limit, context_text=context_text
    )
    return await first_available(
        [VectorSimilarityStrategy(store, gateway), RecencyStrategy(store)], request
    )


__all__ = [
    "Degraded",
    "FileOverlapStrategy",
    "MarkRequest",
    "MarkStrategy",
    "RecencyStrategy",
    "StrategyOutcome",
    "VectorSimilarityStrategy",
    "first_available",
    "get_relevant_marks_rag",
    "merge_unique",
]
