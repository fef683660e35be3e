"""Abstract base class for the persistent store consumed by the briefing core.

The store owns every entity (marks, context entries, agents, tasks,
messages, sessions).  The core reads through parameterised SQL and writes
only two fields: a mark's embedding and its promotion reference.

Classes
-------
- BriefingStore  — abstract async store interface
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any

Row = Mapping[str, Any]
Params = Sequence[Any]


class BriefingStore(ABC):
    """Async read/write projection of the external persistent store.

    Implementations must bind every value as a statement parameter; list
    values are bound as JSON text and vectors as float32 BLOBs.
    """

    @abstractmethod
    async def open(self) -> None:
        """Open the underlying connection.  Calling twice is a no-op."""

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying connection.  Calling twice is a no-op."""

    @abstractmethod
    async def fetch_all(self, sql: str, params: Params = ()) -> list[Row]:
        """Run a query and return every row as a mapping."""

    @abstractmethod
    async def fetch_one(self, sql: str, params: Params = ()) -> Row | None:
        """Run a query and return the first row, or None."""

    @abstractmethod
    async def execute(self, sql: str, params: Params = ()) -> int:
        """Run a single write statement and return the affected row count."""

    @abstractmethod
    async def update_mark_embedding(self, mark_id: int, vector: Sequence[float]) -> None:
        """Set a mark's embedding.

        Raises
        ------
        InvalidEmbeddingError
            If ``vector`` has the wrong dimension or non-finite components.
        """

    @abstractmethod
    async def set_mark_promotion(self, mark_id: int, target: str) -> bool:
        """Record that a mark was promoted to ``target``.

        Returns
        -------
        bool
            True if an unpromoted mark was updated.  Promotion is one-way,
            so an already promoted mark is left unchanged.
        """

    @abstractmethod
    async def similarity_index_exists(self) -> bool:
        """Return True if the mark similarity index exists."""

    @abstractmethod
    async def create_similarity_index(self) -> None:
        """Create the mark similarity index."""

    async def project_id_for_session(self, session_id: str) -> str | None:
        """Return the project owning ``session_id``, or None if unknown."""
        row = await self.fetch_one(
            "SELECT project_id FROM sessions WHERE id = ?", (session_id,)
        )
        if row is None or row["project_id"] is None:
            return None
        return str(row["project_id"])

    async def __aenter__(self) -> BriefingStore:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


__all__ = ["BriefingStore", "Params", "Row"]
