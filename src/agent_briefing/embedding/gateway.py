"""Embedding gateway: text to fixed-dimension vectors via Workers AI.

The gateway never raises to its callers.  Missing credentials, timeouts,
transport errors, non-2xx responses and malformed payloads all come back
as ``None`` for each affected text, which callers treat as "no embedding
available".

Classes
-------
- EmbeddingGateway  — batched, time-bounded embedding client
"""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Sequence

import httpx

from agent_briefing.config import EmbeddingConfig
from agent_briefing.store.vectors import validate_vector

logger = logging.getLogger(__name__)

Vector = list[float]


def build_embedding_text(
    title: str,
    narrative: str | None = None,
    concepts: Sequence[str] | None = None,
    max_chars: int = 2000,
) -> str:
    """Join title, narrative and concepts into one text capped at ``max_chars``."""
    parts = [title]
    if narrative:
        parts.append(narrative)
    if concepts:
        parts.append(" ".join(concepts))
    return " ".join(parts)[:max_chars]


def is_embedding_enabled(config: EmbeddingConfig | None = None) -> bool:
    """True when provider credentials are configured (environment by default)."""
    return (config or EmbeddingConfig.from_env()).has_credentials


class EmbeddingGateway:
    """Batched embedding client with a hard per-call timeout.

    Parameters
    ----------
    config:
        Provider and bound configuration.  Defaults to
        ``EmbeddingConfig.from_env()``.
    client:
        Optional pre-built ``httpx.AsyncClient``.  An injected client is
        not closed by ``aclose()``.
    """

    def __init__(
        self,
        config: EmbeddingConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or EmbeddingConfig.from_env()
        self._client = client
        self._owns_client = client is None

    @property
    def enabled(self) -> bool:
        return self.config.has_credentials

    @property
    def dimension(self) -> int:
        return self.config.dimension

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def embed(self, texts: Sequence[str]) -> list[Vector | None]:
        """Return one vector (or None) per input text, in input order."""
        if not self.enabled or not texts:
            return [None] * len(texts)
        results: list[Vector | None] = []
        size = self.config.batch_size
        for start in range(0, len(texts), size):
            results.extend(await self._embed_batch(list(texts[start:start + size])))
        return results

    async def embed_one(self, text: str) -> Vector | None:
        return (await self.embed([text]))[0]

    async def _embed_batch(self, texts: list[str]) -> list[Vector | None]:
        missing: list[Vector | None] = [None] * len(texts)
        try:
            response = await self._get_client().post(
                self.config.endpoint,
                headers={"Authorization": f"Bearer {self.config.api_token}"},
                json={"text": texts},
                timeout=httpx.Timeout(self.config.timeout_seconds),
            )
        except httpx.HTTPError as exc:
            logger.warning("embedding request failed: %s", exc)
            return missing

        if response.status_code // 100 != 2:
            logger.warning(
                "embedding API error: %s %s", response.status_code, response.reason_phrase
            )
            return missing

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("embedding API returned invalid JSON: %s", exc)
            return missing

        data = None
        if isinstance(payload, dict) and payload.get("success"):
            result = payload.get("result")
            if isinstance(result, dict):
                data = result.get("data")
        if not isinstance(data, list):
            logger.warning("embedding API returned no data: %.200s", str(payload))
            return missing

        vectors: list[Vector | None] = [
            validate_vector(item, self.config.dimension) for item in data[: len(texts)]
        ]
        rejected = sum(1 for vector in vectors if vector is None)
        if rejected:
            logger.warning("embedding API returned %d invalid vector(s)", rejected)
        vectors.extend([None] * (len(texts) - len(vectors)))
        return vectors

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> EmbeddingGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"EmbeddingGateway(model={self.config.model!r}, enabled={self.enabled})"


__all__ = ["EmbeddingGateway", "Vector", "build_embedding_text", "is_embedding_enabled"]
