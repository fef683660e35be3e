"""Unit tests for agent_briefing.embedding.gateway.

HTTP traffic is served by ``httpx.MockTransport``; no network is used.
"""
from __future__ import annotations

import httpx
import pytest

from agent_briefing.config import EmbeddingConfig
from agent_briefing.embedding.gateway import (
    EmbeddingGateway,
    build_embedding_text,
    is_embedding_enabled,
)
from tests.conftest import DIM, mock_gateway, ok_response, requested_texts


class TestBuildEmbeddingText:
    def test_joins_parts(self) -> None:
        text = build_embedding_text("Title", "Narrative here", ["a", "b"])
        assert text == "Title Narrative here a b"

    def test_optional_parts(self) -> None:
        assert build_embedding_text("Title") == "Title"
        assert build_embedding_text("Title", None, []) == "Title"

    def test_capped(self) -> None:
        text = build_embedding_text("t" * 10, "n" * 5000, max_chars=2000)
        assert len(text) == 2000


class TestEmbeddingConfig:
    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "acct")
        monkeypatch.setenv("CLOUDFLARE_API_TOKEN", "tok")
        config = EmbeddingConfig.from_env()
        assert config.has_credentials
        assert config.endpoint == (
            "https://api.cloudflare.com/client/v4/accounts/acct/ai/run/@cf/baai/bge-m3"
        )
        assert is_embedding_enabled(config)

    def test_missing_token_disables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "acct")
        monkeypatch.delenv("CLOUDFLARE_API_TOKEN", raising=False)
        assert not is_embedding_enabled()

    def test_defaults(self) -> None:
        config = EmbeddingConfig()
        assert config.dimension == 1024
        assert config.batch_size == 50
        assert config.timeout_seconds == 2.0
        assert config.max_text_chars == 2000


class TestEmbeddingGateway:
    @pytest.mark.asyncio
    async def test_disabled_never_calls_provider(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return ok_response([])

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        gateway = EmbeddingGateway(EmbeddingConfig(dimension=DIM), client=client)
        assert not gateway.enabled
        assert await gateway.embed(["a", "b"]) == [None, None]
        assert calls == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_success_sends_bearer_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return ok_response([[0.1, 0.2, 0.3, 0.4] for _ in requested_texts(request)])

        async with mock_gateway(handler) as gateway:
            vectors = await gateway.embed(["hello", "world"])

        assert vectors == [[0.1, 0.2, 0.3, 0.4], [0.1, 0.2, 0.3, 0.4]]
        assert seen[0].headers["Authorization"] == "Bearer tok"
        assert "/accounts/acct/ai/run/" in str(seen[0].url)
        assert str(seen[0].url).endswith("bge-m3")
        assert requested_texts(seen[0]) == ["hello", "world"]

    @pytest.mark.asyncio
    async def test_batches_requests(self) -> None:
        sizes: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            texts = requested_texts(request)
            sizes.append(len(texts))
            return ok_response([[1.0, 0.0, 0.0, 0.0] for _ in texts])

        gateway = mock_gateway(handler, batch_size=2)
        vectors = await gateway.embed(["a", "b", "c", "d", "e"])
        assert sizes == [2, 2, 1]
        assert len(vectors) == 5
        assert all(v is not None for v in vectors)

    @pytest.mark.asyncio
    async def test_wrong_dimension_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return ok_response([[0.1, 0.2, 0.3], [0.1, 0.2, 0.3, 0.4]])

        vectors = await mock_gateway(handler).embed(["short", "ok"])
        assert vectors == [None, [0.1, 0.2, 0.3, 0.4]]

    @pytest.mark.asyncio
    async def test_non_finite_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            # httpx refuses to encode NaN, so the body is written by hand.
            body = '{"success": true, "result": {"data": [[NaN, 0.0, 0.0, 0.0]]}}'
            return httpx.Response(200, content=body.encode())

        assert await mock_gateway(handler).embed_one("x") is None

    @pytest.mark.asyncio
    async def test_short_response_padded(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return ok_response([[1.0, 0.0, 0.0, 0.0]])

        vectors = await mock_gateway(handler).embed(["a", "b", "c"])
        assert vectors[0] == [1.0, 0.0, 0.0, 0.0]
        assert vectors[1:] == [None, None]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, text="upstream down"),
            httpx.Response(401, json={"success": False, "errors": [{"message": "auth"}]}),
            httpx.Response(200, json={"success": False, "result": None}),
            httpx.Response(200, json={"success": True, "result": {}}),
            httpx.Response(200, content=b"not json"),
        ],
    )
    async def test_provider_failures_yield_none(self, response: httpx.Response) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return response

        assert await mock_gateway(handler).embed(["a", "b"]) == [None, None]

    @pytest.mark.asyncio
    async def test_timeout_yields_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        assert await mock_gateway(handler).embed_one("slow") is None

    @pytest.mark.asyncio
    async def test_connect_error_yields_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert await mock_gateway(handler).embed(["x"]) == [None]

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        assert await mock_gateway(handler).embed([]) == []

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: ok_response([])))
        gateway = EmbeddingGateway(EmbeddingConfig(account_id="a", api_token="t"), client=client)
        await gateway.aclose()
        assert not client.is_closed
        await client.aclose()

    def test_repr(self) -> None:
        assert "enabled=False" in repr(EmbeddingGateway(EmbeddingConfig()))
