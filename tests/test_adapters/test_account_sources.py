"""Tests for adapters/account_sources (structured and embedded variants)."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from adapters.account_sources import EmbeddedSource, StructuredSource, extract_embedded_payload
from adapters.http_client import BoundedRetrievalClient, build_async_client
from core.domain.models import SourceKind
from core.errors import ParseError, RetrievalError
from core.interfaces.source import AccountSource
from payloads import batch_payload, record_payload


async def _no_sleep(delay: float) -> None:
    return None


def _retrieval(handler: Callable[[httpx.Request], httpx.Response], make_settings: Callable[..., Any]):
    client = build_async_client(make_settings(), transport=httpx.MockTransport(handler))
    return client, BoundedRetrievalClient(client, max_retries=1, sleep=_no_sleep)


class TestExtractEmbeddedPayload:
    def test_finds_first_payload(self) -> None:
        text = "<script>var ad = '{\"a\": 1}'; var ad='{\"b\": 2}';</script>"
        assert extract_embedded_payload(text) == '{"a": 1}'

    @pytest.mark.parametrize("text", ["ad='x'", "ad =\n 'x'", "load = 'x'"])
    def test_whitespace_variants(self, text: str) -> None:
        assert extract_embedded_payload(text) == "x"

    @pytest.mark.parametrize("text", ["", "<html></html>", "ad = ''", 'ad = "x"'])
    def test_no_match(self, text: str) -> None:
        assert extract_embedded_payload(text) is None


class TestStructuredSource:
    def test_implements_protocol(self, make_settings: Callable[..., Any]) -> None:
        source = StructuredSource(BoundedRetrievalClient(build_async_client(make_settings())))
        assert isinstance(source, AccountSource)
        assert source.kind is SourceKind.STRUCTURED

    @pytest.mark.asyncio
    async def test_keeps_displayable_records(self, make_settings: Callable[..., Any]) -> None:
        payload = batch_payload(record_payload("u1", "p1"), record_payload("u2", "p2", status=0))
        client, retrieval = _retrieval(lambda request: httpx.Response(200, json=payload), make_settings)
        async with client:
            batch = await StructuredSource(retrieval).fetch("https://api.test/feed")

        assert batch.usable
        assert [r.identifier for r in batch.records or []] == ["u1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"status": 0, "data": None},
            {"status": "error", "data": "rate limited"},
            {"status": "ok", "data": [{"username": "u2", "status": 0}]},
        ],
    )
    async def test_unusable_batches_are_returned_not_raised(
        self, payload: dict[str, Any], make_settings: Callable[..., Any]
    ) -> None:
        client, retrieval = _retrieval(lambda request: httpx.Response(200, json=payload), make_settings)
        async with client:
            batch = await StructuredSource(retrieval).fetch("https://api.test/feed")

        assert not batch.records

    @pytest.mark.asyncio
    async def test_requests_json(self, make_settings: Callable[..., Any]) -> None:
        accepts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            accepts.append(request.headers["accept"])
            return httpx.Response(200, json=batch_payload())

        client, retrieval = _retrieval(handler, make_settings)
        async with client:
            await StructuredSource(retrieval).fetch("https://api.test/feed")

        assert accepts == ["application/json"]

    @pytest.mark.asyncio
    async def test_invalid_json_is_parse_error(self, make_settings: Callable[..., Any]) -> None:
        client, retrieval = _retrieval(lambda request: httpx.Response(200, text="<html>"), make_settings)
        async with client:
            with pytest.raises(ParseError) as exc_info:
                await StructuredSource(retrieval).fetch("https://api.test/feed")
        assert exc_info.value.url == "https://api.test/feed"

    @pytest.mark.asyncio
    async def test_wrong_shape_is_parse_error(self, make_settings: Callable[..., Any]) -> None:
        client, retrieval = _retrieval(lambda request: httpx.Response(200, json=[1, 2]), make_settings)
        async with client:
            with pytest.raises(ParseError):
                await StructuredSource(retrieval).fetch("https://api.test/feed")

    @pytest.mark.asyncio
    async def test_retrieval_failure_propagates(self, make_settings: Callable[..., Any]) -> None:
        client, retrieval = _retrieval(lambda request: httpx.Response(500), make_settings)
        async with client:
            with pytest.raises(RetrievalError):
                await StructuredSource(retrieval).fetch("https://api.test/feed")


class TestEmbeddedSource:
    @pytest.mark.asyncio
    async def test_parses_embedded_batch(self, make_settings: Callable[..., Any]) -> None:
        payload = json.dumps(batch_payload(record_payload("u1", "p1", country="Japan")))
        html = f"<html><script>\nvar ad = '{payload}';\n</script></html>"
        client, retrieval = _retrieval(lambda request: httpx.Response(200, text=html), make_settings)
        async with client:
            batch = await EmbeddedSource(retrieval).fetch("https://page.test/share")

        assert batch is not None
        assert batch.usable
        assert batch.records is not None
        assert batch.records[0].region_code == "Japan"

    @pytest.mark.asyncio
    async def test_no_payload_returns_none(self, make_settings: Callable[..., Any]) -> None:
        client, retrieval = _retrieval(lambda request: httpx.Response(200, text="<html></html>"), make_settings)
        async with client:
            assert await EmbeddedSource(retrieval).fetch("https://page.test/share") is None

    @pytest.mark.asyncio
    async def test_malformed_payload_is_parse_error(self, make_settings: Callable[..., Any]) -> None:
        html = "<script>var ad = '{not json}';</script>"
        client, retrieval = _retrieval(lambda request: httpx.Response(200, text=html), make_settings)
        async with client:
            with pytest.raises(ParseError):
                await EmbeddedSource(retrieval).fetch("https://page.test/share")

    @pytest.mark.asyncio
    async def test_payload_without_flag_is_not_usable(self, make_settings: Callable[..., Any]) -> None:
        html = "<script>var ad = '{\"data\": []}';</script>"
        client, retrieval = _retrieval(lambda request: httpx.Response(200, text=html), make_settings)
        async with client:
            batch = await EmbeddedSource(retrieval).fetch("https://page.test/share")

        assert batch is not None
        assert not batch.usable

    @pytest.mark.asyncio
    async def test_incomplete_valid_record_is_parse_error(self, make_settings: Callable[..., Any]) -> None:
        html = "<script>var ad = '{\"status\": \"ok\", \"data\": [{\"status\": 1}]}';</script>"
        client, retrieval = _retrieval(lambda request: httpx.Response(200, text=html), make_settings)
        async with client:
            with pytest.raises(ParseError):
                await EmbeddedSource(retrieval).fetch("https://page.test/share")
