from __future__ import annotations

import asyncio
import json
import re
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx

from adapters.webhook_sink import WebhookSink
from core.config import WebhookEndpoint
from core.fetcher import ProtectedContentFetcher
from core.models import DeliveryPayload, DeliveryResult, IncomingMessage
from core.payload import build_payload
from core.processor import MessageProcessor

PRIMARY = "https://hooks.example.com/prod"
SECONDARY = "https://hooks.example.com/test"


def _payload(text: str = "hello") -> DeliveryPayload:
    message = IncomingMessage(
        message_id=31,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        channel_id=42,
        chat_id=None,
        text=text,
        has_photo=True,
        noforwards=True,
    )
    return build_payload(message)


class NoDownloads:
    async def download(self, message: IncomingMessage) -> Optional[bytes]:
        raise AssertionError("unexpected download")


def _data_field(request: httpx.Request) -> dict:
    match = re.search(rb'name="data"\r\n\r\n(.*?)\r\n--', request.content, re.DOTALL)
    assert match is not None
    return json.loads(match.group(1))


def _deliver(
    handler: Callable[[httpx.Request], httpx.Response],
    payload: DeliveryPayload,
    content: Optional[bytes] = None,
    filename: str = "file.bin",
) -> DeliveryResult:
    async def scenario() -> DeliveryResult:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            sink = WebhookSink(WebhookEndpoint(PRIMARY, SECONDARY, "s3cret"), client=client)
            return await sink.deliver(payload, content, filename)

    return asyncio.run(scenario())


def test_primary_success_sends_multipart_metadata() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    result = _deliver(handler, _payload())

    assert result is DeliveryResult.DELIVERED_PRIMARY
    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == PRIMARY
    assert request.headers["x-api-key"] == "s3cret"
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="file"' not in request.content
    data = _data_field(request)
    assert data["chat_id"] == "-10042"
    assert data["text"] == "hello"


def test_attachment_uses_given_filename() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    _deliver(handler, _payload(), b"\xff\xd8jpeg", "protected_31.jpg")

    body = requests[0].content
    assert b'name="file"; filename="protected_31.jpg"' in body
    assert b"\xff\xd8jpeg" in body


def test_primary_failure_falls_back_with_rebuilt_body() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if str(request.url) == PRIMARY:
            return httpx.Response(502)
        return httpx.Response(200)

    result = _deliver(handler, _payload(), b"img", "protected_31.jpg")

    assert result is DeliveryResult.DELIVERED_SECONDARY
    assert [str(request.url) for request in requests] == [PRIMARY, SECONDARY]
    primary, secondary = requests
    assert primary is not secondary
    assert _data_field(primary) == _data_field(secondary)
    assert b'filename="protected_31.jpg"' in secondary.content
    assert secondary.headers["x-api-key"] == "s3cret"


def test_transport_error_falls_back() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == PRIMARY:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(204)

    assert _deliver(handler, _payload()) is DeliveryResult.DELIVERED_SECONDARY


def test_both_endpoints_failing_is_reported_not_raised() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(500)

    result = _deliver(handler, _payload())

    assert result is DeliveryResult.FAILED
    assert not result.delivered
    assert calls == [PRIMARY, SECONDARY]


def test_unexpected_primary_error_still_returns_a_result() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        if str(request.url) == PRIMARY:
            raise RuntimeError("socket closed unexpectedly")
        return httpx.Response(200)

    assert _deliver(handler, _payload()) is DeliveryResult.DELIVERED_SECONDARY
    assert calls == [PRIMARY, SECONDARY]


def test_unencodable_api_key_fails_every_album_item_without_raising() -> None:
    sent: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(200)

    messages = [
        IncomingMessage(
            message_id=message_id,
            date=datetime(2024, 1, 1, tzinfo=timezone.utc),
            channel_id=42,
            chat_id=None,
            text=text,
            group_id="G1",
        )
        for message_id, text in ((1, ""), (2, "cap"))
    ]

    async def scenario() -> list[DeliveryResult]:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            sink = WebhookSink(WebhookEndpoint(PRIMARY, SECONDARY, "ключ"), client=client)
            processor = MessageProcessor(sink, ProtectedContentFetcher(NoDownloads()))
            return await processor.process_album("G1", messages)

    results = asyncio.run(scenario())

    assert results == [DeliveryResult.FAILED, DeliveryResult.FAILED]
    assert sent == []


def test_owned_client_follows_redirects() -> None:
    async def scenario() -> bool:
        sink = WebhookSink(WebhookEndpoint(PRIMARY, SECONDARY, "s3cret"))
        try:
            return sink._client.follow_redirects
        finally:
            await sink.aclose()

    assert asyncio.run(scenario()) is True
