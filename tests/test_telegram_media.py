from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from adapters.telegram_media import TelethonDownloader, TelethonForwarder
from core.chat_refs import Handle, NumericId
from core.models import IncomingMessage


class DummyClient:
    def __init__(self, forwarded=None) -> None:
        self._forwarded = forwarded
        self.entities: list[object] = []
        self.forward_calls: list[tuple] = []
        self.downloads: list[tuple] = []

    async def get_entity(self, value):
        self.entities.append(value)
        return f"entity:{value}"

    async def forward_messages(self, entity, messages, from_peer=None):
        self.forward_calls.append((entity, messages, from_peer))
        return self._forwarded

    async def download_media(self, message, file=None):
        self.downloads.append((message, file))
        return b"media"


def test_forwarder_resolves_both_chats() -> None:
    client = DummyClient(forwarded=[object(), None, object()])

    count = asyncio.run(TelethonForwarder(client).forward(NumericId(-100555), Handle("@target"), [1, 2, 3]))

    assert count == 2
    assert client.entities == [-100555, "@target"]
    assert client.forward_calls == [("entity:@target", [1, 2, 3], "entity:-100555")]


def test_downloader_requests_bytes_for_raw_message() -> None:
    client = DummyClient()
    raw = object()
    message = IncomingMessage(
        message_id=1,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        channel_id=1,
        chat_id=None,
        text="",
        has_photo=True,
        raw=raw,
    )

    content = asyncio.run(TelethonDownloader(client).download(message))

    assert content == b"media"
    assert client.downloads == [(raw, bytes)]


def test_forwarder_skips_empty_requests() -> None:
    client = DummyClient(forwarded=[])

    count = asyncio.run(TelethonForwarder(client).forward(NumericId(1), NumericId(2), []))

    assert count == 0
    assert client.forward_calls == []
