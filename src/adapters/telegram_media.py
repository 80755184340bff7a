"""Telethon adapters for the download and forward primitives."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from telethon import TelegramClient

from core.chat_refs import ChatRef
from core.models import IncomingMessage

LOGGER = logging.getLogger(__name__)


class TelethonDownloader:
    """Download message media into memory."""

    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    async def download(self, message: IncomingMessage) -> Optional[bytes]:
        # file=bytes makes Telethon return the content instead of writing a file.
        return await self._client.download_media(message.raw, file=bytes)


class TelethonForwarder:
    """Forward messages between chats addressed by NumericId or Handle."""

    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    async def forward(self, from_chat: ChatRef, to_chat: ChatRef, message_ids: Sequence[int]) -> int:
        if not message_ids:
            return 0
        from_peer = await self._client.get_entity(from_chat.value)
        to_peer = await self._client.get_entity(to_chat.value)
        result = await self._client.forward_messages(to_peer, list(message_ids), from_peer=from_peer)
        if result is None:
            forwarded = 0
        elif isinstance(result, list):
            forwarded = len([item for item in result if item is not None])
        else:
            forwarded = 1
        LOGGER.info("Forwarded %s of %s message(s) from %s", forwarded, len(message_ids), from_chat.value)
        return forwarded
