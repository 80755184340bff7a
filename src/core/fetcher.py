"""Protected-content retrieval (core domain).

Messages whose chat disallows forwarding cannot be referenced by the webhook
consumer, so their media is downloaded and attached to the delivery instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.models import MEDIA_PHOTO, MEDIA_VOICE, DeliveryPayload, IncomingMessage
from core.payload import classify_media
from core.ports import DownloaderPort

LOGGER = logging.getLogger(__name__)

EXTENSIONS = {
    MEDIA_PHOTO: "jpg",
    MEDIA_VOICE: "ogg",
}


@dataclass(frozen=True)
class FetchResult:
    """Downloaded content, or the error that prevented the download."""

    content: Optional[bytes] = None
    filename: Optional[str] = None
    error: Optional[str] = None


def needs_fetch(payload: DeliveryPayload) -> bool:
    """Only protected photos and voice notes are downloaded."""

    return payload.is_protected and payload.media_type in EXTENSIONS


def synthesize_filename(message_id: int, media_type: str) -> str:
    return f"protected_{message_id}.{EXTENSIONS[media_type]}"


def _describe(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


class ProtectedContentFetcher:
    """Download protected media, capturing failures instead of raising."""

    def __init__(self, downloader: DownloaderPort) -> None:
        self._downloader = downloader

    async def fetch(self, message: IncomingMessage) -> FetchResult:
        media_type = classify_media(message)
        if media_type not in EXTENSIONS:
            return FetchResult()

        LOGGER.info("Protected %s detected in message %s. Downloading...", media_type, message.message_id)
        try:
            content = await self._downloader.download(message)
        except Exception as exc:
            LOGGER.error("Download failed for message %s: %s", message.message_id, exc)
            return FetchResult(error=_describe(exc))

        if not content:
            return FetchResult()
        return FetchResult(content=content, filename=synthesize_filename(message.message_id, media_type))
