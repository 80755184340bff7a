"""Core message processing pipeline.

This module is integration-agnostic. It only relies on ports for downloads
and delivery, enabling other sources or sinks without changes here.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from core.fetcher import ProtectedContentFetcher, needs_fetch
from core.models import DeliveryResult, IncomingMessage
from core.payload import build_payload
from core.ports import DeliveryPort

LOGGER = logging.getLogger(__name__)


def album_caption(messages: Sequence[IncomingMessage]) -> str:
    """Return the first non-empty body in the album, or an empty string."""

    for message in messages:
        if message.text:
            return message.text
    return ""


class MessageProcessor:
    """Orchestrates payload building, protected downloads, and delivery."""

    def __init__(self, sink: DeliveryPort, fetcher: ProtectedContentFetcher) -> None:
        self._sink = sink
        self._fetcher = fetcher

    async def process_single(
        self,
        message: IncomingMessage,
        override_text: Optional[str] = None,
    ) -> DeliveryResult:
        """Deliver one message, attaching protected media when it can be downloaded."""

        payload = build_payload(message, override_text)

        if needs_fetch(payload):
            fetched = await self._fetcher.fetch(message)
            if fetched.content:
                return await self._sink.deliver(payload, fetched.content, fetched.filename)
            # A failed download still delivers the metadata so the event is never dropped.
            if fetched.error:
                payload = payload.with_error(fetched.error)

        return await self._sink.deliver(payload)

    async def process_album(self, group_id: str, messages: Sequence[IncomingMessage]) -> list[DeliveryResult]:
        """Deliver every album member in order, captioning only the last one.

        ``messages`` must already be sorted by message id. Deliveries are awaited
        one at a time so the webhook receives them in that order.
        """

        LOGGER.info("Processing album %s: %s items", group_id, len(messages))
        caption = album_caption(messages)
        results: list[DeliveryResult] = []
        last_index = len(messages) - 1
        for index, message in enumerate(messages):
            text = caption if index == last_index else ""
            LOGGER.debug("Album %s part %s/%s (has text: %s)", group_id, index + 1, len(messages), bool(text))
            results.append(await self.process_single(message, text))
        return results
