"""Route inbound messages to the album buffer or straight to delivery."""

from __future__ import annotations

from core.aggregator import AlbumAggregator
from core.models import IncomingMessage
from core.processor import MessageProcessor


class IngestionDispatcher:
    def __init__(self, aggregator: AlbumAggregator, processor: MessageProcessor) -> None:
        self._aggregator = aggregator
        self._processor = processor

    async def dispatch(self, message: IncomingMessage) -> None:
        if message.group_id is not None:
            self._aggregator.add(message)
            return
        await self._processor.process_single(message)
