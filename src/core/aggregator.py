"""Album debounce buffer (core domain).

Telegram delivers album items as separate messages sharing a grouped id and
gives no signal for the last item. Items are buffered per group until the
group has been quiet for the debounce window, then flushed as one batch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence

from core.config import DEFAULT_DEBOUNCE_SECONDS
from core.models import IncomingMessage

LOGGER = logging.getLogger(__name__)

FlushCallback = Callable[[str, Sequence[IncomingMessage]], Awaitable[object]]


@dataclass
class AlbumGroup:
    """Buffered members of one album and its pending flush task."""

    group_id: str
    messages: list[IncomingMessage] = field(default_factory=list)
    timer: Optional[asyncio.Task] = None


class AlbumAggregator:
    """Group album messages by grouped id and flush them after a quiet period."""

    def __init__(self, flush: FlushCallback, debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        self._flush = flush
        self._debounce_seconds = debounce_seconds
        self._groups: dict[str, AlbumGroup] = {}
        # Strong references keep running flushes alive once their group is dropped.
        self._flushing: set[asyncio.Task] = set()

    @property
    def pending(self) -> tuple[str, ...]:
        """Group ids currently buffered and waiting for their timer."""

        return tuple(self._groups)

    def add(self, message: IncomingMessage) -> None:
        """Buffer an album message and re-arm its group's debounce timer.

        Must be called from a running event loop.
        """

        if message.group_id is None:
            raise ValueError(f"Message {message.message_id} is not part of an album")

        group = self._groups.get(message.group_id)
        if group is None:
            group = AlbumGroup(message.group_id)
            self._groups[message.group_id] = group

        group.messages.append(message)
        if group.timer is not None:
            group.timer.cancel()
        group.timer = asyncio.get_running_loop().create_task(self._flush_when_quiet(group))

    async def _flush_when_quiet(self, group: AlbumGroup) -> None:
        await asyncio.sleep(self._debounce_seconds)

        # Drop the group before flushing so a late item with the same id starts
        # a new album instead of joining one that is already being delivered.
        if self._groups.get(group.group_id) is not group:
            return
        del self._groups[group.group_id]

        task = asyncio.current_task()
        if task is not None:
            self._flushing.add(task)
            task.add_done_callback(self._flushing.discard)

        messages = sorted(group.messages, key=lambda item: item.message_id)
        try:
            await self._flush(group.group_id, messages)
        except Exception:
            LOGGER.exception("Failed to flush album %s", group.group_id)
