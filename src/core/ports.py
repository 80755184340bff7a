"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the upstream client and the delivery
sink so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from core.chat_refs import ChatRef
from core.models import DeliveryPayload, DeliveryResult, IncomingMessage


class DownloaderPort(Protocol):
    """Media download primitive of the upstream client."""

    async def download(self, message: IncomingMessage) -> Optional[bytes]:
        ...


class ForwarderPort(Protocol):
    """Message forward primitive of the upstream client."""

    async def forward(self, from_chat: ChatRef, to_chat: ChatRef, message_ids: Sequence[int]) -> int:
        ...


class DeliveryPort(Protocol):
    """Delivery operations required by the core pipeline.

    Implementations must not raise; failures are reported through the result.
    """

    async def deliver(
        self,
        payload: DeliveryPayload,
        content: Optional[bytes] = None,
        filename: str = "file.bin",
    ) -> DeliveryResult:
        ...
