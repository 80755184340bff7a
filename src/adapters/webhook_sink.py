"""Webhook delivery adapter.

Implements the core DeliveryPort by POSTing multipart bodies to a primary
webhook URL, retrying once against a secondary URL when the primary fails.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from core.config import WebhookEndpoint
from core.models import DeliveryPayload, DeliveryResult
from core.payload import serialize_payload

LOGGER = logging.getLogger(__name__)

_TIMEOUT = 30.0

API_KEY_HEADER = "x-api-key"


def build_multipart(
    payload: DeliveryPayload,
    content: Optional[bytes] = None,
    filename: str = "file.bin",
) -> list[tuple[str, tuple]]:
    """Return the multipart fields for one delivery attempt.

    The ``data`` field is always present so the consumer sees the same layout
    whether or not a file is attached.
    """

    # A None filename turns the part into a plain form field.
    fields: list[tuple[str, tuple]] = [("data", (None, serialize_payload(payload).encode("utf-8")))]
    if content:
        fields.append(("file", (filename, content, "application/octet-stream")))
    return fields


class WebhookSink:
    """Best-effort delivery: primary, then one retry on the secondary URL."""

    def __init__(
        self,
        endpoint: WebhookEndpoint,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = _TIMEOUT,
    ) -> None:
        self._endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(
        self,
        url: str,
        payload: DeliveryPayload,
        content: Optional[bytes],
        filename: str,
    ) -> None:
        # Each attempt builds its own body; a streamed body cannot be resent.
        response = await self._client.post(
            url,
            headers={API_KEY_HEADER: self._endpoint.api_key},
            files=build_multipart(payload, content, filename),
        )
        response.raise_for_status()

    async def deliver(
        self,
        payload: DeliveryPayload,
        content: Optional[bytes] = None,
        filename: str = "file.bin",
    ) -> DeliveryResult:
        """Send the payload and report which endpoint accepted it. Never raises."""

        try:
            await self._post(self._endpoint.primary_url, payload, content, filename)
            LOGGER.debug("Message %s sent to primary webhook", payload.message_id)
            return DeliveryResult.DELIVERED_PRIMARY
        except Exception as exc:
            LOGGER.warning("Primary webhook failed for message %s: %s. Trying secondary...", payload.message_id, exc)

        try:
            await self._post(self._endpoint.secondary_url, payload, content, filename)
        except Exception as exc:
            LOGGER.error("Failed to deliver message %s: %s", payload.message_id, exc)
            return DeliveryResult.FAILED

        LOGGER.info("Message %s sent to secondary webhook", payload.message_id)
        return DeliveryResult.DELIVERED_SECONDARY
