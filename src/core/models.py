"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Any, Optional

MEDIA_PHOTO = "photo"
MEDIA_VOICE = "voice"
MEDIA_TEXT = "text"


@dataclass(frozen=True)
class IncomingMessage:
    """Minimal view of an upstream message used by the pipeline.

    ``raw`` keeps the upstream client object so the download primitive can
    fetch media; the core never inspects it.
    """

    message_id: int
    date: datetime
    channel_id: Optional[int]
    chat_id: Optional[int]
    text: str
    group_id: Optional[str] = None
    has_photo: bool = False
    has_voice: bool = False
    noforwards: bool = False
    chat_noforwards: bool = False
    raw: Any = None


@dataclass(frozen=True)
class DeliveryPayload:
    """Flat record delivered to the webhook for one message."""

    event_date: str
    timestamp: int
    chat_id: Optional[str]
    chat_title: str
    message_id: int
    text: str
    media_type: str
    is_protected: bool
    is_album: bool
    error: Optional[str] = None

    def with_error(self, error: str) -> "DeliveryPayload":
        return replace(self, error=error)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if data["error"] is None:
            del data["error"]
        return data


class DeliveryResult(enum.Enum):
    """Outcome of the two-step delivery policy."""

    DELIVERED_PRIMARY = "delivered_primary"
    DELIVERED_SECONDARY = "delivered_secondary"
    FAILED = "failed"

    @property
    def delivered(self) -> bool:
        return self is not DeliveryResult.FAILED
