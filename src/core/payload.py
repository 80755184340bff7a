"""Payload building and serialization (core domain)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from core.chat_refs import format_chat_id
from core.models import MEDIA_PHOTO, MEDIA_TEXT, MEDIA_VOICE, DeliveryPayload, IncomingMessage

# Resolving real chat titles costs an entity lookup per message.
CHAT_TITLE = "Private"

# Integers beyond this magnitude lose precision in JSON consumers that use
# double-precision numbers, so they are sent as decimal strings.
_MAX_SAFE_INTEGER = 2**53 - 1


def classify_media(message: IncomingMessage) -> str:
    if message.has_photo:
        return MEDIA_PHOTO
    if message.has_voice:
        return MEDIA_VOICE
    return MEDIA_TEXT


def is_protected(message: IncomingMessage) -> bool:
    return bool(message.noforwards or message.chat_noforwards)


def _utc_date(message: IncomingMessage) -> datetime:
    moment = message.date
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _format_event_date(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_payload(message: IncomingMessage, override_text: Optional[str] = None) -> DeliveryPayload:
    """Build the webhook payload for one message.

    ``override_text`` replaces the message body when it is not None; album
    processing uses it to move the caption onto the last album item.
    """

    text = override_text if override_text is not None else (message.text or "")
    moment = _utc_date(message)
    return DeliveryPayload(
        event_date=_format_event_date(moment),
        timestamp=int(moment.timestamp()),
        chat_id=format_chat_id(message.channel_id, message.chat_id),
        chat_title=CHAT_TITLE,
        message_id=message.message_id,
        text=text,
        media_type=classify_media(message),
        is_protected=is_protected(message),
        is_album=message.group_id is not None,
    )


def _stringify_large_ints(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and abs(value) > _MAX_SAFE_INTEGER:
        return str(value)
    if isinstance(value, dict):
        return {key: _stringify_large_ints(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_stringify_large_ints(item) for item in value]
    return value


def serialize_payload(payload: DeliveryPayload) -> str:
    """Return the JSON text sent in the multipart ``data`` field."""

    return json.dumps(_stringify_large_ints(payload.to_dict()), ensure_ascii=False)
