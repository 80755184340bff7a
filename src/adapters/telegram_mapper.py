"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message
from telethon.tl.types import PeerChannel

from core.models import IncomingMessage


def _group_id_from_message(message: Message) -> Optional[str]:
    grouped_id = getattr(message, "grouped_id", None)
    if grouped_id is None:
        return None
    return str(grouped_id)


def _peer_ids(message: Message) -> tuple[Optional[int], Optional[int]]:
    """Return (channel_id, chat_id) for the message peer."""

    peer_id = getattr(message, "peer_id", None)
    if peer_id is None:
        return None, None
    if isinstance(peer_id, PeerChannel):
        return peer_id.channel_id, None
    return None, getattr(message, "chat_id", None)


def to_incoming(message: Message) -> IncomingMessage:
    """Build a core IncomingMessage from a Telethon Message."""

    channel_id, chat_id = _peer_ids(message)
    # The chat entity is only present when Telethon has it cached.
    chat = getattr(message, "chat", None)

    return IncomingMessage(
        message_id=message.id,
        date=message.date,
        channel_id=channel_id,
        chat_id=chat_id,
        text=getattr(message, "message", None) or "",
        group_id=_group_id_from_message(message),
        has_photo=bool(getattr(message, "photo", None)),
        has_voice=bool(getattr(message, "voice", None)),
        noforwards=bool(getattr(message, "noforwards", False)),
        chat_noforwards=bool(getattr(chat, "noforwards", False)),
        raw=message,
    )
