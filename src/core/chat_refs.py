"""Helpers for working with Telegram chat references."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

CHANNEL_PREFIX = "-100"


@dataclass(frozen=True)
class NumericId:
    """A chat addressed by its (possibly marked) numeric id."""

    value: int


@dataclass(frozen=True)
class Handle:
    """A chat addressed by username or other non-numeric identifier."""

    value: str


ChatRef = Union[NumericId, Handle]


def format_chat_id(channel_id: Optional[int], chat_id: Optional[int]) -> Optional[str]:
    """Return the chat id as delivered to the webhook.

    Channels and supergroups use the -100<channel_id> peer form; every other
    peer keeps its raw chat id.
    """

    if channel_id is not None:
        return f"{CHANNEL_PREFIX}{channel_id}"
    if chat_id is None:
        return None
    return str(chat_id)


def _is_numeric(text: str) -> bool:
    digits = text[1:] if text[:1] in {"-", "+"} else text
    return digits.isdigit()


def classify_chat_input(value: Union[int, str]) -> ChatRef:
    """Classify a control-plane chat input into a NumericId or a Handle.

    Integers and numeric strings (including the -100 channel form) become
    NumericId; any other string is treated as a username or identifier.
    """

    if isinstance(value, bool):
        raise ValueError(f"Unsupported chat reference: {value!r}")
    if isinstance(value, int):
        return NumericId(value)
    if isinstance(value, str):
        text = value.strip()
        if _is_numeric(text):
            return NumericId(int(text))
        return Handle(text)
    raise ValueError(f"Unsupported chat reference: {value!r}")
