"""Telegram client factory for tgbridge.

We explicitly manage the client's lifecycle (start/run_until_disconnected)
so it is obvious when the session is created and when it ends.
"""

from __future__ import annotations

import logging

from telethon import TelegramClient

import settings


def build_client() -> TelegramClient:
    """Create a Telethon client from settings.

    The session name defaults to "tgbridge" to create a local .session file.
    """

    api_id = settings.TELEGRAM_API_ID
    api_hash = settings.TELEGRAM_API_HASH

    # Fail fast on missing credentials to avoid an ambiguous login prompt.
    if not api_id or not api_hash:
        raise RuntimeError("Missing TELEGRAM_API_ID or TELEGRAM_API_HASH in environment")

    logging.getLogger(__name__).info("Initializing Telegram client")

    return TelegramClient(settings.SESSION_NAME, int(api_id), api_hash, connection_retries=5)
