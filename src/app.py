"""Application entry point for the tgbridge webhook bridge."""

from __future__ import annotations

import argparse
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import uvicorn
from art import tprint
from telethon import TelegramClient, events

import settings
from adapters.control_api import create_app
from adapters.telegram_mapper import to_incoming
from adapters.telegram_media import TelethonDownloader, TelethonForwarder
from adapters.webhook_sink import WebhookSink
from client import build_client
from core.aggregator import AlbumAggregator
from core.config import WebhookEndpoint
from core.dispatcher import IngestionDispatcher
from core.fetcher import ProtectedContentFetcher
from core.processor import MessageProcessor

NAME = "TGBRIDGE"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/tgbridge.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


async def _sync_dialogs(client: TelegramClient) -> None:
    """Warm the entity cache and persist the session afterwards."""

    logger = logging.getLogger(__name__)
    logger.info("Syncing dialogs...")
    await client.get_dialogs(limit=settings.DIALOG_SYNC_LIMIT)
    client.session.save()
    logger.info("Dialogs synced")


def _start_kwargs() -> dict:
    kwargs = {}
    if settings.TELEGRAM_PHONE_NUMBER:
        kwargs["phone"] = settings.TELEGRAM_PHONE_NUMBER
    if settings.TELEGRAM_PASSWORD:
        kwargs["password"] = settings.TELEGRAM_PASSWORD
    return kwargs


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting tgbridge")

    client = build_client()
    # Explicit lifecycle management makes start/shutdown behavior obvious.
    client.start(**_start_kwargs())
    logger.info("Telegram client connected")
    client.loop.run_until_complete(_sync_dialogs(client))

    sink = WebhookSink(
        WebhookEndpoint(
            primary_url=settings.WEBHOOK_PROD,
            secondary_url=settings.WEBHOOK_TEST,
            api_key=settings.API_SECRET,
        ),
        timeout=settings.WEBHOOK_TIMEOUT,
    )
    processor = MessageProcessor(sink, ProtectedContentFetcher(TelethonDownloader(client)))
    aggregator = AlbumAggregator(processor.process_album, debounce_seconds=settings.ALBUM_DEBOUNCE_MS / 1000)
    dispatcher = IngestionDispatcher(aggregator, processor)

    # Single handler keeps Telethon integration minimal; everything else is
    # decided by the dispatcher so behavior stays testable without Telegram.
    @client.on(events.NewMessage())
    async def handler(event) -> None:
        try:
            if event.message is None:
                return
            await dispatcher.dispatch(to_incoming(event.message))
        except Exception:
            logger.exception("Error while processing message")

    control_app = create_app(settings.API_SECRET, TelethonForwarder(client))
    server = uvicorn.Server(
        uvicorn.Config(
            control_app,
            host=settings.SERVER_HOST,
            port=settings.SERVER_PORT,
            log_config=None,
        )
    )
    server_task = client.loop.create_task(server.serve())
    logger.info("Bridge server listening on %s:%s", settings.SERVER_HOST, settings.SERVER_PORT)

    try:
        logger.info("Listening for incoming messages...")
        client.run_until_disconnected()
    finally:
        server.should_exit = True
        client.loop.run_until_complete(server_task)
        client.loop.run_until_complete(sink.aclose())


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="tgbridge")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bridge and the control server")

    parser.parse_args(argv)
    _run()


if __name__ == "__main__":
    main()
