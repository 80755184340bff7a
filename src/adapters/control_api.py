"""Control-plane HTTP API.

Exposes a health probe and a forward endpoint. Every route is guarded by the
shared ``x-api-key`` secret.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.chat_refs import classify_chat_input
from core.ports import ForwarderPort

LOGGER = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
DEFAULT_MODE = "protected_bridge"


def _is_missing(value: Any) -> bool:
    # An empty messageIds list is a valid request that forwards nothing.
    return value is None or value is False or value == "" or value == 0


async def _read_json(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def create_app(api_key: str, forwarder: ForwarderPort, mode: str = DEFAULT_MODE) -> FastAPI:
    app = FastAPI(title="tgbridge", docs_url=None, redoc_url=None, openapi_url=None)
    started_at = time.monotonic()

    @app.middleware("http")
    async def require_api_key(request: Request, call_next):
        if request.headers.get(API_KEY_HEADER) != api_key:
            return JSONResponse({"error": "Access Denied"}, status_code=403)
        return await call_next(request)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        uptime = time.monotonic() - started_at
        return {"status": "online", "mode": mode, "uptime": uptime, "uptime_seconds": uptime}

    @app.post("/forward")
    async def forward(request: Request) -> JSONResponse:
        body = await _read_json(request)
        from_chat_id = body.get("fromChatId")
        to_chat_id = body.get("toChatId")
        message_ids = body.get("messageIds")
        if _is_missing(from_chat_id) or _is_missing(to_chat_id) or _is_missing(message_ids):
            return JSONResponse({"error": "Missing params"}, status_code=400)

        try:
            if not isinstance(message_ids, list):
                message_ids = [message_ids]
            forwarded = await forwarder.forward(
                classify_chat_input(from_chat_id),
                classify_chat_input(to_chat_id),
                [int(message_id) for message_id in message_ids],
            )
        except Exception as exc:
            LOGGER.exception("Forward request failed")
            return JSONResponse({"success": False, "error": str(exc)}, status_code=500)

        return JSONResponse({"success": True, "forwarded_count": forwarded})

    return app
