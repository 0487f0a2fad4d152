from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from ...application.use_cases.relay_notification import RelayNotificationUseCase
from ...logging import get_logger

logger = get_logger(__name__)

DEFAULT_WEBHOOK_PATH = "/api/webhook"


async def _read_body(request: Request) -> Any:
    """JSON body, or None for an empty body."""
    raw = await request.body()
    if not raw.strip():
        return None
    return json.loads(raw)


def create_webhook_router(
    relay: RelayNotificationUseCase,
    path: str = DEFAULT_WEBHOOK_PATH,
) -> APIRouter:
    """
    Router exposing the notification endpoint:

      GET  -> "ok" (health check)
      POST -> relay the notification; 400 with the error text on failure
    """
    router = APIRouter()

    @router.get(path, response_class=PlainTextResponse)
    async def health() -> str:
        return "ok"

    @router.post(path)
    async def receive_notification(request: Request):
        try:
            body = await _read_body(request)
            result = await relay.execute(body)
        except Exception as exc:  # noqa: BLE001
            logger.error("webhook.error", error=str(exc), error_type=type(exc).__name__)
            return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)

        if not result.forwarded:
            logger.info("webhook.ping", body=result.body)
        return JSONResponse(result.to_response())

    return router
