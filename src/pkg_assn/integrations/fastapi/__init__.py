from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from .router import DEFAULT_WEBHOOK_PATH, create_webhook_router
from ..common.relay_factory import create_relay_from_settings
from ...application.use_cases.relay_notification import RelayNotificationUseCase
from ...env import settings_from_env
from ...logging import configure_logging
from ...settings import RelaySettings


def create_fastapi_app(
    settings: RelaySettings | None = None,
    *,
    relay: RelayNotificationUseCase | None = None,
) -> FastAPI:
    """
    High-level helper for serving the relay:

    - Reads RelaySettings from env when none are given
    - Builds the relay use case (unless one is injected) on a shared
      httpx.AsyncClient closed at shutdown
    - Mounts the webhook router at ``settings.webhook_path``
    """
    if settings is None:
        settings = settings_from_env(require_forward_url=relay is None)

    configure_logging(settings.log_level)

    http_client: httpx.AsyncClient | None = None
    if relay is None:
        http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        relay = create_relay_from_settings(settings, http_client=http_client)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        if http_client is not None:
            await http_client.aclose()

    app = FastAPI(title="pkg-assn", lifespan=lifespan)
    app.include_router(create_webhook_router(relay, path=settings.webhook_path))
    return app


__all__ = ["DEFAULT_WEBHOOK_PATH", "create_fastapi_app", "create_webhook_router"]
