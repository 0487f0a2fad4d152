from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx

from ...domain.exceptions import DeliveryError
from ...domain.ports import EventForwarder

DEFAULT_SECRET_HEADER = "x-hook-secret"


class HTTPEventForwarder(EventForwarder):
    """
    Minimal async forwarder: POSTs the event as JSON and reports the status.

    The downstream status is returned as-is, including 4xx/5xx; only
    transport failures raise.
    """

    def __init__(
        self,
        url: str,
        secret: str = "",
        secret_header: str = DEFAULT_SECRET_HEADER,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._url = url
        self._secret = secret
        self._secret_header = secret_header
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"content-type": "application/json"}
        if self._secret_header:
            headers[self._secret_header] = self._secret
        return headers

    async def forward(self, event: Mapping[str, Any]) -> int:
        try:
            resp = await self._client.post(self._url, json=dict(event), headers=self._headers())
        except httpx.HTTPError as exc:
            raise DeliveryError(f"Failed to forward event to {self._url}: {exc}") from exc
        return resp.status_code
