from __future__ import annotations

import time
from typing import Dict, Optional

import httpx

from .parsing import parse_key_set
from ...domain.exceptions import KeySetUnavailableError
from ...domain.value_objects import VerificationKey
from ...logging import get_logger

logger = get_logger(__name__)


class RemoteKeySet:
    """
    Key set fetched from a JWKS URL with simple in-memory caching.

    - keys are reused until ``cache_ttl_seconds`` elapse
    - an unknown ``kid`` triggers a refetch (key rotation), at most once
      per ``refetch_cooldown_seconds``
    - concurrent refetches are allowed; they converge on the same keys
    """

    def __init__(
        self,
        jwks_uri: str,
        cache_ttl_seconds: float = 3600,
        refetch_cooldown_seconds: float = 30,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._jwks_uri = jwks_uri
        self._cache_ttl = cache_ttl_seconds
        self._refetch_cooldown = refetch_cooldown_seconds
        self._client = client or httpx.AsyncClient(timeout=timeout)

        self._keys: Optional[Dict[str, VerificationKey]] = None
        self._last_fetched: float = 0.0

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    async def get_key(self, key_id: str) -> Optional[VerificationKey]:
        if self._is_fresh():
            if key_id in self._keys:
                return self._keys[key_id]
            if (time.monotonic() - self._last_fetched) < self._refetch_cooldown:
                logger.debug("jwks.refetch_skipped", kid=key_id)
                return None

        keys = await self._fetch_keys()
        return keys.get(key_id)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _is_fresh(self) -> bool:
        return self._keys is not None and (time.monotonic() - self._last_fetched) < self._cache_ttl

    async def _fetch_keys(self) -> Dict[str, VerificationKey]:
        try:
            response = await self._client.get(self._jwks_uri)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise KeySetUnavailableError(f"Failed to fetch JWKS from {self._jwks_uri}: {exc}") from exc
        except ValueError as exc:
            raise KeySetUnavailableError(f"JWKS at {self._jwks_uri} is not valid JSON") from exc

        if not isinstance(body, dict):
            raise KeySetUnavailableError(f"JWKS at {self._jwks_uri} is not a JSON object")

        self._keys = parse_key_set(body)
        self._last_fetched = time.monotonic()
        logger.info("jwks.fetched", url=self._jwks_uri, keys=len(self._keys))
        return self._keys
