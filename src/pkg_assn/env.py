from __future__ import annotations

import os
from typing import Optional

from .domain.constants import DEFAULT_ALGORITHM, KeySource
from .domain.exceptions import ConfigurationError
from .settings import RelaySettings


def _first_env(*keys: str, default: Optional[str] = None) -> Optional[str]:
    for key in keys:
        raw = os.getenv(key)
        if raw is not None and raw.strip():
            return raw.strip()
    return default


def _split_csv(key: str) -> list[str]:
    raw = os.getenv(key)
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x and x.strip()]


def _float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc


def settings_from_env(*, require_forward_url: bool = True) -> RelaySettings:
    """
    Build RelaySettings from environment variables.

    ``BUBBLE_HOOK_URL`` / ``BUBBLE_SECRET`` are accepted as aliases of
    ``ASSN_FORWARD_URL`` / ``ASSN_FORWARD_SECRET``.
    """
    raw_source = _first_env("ASSN_KEY_SOURCE", default=KeySource.CERTIFICATE.value)
    try:
        key_source = KeySource(raw_source.lower())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in KeySource)
        raise ConfigurationError(f"ASSN_KEY_SOURCE must be one of: {allowed}") from exc

    settings = RelaySettings(
        forward_url=_first_env("ASSN_FORWARD_URL", "BUBBLE_HOOK_URL", default=""),
        forward_secret=_first_env("ASSN_FORWARD_SECRET", "BUBBLE_SECRET", default=""),
        forward_secret_header=_first_env("ASSN_FORWARD_SECRET_HEADER", default="x-hook-secret"),
        algorithm=_first_env("ASSN_SIGNING_ALGORITHM", default=DEFAULT_ALGORITHM),
        key_source=key_source,
        jwks_path=_first_env("ASSN_JWKS_PATH"),
        jwks_url=_first_env("ASSN_JWKS_URL"),
        jwks_cache_ttl_seconds=_float("ASSN_JWKS_CACHE_TTL", 3600),
        jwks_refetch_cooldown_seconds=_float("ASSN_JWKS_REFETCH_COOLDOWN", 30),
        trusted_root_paths=_split_csv("ASSN_TRUSTED_ROOTS"),
        http_timeout_seconds=_float("ASSN_HTTP_TIMEOUT", 10.0),
        webhook_path=_first_env("ASSN_WEBHOOK_PATH", default="/api/webhook"),
        log_level=_first_env("ASSN_LOG_LEVEL", default="info"),
    )

    if require_forward_url and not settings.forward_url:
        raise ConfigurationError("Missing relay settings: ASSN_FORWARD_URL (or BUBBLE_HOOK_URL)")

    return settings.validate(require_forward_url=require_forward_url)
