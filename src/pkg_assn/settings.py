from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .domain.constants import DEFAULT_ALGORITHM, KeySource
from .domain.exceptions import ConfigurationError


@dataclass(slots=True)
class RelaySettings:
    """
    Relay wiring settings.

    Host code decides how to construct this (env, config file, etc.).
    """
    forward_url: str = ""
    forward_secret: str = ""
    forward_secret_header: str = "x-hook-secret"

    # Verification
    algorithm: str = DEFAULT_ALGORITHM
    key_source: KeySource = KeySource.CERTIFICATE
    jwks_path: Optional[str] = None
    jwks_url: Optional[str] = None
    jwks_cache_ttl_seconds: float = 3600
    jwks_refetch_cooldown_seconds: float = 30
    trusted_root_paths: List[str] = field(default_factory=list)

    # Transport
    http_timeout_seconds: float = 10.0
    webhook_path: str = "/api/webhook"
    log_level: str = "info"

    def validate(self, *, require_forward_url: bool = True) -> "RelaySettings":
        """
        Check the settings are coherent.

        Raises:
            ConfigurationError
        """
        problems: List[str] = []

        if require_forward_url and not self.forward_url:
            problems.append("forward_url is required")
        if not self.algorithm:
            problems.append("algorithm must not be empty")
        if self.key_source.uses_local_key_set and not self.jwks_path:
            problems.append(f"jwks_path is required for key source {self.key_source.value!r}")
        if self.key_source.uses_remote_key_set and not self.jwks_url:
            problems.append(f"jwks_url is required for key source {self.key_source.value!r}")
        if self.jwks_cache_ttl_seconds <= 0:
            problems.append("jwks_cache_ttl_seconds must be positive")
        if self.jwks_refetch_cooldown_seconds < 0:
            problems.append("jwks_refetch_cooldown_seconds must not be negative")
        if not self.webhook_path.startswith("/"):
            problems.append("webhook_path must start with '/'")

        if problems:
            raise ConfigurationError("Invalid relay settings: " + "; ".join(problems))
        return self
