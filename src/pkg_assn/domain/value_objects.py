# src/pkg_assn/domain/value_objects.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from .exceptions import MalformedTokenError


# --- Token header ----------------------------------------------------------


def _normalize_chain(raw: Any) -> Tuple[str, ...]:
    """
    Normalize an ``x5c`` header value into a tuple of base64 DER strings.
    A plain string is treated as a single-certificate chain.

    Raises:
        MalformedTokenError for anything that is not a string or a list of strings.
    """
    if raw is None or raw == "" or raw == []:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, (list, tuple)) or not all(isinstance(c, str) for c in raw):
        raise MalformedTokenError("x5c header must be a list of base64 certificates")
    return tuple(raw)


@dataclass(frozen=True, slots=True)
class TokenHeader:
    """
    Unverified JWS protected header.

    Nothing here is trusted: it only carries the hints used to pick a key.
    The declared algorithm is kept for logging, never for verification.
    """
    algorithm: Optional[str] = None
    key_id: Optional[str] = None
    certificate_chain: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, header: Mapping[str, Any]) -> "TokenHeader":
        kid = header.get("kid")
        return cls(
            algorithm=header.get("alg"),
            key_id=str(kid) if kid else None,
            certificate_chain=_normalize_chain(header.get("x5c")),
        )

    @property
    def leaf_certificate(self) -> Optional[str]:
        return self.certificate_chain[0] if self.certificate_chain else None


# --- Keys ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VerificationKey:
    """
    A public key able to verify one algorithm.

    ``key_id`` is None for ad-hoc keys taken from an embedded certificate.
    ``public_key`` is a ``cryptography`` public key object.
    """
    public_key: Any
    algorithm: str
    key_id: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.key_id or 'x5c'}/{self.algorithm}"
