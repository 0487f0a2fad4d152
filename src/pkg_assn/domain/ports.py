from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from .value_objects import TokenHeader, VerificationKey


class KeySet(Protocol):
    """
    Port for a collection of public keys addressable by key id (a JWKS).
    """

    async def get_key(self, key_id: str) -> Optional[VerificationKey]:
        """Return the key for ``key_id`` or None when the set does not hold it."""
        ...


class KeyStore(Protocol):
    """
    Port for resolving the key that must verify a token, given its
    unverified header.
    """

    async def resolve_key(self, header: TokenHeader) -> VerificationKey:
        """
        Raises:
          - KeyNotFoundError
          - NoKeyMaterialError
        """
        ...


class TokenVerifier(Protocol):
    """
    Port for verifying a compact signed token and returning its claims.

    Implementations live in the adapters layer (e.g. the PyJWT verifier).
    """

    async def verify(self, token: str) -> Mapping[str, Any]:
        """
        Should:
          - resolve the key through a KeyStore
          - verify the signature with the configured algorithm only
        Raises:
          - MalformedTokenError
          - SignatureInvalidError
          - KeyNotFoundError / NoKeyMaterialError
        """
        ...


class EventForwarder(Protocol):
    """
    Port for relaying a normalized event downstream.
    """

    async def forward(self, event: Mapping[str, Any]) -> int:
        """Deliver the event and return the downstream HTTP status code."""
        ...
