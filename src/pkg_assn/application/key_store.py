from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple

from ..adapters.x5c.certificate import key_from_certificate_chain
from ..domain.exceptions import KeyNotFoundError, NoKeyMaterialError
from ..domain.ports import KeySet, KeyStore
from ..domain.value_objects import TokenHeader, VerificationKey
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class KeySetKeyStore:
    """
    Resolve keys by ``kid`` from a key set (local file or remote JWKS).
    """

    key_set: KeySet

    async def resolve_key(self, header: TokenHeader) -> VerificationKey:
        if not header.key_id:
            raise NoKeyMaterialError("Token header has no key id")

        key = await self.key_set.get_key(header.key_id)
        if key is None:
            raise KeyNotFoundError(f"No key with id {header.key_id!r} in key set")

        logger.debug("key.resolved", source="key_set", kid=header.key_id)
        return key


@dataclass(slots=True)
class CertificateChainKeyStore:
    """
    Resolve an ad-hoc key from the token's embedded ``x5c`` leaf certificate.

    ``trusted_roots`` (``cryptography`` certificates) enables chain validation.
    """

    trusted_roots: Tuple[Any, ...] = field(default_factory=tuple)

    async def resolve_key(self, header: TokenHeader) -> VerificationKey:
        if not header.certificate_chain:
            raise NoKeyMaterialError("Token header has no certificate chain")

        key = key_from_certificate_chain(header.certificate_chain, self.trusted_roots)
        logger.debug(
            "key.resolved",
            source="x5c",
            chain_length=len(header.certificate_chain),
            chain_validated=bool(self.trusted_roots),
        )
        return key


@dataclass(slots=True)
class CompositeKeyStore:
    """
    Full resolution policy:

      1. ``kid`` present   -> key set lookup (KeyNotFoundError if unknown)
      2. ``x5c`` present   -> leaf certificate key, key set not consulted
      3. neither           -> NoKeyMaterialError
    """

    key_id_store: KeyStore
    certificate_store: KeyStore

    async def resolve_key(self, header: TokenHeader) -> VerificationKey:
        if header.key_id:
            return await self.key_id_store.resolve_key(header)
        if header.certificate_chain:
            return await self.certificate_store.resolve_key(header)
        raise NoKeyMaterialError("Token header has neither a key id nor a certificate chain")
