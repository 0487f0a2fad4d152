from __future__ import annotations

from typing import Any, Dict, Mapping

import jwt
from jwt.exceptions import (
    DecodeError,
    InvalidAlgorithmError,
    InvalidKeyError,
    InvalidSignatureError,
    InvalidTokenError as JWTInvalidTokenError,
)

from ...domain.constants import DEFAULT_ALGORITHM
from ...domain.exceptions import MalformedTokenError, SignatureInvalidError
from ...domain.ports import KeyStore, TokenVerifier
from ...domain.value_objects import TokenHeader
from ...logging import get_logger

logger = get_logger(__name__)

# App Store payloads carry signedDate/expiresDate, not registered time claims.
_DECODE_OPTIONS: Dict[str, Any] = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
}


class JWSTokenVerifier(TokenVerifier):
    """
    Adapter implementing TokenVerifier port using PyJWT.

    Infrastructure layer:
    - Knows about JWS structure and verification.
    - Delegates key selection to a KeyStore.
    - Only ever accepts ``algorithm``; the header's ``alg`` is ignored.
    """

    def __init__(self, key_store: KeyStore, algorithm: str = DEFAULT_ALGORITHM) -> None:
        self._key_store = key_store
        self._algorithm = algorithm

    @property
    def algorithm(self) -> str:
        return self._algorithm

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    async def verify(self, token: str) -> Mapping[str, Any]:
        """
        Verify a compact JWS and return its claims.

        Raises:
            MalformedTokenError
            SignatureInvalidError
            KeyNotFoundError / NoKeyMaterialError (from the key store)
        """
        header = self._read_header(token)
        key = await self._key_store.resolve_key(header)

        if key.algorithm != self._algorithm:
            raise SignatureInvalidError(
                f"Key {key} cannot verify {self._algorithm} signatures"
            )

        try:
            return jwt.decode(
                token,
                key.public_key,
                algorithms=[self._algorithm],
                options=_DECODE_OPTIONS,
            )
        except InvalidSignatureError as exc:
            raise SignatureInvalidError("Signature verification failed") from exc
        except (InvalidAlgorithmError, InvalidKeyError) as exc:
            raise SignatureInvalidError(f"Signature rejected: {exc}") from exc
        except (DecodeError, JWTInvalidTokenError) as exc:
            raise MalformedTokenError(f"Invalid token: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _read_header(token: str) -> TokenHeader:
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedTokenError("Token is not a compact JWS (header.payload.signature)")

        try:
            raw_header = jwt.get_unverified_header(token)
        except (DecodeError, JWTInvalidTokenError) as exc:
            raise MalformedTokenError(f"Cannot decode token header: {exc}") from exc

        return TokenHeader.from_mapping(raw_header)
