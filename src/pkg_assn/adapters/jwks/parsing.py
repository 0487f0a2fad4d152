from __future__ import annotations

from typing import Any, Dict, Mapping

import jwt

from ..crypto import algorithm_for_key
from ...domain.value_objects import VerificationKey
from ...logging import get_logger

logger = get_logger(__name__)


def parse_key_set(document: Mapping[str, Any]) -> Dict[str, VerificationKey]:
    """
    Turn a JWKS document into a ``kid -> VerificationKey`` mapping.

    Entries without a ``kid`` or that PyJWT cannot load are skipped with a
    warning; a later duplicate ``kid`` replaces an earlier one.
    """
    keys: Dict[str, VerificationKey] = {}

    for entry in document.get("keys") or []:
        if not isinstance(entry, Mapping):
            continue

        kid = entry.get("kid")
        if not kid:
            logger.warning("jwks.entry_skipped", reason="missing kid")
            continue

        try:
            jwk = jwt.PyJWK(dict(entry))
            algorithm = entry.get("alg") or algorithm_for_key(jwk.key)
        except (jwt.PyJWKError, jwt.InvalidKeyError, ValueError) as exc:
            logger.warning("jwks.entry_skipped", kid=kid, reason=str(exc))
            continue

        keys[str(kid)] = VerificationKey(
            public_key=jwk.key,
            algorithm=str(algorithm),
            key_id=str(kid),
        )

    return keys
