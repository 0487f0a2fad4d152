"""
Keys taken from a JWS ``x5c`` header.

The chain is ``[leaf, intermediate..., (root)]``, each entry base64 (not
base64url) DER. Sandbox notifications are signed this way instead of by a
key the published JWKS knows.
"""

from __future__ import annotations

import base64
import binascii
from pathlib import Path
from typing import Iterable, List, Sequence

from cryptography import x509
from cryptography.exceptions import InvalidSignature

from ..crypto import algorithm_for_key
from ...domain.exceptions import ConfigurationError, MalformedTokenError, UntrustedCertificateError
from ...domain.value_objects import VerificationKey


def load_certificate_chain(encoded_chain: Sequence[str]) -> List[x509.Certificate]:
    try:
        return [
            x509.load_der_x509_certificate(base64.b64decode(c, validate=True))
            for c in encoded_chain
        ]
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError(f"Cannot parse x5c certificate chain: {exc}") from exc


def load_trusted_roots(paths: Iterable[str | Path]) -> List[x509.Certificate]:
    """Load root certificates from PEM or DER files."""
    roots: List[x509.Certificate] = []
    for path in paths:
        try:
            data = Path(path).read_bytes()
            if b"-----BEGIN CERTIFICATE-----" in data:
                roots.extend(x509.load_pem_x509_certificates(data))
            else:
                roots.append(x509.load_der_x509_certificate(data))
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"Cannot load trusted root {path}: {exc}") from exc
    return roots


def _is_issued_by(child: x509.Certificate, issuer: x509.Certificate) -> bool:
    try:
        child.verify_directly_issued_by(issuer)
    except (ValueError, TypeError, InvalidSignature):
        return False
    return True


def validate_chain(
    chain: Sequence[x509.Certificate],
    trusted_roots: Sequence[x509.Certificate],
) -> None:
    """
    Check each certificate is issued by the next one and that the last one
    is a trusted root or issued by one.

    Raises:
        UntrustedCertificateError
    """
    for position in range(len(chain) - 1):
        if not _is_issued_by(chain[position], chain[position + 1]):
            raise UntrustedCertificateError(f"Certificate chain broken at position {position}")

    anchor = chain[-1]
    if any(anchor == root or _is_issued_by(anchor, root) for root in trusted_roots):
        return
    raise UntrustedCertificateError("Certificate chain does not lead to a trusted root")


def key_from_certificate_chain(
    encoded_chain: Sequence[str],
    trusted_roots: Sequence[x509.Certificate] = (),
) -> VerificationKey:
    """
    Build an ad-hoc key from the leaf certificate.

    When ``trusted_roots`` is empty the chain is not validated and the leaf
    is used as-is.
    """
    if not encoded_chain:
        raise MalformedTokenError("Empty x5c certificate chain")

    chain = load_certificate_chain(encoded_chain)
    if trusted_roots:
        validate_chain(chain, trusted_roots)

    public_key = chain[0].public_key()
    try:
        algorithm = algorithm_for_key(public_key)
    except ValueError as exc:
        raise MalformedTokenError(f"Unusable leaf certificate key: {exc}") from exc

    return VerificationKey(public_key=public_key, algorithm=algorithm)
