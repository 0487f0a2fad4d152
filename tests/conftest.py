# tests/conftest.py
import base64
import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List

import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
from jwt.algorithms import ECAlgorithm

from pkg_assn.adapters.jwks.local import LocalKeySet
from pkg_assn.adapters.pyjwt.verifier import JWSTokenVerifier
from pkg_assn.application.key_store import (
    CertificateChainKeyStore,
    CompositeKeyStore,
    KeySetKeyStore,
)

KID = "apple-key-1"


def public_jwk(private_key: Any, kid: str) -> dict:
    jwk = json.loads(ECAlgorithm.to_jwk(private_key.public_key()))
    jwk.update(kid=kid, alg="ES256", use="sig")
    return jwk


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _certificate(subject: str, public_key: Any, issuer: str, issuer_key: Any, ca: bool) -> x509.Certificate:
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject)]))
        .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer)]))
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(issuer_key, hashes.SHA256())
    )


@dataclass
class CertificateChain:
    leaf_key: Any
    root: x509.Certificate
    encoded: List[str]


# --- keys ------------------------------------------------------------------


@pytest.fixture(scope="session")
def signing_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def other_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def jwks_document(signing_key):
    return {"keys": [public_jwk(signing_key, KID)]}


@pytest.fixture(scope="session")
def certificate_chain():
    root_key = ec.generate_private_key(ec.SECP256R1())
    intermediate_key = ec.generate_private_key(ec.SECP256R1())
    leaf_key = ec.generate_private_key(ec.SECP256R1())

    root = _certificate("Test Root CA", root_key.public_key(), "Test Root CA", root_key, ca=True)
    intermediate = _certificate(
        "Test Intermediate", intermediate_key.public_key(), "Test Root CA", root_key, ca=True
    )
    leaf = _certificate("Test Leaf", leaf_key.public_key(), "Test Intermediate", intermediate_key, ca=False)

    encoded = [
        base64.b64encode(c.public_bytes(serialization.Encoding.DER)).decode()
        for c in (leaf, intermediate, root)
    ]
    return CertificateChain(leaf_key=leaf_key, root=root, encoded=encoded)


@pytest.fixture(scope="session")
def foreign_root():
    key = ec.generate_private_key(ec.SECP256R1())
    return _certificate("Other Root CA", key.public_key(), "Other Root CA", key, ca=True)


# --- token factories ---------------------------------------------------------


@pytest.fixture
def sign_with_kid(signing_key):
    def _sign(claims: dict, kid: str = KID, key: Any = None) -> str:
        return jwt.encode(claims, key or signing_key, algorithm="ES256", headers={"kid": kid})

    return _sign


@pytest.fixture
def sign_with_x5c(certificate_chain):
    def _sign(claims: dict, key: Any = None, chain: List[str] | None = None) -> str:
        return jwt.encode(
            claims,
            key or certificate_chain.leaf_key,
            algorithm="ES256",
            headers={"x5c": chain if chain is not None else certificate_chain.encoded},
        )

    return _sign


@pytest.fixture
def forge_hs256():
    """HMAC-signed token with an arbitrary (lying) header."""

    def _forge(header: dict, claims: dict, secret: bytes = b"shared-secret") -> str:
        signing_input = f"{b64url(json.dumps(header).encode())}.{b64url(json.dumps(claims).encode())}"
        signature = hmac.new(secret, signing_input.encode(), hashlib.sha256).digest()
        return f"{signing_input}.{b64url(signature)}"

    return _forge


# --- verification wiring ---------------------------------------------------


@pytest.fixture
def key_set(jwks_document):
    return LocalKeySet.from_document(jwks_document)


@pytest.fixture
def key_store(key_set):
    return CompositeKeyStore(
        key_id_store=KeySetKeyStore(key_set),
        certificate_store=CertificateChainKeyStore(),
    )


@pytest.fixture
def verifier(key_store):
    return JWSTokenVerifier(key_store=key_store, algorithm="ES256")


@pytest.fixture
def notification_claims():
    def _claims(notification_type: str = "SUBSCRIBED", **data: Any) -> dict:
        return {
            "notificationType": notification_type,
            "subtype": "INITIAL_BUY",
            "notificationUUID": "6f3a9a6e-1d6e-4b8e-9d7c-2a4b5c6d7e8f",
            "version": "2.0",
            "signedDate": 1700000000000,
            "data": {"environment": "Sandbox", "bundleId": "com.example.app", **data},
        }

    return _claims
