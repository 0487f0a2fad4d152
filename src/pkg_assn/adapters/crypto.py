from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa

_EC_CURVE_ALGORITHMS = {
    "secp256r1": "ES256",
    "secp256k1": "ES256K",
    "secp384r1": "ES384",
    "secp521r1": "ES512",
}


def algorithm_for_key(public_key: Any) -> str:
    """
    Infer the JWS algorithm a bare public key can verify.

    RSA keys default to RS256; a JWKS entry can override this with ``alg``.
    """
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        try:
            return _EC_CURVE_ALGORITHMS[public_key.curve.name]
        except KeyError:
            raise ValueError(f"Unsupported EC curve: {public_key.curve.name}") from None
    if isinstance(public_key, rsa.RSAPublicKey):
        return "RS256"
    if isinstance(public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
        return "EdDSA"
    raise ValueError(f"Unsupported public key type: {type(public_key).__name__}")
