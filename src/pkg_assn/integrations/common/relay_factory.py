from __future__ import annotations

from typing import Optional

import httpx

from ...adapters.http.forwarder import HTTPEventForwarder
from ...adapters.jwks.local import LocalKeySet
from ...adapters.jwks.remote import RemoteKeySet
from ...adapters.pyjwt.verifier import JWSTokenVerifier
from ...adapters.x5c.certificate import load_trusted_roots
from ...application.key_store import CertificateChainKeyStore, CompositeKeyStore, KeySetKeyStore
from ...application.use_cases.relay_notification import RelayNotificationUseCase
from ...application.use_cases.verify_notification import VerifyNotificationUseCase
from ...domain.ports import EventForwarder, KeySet, KeyStore
from ...settings import RelaySettings
from ...logging import get_logger

logger = get_logger(__name__)


def create_key_store(
        settings: RelaySettings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
) -> KeyStore:
    """
    Settings -> KeyStore strategy.

    - ``local`` / ``remote``: kid lookup only
    - ``certificate``: embedded x5c leaf only
    - ``*+certificate``: kid lookup, x5c fallback when no kid
    """
    source = settings.key_source

    key_set: KeySet | None = None
    if source.uses_local_key_set:
        key_set = LocalKeySet.from_file(settings.jwks_path)
    elif source.uses_remote_key_set:
        key_set = RemoteKeySet(
            jwks_uri=settings.jwks_url,
            cache_ttl_seconds=settings.jwks_cache_ttl_seconds,
            refetch_cooldown_seconds=settings.jwks_refetch_cooldown_seconds,
            client=http_client,
            timeout=settings.http_timeout_seconds,
        )

    certificate_store: KeyStore | None = None
    if source.uses_certificates:
        roots = tuple(load_trusted_roots(settings.trusted_root_paths))
        if not roots:
            logger.warning(
                "key_store.certificates_untrusted",
                detail="no trusted roots configured; any embedded x5c leaf is accepted",
                key_source=source.value,
            )
        certificate_store = CertificateChainKeyStore(trusted_roots=roots)

    if key_set is not None and certificate_store is not None:
        return CompositeKeyStore(
            key_id_store=KeySetKeyStore(key_set),
            certificate_store=certificate_store,
        )
    if key_set is not None:
        return KeySetKeyStore(key_set)
    return certificate_store


def create_verify_use_case(
        settings: RelaySettings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
) -> VerifyNotificationUseCase:
    key_store = create_key_store(settings, http_client=http_client)
    verifier = JWSTokenVerifier(key_store=key_store, algorithm=settings.algorithm)
    return VerifyNotificationUseCase(token_verifier=verifier)


def create_relay_from_settings(
        settings: RelaySettings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        forwarder: Optional[EventForwarder] = None,
) -> RelayNotificationUseCase:
    """
    High-level factory: RelaySettings -> RelayNotificationUseCase.

    - builds the configured KeyStore and a JWSTokenVerifier
    - wires VerifyNotificationUseCase + an HTTPEventForwarder
    """
    settings.validate(require_forward_url=forwarder is None)

    if forwarder is None:
        forwarder = HTTPEventForwarder(
            url=settings.forward_url,
            secret=settings.forward_secret,
            secret_header=settings.forward_secret_header,
            client=http_client,
            timeout=settings.http_timeout_seconds,
        )

    return RelayNotificationUseCase(
        verify_use_case=create_verify_use_case(settings, http_client=http_client),
        forwarder=forwarder,
    )
