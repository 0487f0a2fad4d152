"""
pkg_assn

Clean-architecture relay for App Store Server Notifications (v2):
verifies every signed token layer, normalizes the notification into a
vendor-neutral event and forwards it downstream.
"""

__version__ = "0.1.0"

from .domain.entities import (
    DecodedNotification,
    Entitlement,
    Notification,
    NormalizedEvent,
    RenewalInfo,
    TransactionInfo,
)
from .domain.constants import DEFAULT_ALGORITHM, KeySource, Operation
from .domain.exceptions import (
    NotificationError,
    ConfigurationError,
    VerificationError,
    MalformedTokenError,
    KeyNotFoundError,
    UntrustedCertificateError,
    NoKeyMaterialError,
    SignatureInvalidError,
    KeySetUnavailableError,
    DeliveryError,
)
from .domain.value_objects import TokenHeader, VerificationKey
from .domain.ports import EventForwarder, KeySet, KeyStore, TokenVerifier

from .application.key_store import CertificateChainKeyStore, CompositeKeyStore, KeySetKeyStore
from .application.normalizer import normalize, map_operation, epoch_to_iso
from .application.use_cases.verify_notification import VerifyNotificationUseCase
from .application.use_cases.relay_notification import RelayNotificationUseCase, RelayResult

# Infrastructure adapters
from .adapters.pyjwt.verifier import JWSTokenVerifier
from .adapters.jwks.local import LocalKeySet
from .adapters.jwks.remote import RemoteKeySet
from .adapters.http.forwarder import HTTPEventForwarder

from .settings import RelaySettings
from .integrations.common.relay_factory import create_relay_from_settings

__all__ = [
    "__version__",
    # domain core
    "DecodedNotification",
    "Entitlement",
    "Notification",
    "NormalizedEvent",
    "RenewalInfo",
    "TransactionInfo",
    "DEFAULT_ALGORITHM",
    "KeySource",
    "Operation",
    "TokenHeader",
    "VerificationKey",
    "EventForwarder",
    "KeySet",
    "KeyStore",
    "TokenVerifier",
    # exceptions
    "NotificationError",
    "ConfigurationError",
    "VerificationError",
    "MalformedTokenError",
    "KeyNotFoundError",
    "UntrustedCertificateError",
    "NoKeyMaterialError",
    "SignatureInvalidError",
    "KeySetUnavailableError",
    "DeliveryError",
    # key stores
    "CertificateChainKeyStore",
    "CompositeKeyStore",
    "KeySetKeyStore",
    # normalization + use cases
    "normalize",
    "map_operation",
    "epoch_to_iso",
    "VerifyNotificationUseCase",
    "RelayNotificationUseCase",
    "RelayResult",
    # adapters
    "JWSTokenVerifier",
    "LocalKeySet",
    "RemoteKeySet",
    "HTTPEventForwarder",
    # wiring
    "RelaySettings",
    "create_relay_from_settings",
]
