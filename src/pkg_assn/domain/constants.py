from enum import Enum

DEFAULT_ALGORITHM = "ES256"
SOURCE_TAG = "apple-assn"

# Epoch values at or above this are milliseconds (~2001-09 in ms, ~33658 AD in s).
MILLISECONDS_THRESHOLD = 10**12


class Operation(str, Enum):
    PURCHASE = "purchase"
    RENEW = "renew"
    AUTO_RENEW_ON = "auto_renew_on"
    AUTO_RENEW_OFF = "auto_renew_off"
    RENEW_FAILED = "renew_failed"
    GRACE_EXPIRED = "grace_expired"
    EXPIRED = "expired"
    REVOKED = "revoked"
    OTHER = "other"


class KeySource(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    CERTIFICATE = "certificate"
    LOCAL_WITH_CERTIFICATE = "local+certificate"
    REMOTE_WITH_CERTIFICATE = "remote+certificate"

    @property
    def uses_local_key_set(self) -> bool:
        return self in (KeySource.LOCAL, KeySource.LOCAL_WITH_CERTIFICATE)

    @property
    def uses_remote_key_set(self) -> bool:
        return self in (KeySource.REMOTE, KeySource.REMOTE_WITH_CERTIFICATE)

    @property
    def uses_certificates(self) -> bool:
        return self in (
            KeySource.CERTIFICATE,
            KeySource.LOCAL_WITH_CERTIFICATE,
            KeySource.REMOTE_WITH_CERTIFICATE,
        )
