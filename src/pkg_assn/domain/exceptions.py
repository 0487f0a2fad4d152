class NotificationError(Exception):
    """Base class for every error raised while relaying a notification."""
    pass


class ConfigurationError(NotificationError):
    """Raised when relay settings are missing or inconsistent."""
    pass


class VerificationError(NotificationError):
    """Raised when a signed token cannot be trusted."""
    pass


class MalformedTokenError(VerificationError):
    """Raised when a token cannot be split into header, payload and signature."""
    pass


class KeyNotFoundError(VerificationError):
    """Raised when the token names a key that no key source knows."""
    pass


class UntrustedCertificateError(KeyNotFoundError):
    """Raised when an embedded certificate chain does not lead to a trusted root."""
    pass


class NoKeyMaterialError(VerificationError):
    """Raised when the token header carries neither a key id nor a certificate chain."""
    pass


class SignatureInvalidError(VerificationError):
    """Raised when the signature does not verify with the configured algorithm."""
    pass


class KeySetUnavailableError(NotificationError):
    """Raised when a remote key set cannot be fetched or parsed."""
    pass


class DeliveryError(NotificationError):
    """Raised when the normalized event cannot be handed to the downstream endpoint."""
    pass
