from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


def _text(value: Any) -> str:
    """Stringify a claim, mapping missing/falsy values to ''."""
    return str(value) if value else ""


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


@dataclass(slots=True)
class Notification:
    """
    Decoded outer notification (App Store ``responseBodyV2DecodedPayload``).

    The nested ``signed_*`` tokens are still untrusted compact JWS strings.
    """
    notification_type: str = ""
    subtype: str = ""
    notification_uuid: str = ""
    environment: str = ""
    bundle_id: str = ""
    version: str = ""
    signed_date: Optional[int] = None

    signed_transaction_info: Optional[str] = None
    signed_renewal_info: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Notification":
        data = _mapping(claims.get("data"))
        return cls(
            notification_type=_text(claims.get("notificationType")),
            subtype=_text(claims.get("subtype")),
            notification_uuid=_text(claims.get("notificationUUID")),
            environment=_text(data.get("environment")),
            bundle_id=_text(data.get("bundleId")),
            version=_text(claims.get("version")),
            signed_date=claims.get("signedDate"),
            signed_transaction_info=data.get("signedTransactionInfo") or None,
            signed_renewal_info=data.get("signedRenewalInfo") or None,
        )


@dataclass(slots=True)
class TransactionInfo:
    """
    Decoded ``JWSTransactionDecodedPayload``.
    ``expires_date`` is kept raw: its unit (s or ms) is decided at normalization.
    """
    product_id: str = ""
    original_transaction_id: str = ""
    transaction_id: str = ""
    expires_date: Any = None
    app_account_token: str = ""

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "TransactionInfo":
        return cls(
            product_id=_text(claims.get("productId")),
            original_transaction_id=_text(claims.get("originalTransactionId")),
            transaction_id=_text(claims.get("transactionId")),
            expires_date=claims.get("expiresDate"),
            app_account_token=_text(claims.get("appAccountToken")),
        )


@dataclass(slots=True)
class RenewalInfo:
    """
    Decoded ``JWSRenewalInfoDecodedPayload``.
    """
    auto_renew_status: Any = None
    auto_renew_product_id: str = ""
    product_id: str = ""
    original_transaction_id: str = ""
    app_account_token: str = ""

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "RenewalInfo":
        return cls(
            auto_renew_status=claims.get("autoRenewStatus"),
            auto_renew_product_id=_text(
                claims.get("autoRenewProductId") or claims.get("autoRenewPreference")
            ),
            product_id=_text(claims.get("productId")),
            original_transaction_id=_text(claims.get("originalTransactionId")),
            app_account_token=_text(claims.get("appAccountToken")),
        )

    @property
    def auto_renew_off(self) -> bool:
        return self.auto_renew_status == "OFF"


@dataclass(slots=True)
class DecodedNotification:
    """
    Aggregate of the verified outer notification and its verified nested claim sets.
    """
    notification: Notification
    transaction_info: Optional[TransactionInfo] = None
    renewal_info: Optional[RenewalInfo] = None


@dataclass(slots=True)
class Entitlement:
    product_id: str
    original_transaction_id: str = ""
    expires_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "original_transaction_id": self.original_transaction_id,
            "expires_at": self.expires_at,
        }


@dataclass(slots=True)
class NormalizedEvent:
    """
    Vendor-neutral event handed to the downstream workflow endpoint.

    The shape is fixed: optional values default to '' / [] / None rather
    than being omitted, so the downstream schema never changes.
    """
    now: str
    source: str
    operation: str
    environment: str = ""
    notification_uuid: str = ""
    notification_type: str = ""
    subtype: str = ""
    transaction_id: str = ""
    transaction_expires_at: Optional[str] = None
    products: List[str] = field(default_factory=list)
    entitlements: List[Entitlement] = field(default_factory=list)
    app_account_token: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "now": self.now,
            "source": self.source,
            "operation": self.operation,
            "environment": self.environment,
            "notification_uuid": self.notification_uuid,
            "type": self.notification_type,
            "subtype": self.subtype,
            "transaction_id": self.transaction_id,
            "transaction_expires_at": self.transaction_expires_at,
            "products": list(self.products),
            "entitlements": [e.to_dict() for e in self.entitlements],
            "app_account_token": self.app_account_token,
        }
