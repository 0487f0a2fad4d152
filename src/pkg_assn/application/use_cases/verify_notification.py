from __future__ import annotations

from dataclasses import dataclass

from ...domain.entities import DecodedNotification, Notification, RenewalInfo, TransactionInfo
from ...domain.exceptions import NotificationError, VerificationError
from ...domain.ports import TokenVerifier
from ...logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class VerifyNotificationUseCase:
    """
    Application use case:
    - Verify the outer ``signedPayload``
    - Verify the nested transaction / renewal tokens, when present
    - Map each claim set onto its domain entity

    All-or-nothing: any failing layer fails the whole notification.
    """

    token_verifier: TokenVerifier

    async def execute(self, signed_payload: str) -> DecodedNotification:
        """
        Raises:
            MalformedTokenError
            KeyNotFoundError
            NoKeyMaterialError
            SignatureInvalidError
            VerificationError (wrapping unexpected errors)
        """
        try:
            return await self._verify_layers(signed_payload)
        except NotificationError as exc:
            logger.warning("notification.rejected", error=str(exc), error_type=type(exc).__name__)
            raise
        except Exception as exc:
            # Wrap unexpected errors in a generic VerificationError
            logger.exception("notification.verification_crashed")
            raise VerificationError(f"Notification verification failed: {exc}") from exc

    async def _verify_layers(self, signed_payload: str) -> DecodedNotification:
        notification = Notification.from_claims(await self.token_verifier.verify(signed_payload))

        transaction_info = None
        if notification.signed_transaction_info:
            claims = await self.token_verifier.verify(notification.signed_transaction_info)
            transaction_info = TransactionInfo.from_claims(claims)

        renewal_info = None
        if notification.signed_renewal_info:
            claims = await self.token_verifier.verify(notification.signed_renewal_info)
            renewal_info = RenewalInfo.from_claims(claims)

        logger.info(
            "notification.verified",
            notification_uuid=notification.notification_uuid,
            type=notification.notification_type,
            subtype=notification.subtype,
            environment=notification.environment,
            has_transaction=transaction_info is not None,
            has_renewal=renewal_info is not None,
        )
        return DecodedNotification(
            notification=notification,
            transaction_info=transaction_info,
            renewal_info=renewal_info,
        )
