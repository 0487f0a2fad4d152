from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from .verify_notification import VerifyNotificationUseCase
from ..normalizer import normalize
from ...domain.entities import NormalizedEvent
from ...domain.ports import EventForwarder
from ...logging import get_logger

logger = get_logger(__name__)

SIGNED_PAYLOAD_FIELD = "signedPayload"


@dataclass(slots=True)
class RelayResult:
    """
    Outcome of one inbound request.

    ``forwarded`` is False for bodies without a signed payload (pings),
    which are acknowledged and echoed back untouched.
    """
    forwarded: bool
    body: Any = None
    event: Optional[NormalizedEvent] = None
    forwarded_status: Optional[int] = None

    def to_response(self) -> Dict[str, Any]:
        if self.forwarded:
            return {"forwardedStatus": self.forwarded_status}
        return {"received": True, "body": self.body}


def extract_signed_payload(body: Any) -> Optional[str]:
    if not isinstance(body, Mapping):
        return None
    return body.get(SIGNED_PAYLOAD_FIELD) or None


@dataclass(slots=True)
class RelayNotificationUseCase:
    """
    Application use case:
    - Bypass bodies without ``signedPayload``
    - Verify + decode every token layer
    - Normalize and hand the event to the forwarder

    Errors propagate to the caller; nothing is forwarded on failure.
    """

    verify_use_case: VerifyNotificationUseCase
    forwarder: EventForwarder
    clock: Optional[Callable[[], datetime]] = None

    async def execute(self, body: Any) -> RelayResult:
        signed_payload = extract_signed_payload(body)
        if signed_payload is None:
            logger.info("notification.bypassed", reason="no signedPayload")
            return RelayResult(forwarded=False, body=body)

        decoded = await self.verify_use_case.execute(signed_payload)
        event = normalize(
            decoded.notification,
            decoded.transaction_info,
            decoded.renewal_info,
            now=self.clock() if self.clock else None,
        )

        status_code = await self.forwarder.forward(event.to_dict())
        logger.info(
            "notification.forwarded",
            notification_uuid=event.notification_uuid,
            operation=event.operation,
            forwarded_status=status_code,
        )
        return RelayResult(forwarded=True, body=body, event=event, forwarded_status=status_code)
