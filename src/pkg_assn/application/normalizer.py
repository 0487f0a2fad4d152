"""
Notification -> NormalizedEvent mapping.

Pure functions only: no I/O and no failure path. Missing fields default to
'' / [] / None so the emitted shape never changes.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..domain.constants import MILLISECONDS_THRESHOLD, SOURCE_TAG, Operation
from ..domain.entities import (
    Entitlement,
    Notification,
    NormalizedEvent,
    RenewalInfo,
    TransactionInfo,
)


def _renewal_status_operation(renewal_info: Optional[RenewalInfo]) -> Operation:
    if renewal_info is not None and renewal_info.auto_renew_off:
        return Operation.AUTO_RENEW_OFF
    return Operation.AUTO_RENEW_ON


# Keys are upper-cased notification types.
OPERATION_TABLE: Dict[str, Callable[[Optional[RenewalInfo]], Operation]] = {
    "SUBSCRIBED": lambda _: Operation.PURCHASE,
    "DID_RENEW": lambda _: Operation.RENEW,
    "DID_CHANGE_RENEWAL_STATUS": _renewal_status_operation,
    "DID_FAIL_TO_RENEW": lambda _: Operation.RENEW_FAILED,
    "GRACE_PERIOD_EXPIRED": lambda _: Operation.GRACE_EXPIRED,
    "EXPIRED": lambda _: Operation.EXPIRED,
    "REFUND": lambda _: Operation.REVOKED,
    "REVOKE": lambda _: Operation.REVOKED,
}


def map_operation(notification_type: str, renewal_info: Optional[RenewalInfo] = None) -> str:
    """Canonical operation for a notification type (case-insensitive)."""
    code = notification_type or ""
    if not code:
        return Operation.OTHER.value

    rule = OPERATION_TABLE.get(code.upper())
    if rule is None:
        return code.lower()
    return rule(renewal_info).value


def format_instant(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_to_iso(value: Any) -> Optional[str]:
    """
    Convert an epoch timestamp of unknown unit to ISO-8601.

    Values >= 10**12 are read as milliseconds, smaller ones as seconds.
    Absent, zero, negative or unparseable values give None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or number <= 0:
        return None

    seconds = number / 1000 if number >= MILLISECONDS_THRESHOLD else number
    try:
        return format_instant(datetime.fromtimestamp(seconds, tz=timezone.utc))
    except (OverflowError, OSError, ValueError):
        return None


def normalize(
    notification: Notification,
    transaction_info: Optional[TransactionInfo] = None,
    renewal_info: Optional[RenewalInfo] = None,
    now: Optional[datetime] = None,
) -> NormalizedEvent:
    """
    Build the canonical event for a verified notification.

    ``now`` is the generation timestamp; pass it to get a fully
    deterministic result.
    """
    txn = transaction_info or TransactionInfo()
    renewal = renewal_info or RenewalInfo()

    product_id = txn.product_id or renewal.auto_renew_product_id
    expires_at = epoch_to_iso(txn.expires_date)

    entitlements = []
    if product_id:
        entitlements.append(
            Entitlement(
                product_id=product_id,
                original_transaction_id=txn.original_transaction_id,
                expires_at=expires_at,
            )
        )

    return NormalizedEvent(
        now=format_instant(now or datetime.now(timezone.utc)),
        source=SOURCE_TAG,
        operation=map_operation(notification.notification_type, renewal_info),
        environment=notification.environment,
        notification_uuid=notification.notification_uuid,
        notification_type=notification.notification_type,
        subtype=notification.subtype,
        transaction_id=txn.transaction_id,
        transaction_expires_at=expires_at,
        products=[product_id] if product_id else [],
        entitlements=entitlements,
        app_account_token=txn.app_account_token or renewal.app_account_token,
    )
