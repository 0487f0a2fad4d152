from datetime import datetime, timezone

import pytest

from pkg_assn.application.normalizer import epoch_to_iso, map_operation, normalize
from pkg_assn.domain.entities import Notification, RenewalInfo, TransactionInfo

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _notification(notification_type="SUBSCRIBED", **kwargs):
    return Notification(notification_type=notification_type, **kwargs)


@pytest.mark.parametrize(
    "notification_type, expected",
    [
        ("SUBSCRIBED", "purchase"),
        ("subscribed", "purchase"),
        ("DID_RENEW", "renew"),
        ("DID_FAIL_TO_RENEW", "renew_failed"),
        ("GRACE_PERIOD_EXPIRED", "grace_expired"),
        ("EXPIRED", "expired"),
        ("REFUND", "revoked"),
        ("REVOKE", "revoked"),
        ("PRICE_INCREASE", "price_increase"),
        ("", "other"),
        (None, "other"),
        (" Foo ", " foo "),
    ],
)
def test_map_operation(notification_type, expected):
    assert map_operation(notification_type) == expected


def test_renewal_status_operation():
    off = RenewalInfo(auto_renew_status="OFF")
    on = RenewalInfo(auto_renew_status="ON")
    assert map_operation("DID_CHANGE_RENEWAL_STATUS", off) == "auto_renew_off"
    assert map_operation("DID_CHANGE_RENEWAL_STATUS", on) == "auto_renew_on"
    assert map_operation("DID_CHANGE_RENEWAL_STATUS", None) == "auto_renew_on"
    assert map_operation("DID_CHANGE_RENEWAL_STATUS", RenewalInfo(auto_renew_status=0)) == "auto_renew_on"


def test_epoch_units_normalize_to_same_instant():
    assert epoch_to_iso(1700000000) == epoch_to_iso(1700000000000) == "2023-11-14T22:13:20.000Z"
    assert epoch_to_iso("1700000000000") == "2023-11-14T22:13:20.000Z"


@pytest.mark.parametrize("value", [None, 0, "0", "", "soon", -5, True, float("nan")])
def test_epoch_without_value_is_null(value):
    assert epoch_to_iso(value) is None


def test_subscribed_scenario():
    event = normalize(
        _notification(
            "SUBSCRIBED",
            subtype="INITIAL_BUY",
            notification_uuid="uuid-1",
            environment="Sandbox",
        ),
        TransactionInfo(
            product_id="pro_monthly",
            original_transaction_id="1000",
            transaction_id="1001",
            expires_date=1700000000,
            app_account_token="acct-1",
        ),
        now=NOW,
    )

    assert event.operation == "purchase"
    assert event.products == ["pro_monthly"]
    assert len(event.entitlements) == 1
    assert event.entitlements[0].product_id == "pro_monthly"
    assert event.entitlements[0].original_transaction_id == "1000"
    assert event.entitlements[0].expires_at == "2023-11-14T22:13:20.000Z"
    assert event.transaction_expires_at == "2023-11-14T22:13:20.000Z"
    assert event.to_dict()["now"] == "2024-05-01T12:00:00.000Z"
    assert event.to_dict()["source"] == "apple-assn"
    assert event.app_account_token == "acct-1"


def test_renewal_status_off_scenario():
    event = normalize(
        _notification("DID_CHANGE_RENEWAL_STATUS", subtype="AUTO_RENEW_DISABLED"),
        renewal_info=RenewalInfo(
            auto_renew_status="OFF",
            auto_renew_product_id="pro_yearly",
            app_account_token="acct-2",
        ),
        now=NOW,
    )
    assert event.operation == "auto_renew_off"
    assert event.products == ["pro_yearly"]
    assert event.entitlements[0].original_transaction_id == ""
    assert event.entitlements[0].expires_at is None
    assert event.transaction_expires_at is None
    assert event.app_account_token == "acct-2"


def test_no_product_gives_empty_lists():
    data = normalize(_notification("TEST"), now=NOW).to_dict()
    assert data["operation"] == "test"
    assert data["products"] == []
    assert data["entitlements"] == []
    assert data["transaction_id"] == ""
    assert data["environment"] == ""
    assert data["subtype"] == ""
    assert data["app_account_token"] == ""
    assert data["transaction_expires_at"] is None


def test_transaction_product_wins_over_renewal():
    event = normalize(
        _notification("DID_RENEW"),
        TransactionInfo(product_id="pro_monthly"),
        RenewalInfo(auto_renew_product_id="pro_yearly", app_account_token="renewal-acct"),
        now=NOW,
    )
    assert event.products == ["pro_monthly"]
    assert event.app_account_token == "renewal-acct"


def test_normalize_is_deterministic():
    args = (
        _notification("DID_RENEW", notification_uuid="u"),
        TransactionInfo(product_id="p", expires_date=1700000000000),
        RenewalInfo(auto_renew_status="ON"),
    )
    assert normalize(*args, now=NOW) == normalize(*args, now=NOW)
    assert normalize(*args, now=NOW).to_dict() == normalize(*args, now=NOW).to_dict()
