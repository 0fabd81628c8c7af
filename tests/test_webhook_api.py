"""
End-to-end tests for the HTTP surface: POST /webhook, health, subscription status.
"""

import json

import pytest
from sqlalchemy.exc import OperationalError

from conftest import sign_payload, stripe_event


def _invoice_paid(invoice_id="in_1", event_id=None):
    return stripe_event(
        "invoice.payment_succeeded",
        {
            "id": invoice_id,
            "subscription": "sub_1",
            "customer": "cus_1",
            "amount_paid": 999,
            "amount_due": 999,
            "currency": "usd",
        },
        event_id=event_id,
    )


@pytest.fixture
def subscribed(store):
    return store.create_account(
        "u1", subscription_status="active", subscription_id="sub_1", customer_id="cus_1"
    )


class TestSignature:
    def test_missing_signature_is_client_error_without_mutation(self, store, subscribed, post_event):
        resp = post_event(stripe_event("customer.subscription.deleted", {"id": "sub_1"}), signature=None)

        assert resp.status_code == 400
        assert resp.text.startswith("Webhook Error:")
        assert store.get_account("u1").subscription_status == "active"

    def test_tampered_body_is_client_error_without_mutation(self, store, subscribed, post_event):
        original = json.dumps(_invoice_paid()).encode()
        tampered = original.replace(b"999", b"1")

        resp = post_event({}, signature=sign_payload(original), body=tampered)

        assert resp.status_code == 400
        assert store.list_payments() == []
        assert store.get_account("u1").subscription_status == "active"

    def test_garbage_signature_is_client_error(self, post_event):
        resp = post_event(stripe_event("foo.bar", {}), signature="t=1,v1=deadbeef")
        assert resp.status_code == 400


class TestDispatch:
    def test_unknown_type_is_acknowledged_without_writes(self, store, subscribed, post_event):
        resp = post_event(stripe_event("foo.bar", {"id": "x"}))

        assert resp.status_code == 200
        assert resp.json() == {"received": True}
        assert store.get_account("u1").subscription_status == "active"
        assert store.list_payments() == []

    def test_checkout_completed_activates_account(self, store, post_event):
        store.create_account("u1", subscription_status="trial")

        resp = post_event(
            stripe_event(
                "checkout.session.completed",
                {"id": "cs_1", "client_reference_id": "u1", "subscription": "sub_1", "customer": "cus_1"},
            )
        )

        assert resp.status_code == 200
        account = store.get_account("u1")
        assert account.subscription_status == "active"
        assert account.subscription_id == "sub_1"
        assert account.customer_id == "cus_1"
        assert account.trial_end_date is None

    def test_subscription_updated_non_active_is_inactive(self, store, subscribed, post_event):
        resp = post_event(
            stripe_event("customer.subscription.updated", {"id": "sub_1", "customer": "cus_1", "status": "unpaid"})
        )

        assert resp.status_code == 200
        assert store.get_account("u1").subscription_status == "inactive"

    def test_subscription_deleted_twice_stays_expired(self, store, subscribed, post_event):
        event = stripe_event("customer.subscription.deleted", {"id": "sub_1", "canceled_at": 1760000000})

        assert post_event(event).status_code == 200
        assert post_event(event).status_code == 200
        assert store.get_account("u1").subscription_status == "expired"

    def test_payment_redelivery_duplicates_history(self, store, subscribed, post_event):
        # 알려진 결함: 같은 이벤트 재전송 → 같은 invoice_id row 2개.
        # exactly-once가 필요하면 DEDUPE_PAYMENTS=true (아래 테스트)
        event = _invoice_paid(event_id="evt_paid")

        assert post_event(event).status_code == 200
        assert post_event(event).status_code == 200

        payments = store.list_payments(invoice_id="in_1")
        assert len(payments) == 2
        assert {p.invoice_id for p in payments} == {"in_1"}

    def test_payment_failed_marks_past_due(self, store, subscribed, post_event):
        event = stripe_event(
            "invoice.payment_failed",
            {"id": "in_2", "subscription": "sub_1", "customer": "cus_1", "amount_due": 1500, "currency": "usd"},
        )

        assert post_event(event).status_code == 200
        assert store.get_account("u1").subscription_status == "past_due"
        assert [(p.status, p.amount) for p in store.list_payments()] == [("failed", 1500)]

    def test_subscription_created_for_unknown_customer_is_soft(self, store, post_event):
        store.create_account("u1", subscription_status="trial")

        resp = post_event(
            stripe_event("customer.subscription.created", {"id": "sub_1", "customer": "cus_1", "status": "active"})
        )

        assert resp.status_code == 200
        account = store.get_account("u1")
        assert account.subscription_status == "trial"
        assert account.subscription_id is None

    def test_payment_checkout_does_not_unlink_subscription(self, store, subscribed, post_event):
        checkout = stripe_event(
            "checkout.session.completed",
            {"id": "cs_2", "mode": "payment", "client_reference_id": "u1", "subscription": None, "customer": None},
        )
        assert post_event(checkout).status_code == 200

        account = store.get_account("u1")
        assert account.subscription_id == "sub_1"
        assert account.customer_id == "cus_1"

        # 이후 구독 이벤트가 여전히 계정을 찾아야 한다
        deleted = stripe_event("customer.subscription.deleted", {"id": "sub_1", "canceled_at": 1760000000})
        assert post_event(deleted).status_code == 200
        assert store.get_account("u1").subscription_status == "expired"

    def test_store_failure_is_server_error(self, store, subscribed, post_event, monkeypatch):
        store.update_account("u1", subscription_status="past_due")

        def boom(**kwargs):
            raise OperationalError("INSERT INTO payments", {}, Exception("connection lost"))

        monkeypatch.setattr(store, "add_payment", boom)

        resp = post_event(_invoice_paid())

        assert resp.status_code == 500
        assert "error" in resp.json()
        assert store.get_account("u1").subscription_status == "past_due"
        assert store.list_payments() == []


class TestPolicies:
    @pytest.fixture
    def settings(self, settings):
        return settings.model_copy(update={"lookup_miss_policy": "retry", "dedupe_payments": True})

    def test_lookup_miss_asks_for_redelivery(self, post_event):
        resp = post_event(stripe_event("customer.subscription.deleted", {"id": "sub_missing"}))

        assert resp.status_code == 500
        assert "sub_missing" in resp.json()["error"]

    def test_dedupe_records_payment_once(self, store, subscribed, post_event):
        event = _invoice_paid(event_id="evt_paid")

        assert post_event(event).status_code == 200
        assert post_event(event).status_code == 200
        assert len(store.list_payments(invoice_id="in_1")) == 1


class TestReadEndpoints:
    @pytest.mark.parametrize("path", ["/", "/health"])
    def test_health(self, client, path):
        resp = client.get(path)

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "OK"
        assert body["service"] == "subsync"
        assert body["message"] == "subsync is running"
        assert "timestamp" in body

    def test_db_ping(self, client):
        assert client.get("/db-ping").json() == {"db": "ok"}

    def test_subscription_status(self, client, store, post_event):
        store.create_account("u1", subscription_status="trial")
        post_event(
            stripe_event(
                "checkout.session.completed",
                {"id": "cs_1", "client_reference_id": "u1", "subscription": "sub_1", "customer": "cus_1"},
            )
        )

        resp = client.get("/subscription-status/u1")

        assert resp.status_code == 200
        assert resp.json() == {
            "subscriptionStatus": "active",
            "subscriptionId": "sub_1",
            "currentPeriodEnd": None,
            "trialEndDate": None,
        }

    def test_subscription_status_unknown_user(self, client):
        assert client.get("/subscription-status/nobody").status_code == 404
