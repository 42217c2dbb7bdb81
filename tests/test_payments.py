"""Tests for the payment providers and the payment endpoints."""

import hashlib
import hmac
from decimal import Decimal

import pytest
import requests

from conftest import OTHER_USER_ID, USER_ID, FakeProviderSession, user_headers
from storefront.domain.errors import PaymentProviderError, ValidationError
from storefront.services.order_service import OrderService
from storefront.services.payment_providers import RazorpayProvider, StripeProvider

SECRET = "rzp_test_secret"


def _sign(provider_order_id, provider_payment_id, secret=SECRET):
    body = f"{provider_order_id}|{provider_payment_id}".encode()
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def _payload(provider_order_id="order_1", provider_payment_id="pay_1", signature=None):
    return {
        "provider_order_id": provider_order_id,
        "provider_payment_id": provider_payment_id,
        "signature": signature if signature is not None else _sign(provider_order_id, provider_payment_id),
    }


@pytest.fixture
def order(place_order, make_product):
    p = make_product(price="300.00", quantity=10)
    response = place_order([{"productId": p.id, "quantity": 2}])
    assert response.status_code == 201
    return response.json()["data"]


class TestRazorpayProvider:
    def test_initiate_sends_minor_units(self):
        session = FakeProviderSession()
        provider = RazorpayProvider("key", SECRET, "https://razorpay.test/v1", "INR", session=session)

        created = provider.initiate(7, 1, Decimal("708.00"))

        method, url, kwargs = session.calls[0]
        assert (method, url) == ("POST", "https://razorpay.test/v1/orders")
        assert kwargs["json"]["amount"] == 70800
        assert kwargs["json"]["receipt"] == "7"
        assert kwargs["auth"] == ("key", SECRET)
        assert created["amount"] == 70800
        assert created["key_id"] == "key"

    def test_valid_signature(self):
        provider = RazorpayProvider("key", SECRET, session=FakeProviderSession())
        assert provider.verify(7, _payload(), reference="order_1") == "pay_1"

    def test_tampered_signature(self):
        provider = RazorpayProvider("key", SECRET, session=FakeProviderSession())
        signature = _sign("order_1", "pay_1")
        payload = _payload(signature=signature[:-1] + ("0" if signature[-1] != "0" else "1"))
        with pytest.raises(ValidationError, match="Invalid payment signature"):
            provider.verify(7, payload, reference="order_1")

    def test_signature_for_other_payment(self):
        provider = RazorpayProvider("key", SECRET, session=FakeProviderSession())
        payload = _payload(provider_payment_id="pay_2", signature=_sign("order_1", "pay_1"))
        with pytest.raises(ValidationError):
            provider.verify(7, payload, reference="order_1")

    def test_non_ascii_signature_is_rejected(self):
        provider = RazorpayProvider("key", SECRET, session=FakeProviderSession())
        with pytest.raises(ValidationError, match="Invalid payment signature"):
            provider.verify(7, _payload(signature="zażółć"), reference="order_1")

    def test_provider_order_issued_for_another_order(self):
        provider = RazorpayProvider("key", SECRET, session=FakeProviderSession())
        # poprawny podpis, ale dla obiektu wystawionego innemu zamowieniu
        with pytest.raises(ValidationError, match="does not belong"):
            provider.verify(7, _payload("order_9", "pay_1"), reference="order_1")

    def test_verify_without_initiated_order(self):
        provider = RazorpayProvider("key", SECRET, session=FakeProviderSession())
        with pytest.raises(ValidationError, match="does not belong"):
            provider.verify(7, _payload(), reference=None)

    @pytest.mark.parametrize("secret", ["", None])
    def test_missing_secret_fails_closed(self, secret, monkeypatch):
        monkeypatch.setattr("storefront.utils.settings.RAZORPAY_KEY_SECRET", "")
        session = FakeProviderSession()
        provider = RazorpayProvider("key", secret, session=session)
        # podpis z pustym kluczem nie moze przejsc weryfikacji
        payload = _payload(signature=_sign("order_1", "pay_1", secret=""))

        with pytest.raises(PaymentProviderError, match="credentials are not configured"):
            provider.verify(7, payload, reference="order_1")
        with pytest.raises(PaymentProviderError, match="credentials are not configured"):
            provider.initiate(7, 1, Decimal("10.00"))
        assert session.calls == []

    def test_transport_error_is_wrapped(self):
        session = FakeProviderSession()
        session.fail_with = requests.ConnectionError("connection refused")
        provider = RazorpayProvider("key", SECRET, session=session)

        with pytest.raises(PaymentProviderError) as exc:
            provider.initiate(7, 1, Decimal("10.00"))
        assert exc.value.status_code == 500
        assert len(session.calls) == 1


class TestStripeProvider:
    def test_succeeded_intent(self):
        session = FakeProviderSession()
        provider = StripeProvider("sk", "https://stripe.test/v1", session=session)
        intent = provider.initiate(7, 1, Decimal("404.00"))
        session.succeed(intent["payment_intent_id"])

        assert provider.verify(7, {"payment_intent_id": intent["payment_intent_id"]}) == intent["payment_intent_id"]
        assert session.calls[0][2]["data"]["amount"] == 40400

    def test_unfinished_intent(self):
        session = FakeProviderSession()
        provider = StripeProvider("sk", session=session)
        intent = provider.initiate(7, 1, Decimal("404.00"))

        with pytest.raises(ValidationError, match="Payment not completed"):
            provider.verify(7, {"payment_intent_id": intent["payment_intent_id"]})

    def test_intent_for_other_order(self):
        session = FakeProviderSession()
        provider = StripeProvider("sk", session=session)
        intent = provider.initiate(8, 1, Decimal("404.00"))
        session.succeed(intent["payment_intent_id"])

        with pytest.raises(ValidationError, match="does not belong"):
            provider.verify(7, {"payment_intent_id": intent["payment_intent_id"]})

    def test_missing_secret_fails_closed(self, monkeypatch):
        monkeypatch.setattr("storefront.utils.settings.STRIPE_SECRET_KEY", "")
        session = FakeProviderSession()
        provider = StripeProvider("", session=session)

        with pytest.raises(PaymentProviderError, match="credentials are not configured"):
            provider.initiate(7, 1, Decimal("10.00"))
        with pytest.raises(PaymentProviderError, match="credentials are not configured"):
            provider.verify(7, {"payment_intent_id": "pi_1"})
        assert session.calls == []


def _initiate(client, order, user_id=USER_ID):
    response = client.post("/api/payment/razorpay", json={"orderId": order["id"]}, headers=user_headers(user_id))
    assert response.status_code == 200
    return response.json()["data"]["providerOrderId"]


def _verify_body(order, provider_order_id, payment_id="pay_1", secret=SECRET):
    return {
        "providerOrderId": provider_order_id,
        "providerPaymentId": payment_id,
        "signature": _sign(provider_order_id, payment_id, secret=secret),
        "orderId": order["id"],
    }


class TestRazorpayEndpoints:
    def test_initiate(self, client, order):
        response = client.post("/api/payment/razorpay", json={"orderId": order["id"]}, headers=user_headers())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["amount"] == 70800
        assert data["currency"] == "INR"
        assert data["keyId"] == "rzp_test_key"
        assert data["providerOrderId"].startswith("order_")

    def test_amount_mismatch(self, client, order):
        response = client.post(
            "/api/payment/razorpay",
            json={"orderId": order["id"], "amount": "700.00"},
            headers=user_headers(),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Amount does not match order total"

    def test_initiate_for_foreign_order(self, client, order):
        response = client.post(
            "/api/payment/razorpay",
            json={"orderId": order["id"]},
            headers=user_headers(OTHER_USER_ID),
        )
        assert response.status_code == 404

    def test_verify_confirms_order(self, client, order):
        provider_order_id = _initiate(client, order)

        response = client.put(
            "/api/payment/razorpay", json=_verify_body(order, provider_order_id), headers=user_headers()
        )

        assert response.status_code == 200
        paid = response.json()["data"]
        assert paid["status"] == "confirmed"
        assert paid["payment"]["status"] == "completed"
        assert paid["payment"]["provider"] == "razorpay"
        assert paid["payment"]["transactionId"] == "pay_1"
        assert paid["payment"]["paidAt"] is not None

    def test_verify_replay_is_idempotent(self, client, order):
        body = _verify_body(order, _initiate(client, order))
        first = client.put("/api/payment/razorpay", json=body, headers=user_headers())
        second = client.put("/api/payment/razorpay", json=body, headers=user_headers())

        assert second.status_code == 200
        assert second.json()["data"]["payment"]["paidAt"] == first.json()["data"]["payment"]["paidAt"]

    def test_second_payment_rejected(self, client, order):
        provider_order_id = _initiate(client, order)
        for payment_id, expected in (("pay_1", 200), ("pay_2", 400)):
            body = _verify_body(order, provider_order_id, payment_id)
            response = client.put("/api/payment/razorpay", json=body, headers=user_headers())
            assert response.status_code == expected

        assert response.json()["error"] == "Order is already paid"

    def test_verify_without_initiate(self, client, order):
        response = client.put(
            "/api/payment/razorpay", json=_verify_body(order, "order_1"), headers=user_headers()
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Payment does not belong to this order"

    def test_provider_order_of_another_order_is_rejected(self, client, place_order, make_product):
        p = make_product(price="300.00", quantity=10)
        first = place_order([{"productId": p.id, "quantity": 1}]).json()["data"]
        second = place_order([{"productId": p.id, "quantity": 1}]).json()["data"]
        first_ref = _initiate(client, first)
        _initiate(client, second)

        # podpis poprawny, ale wystawiony dla pierwszego zamowienia
        response = client.put(
            "/api/payment/razorpay", json=_verify_body(second, first_ref), headers=user_headers()
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Payment does not belong to this order"
        current = client.get(f"/api/orders/{second['id']}", headers=user_headers()).json()["data"]
        assert current["payment"]["status"] == "pending"

    def test_non_ascii_signature(self, client, order):
        body = _verify_body(order, _initiate(client, order))
        body["signature"] = "ąęść" * 16

        response = client.put("/api/payment/razorpay", json=body, headers=user_headers())

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid payment signature"

    def test_tampered_signature_leaves_order_pending(self, client, order):
        body = _verify_body(order, _initiate(client, order), secret="wrong")

        response = client.put("/api/payment/razorpay", json=body, headers=user_headers())

        assert response.status_code == 400
        current = client.get(f"/api/orders/{order['id']}", headers=user_headers()).json()["data"]
        assert current["status"] == "pending"
        assert current["payment"]["status"] == "pending"

    def test_paid_order_cannot_be_initiated_again(self, client, order):
        client.put("/api/payment/razorpay", json=_verify_body(order, _initiate(client, order)), headers=user_headers())

        response = client.post("/api/payment/razorpay", json={"orderId": order["id"]}, headers=user_headers())
        assert response.status_code == 400
        assert response.json()["error"] == "Order is already paid"

    def test_missing_fields(self, client, order):
        response = client.put("/api/payment/razorpay", json={"orderId": order["id"]}, headers=user_headers())
        assert response.status_code == 400


class TestTransactionBinding:
    def test_transaction_cannot_pay_two_orders(self, db, place_order, make_product):
        p = make_product(price="300.00", quantity=10)
        first = place_order([{"productId": p.id, "quantity": 1}]).json()["data"]
        second = place_order([{"productId": p.id, "quantity": 1}]).json()["data"]
        service = OrderService(db)

        service.record_payment(service.repo.get_order(first["id"]), "pay_1", "razorpay")
        with pytest.raises(ValidationError, match="Transaction already recorded for another order"):
            service.record_payment(service.repo.get_order(second["id"]), "pay_1", "razorpay")

        assert service.repo.get_order(second["id"]).payment_status == "pending"


class TestStripeEndpoints:
    def test_intent_then_confirm(self, client, order, provider_session):
        created = client.post("/api/payment/stripe", json={"orderId": order["id"]}, headers=user_headers())
        assert created.status_code == 200
        intent = created.json()["data"]
        assert intent["clientSecret"].startswith(intent["paymentIntentId"])

        provider_session.succeed(intent["paymentIntentId"])
        response = client.put(
            "/api/payment/stripe",
            json={"paymentIntentId": intent["paymentIntentId"], "orderId": order["id"]},
            headers=user_headers(),
        )

        assert response.status_code == 200
        paid = response.json()["data"]
        assert paid["status"] == "confirmed"
        assert paid["payment"]["transactionId"] == intent["paymentIntentId"]

    def test_confirm_before_payment(self, client, order):
        intent = client.post("/api/payment/stripe", json={"orderId": order["id"]}, headers=user_headers()).json()["data"]

        response = client.put(
            "/api/payment/stripe",
            json={"paymentIntentId": intent["paymentIntentId"], "orderId": order["id"]},
            headers=user_headers(),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Payment not completed"

    def test_requires_principal(self, client, order):
        response = client.post("/api/payment/stripe", json={"orderId": order["id"]})
        assert response.status_code == 401
