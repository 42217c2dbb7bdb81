"""Pytest fixtures for storefront tests."""

import os

# ustawienia czytane sa przy imporcie, wiec env musi byc gotowy wczesniej
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_secret")

from datetime import timedelta
from decimal import Decimal
from itertools import count

import pytest
import requests
from fastapi.testclient import TestClient

from storefront.api.deps import get_payment_providers
from storefront.data.database import Base, SessionLocal, engine, init_db
from storefront.data.models import CategoryModel, CouponModel, ProductModel, UserModel
from storefront.main import app
from storefront.services.payment_providers import RazorpayProvider, StripeProvider
from storefront.services.rate_limiter import MemoryWindowStore, RateLimiter
from storefront.utils.clock import utcnow

USER_ID = 1
OTHER_USER_ID = 2
ADMIN_ID = 99


def user_headers(user_id: int = USER_ID) -> dict:
    return {"X-User-Id": str(user_id), "X-User-Role": "user"}


def admin_headers(user_id: int = ADMIN_ID) -> dict:
    return {"X-User-Id": str(user_id), "X-User-Role": "admin"}


ADDRESS = {
    "name": "Asha Rao",
    "phone": "+91 98765 43210",
    "addressLine1": "12 MG Road",
    "city": "Bengaluru",
    "state": "KA",
    "postalCode": "560001",
    "country": "IN",
}


class FakeResponse:
    def __init__(self, status_code: int, payload: dict):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._payload


class FakeProviderSession:
    """In-memory stand-in for both payment provider HTTP APIs."""

    def __init__(self):
        self.calls = []
        self.intents = {}
        self.fail_with = None
        self._ids = count(1)

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

        if method == "POST" and url.endswith("/orders"):
            body = kwargs["json"]
            return FakeResponse(
                200,
                {"id": f"order_{next(self._ids)}", "amount": body["amount"], "currency": body["currency"]},
            )

        if method == "POST" and url.endswith("/payment_intents"):
            data = kwargs["data"]
            intent_id = f"pi_{next(self._ids)}"
            self.intents[intent_id] = {
                "id": intent_id,
                "client_secret": f"{intent_id}_secret",
                "amount": data["amount"],
                "status": "requires_payment_method",
                "metadata": {"orderId": data["metadata[orderId]"], "userId": data["metadata[userId]"]},
            }
            return FakeResponse(200, self.intents[intent_id])

        if method == "GET" and "/payment_intents/" in url:
            intent = self.intents.get(url.rsplit("/", 1)[-1])
            if intent is None:
                return FakeResponse(404, {"error": {"message": "No such payment_intent"}})
            return FakeResponse(200, intent)

        return FakeResponse(404, {})

    def succeed(self, intent_id: str):
        self.intents[intent_id]["status"] = "succeeded"


@pytest.fixture
def provider_session():
    return FakeProviderSession()


@pytest.fixture
def providers(provider_session):
    return {
        "razorpay": RazorpayProvider(
            key_id="rzp_test_key",
            key_secret="rzp_test_secret",
            base_url="https://razorpay.test/v1",
            session=provider_session,
        ),
        "stripe": StripeProvider(
            secret_key="sk_test_secret",
            base_url="https://stripe.test/v1",
            session=provider_session,
        ),
    }


@pytest.fixture(autouse=True)
def database():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(providers):
    previous_limiter = app.state.rate_limiter
    app.state.rate_limiter = RateLimiter(MemoryWindowStore(), max_requests=1000, window_seconds=60)
    app.dependency_overrides[get_payment_providers] = lambda: providers
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        app.state.rate_limiter = previous_limiter


@pytest.fixture
def users(db):
    db.add_all(
        [
            UserModel(id=USER_ID, name="Asha Rao", email="asha@example.com"),
            UserModel(id=OTHER_USER_ID, name="Ravi Iyer", email="ravi@example.com"),
            UserModel(id=ADMIN_ID, name="Admin", email="admin@example.com", role="admin"),
        ]
    )
    db.commit()


@pytest.fixture
def category(db):
    c = CategoryModel(name="Apparel", slug="apparel")
    db.add(c)
    db.commit()
    return c


@pytest.fixture
def make_product(db, category):
    skus = count(1)

    def _make(price="300.00", quantity=10, **overrides):
        n = next(skus)
        fields = dict(
            name=f"Product {n}",
            slug=f"product-{n}",
            description="Test product",
            price=Decimal(price),
            category_id=category.id,
            sku=f"SKU-{n:03d}",
            quantity=quantity,
        )
        fields.update(overrides)
        p = ProductModel(**fields)
        db.add(p)
        db.commit()
        return p

    return _make


@pytest.fixture
def make_coupon(db):
    def _make(code="SAVE10", **overrides):
        now = utcnow()
        fields = dict(
            code=code,
            discount_type="percentage",
            discount_value=Decimal("10"),
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=30),
        )
        fields.update(overrides)
        c = CouponModel(**fields)
        db.add(c)
        db.commit()
        return c

    return _make


@pytest.fixture
def place_order(client, users):
    def _place(items, coupon_code=None, user_id=USER_ID, **extra):
        body = {"items": items, "shippingAddress": ADDRESS, "paymentMethod": "razorpay", **extra}
        if coupon_code is not None:
            body["couponCode"] = coupon_code
        return client.post("/api/orders", json=body, headers=user_headers(user_id))

    return _place
