"""Tests for coupon evaluation and the coupon endpoints."""

from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import admin_headers, user_headers
from storefront.services.coupon_service import CouponService
from storefront.utils.clock import utcnow


class TestEvaluate:
    def test_valid_percentage(self, db, make_coupon):
        make_coupon(code="SAVE10")
        evaluation = CouponService(db).evaluate(" save10 ", Decimal("400"))
        assert evaluation.valid
        assert evaluation.code == "SAVE10"
        assert evaluation.discount == Decimal("40.00")

    def test_max_discount_applies(self, db, make_coupon):
        make_coupon(code="CAP", max_discount=Decimal("50"))
        assert CouponService(db).evaluate("CAP", Decimal("1000")).discount == Decimal("50.00")

    @pytest.mark.parametrize(
        "overrides,reason",
        [
            ({"is_active": False}, "Coupon is not active"),
            ({"start_date_offset": 2}, "Coupon is not yet valid"),
            ({"end_date_offset": -1}, "Coupon has expired"),
            ({"usage_limit": 5, "usage_count": 5}, "Coupon usage limit reached"),
            ({"min_purchase": Decimal("500")}, "Minimum purchase of 500.00 required"),
        ],
    )
    def test_invalid(self, db, make_coupon, overrides, reason):
        now = utcnow()
        if "start_date_offset" in overrides:
            overrides["start_date"] = now + timedelta(days=overrides.pop("start_date_offset"))
        if "end_date_offset" in overrides:
            overrides["end_date"] = now + timedelta(days=overrides.pop("end_date_offset"))
        make_coupon(code="RULE", **overrides)

        evaluation = CouponService(db).evaluate("RULE", Decimal("400"))

        assert not evaluation.valid
        assert evaluation.reason == reason
        assert evaluation.discount == Decimal("0.00")

    def test_unknown_code(self, db):
        evaluation = CouponService(db).evaluate("nothing", Decimal("400"))
        assert not evaluation.valid
        assert evaluation.reason == "Coupon not found"


class TestCouponEndpoints:
    def _body(self, **overrides):
        now = utcnow()
        body = {
            "code": "summer25",
            "discountType": "percentage",
            "discountValue": "25",
            "maxDiscount": "300",
            "startDate": (now - timedelta(hours=1)).isoformat(),
            "endDate": (now + timedelta(days=10)).isoformat(),
        }
        body.update(overrides)
        return body

    def test_create_normalizes_code(self, client, users):
        response = client.post("/api/coupons", json=self._body(), headers=admin_headers())
        assert response.status_code == 201
        coupon = response.json()["data"]
        assert coupon["code"] == "SUMMER25"
        assert coupon["usageCount"] == 0

    def test_create_rejects_bad_window(self, client, users):
        now = utcnow()
        response = client.post(
            "/api/coupons",
            json=self._body(startDate=now.isoformat(), endDate=(now - timedelta(days=1)).isoformat()),
            headers=admin_headers(),
        )
        assert response.status_code == 400

    def test_create_rejects_percentage_over_100(self, client, users):
        response = client.post("/api/coupons", json=self._body(discountValue="150"), headers=admin_headers())
        assert response.status_code == 400

    def test_create_duplicate(self, client, users):
        client.post("/api/coupons", json=self._body(), headers=admin_headers())
        response = client.post("/api/coupons", json=self._body(code="SUMMER25"), headers=admin_headers())
        assert response.status_code == 400

    def test_create_requires_admin(self, client, users):
        response = client.post("/api/coupons", json=self._body(), headers=user_headers())
        assert response.status_code == 401

    def test_validate(self, client, users, make_coupon):
        make_coupon(code="SAVE10")
        response = client.post(
            "/api/coupons/validate",
            json={"code": "save10", "subtotal": "250"},
            headers=user_headers(),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["valid"] is True
        assert Decimal(data["discount"]) == Decimal("25.00")

    def test_validate_does_not_consume_usage(self, client, db, users, make_coupon):
        coupon = make_coupon(code="ONCE", usage_limit=1)
        for _ in range(2):
            response = client.post(
                "/api/coupons/validate",
                json={"code": "ONCE", "subtotal": "250"},
                headers=user_headers(),
            )
            assert response.json()["data"]["valid"] is True
        db.refresh(coupon)
        assert coupon.usage_count == 0
