# storefront/services/coupon_service.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel
from storefront.domain.errors import ValidationError
from storefront.domain.pricing import ZERO, coupon_discount, money
from storefront.domain.schemas import CouponCreate
from storefront.repos.coupon_repo import CouponRepo, normalize_code
from storefront.services.serializers import coupon_to_dict
from storefront.utils.clock import as_utc, utcnow
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CouponEvaluation:
    code: str
    valid: bool
    discount: Decimal = ZERO
    reason: Optional[str] = None
    coupon: Optional[CouponModel] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "valid": self.valid,
            "reason": self.reason,
            "discount": self.discount,
        }


def check_coupon(coupon: CouponModel, subtotal: Decimal, now: datetime) -> Optional[str]:
    """Return the first failing rule's message, or None when the coupon applies."""
    if not coupon.is_active:
        return "Coupon is not active"
    if now < as_utc(coupon.start_date):
        return "Coupon is not yet valid"
    if now > as_utc(coupon.end_date):
        return "Coupon has expired"
    if coupon.usage_limit is not None and coupon.usage_count >= coupon.usage_limit:
        return "Coupon usage limit reached"
    if coupon.min_purchase is not None and subtotal < coupon.min_purchase:
        return f"Minimum purchase of {money(coupon.min_purchase)} required"
    return None


class CouponService:
    def __init__(self, db: Session):
        self.repo = CouponRepo(db)

    def evaluate(self, code: str, subtotal: Decimal, now: datetime | None = None) -> CouponEvaluation:
        normalized = normalize_code(code)
        coupon = self.repo.get_by_code(normalized)
        if not coupon:
            return CouponEvaluation(code=normalized, valid=False, reason="Coupon not found")

        reason = check_coupon(coupon, subtotal, now or utcnow())
        if reason:
            return CouponEvaluation(code=normalized, valid=False, reason=reason, coupon=coupon)

        discount = coupon_discount(
            subtotal,
            coupon.discount_type,
            coupon.discount_value,
            coupon.max_discount,
        )
        return CouponEvaluation(code=normalized, valid=True, discount=discount, coupon=coupon)

    def create_coupon(self, payload: CouponCreate) -> Dict[str, Any]:
        code = normalize_code(payload.code)
        if not code:
            raise ValidationError("Coupon code is required")
        if self.repo.get_by_code(code):
            raise ValidationError("Coupon code already exists")
        if as_utc(payload.end_date) <= as_utc(payload.start_date):
            raise ValidationError("endDate must be after startDate")
        if payload.discount_type == "percentage" and payload.discount_value > 100:
            raise ValidationError("Percentage discount cannot exceed 100")

        created = self.repo.create(
            CouponModel(
                code=code,
                description=payload.description,
                discount_type=payload.discount_type,
                discount_value=payload.discount_value,
                min_purchase=payload.min_purchase,
                max_discount=payload.max_discount,
                usage_limit=payload.usage_limit,
                usage_count=0,
                start_date=payload.start_date,
                end_date=payload.end_date,
                is_active=payload.is_active,
            )
        )
        logger.info(f"Utworzono kupon {created.code}")
        return coupon_to_dict(created)
