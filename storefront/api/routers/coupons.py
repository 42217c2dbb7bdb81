# storefront/api/routers/coupons.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import CouponCreate, CouponEvaluationOut, CouponOut, CouponValidateIn, Envelope
from storefront.services.coupon_service import CouponService

router = APIRouter(prefix="/api/coupons", tags=["coupons"])


@router.post("", response_model=Envelope[CouponOut], status_code=201)
def create_coupon(
    payload: CouponCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"data": CouponService(db).create_coupon(payload), "message": "Coupon created"}


@router.post("/validate", response_model=Envelope[CouponEvaluationOut])
def validate_coupon(
    payload: CouponValidateIn,
    db: Session = Depends(get_db),
):
    """Podglad rabatu w koszyku, nie zmienia licznika uzyc."""
    evaluation = CouponService(db).evaluate(payload.code, payload.subtotal)
    return {"data": evaluation.to_dict()}
