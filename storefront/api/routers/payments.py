# storefront/api/routers/payments.py
from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, get_payment_providers, get_principal
from storefront.data.database import get_db
from storefront.domain.schemas import (
    Envelope,
    OrderOut,
    PaymentInitiateIn,
    RazorpayOrderOut,
    RazorpayVerifyIn,
    StripeConfirmIn,
    StripeIntentOut,
)
from storefront.services.payment_providers import PaymentProvider
from storefront.services.payment_service import PaymentService

router = APIRouter(prefix="/api/payment", tags=["payments"])


@router.post("/razorpay", response_model=Envelope[RazorpayOrderOut])
def create_razorpay_order(
    payload: PaymentInitiateIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    providers: Dict[str, PaymentProvider] = Depends(get_payment_providers),
):
    data = PaymentService(db).initiate(providers["razorpay"], principal.user_id, payload.order_id, payload.amount)
    return {"data": data}


@router.put("/razorpay", response_model=Envelope[OrderOut])
def verify_razorpay_payment(
    payload: RazorpayVerifyIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    providers: Dict[str, PaymentProvider] = Depends(get_payment_providers),
):
    order = PaymentService(db).confirm(
        providers["razorpay"], principal.user_id, payload.order_id, payload.model_dump()
    )
    return {"data": order, "message": "Payment verified successfully"}


@router.post("/stripe", response_model=Envelope[StripeIntentOut])
def create_stripe_intent(
    payload: PaymentInitiateIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    providers: Dict[str, PaymentProvider] = Depends(get_payment_providers),
):
    data = PaymentService(db).initiate(providers["stripe"], principal.user_id, payload.order_id, payload.amount)
    return {"data": data}


@router.put("/stripe", response_model=Envelope[OrderOut])
def confirm_stripe_payment(
    payload: StripeConfirmIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    providers: Dict[str, PaymentProvider] = Depends(get_payment_providers),
):
    order = PaymentService(db).confirm(
        providers["stripe"], principal.user_id, payload.order_id, payload.model_dump()
    )
    return {"data": order, "message": "Payment confirmed successfully"}
