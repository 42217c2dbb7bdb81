# storefront/api/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, get_principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import (
    Envelope,
    OrderCreate,
    OrderOut,
    OrderStatus,
    OrderStatusUpdate,
    Pagination,
)
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("", response_model=Envelope[OrderOut], status_code=201)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Sklada zamowienie: ceny, kupon, wysylka, podatek, rezerwacja stanow.
    Wysyla powiadomienie asynchronicznie.
    """
    svc = get_service(db)
    return {"data": svc.create_order(principal.user_id, payload), "message": "Order created successfully"}


@router.get("", response_model=Envelope[List[OrderOut]])
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    svc = get_service(db)
    orders, total = svc.list_orders(principal.user_id, status, page, limit)
    return {"data": orders, "pagination": Pagination.build(page, limit, total)}


@router.get("/{order_id}", response_model=Envelope[OrderOut])
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    svc = get_service(db)
    return {"data": svc.get_order(order_id, principal.user_id)}


@router.patch("/{order_id}/status", response_model=Envelope[OrderOut])
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    svc = get_service(db)
    order = svc.update_status(order_id, payload.status, payload.tracking_number)
    return {"data": order, "message": "Order status updated"}
