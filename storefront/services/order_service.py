# storefront/services/order_service.py
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from storefront.domain.inventory import remaining_after
from storefront.domain.pricing import ZERO, money, order_totals
from storefront.domain.schemas import OrderCreate, OrderItemIn
from storefront.domain.status import ensure_transition
from storefront.repos.coupon_repo import CouponRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.coupon_service import CouponEvaluation, CouponService
from storefront.services.notification_service import NotificationService
from storefront.services.serializers import order_to_dict
from storefront.utils.clock import utcnow
from storefront.utils.logging import get_logger
from storefront.utils.retry import conflict_retry
from storefront.utils.settings import REJECT_INVALID_COUPONS

logger = get_logger(__name__)

_BASE36 = string.digits + string.ascii_uppercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_order_number(now: datetime | None = None) -> str:
    """ORD-<base36 ms timestamp>-<3 random base36 chars>"""
    millis = int((now or utcnow()).timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(3))
    return f"ORD-{_base36(millis)}-{suffix}"


@dataclass
class _Reservation:
    product: ProductModel
    expected_quantity: int
    requested: int
    new_quantity: int


class OrderService:
    """
    Domena zamowien.
    commands: create_order (order assembler), update_status, record_payment
    query: get_order, list_orders
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.coupon_repo = CouponRepo(db)
        self.coupons = CouponService(db)
        self.notification_service = notification_service or NotificationService()

    #query
    def get_order(self, order_id: int, user_id: int) -> Dict[str, Any]:
        order = self.repo.get_user_order(order_id, user_id)
        if not order:
            raise NotFoundError("Order not found")
        return order_to_dict(order)

    def list_orders(
        self,
        user_id: int,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[List[Dict[str, Any]], int]:
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if not 1 <= limit <= 100:
            raise ValidationError("Limit must be between 1 and 100")
        orders, total = self.repo.list_user_orders(user_id, status, page, limit)
        return [order_to_dict(o) for o in orders], total

    #commands
    def create_order(self, user_id: int, payload: OrderCreate) -> Dict[str, Any]:
        """
        Use Case: zlozenie zamowienia z koszyka.

        1. Rozwiazuje produkty i sprawdza stan magazynu (bez zapisu)
        2. Liczy subtotal, kupon, wysylke, podatek, total
        3. Jedna transakcja: CAS na stanach, CAS na kuponie, insert zamowienia
        4. Powiadomienie (async)

        Konflikt CAS = rollback calosci i ponowienie od kroku 1.
        """
        if not payload.items or not payload.shipping_address or not payload.payment_method:
            raise ValidationError("Missing required fields")
        if not self.users.get_user(user_id):
            # profil nie zsynchronizowany przez dostawce tozsamosci
            raise NotFoundError("User not found")

        order = self._place_order(user_id, payload)

        logger.info(
            f"Order {order.order_number} created for user {user_id}: "
            f"subtotal={order.subtotal} discount={order.discount} total={order.total}"
        )
        self.notification_service.order_placed(user_id, order.order_number, order.total)
        return order_to_dict(order)

    @conflict_retry()
    def _place_order(self, user_id: int, payload: OrderCreate) -> OrderModel:
        try:
            lines, reservations, subtotal = self._resolve_lines(payload.items)
            evaluation = self._evaluate_coupon(payload.coupon_code, subtotal)
            discount = evaluation.discount if evaluation and evaluation.valid else ZERO
            totals = order_totals(subtotal, discount)

            for r in reservations:
                if self.products.reserve_stock(r.product.id, r.expected_quantity, r.new_quantity) == 0:
                    logger.warning(f"Stock of product {r.product.id} changed concurrently, retrying")
                    raise ConflictError("Inventory changed while placing the order, please retry")

            coupon_code = None
            if evaluation and evaluation.valid:
                coupon = evaluation.coupon
                if self.coupon_repo.increment_usage(coupon.id, coupon.usage_count) == 0:
                    logger.warning(f"Usage of coupon {coupon.code} changed concurrently, retrying")
                    raise ConflictError("Coupon usage changed while placing the order, please retry")
                coupon_code = coupon.code

            shipping = payload.shipping_address.model_dump()
            billing = payload.billing_address.model_dump() if payload.billing_address else shipping

            order = OrderModel(
                order_number=generate_order_number(),
                user_id=user_id,
                items=lines,
                shipping_address=shipping,
                billing_address=billing,
                payment_method=payload.payment_method,
                payment_status="pending",
                payment_amount=totals.total,
                status="pending",
                fulfillment_status="unfulfilled",
                subtotal=totals.subtotal,
                shipping_cost=totals.shipping_cost,
                tax=totals.tax,
                discount=totals.discount,
                total=totals.total,
                coupon_code=coupon_code,
                notes=payload.notes,
            )
            self.repo.add(order)
            self.repo.commit()
        except Exception:
            # nic nie zostaje zarezerwowane jesli cokolwiek po drodze padnie
            self.repo.rollback()
            raise

        return order

    def _resolve_lines(
        self, items: List[OrderItemIn]
    ) -> tuple[List[OrderItemModel], List[_Reservation], Decimal]:
        lines: List[OrderItemModel] = []
        reservations: Dict[int, _Reservation] = {}
        subtotal = ZERO

        for item in items:
            product = self.products.get(item.product_id)
            if not product:
                raise NotFoundError(f"Product not found: {item.product_id}")
            if not product.is_active:
                raise ValidationError(f"Product is not available: {product.name}")

            if product.track_inventory:
                reservation = reservations.get(product.id)
                requested = item.quantity + (reservation.requested if reservation else 0)
                remaining = remaining_after(product.quantity, requested, product.allow_backorders)
                if remaining is None:
                    raise InsufficientStockError(product.name)
                reservations[product.id] = _Reservation(
                    product=product,
                    expected_quantity=product.quantity,
                    requested=requested,
                    new_quantity=remaining,
                )

            price = money(product.price)
            line_total = money(price * item.quantity)
            subtotal += line_total

            lines.append(
                OrderItemModel(
                    product=product,
                    variant_id=item.variant_id,
                    quantity=item.quantity,
                    price=price,
                    total=line_total,
                )
            )

        return lines, list(reservations.values()), subtotal

    def _evaluate_coupon(self, code: str | None, subtotal: Decimal) -> CouponEvaluation | None:
        if not code or not code.strip():
            return None

        evaluation = self.coupons.evaluate(code, subtotal)
        if evaluation.valid:
            logger.info(f"Coupon {evaluation.code} applied, discount {evaluation.discount}")
            return evaluation

        if REJECT_INVALID_COUPONS:
            raise ValidationError(f"Invalid coupon: {evaluation.reason}")

        logger.warning(f"Coupon {evaluation.code} ignored: {evaluation.reason}")
        return evaluation

    def update_status(self, order_id: int, status: str, tracking_number: str | None = None) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        ensure_transition(order.status, status)

        if order.status == status:
            # idempotentnie, ewentualnie dopisz numer przesylki
            if status == "shipped" and tracking_number and tracking_number != order.tracking_number:
                order.tracking_number = tracking_number
                self.repo.commit()
                self.repo.refresh(order)
            return order_to_dict(order)

        previous = order.status
        now = utcnow()
        order.status = status

        if status == "shipped":
            order.shipped_at = now
            if tracking_number:
                order.tracking_number = tracking_number
        elif status == "delivered":
            order.delivered_at = now
            order.fulfillment_status = "fulfilled"

        self.repo.commit()
        self.repo.refresh(order)

        logger.info(f"Order {order.order_number} status {previous} -> {status}")
        self.notification_service.status_changed(order.user_id, order.order_number, status)
        return order_to_dict(order)

    def record_payment(self, order: OrderModel, transaction_id: str, provider: str) -> OrderModel:
        """Mark the order paid and confirmed in one commit; replays of the same transaction are no-ops."""
        if order.payment_status == "completed":
            if order.payment_transaction_id == transaction_id:
                logger.info(f"Payment {transaction_id} for order {order.order_number} already recorded")
                return order
            raise ValidationError("Order is already paid")

        owner = self.repo.transaction_owner(transaction_id)
        if owner is not None and owner != order.id:
            logger.warning(f"Transaction {transaction_id} already recorded on order {owner}")
            raise ValidationError("Transaction already recorded for another order")

        ensure_transition(order.status, "confirmed")

        order.payment_status = "completed"
        order.payment_transaction_id = transaction_id
        order.payment_provider = provider
        order.payment_paid_at = utcnow()
        order.status = "confirmed"
        self.repo.commit()
        self.repo.refresh(order)

        logger.info(f"Order {order.order_number} paid via {provider} ({transaction_id})")
        self.notification_service.payment_confirmed(order.user_id, order.order_number, provider)
        return order
