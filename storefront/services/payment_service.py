# storefront/services/payment_service.py
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.pricing import money
from storefront.repos.order_repo import OrderRepo
from storefront.services.order_service import OrderService
from storefront.services.payment_providers import PaymentProvider
from storefront.services.serializers import order_to_dict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentService:
    """
    Platnosci niezalezne od dostawcy.
    initiate -> obiekt platnosci u dostawcy, confirm -> weryfikacja + zmiana stanu zamowienia.
    """

    def __init__(self, db: Session, order_service: OrderService | None = None):
        self.repo = OrderRepo(db)
        self.orders = order_service or OrderService(db)

    def _owned_order(self, order_id: int, user_id: int):
        order = self.repo.get_user_order(order_id, user_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def initiate(
        self,
        provider: PaymentProvider,
        user_id: int,
        order_id: int,
        amount: Decimal | None = None,
    ) -> Dict[str, Any]:
        order = self._owned_order(order_id, user_id)

        if order.payment_status == "completed":
            raise ValidationError("Order is already paid")
        if order.status in ("cancelled", "refunded"):
            raise ValidationError(f"Order is {order.status}")

        charge = money(order.total)
        if amount is not None and money(amount) != charge:
            raise ValidationError("Amount does not match order total")

        logger.info(f"Initiating {provider.name} payment for order {order.order_number}: {charge}")
        initiated = provider.initiate(order.id, user_id, charge)

        # potwierdzenie przyjmujemy tylko dla obiektu wystawionego dla tego zamowienia
        order.payment_provider = provider.name
        order.payment_reference = initiated[provider.reference_field]
        self.repo.commit()
        return initiated

    def confirm(
        self,
        provider: PaymentProvider,
        user_id: int,
        order_id: int,
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        order = self._owned_order(order_id, user_id)

        reference = order.payment_reference if order.payment_provider == provider.name else None
        transaction_id = provider.verify(order.id, payload, reference)
        order = self.orders.record_payment(order, transaction_id, provider.name)
        return order_to_dict(order)
