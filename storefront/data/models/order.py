from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, JSON, Text
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String, nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=False)

    # embedded payment record
    payment_method = Column(String, nullable=False)  # razorpay, stripe, cod
    payment_status = Column(String, nullable=False, default="pending", index=True)
    payment_transaction_id = Column(String, nullable=True, index=True)
    payment_provider = Column(String, nullable=True)
    # id obiektu platnosci u dostawcy (razorpay order, stripe intent)
    payment_reference = Column(String, nullable=True)
    payment_paid_at = Column(DateTime(timezone=True), nullable=True)
    payment_amount = Column(Numeric(10, 2), nullable=False)

    status = Column(String, nullable=False, default="pending", index=True)
    fulfillment_status = Column(String, nullable=False, default="unfulfilled")

    subtotal = Column(Numeric(10, 2), nullable=False)
    shipping_cost = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    coupon_code = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    tracking_number = Column(String, nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItemModel.id",
    )
