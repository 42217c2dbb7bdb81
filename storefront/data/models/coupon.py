from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric

from storefront.data.database import Base


class CouponModel(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True)
    code = Column(String, nullable=False, unique=True)  # zawsze upper
    description = Column(String)

    discount_type = Column(String, nullable=False)  # percentage, fixed
    discount_value = Column(Numeric(10, 2), nullable=False)
    min_purchase = Column(Numeric(10, 2), nullable=True)
    max_discount = Column(Numeric(10, 2), nullable=True)

    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
