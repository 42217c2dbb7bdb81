from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean

from storefront.data.database import Base


class TestimonialModel(Base):
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String)
    avatar = Column(String)
    rating = Column(Integer, nullable=False)  # 1-5
    title = Column(String(200))
    content = Column(String(1000), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
