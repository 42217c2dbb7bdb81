from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Numeric, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    slug = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=False)
    short_description = Column(String(500))

    price = Column(Numeric(10, 2), nullable=False)
    compare_price = Column(Numeric(10, 2), nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    sku = Column(String, nullable=False, unique=True)

    # inventory
    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=5)
    track_inventory = Column(Boolean, nullable=False, default=True)
    allow_backorders = Column(Boolean, nullable=False, default=False)

    rating_average = Column(Float, nullable=False, default=0.0)
    rating_count = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_featured = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    category = relationship("CategoryModel")
    tag_rows = relationship(
        "ProductTagModel",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [t.tag for t in self.tag_rows]


class ProductTagModel(Base):
    __tablename__ = "product_tags"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    tag = Column(String, nullable=False, index=True)

    product = relationship("ProductModel", back_populates="tag_rows")

    __table_args__ = (UniqueConstraint("product_id", "tag", name="u_product_tag"),)
