# storefront/data/seed.py
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.database import SessionLocal
from storefront.data.models import CategoryModel, CouponModel, ProductModel, ProductTagModel
from storefront.utils.clock import utcnow
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_CATALOG = {
    ("Apparel", "apparel"): [
        ("Cotton Tee", "APP-TEE-001", "299.00", "399.00", 40, ["cotton", "summer"]),
        ("Denim Jacket", "APP-DNM-002", "1499.00", None, 4, ["denim"]),
    ],
    ("Home", "home"): [
        ("Ceramic Mug", "HOM-MUG-001", "199.00", None, 120, ["kitchen"]),
        ("Linen Throw", "HOM-LIN-002", "899.00", "1099.00", 0, ["linen", "bedroom"]),
    ],
}


def seed_demo_data(db: Session) -> bool:
    # not forcing: only seed if empty
    if db.execute(select(ProductModel.id).limit(1)).first():
        return False

    for (category_name, category_slug), products in DEMO_CATALOG.items():
        category = CategoryModel(name=category_name, slug=category_slug)
        db.add(category)
        db.flush()
        for name, sku, price, compare_price, quantity, tags in products:
            db.add(
                ProductModel(
                    name=name,
                    slug=sku.lower(),
                    description=f"{name} from the demo catalog",
                    price=Decimal(price),
                    compare_price=Decimal(compare_price) if compare_price else None,
                    category_id=category.id,
                    sku=sku,
                    quantity=quantity,
                    tag_rows=[ProductTagModel(tag=t) for t in tags],
                )
            )

    now = utcnow()
    db.add(
        CouponModel(
            code="WELCOME10",
            description="10% off the first order",
            discount_type="percentage",
            discount_value=Decimal("10"),
            min_purchase=Decimal("300"),
            max_discount=Decimal("200"),
            usage_limit=1000,
            start_date=now,
            end_date=now + timedelta(days=365),
        )
    )
    db.commit()
    logger.info("Demo catalog seeded")
    return True


def seed():
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()
