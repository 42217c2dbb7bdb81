# storefront/repos/product_repo.py
from sqlalchemy import select, update, func, or_
from sqlalchemy.orm import Session

from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel, ProductTagModel
from storefront.domain.schemas import ProductFilter
from storefront.utils.clock import utcnow

SORT_COLUMNS = {
    "newest": ProductModel.created_at.desc(),
    "price-asc": ProductModel.price.asc(),
    "price-desc": ProductModel.price.desc(),
    "popular": ProductModel.rating_count.desc(),
    "rating": ProductModel.rating_average.desc(),
}


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_by_slug(self, slug: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.slug == slug)
        ).scalar_one_or_none()

    def get_by_sku(self, sku: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.sku == sku)
        ).scalar_one_or_none()

    def slug_exists(self, slug: str) -> bool:
        return self.db.execute(
            select(ProductModel.id).where(ProductModel.slug == slug)
        ).first() is not None

    def _filtered(self, stmt, filters: ProductFilter, active_only: bool):
        if active_only:
            stmt = stmt.where(ProductModel.is_active.is_(True))
        if filters.category is not None:
            stmt = stmt.where(ProductModel.category_id == filters.category)
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            stmt = stmt.where(
                or_(
                    ProductModel.name.ilike(pattern),
                    ProductModel.description.ilike(pattern),
                    ProductModel.sku.ilike(pattern),
                )
            )
        if filters.min_price is not None:
            stmt = stmt.where(ProductModel.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(ProductModel.price <= filters.max_price)
        if filters.rating is not None:
            stmt = stmt.where(ProductModel.rating_average >= filters.rating)
        if filters.featured:
            stmt = stmt.where(ProductModel.is_featured.is_(True))
        if filters.in_stock:
            stmt = stmt.where(
                or_(ProductModel.track_inventory.is_(False), ProductModel.quantity > 0)
            )
        if filters.tags:
            tagged = select(ProductTagModel.product_id).where(ProductTagModel.tag.in_(filters.tags))
            stmt = stmt.where(ProductModel.id.in_(tagged))
        return stmt

    def list_products(
        self,
        filters: ProductFilter,
        sort: str,
        page: int,
        limit: int,
        active_only: bool = True,
    ) -> tuple[list[ProductModel], int]:
        query = self._filtered(select(ProductModel), filters, active_only)
        query = query.order_by(SORT_COLUMNS[sort], ProductModel.id.desc())
        query = query.offset((page - 1) * limit).limit(limit)

        count = self._filtered(select(func.count(ProductModel.id)), filters, active_only)

        items = list(self.db.execute(query).scalars().all())
        total = self.db.execute(count).scalar_one()
        return items, total

    def create(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def save(self, product: ProductModel) -> ProductModel:
        self.db.commit()
        self.db.refresh(product)
        return product

    def has_orders(self, product_id: int) -> bool:
        return self.db.execute(
            select(OrderItemModel.id).where(OrderItemModel.product_id == product_id).limit(1)
        ).first() is not None

    def delete(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.commit()

    def reserve_stock(self, product_id: int, expected_quantity: int, new_quantity: int) -> int:
        """
        Optimistic CAS na polu quantity:
        update products set quantity = new where id = ? and quantity = expected
        Zwraca rowcount, 0 oznacza ze ktos inny zmienil stan magazynu. Nie commituje.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.quantity == expected_quantity,
            )
            .values(quantity=new_quantity, updated_at=utcnow())
        )
        return result.rowcount

    def low_stock(self, limit: int | None = None) -> list[ProductModel]:
        stmt = (
            select(ProductModel)
            .where(
                ProductModel.is_active.is_(True),
                ProductModel.track_inventory.is_(True),
                ProductModel.quantity > 0,
                ProductModel.quantity <= ProductModel.low_stock_threshold,
            )
            .order_by(ProductModel.quantity.asc(), ProductModel.id.asc())
        )
        if limit:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars().all())
