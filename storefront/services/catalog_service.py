# storefront/services/catalog_service.py
from typing import Any, Dict, List

from slugify import slugify
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel, ProductTagModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.schemas import (
    CategoryCreate,
    ProductCreate,
    ProductFilter,
    ProductUpdate,
)
from storefront.repos.category_repo import CategoryRepo
from storefront.repos.product_repo import ProductRepo, SORT_COLUMNS
from storefront.services.serializers import category_to_dict, product_to_dict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


class CatalogService:
    """
    Produkty i kategorie.
    query: list/get, commands (admin): create/update/delete
    """

    def __init__(self, db: Session):
        self.products = ProductRepo(db)
        self.categories = CategoryRepo(db)

    #query
    def list_products(
        self,
        filters: ProductFilter,
        sort: str = "newest",
        page: int = 1,
        limit: int = 12,
    ) -> tuple[List[Dict[str, Any]], int]:
        if sort not in SORT_COLUMNS:
            raise ValidationError(f"Unknown sort key: {sort}")
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise ValidationError("minPrice cannot be greater than maxPrice")

        items, total = self.products.list_products(filters, sort, page, limit)
        return [product_to_dict(p) for p in items], total

    def get_product(self, id_or_slug: str) -> Dict[str, Any]:
        product = None
        if id_or_slug.isdigit():
            product = self.products.get(int(id_or_slug))
        if product is None:
            product = self.products.get_by_slug(id_or_slug)
        if product is None:
            raise NotFoundError("Product not found")
        return product_to_dict(product)

    def list_categories(self, parent_only: bool = False, include_inactive: bool = False) -> List[Dict[str, Any]]:
        return [
            category_to_dict(c)
            for c in self.categories.list_categories(parent_only=parent_only, include_inactive=include_inactive)
        ]

    #commands
    def create_category(self, payload: CategoryCreate) -> Dict[str, Any]:
        slug = payload.slug or slugify(payload.name)
        if not slug:
            raise ValidationError("Category slug cannot be empty")
        if self.categories.slug_exists(slug):
            raise ValidationError("Category slug already exists")
        if payload.parent_id is not None and not self.categories.get(payload.parent_id):
            raise NotFoundError("Parent category not found")

        created = self.categories.create(
            CategoryModel(
                name=payload.name.strip(),
                slug=slug,
                description=payload.description,
                image=payload.image,
                parent_id=payload.parent_id,
                is_active=payload.is_active,
                sort_order=payload.sort_order,
            )
        )
        logger.info(f"Utworzono kategorie {created.id} ({created.slug})")
        return category_to_dict(created)

    def create_product(self, payload: ProductCreate) -> Dict[str, Any]:
        if self.products.get_by_sku(payload.sku):
            raise ValidationError("SKU already exists")
        if not self.categories.get(payload.category_id):
            raise NotFoundError("Category not found")

        slug = self._free_product_slug(payload.slug or slugify(payload.name), payload.sku)

        product = ProductModel(
            name=payload.name.strip(),
            slug=slug,
            description=payload.description,
            short_description=payload.short_description,
            price=payload.price,
            compare_price=payload.compare_price,
            category_id=payload.category_id,
            sku=payload.sku,
            quantity=payload.inventory.quantity,
            low_stock_threshold=payload.inventory.low_stock_threshold,
            track_inventory=payload.inventory.track_inventory,
            allow_backorders=payload.inventory.allow_backorders,
            is_active=payload.is_active,
            is_featured=payload.is_featured,
            tag_rows=[ProductTagModel(tag=t) for t in _unique_tags(payload.tags)],
        )
        created = self.products.create(product)
        logger.info(f"Utworzono produkt {created.id} sku={created.sku}")
        return product_to_dict(created)

    def _free_product_slug(self, base: str, sku: str) -> str:
        if not base:
            raise ValidationError("Product slug cannot be empty")
        if not self.products.slug_exists(base):
            return base
        # kolizja: doklej sku, potem licznik
        candidate = with_sku = f"{base}-{slugify(sku)}"
        suffix = 2
        while self.products.slug_exists(candidate):
            candidate = f"{with_sku}-{suffix}"
            suffix += 1
        return candidate

    def update_product(self, product_id: int, payload: ProductUpdate) -> Dict[str, Any]:
        product = self.products.get(product_id)
        if not product:
            raise NotFoundError("Product not found")

        changes = payload.model_dump(exclude_unset=True)

        if "sku" in changes and changes["sku"] != product.sku:
            other = self.products.get_by_sku(changes["sku"])
            if other and other.id != product.id:
                raise ValidationError("SKU already exists")
        if "category_id" in changes and not self.categories.get(changes["category_id"]):
            raise NotFoundError("Category not found")

        inventory = changes.pop("inventory", None)
        tags = changes.pop("tags", None)

        for field, value in changes.items():
            if value is None and field in ("name", "description", "price", "sku", "category_id", "is_active", "is_featured"):
                raise ValidationError(f"{field} cannot be null")
            setattr(product, field, value)
        if inventory is not None:
            for field, value in inventory.items():
                setattr(product, field, value)
        if tags is not None:
            _sync_tags(product, _unique_tags(tags))

        updated = self.products.save(product)
        logger.info(f"Zaktualizowano produkt {product_id}: {sorted(payload.model_fields_set)}")
        return product_to_dict(updated)

    def delete_product(self, product_id: int) -> None:
        product = self.products.get(product_id)
        if not product:
            raise NotFoundError("Product not found")
        if self.products.has_orders(product_id):
            # historyczne zamowienia trzymaja FK do produktu
            raise ValidationError("Product has orders, deactivate it instead")
        self.products.delete(product)
        logger.info(f"Usunieto produkt {product_id}")


def _sync_tags(product: ProductModel, tags: List[str]) -> None:
    # keep surviving rows so the (product_id, tag) constraint never sees a duplicate insert
    product.tag_rows = [row for row in product.tag_rows if row.tag in tags]
    present = {row.tag for row in product.tag_rows}
    product.tag_rows.extend(ProductTagModel(tag=t) for t in tags if t not in present)


def _unique_tags(tags: List[str]) -> List[str]:
    seen = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
