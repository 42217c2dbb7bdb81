# storefront/api/routers/products.py
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import (
    Envelope,
    Pagination,
    ProductCreate,
    ProductFilter,
    ProductOut,
    ProductUpdate,
    SortKey,
)
from storefront.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/products", tags=["products"])


def product_filters(
    category: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    rating: Optional[float] = Query(None, ge=0, le=5),
    featured: bool = Query(False),
    in_stock: bool = Query(False, alias="inStock"),
    tags: Optional[str] = Query(None, description="Comma separated tags"),
) -> ProductFilter:
    return ProductFilter(
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        rating=rating,
        featured=featured,
        in_stock=in_stock,
        tags=[t.strip().lower() for t in tags.split(",") if t.strip()] if tags else [],
    )


@router.get("", response_model=Envelope[List[ProductOut]])
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    sort_by: SortKey = Query("newest", alias="sortBy"),
    filters: ProductFilter = Depends(product_filters),
    db: Session = Depends(get_db),
):
    items, total = CatalogService(db).list_products(filters, sort_by, page, limit)
    return {"data": items, "pagination": Pagination.build(page, limit, total)}


@router.get("/{id_or_slug}", response_model=Envelope[ProductOut])
def get_product(id_or_slug: str, db: Session = Depends(get_db)):
    return {"data": CatalogService(db).get_product(id_or_slug)}


@router.post("", response_model=Envelope[ProductOut], status_code=201)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"data": CatalogService(db).create_product(payload), "message": "Product created"}


@router.put("/{product_id}", response_model=Envelope[ProductOut])
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"data": CatalogService(db).update_product(product_id, payload), "message": "Product updated"}


@router.delete("/{product_id}", response_model=Envelope)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    CatalogService(db).delete_product(product_id)
    return {"message": "Product deleted"}
