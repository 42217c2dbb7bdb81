# storefront/api/routers/categories.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import CategoryCreate, CategoryOut, Envelope
from storefront.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=Envelope[List[CategoryOut]])
def list_categories(
    parent_only: bool = Query(False, alias="parentOnly"),
    db: Session = Depends(get_db),
):
    return {"data": CatalogService(db).list_categories(parent_only=parent_only)}


@router.post("", response_model=Envelope[CategoryOut], status_code=201)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"data": CatalogService(db).create_category(payload), "message": "Category created"}
