# storefront/api/routers/blog.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, get_optional_principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import (
    BlogCategoryCreate,
    BlogCategoryOut,
    BlogPostCreate,
    BlogPostOut,
    BlogPostUpdate,
    BlogStatus,
    Envelope,
    Pagination,
)
from storefront.services.blog_service import BlogService

router = APIRouter(prefix="/api/blog", tags=["blog"])


@router.get("", response_model=Envelope[List[BlogPostOut]])
def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(9, ge=1, le=50),
    category: Optional[str] = Query(None, description="Blog category slug"),
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: BlogStatus = Query("published"),
    principal: Principal | None = Depends(get_optional_principal),
    db: Session = Depends(get_db),
):
    if principal is None or not principal.is_admin:
        # szkice i archiwum tylko dla admina
        status = "published"
    items, total = BlogService(db).list_posts(page, limit, category, tag, search, status)
    return {"data": items, "pagination": Pagination.build(page, limit, total)}


@router.get("/categories", response_model=Envelope[List[BlogCategoryOut]])
def list_categories(db: Session = Depends(get_db)):
    return {"data": BlogService(db).list_categories()}


@router.post("/categories", response_model=Envelope[BlogCategoryOut], status_code=201)
def create_category(
    payload: BlogCategoryCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"data": BlogService(db).create_category(payload), "message": "Blog category created"}


@router.get("/{slug}", response_model=Envelope[BlogPostOut])
def get_post(slug: str, db: Session = Depends(get_db)):
    return {"data": BlogService(db).get_post(slug)}


@router.post("", response_model=Envelope[BlogPostOut], status_code=201)
def create_post(
    payload: BlogPostCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return {"data": BlogService(db).create_post(principal.user_id, payload), "message": "Blog post created"}


@router.put("/{slug}", response_model=Envelope[BlogPostOut])
def update_post(
    slug: str,
    payload: BlogPostUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"data": BlogService(db).update_post(slug, payload), "message": "Blog post updated"}


@router.delete("/{slug}", response_model=Envelope)
def delete_post(
    slug: str,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    BlogService(db).delete_post(slug)
    return {"message": "Blog post deleted"}
