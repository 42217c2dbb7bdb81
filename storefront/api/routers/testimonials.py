# storefront/api/routers/testimonials.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, get_optional_principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import Envelope, TestimonialCreate, TestimonialOut
from storefront.services.testimonial_service import TestimonialService

router = APIRouter(prefix="/api/testimonials", tags=["testimonials"])


@router.get("", response_model=Envelope[List[TestimonialOut]])
def list_testimonials(
    limit: int = Query(10, ge=1, le=100),
    include_inactive: bool = Query(False, alias="includeInactive"),
    principal: Principal | None = Depends(get_optional_principal),
    db: Session = Depends(get_db),
):
    show_inactive = include_inactive and principal is not None and principal.is_admin
    return {"data": TestimonialService(db).list_testimonials(limit, show_inactive)}


@router.post("", response_model=Envelope[TestimonialOut], status_code=201)
def create_testimonial(
    payload: TestimonialCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"data": TestimonialService(db).create_testimonial(payload), "message": "Testimonial created"}
