# storefront/api/routers/contact.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import ContactCreate, ContactOut, Envelope, Pagination
from storefront.services.contact_service import ContactService

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", response_model=Envelope[ContactOut], status_code=201)
def submit_contact(payload: ContactCreate, db: Session = Depends(get_db)):
    return {"data": ContactService(db).submit(payload), "message": "Message sent successfully"}


@router.get("", response_model=Envelope[List[ContactOut]])
def list_messages(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    items, total = ContactService(db).list_messages(page, limit, is_read)
    return {"data": items, "pagination": Pagination.build(page, limit, total)}
