# storefront/api/routers/admin.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import DashboardOut, Envelope
from storefront.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/dashboard", response_model=Envelope[DashboardOut])
def dashboard(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"data": DashboardService(db).summary()}
