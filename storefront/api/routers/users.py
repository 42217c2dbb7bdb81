# storefront/api/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import Principal, get_principal, require_admin
from storefront.data.database import get_db
from storefront.domain.schemas import Envelope, UserCreate, UserOut
from storefront.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=Envelope[UserOut], status_code=201)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    """Rejestruje profil przekazany przez dostawce tozsamosci."""
    return {"data": UserService(db).create_user(payload)}


@router.get("/me", response_model=Envelope[UserOut])
def get_me(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return {"data": UserService(db).get_user(principal.user_id)}
