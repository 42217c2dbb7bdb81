# storefront/api/deps.py
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict

from fastapi import Depends, Header

from storefront.domain.errors import UnauthorizedError
from storefront.services.payment_providers import PaymentProvider, build_providers


@dataclass(frozen=True)
class Principal:
    """Caller identity forwarded by the identity provider in front of the API."""

    user_id: int
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_principal(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Principal:
    if not x_user_id or not x_user_id.strip().isdigit() or int(x_user_id) <= 0:
        raise UnauthorizedError()
    role = (x_user_role or "user").strip().lower()
    if role not in ("user", "admin"):
        raise UnauthorizedError()
    return Principal(user_id=int(x_user_id), role=role)


def get_optional_principal(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Principal | None:
    # publiczne endpointy, admin widzi wiecej
    if x_user_id is None:
        return None
    return get_principal(x_user_id, x_user_role)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise UnauthorizedError()
    return principal


@lru_cache
def _providers() -> Dict[str, PaymentProvider]:
    return build_providers()


def get_payment_providers() -> Dict[str, PaymentProvider]:
    return _providers()
