from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.schemas import UserCreate
from storefront.repos.user_repo import UserRepo
from storefront.services.serializers import user_to_dict


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> dict:
        existing = self.repo.get_user(payload.id)
        if existing:
            return user_to_dict(existing)

        email = payload.email.strip().lower()
        if self.repo.get_by_email(email):
            raise ValidationError("Email already registered")

        user = UserModel(id=payload.id, name=payload.name, email=email, role=payload.role)
        return user_to_dict(self.repo.create_user(user))

    def get_user(self, user_id: int) -> dict:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user_to_dict(user)
