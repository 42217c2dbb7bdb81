# storefront/services/contact_service.py
import re
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.contact_message import ContactMessageModel
from storefront.domain.errors import ValidationError
from storefront.domain.schemas import ContactCreate
from storefront.repos.contact_repo import ContactRepo
from storefront.services.notification_service import NotificationService
from storefront.services.serializers import contact_to_dict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")


def normalize_email(value: str) -> str:
    email = value.strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email address")
    return email


class ContactService:
    """
    Formularz kontaktowy.
    command: submit (publiczny), query: list_messages (admin)
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.repo = ContactRepo(db)
        self.notification_service = notification_service or NotificationService()

    def submit(self, payload: ContactCreate) -> Dict[str, Any]:
        email = normalize_email(payload.email)
        message = self.repo.create(
            ContactMessageModel(
                name=payload.name.strip(),
                email=email,
                phone=payload.phone.strip() if payload.phone else None,
                subject=payload.subject.strip(),
                message=payload.message.strip(),
            )
        )
        logger.info(f"Wiadomosc kontaktowa {message.id} od {email}")
        self.notification_service.contact_received(message.id, email, message.subject)
        return contact_to_dict(message)

    def list_messages(
        self, page: int = 1, limit: int = 20, is_read: bool | None = None
    ) -> tuple[List[Dict[str, Any]], int]:
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if not 1 <= limit <= 100:
            raise ValidationError("Limit must be between 1 and 100")
        messages, total = self.repo.list_messages(page, limit, is_read)
        return [contact_to_dict(m) for m in messages], total
