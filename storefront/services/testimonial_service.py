# storefront/services/testimonial_service.py
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.testimonial import TestimonialModel
from storefront.domain.errors import ValidationError
from storefront.domain.schemas import TestimonialCreate
from storefront.repos.testimonial_repo import TestimonialRepo
from storefront.services.serializers import testimonial_to_dict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class TestimonialService:
    def __init__(self, db: Session):
        self.repo = TestimonialRepo(db)

    def list_testimonials(self, limit: int = 10, include_inactive: bool = False) -> List[Dict[str, Any]]:
        if not 1 <= limit <= 100:
            raise ValidationError("Limit must be between 1 and 100")
        return [testimonial_to_dict(t) for t in self.repo.list_testimonials(limit, include_inactive)]

    def create_testimonial(self, payload: TestimonialCreate) -> Dict[str, Any]:
        created = self.repo.create(
            TestimonialModel(
                name=payload.name.strip(),
                email=payload.email.strip().lower() if payload.email else None,
                avatar=payload.avatar,
                rating=payload.rating,
                title=payload.title,
                content=payload.content.strip(),
                is_active=payload.is_active,
                sort_order=payload.sort_order,
            )
        )
        logger.info(f"Dodano opinie {created.id} (rating {created.rating})")
        return testimonial_to_dict(created)
