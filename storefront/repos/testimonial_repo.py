# storefront/repos/testimonial_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.testimonial import TestimonialModel


class TestimonialRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_testimonials(self, limit: int, include_inactive: bool = False) -> list[TestimonialModel]:
        stmt = select(TestimonialModel)
        if not include_inactive:
            stmt = stmt.where(TestimonialModel.is_active.is_(True))
        stmt = stmt.order_by(
            TestimonialModel.sort_order.asc(),
            TestimonialModel.created_at.desc(),
            TestimonialModel.id.desc(),
        ).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def create(self, testimonial: TestimonialModel) -> TestimonialModel:
        self.db.add(testimonial)
        self.db.commit()
        self.db.refresh(testimonial)
        return testimonial
