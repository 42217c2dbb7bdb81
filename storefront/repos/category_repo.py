# storefront/repos/category_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def slug_exists(self, slug: str) -> bool:
        return self.db.execute(
            select(CategoryModel.id).where(CategoryModel.slug == slug)
        ).first() is not None

    def list_categories(self, parent_only: bool = False, include_inactive: bool = False) -> list[CategoryModel]:
        stmt = select(CategoryModel)
        if not include_inactive:
            stmt = stmt.where(CategoryModel.is_active.is_(True))
        if parent_only:
            stmt = stmt.where(CategoryModel.parent_id.is_(None))
        stmt = stmt.order_by(CategoryModel.sort_order.asc(), CategoryModel.name.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category
