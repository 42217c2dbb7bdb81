# storefront/repos/blog_repo.py
from sqlalchemy import select, update, func, or_
from sqlalchemy.orm import Session

from storefront.data.models.blog import BlogCategoryModel, BlogPostModel, BlogPostTagModel


class BlogRepo:
    def __init__(self, db: Session):
        self.db = db

    #kategorie
    def get_category(self, category_id: int) -> BlogCategoryModel | None:
        return self.db.get(BlogCategoryModel, category_id)

    def get_category_by_slug(self, slug: str) -> BlogCategoryModel | None:
        return self.db.execute(
            select(BlogCategoryModel).where(BlogCategoryModel.slug == slug)
        ).scalar_one_or_none()

    def category_taken(self, name: str, slug: str) -> bool:
        return self.db.execute(
            select(BlogCategoryModel.id).where(
                or_(func.lower(BlogCategoryModel.name) == name.lower(), BlogCategoryModel.slug == slug)
            )
        ).first() is not None

    def list_categories(self) -> list[BlogCategoryModel]:
        stmt = select(BlogCategoryModel).order_by(BlogCategoryModel.name.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create_category(self, category: BlogCategoryModel) -> BlogCategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def bump_post_count(self, category_id: int, delta: int) -> None:
        # licznik w bazie, bez read-modify-write, nie schodzi ponizej zera. Nie commituje.
        stmt = update(BlogCategoryModel).where(BlogCategoryModel.id == category_id)
        if delta < 0:
            stmt = stmt.where(BlogCategoryModel.post_count >= -delta)
        self.db.execute(stmt.values(post_count=BlogCategoryModel.post_count + delta))

    #posty
    def get_post_by_slug(self, slug: str) -> BlogPostModel | None:
        return self.db.execute(
            select(BlogPostModel).where(BlogPostModel.slug == slug)
        ).unique().scalar_one_or_none()

    def post_slug_exists(self, slug: str) -> bool:
        return self.db.execute(
            select(BlogPostModel.id).where(BlogPostModel.slug == slug)
        ).first() is not None

    def _filtered(self, stmt, status: str | None, category_id: int | None, tag: str | None, search: str | None):
        if status:
            stmt = stmt.where(BlogPostModel.status == status)
        if category_id is not None:
            stmt = stmt.where(BlogPostModel.category_id == category_id)
        if tag:
            tagged = select(BlogPostTagModel.post_id).where(BlogPostTagModel.tag == tag)
            stmt = stmt.where(BlogPostModel.id.in_(tagged))
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    BlogPostModel.title.ilike(pattern),
                    BlogPostModel.excerpt.ilike(pattern),
                    BlogPostModel.content.ilike(pattern),
                )
            )
        return stmt

    def list_posts(
        self,
        page: int,
        limit: int,
        status: str | None = "published",
        category_id: int | None = None,
        tag: str | None = None,
        search: str | None = None,
    ) -> tuple[list[BlogPostModel], int]:
        query = self._filtered(select(BlogPostModel), status, category_id, tag, search)
        query = query.order_by(
            BlogPostModel.published_at.desc(), BlogPostModel.created_at.desc(), BlogPostModel.id.desc()
        )
        query = query.offset((page - 1) * limit).limit(limit)

        count = self._filtered(select(func.count(BlogPostModel.id)), status, category_id, tag, search)

        items = list(self.db.execute(query).unique().scalars().all())
        total = self.db.execute(count).scalar_one()
        return items, total

    def add_view(self, post_id: int) -> None:
        self.db.execute(
            update(BlogPostModel)
            .where(BlogPostModel.id == post_id)
            .values(views=BlogPostModel.views + 1)
        )
        self.db.commit()

    def add(self, post: BlogPostModel) -> None:
        self.db.add(post)

    def delete(self, post: BlogPostModel) -> None:
        self.db.delete(post)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, obj):
        self.db.refresh(obj)
