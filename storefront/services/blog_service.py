# storefront/services/blog_service.py
from typing import Any, Dict, List

from slugify import slugify
from sqlalchemy.orm import Session

from storefront.data.models.blog import BlogCategoryModel, BlogPostModel, BlogPostTagModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.schemas import BlogCategoryCreate, BlogPostCreate, BlogPostUpdate
from storefront.repos.blog_repo import BlogRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.serializers import blog_category_to_dict, blog_post_to_dict
from storefront.utils.clock import utcnow
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 50


class BlogService:
    """
    Blog sklepu.
    query: list_posts, get_post, list_categories
    commands (admin): create/update/delete post, create_category
    """

    def __init__(self, db: Session):
        self.repo = BlogRepo(db)
        self.users = UserRepo(db)

    #query
    def list_posts(
        self,
        page: int = 1,
        limit: int = 9,
        category: str | None = None,
        tag: str | None = None,
        search: str | None = None,
        status: str = "published",
    ) -> tuple[List[Dict[str, Any]], int]:
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        category_id = None
        if category:
            found = self.repo.get_category_by_slug(category)
            if found is None:
                return [], 0
            category_id = found.id

        posts, total = self.repo.list_posts(
            page,
            limit,
            status=status,
            category_id=category_id,
            tag=tag.strip().lower() if tag else None,
            search=search,
        )
        return [blog_post_to_dict(p) for p in posts], total

    def get_post(self, slug: str) -> Dict[str, Any]:
        """Published post by slug; every read counts as a view."""
        post = self.repo.get_post_by_slug(slug)
        if post is None or post.status != "published":
            raise NotFoundError("Blog post not found")
        self.repo.add_view(post.id)
        self.repo.refresh(post)
        return blog_post_to_dict(post)

    def list_categories(self) -> List[Dict[str, Any]]:
        return [blog_category_to_dict(c) for c in self.repo.list_categories()]

    #commands
    def create_category(self, payload: BlogCategoryCreate) -> Dict[str, Any]:
        name = payload.name.strip()
        slug = payload.slug or slugify(name)
        if not slug:
            raise ValidationError("Blog category slug cannot be empty")
        if self.repo.category_taken(name, slug):
            raise ValidationError("Blog category already exists")

        created = self.repo.create_category(
            BlogCategoryModel(name=name, slug=slug, description=payload.description, post_count=0)
        )
        logger.info(f"Utworzono kategorie bloga {created.id} ({created.slug})")
        return blog_category_to_dict(created)

    def create_post(self, author_id: int, payload: BlogPostCreate) -> Dict[str, Any]:
        if not self.users.get_user(author_id):
            raise NotFoundError("User not found")
        if not self.repo.get_category(payload.category_id):
            raise NotFoundError("Blog category not found")

        post = BlogPostModel(
            title=payload.title.strip(),
            slug=self._free_slug(payload.slug or slugify(payload.title)),
            excerpt=payload.excerpt,
            content=payload.content,
            featured_image=payload.featured_image,
            author_id=author_id,
            category_id=payload.category_id,
            status=payload.status,
            published_at=utcnow() if payload.status == "published" else None,
            tag_rows=[BlogPostTagModel(tag=t) for t in _unique_tags(payload.tags)],
        )
        try:
            self.repo.add(post)
            self.repo.bump_post_count(payload.category_id, 1)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        self.repo.refresh(post)

        logger.info(f"Utworzono wpis {post.id} ({post.slug}) status={post.status}")
        return blog_post_to_dict(post)

    def update_post(self, slug: str, payload: BlogPostUpdate) -> Dict[str, Any]:
        post = self.repo.get_post_by_slug(slug)
        if post is None:
            raise NotFoundError("Blog post not found")

        changes = payload.model_dump(exclude_unset=True)
        tags = changes.pop("tags", None)

        for field in ("title", "content", "category_id", "status"):
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null")

        previous_category = post.category_id
        new_category = changes.get("category_id", previous_category)
        if new_category != previous_category and not self.repo.get_category(new_category):
            raise NotFoundError("Blog category not found")

        # slug zostaje, linki do wpisu nie moga sie psuc po zmianie tytulu
        for field, value in changes.items():
            setattr(post, field, value)
        if post.status == "published" and post.published_at is None:
            post.published_at = utcnow()
        if tags is not None:
            _sync_tags(post, _unique_tags(tags))

        try:
            if new_category != previous_category:
                self.repo.bump_post_count(previous_category, -1)
                self.repo.bump_post_count(new_category, 1)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        self.repo.refresh(post)

        logger.info(f"Zaktualizowano wpis {post.id}: {sorted(payload.model_fields_set)}")
        return blog_post_to_dict(post)

    def delete_post(self, slug: str) -> None:
        post = self.repo.get_post_by_slug(slug)
        if post is None:
            raise NotFoundError("Blog post not found")
        try:
            self.repo.bump_post_count(post.category_id, -1)
            self.repo.delete(post)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        logger.info(f"Usunieto wpis {slug}")

    def _free_slug(self, base: str) -> str:
        if not base:
            raise ValidationError("Blog post slug cannot be empty")
        candidate, suffix = base, 2
        while self.repo.post_slug_exists(candidate):
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate


def _sync_tags(post: BlogPostModel, tags: List[str]) -> None:
    post.tag_rows = [row for row in post.tag_rows if row.tag in tags]
    present = {row.tag for row in post.tag_rows}
    post.tag_rows.extend(BlogPostTagModel(tag=t) for t in tags if t not in present)


def _unique_tags(tags: List[str]) -> List[str]:
    seen = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
