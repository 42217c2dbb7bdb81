from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class BlogCategoryModel(Base):
    __tablename__ = "blog_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    slug = Column(String, nullable=False, unique=True)
    description = Column(String(500))
    post_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)


class BlogPostModel(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    slug = Column(String, nullable=False, unique=True)
    excerpt = Column(String(500))
    content = Column(Text, nullable=False)
    featured_image = Column(String)

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("blog_categories.id"), nullable=False, index=True)

    status = Column(String, nullable=False, default="draft", index=True)  # draft, published, archived
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    author = relationship("UserModel", lazy="joined")
    category = relationship("BlogCategoryModel", lazy="joined")
    tag_rows = relationship(
        "BlogPostTagModel",
        back_populates="post",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [t.tag for t in self.tag_rows]


class BlogPostTagModel(Base):
    __tablename__ = "blog_post_tags"

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    tag = Column(String, nullable=False, index=True)

    post = relationship("BlogPostModel", back_populates="tag_rows")

    __table_args__ = (UniqueConstraint("post_id", "tag", name="u_blog_post_tag"),)
