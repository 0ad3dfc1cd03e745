from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal
from datetime import datetime, timezone

from app.database import Base, MAX_ID
from app.models.category import CategoryInfo
from app.services.slug import MAX_SLUG_LENGTH


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Many-to-many link between posts and categories. Declared in the schema but
# never populated: a post's category lives in posts.category_id.
post_categories = Table(
    'post_categories',
    Base.metadata,
    Column('post_id', Integer, ForeignKey('posts.id'), nullable=False),
    Column('category_id', Integer, ForeignKey('categories.id'), nullable=False),
)


class Post(Base):
    """Blog post with optional category and publication status"""
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    slug = Column(String(255), unique=True, nullable=False)  # Derived from title
    published = Column(Boolean, default=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)  # Not cascaded
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    category = relationship("Category", lazy="raise")

    def __repr__(self):
        return f"<Post {self.title}>"


# Pydantic models for API

class PostCreate(BaseModel):
    """Schema for creating a post"""
    title: str = Field(..., max_length=MAX_SLUG_LENGTH)
    content: str
    category_id: Optional[int] = Field(default=None, ge=1, le=MAX_ID)
    is_draft: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PostUpdate(BaseModel):
    """Schema for updating a post; omitting category_id clears the category"""
    title: str = Field(..., max_length=MAX_SLUG_LENGTH)
    content: str
    category_id: Optional[int] = Field(default=None, ge=1, le=MAX_ID)
    published: Optional[bool] = Field(default=None, description="Publish (true) or revert to draft (false)")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PostResponse(BaseModel):
    """Schema for post response"""
    id: int
    title: str
    content: str
    slug: str
    published: bool
    category_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    category: Optional[CategoryInfo] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class PostList(BaseModel):
    """Schema for list of posts"""
    posts: List[PostResponse]
    total: int


class PostFilters(BaseModel):
    """Optional narrowing and ordering for post listings"""
    published_only: bool = False
    category_id: Optional[int] = Field(default=None, ge=1, le=MAX_ID)
    search: Optional[str] = None
    sort: Literal["newest", "oldest", "title"] = "newest"
