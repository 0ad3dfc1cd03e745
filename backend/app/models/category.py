from sqlalchemy import Column, Integer, String, Text
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List

from app.database import Base


class Category(Base):
    """A labeled grouping that posts may optionally belong to"""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    slug = Column(String(255), unique=True, nullable=False)  # Derived from name, regenerated on rename
    description = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Category {self.name}>"


# Default categories created when the table is found empty
DEFAULT_CATEGORIES = [
    {"name": "Technology", "description": "Posts about technology, programming, and digital innovations"},
    {"name": "Design", "description": "UI/UX design, graphic design, and creative content"},
    {"name": "Business", "description": "Entrepreneurship, startups, and business strategies"},
    {"name": "Lifestyle", "description": "Personal development, health, and lifestyle tips"},
    {"name": "Travel", "description": "Travel guides, experiences, and destinations"},
    {"name": "Food", "description": "Recipes, restaurant reviews, and culinary experiences"},
    {"name": "Health", "description": "Health tips, fitness, and wellness content"},
]

# Extra categories only added by the seed script
EXTRA_SEED_CATEGORIES = [
    {"name": "Education", "description": "Learning resources, tutorials, and educational content"},
]


# Pydantic models for API

class CategoryBase(BaseModel):
    """Base category schema"""
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CategoryCreate(CategoryBase):
    """Schema for creating a category"""


class CategoryUpdate(CategoryBase):
    """Schema for renaming a category; description is left unchanged when omitted"""


class CategoryInfo(BaseModel):
    """Category embedded in a post response"""
    id: int
    name: str
    slug: str
    description: Optional[str] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class CategoryResponse(CategoryInfo):
    """Schema for category response"""
    post_count: Optional[int] = None


class CategoryList(BaseModel):
    """Schema for list of categories"""
    categories: List[CategoryResponse]
    total: int
