"""Service for managing post categories"""
import logging
from typing import Dict, List, Optional
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.exceptions import ValidationError, ConflictError, StoreError
from app.models.category import Category, CategoryCreate, CategoryUpdate, CategoryResponse, DEFAULT_CATEGORIES
from app.models.post import Post
from app.services.slug import slugify, MAX_SLUG_LENGTH

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2


class CategoryService:
    """Service for category CRUD operations"""

    def __init__(self, seed_defaults: bool = True):
        self.seed_defaults = seed_defaults

    async def get_all_categories(self, db: AsyncSession, include_post_count: bool = False) -> List[CategoryResponse]:
        """Get all categories ordered by name, seeding the defaults into an empty table"""
        try:
            categories = await self._list_categories(db)

            if not categories and self.seed_defaults:
                try:
                    await self.seed_default_categories(db)
                except Exception as e:
                    # Reads stay available even if seeding fails
                    logger.error(f"Error creating default categories: {e}")
                categories = await self._list_categories(db)

            post_counts = await self._count_posts(db) if include_post_count else {}

            return [
                CategoryResponse(
                    id=category.id,
                    name=category.name,
                    slug=category.slug,
                    description=category.description,
                    post_count=post_counts.get(category.id, 0) if include_post_count else None
                )
                for category in categories
            ]

        except SQLAlchemyError as e:
            logger.error(f"Error getting categories: {e}")
            raise StoreError("Failed to fetch categories") from e

    async def get_category_by_id(self, db: AsyncSession, category_id: int) -> Optional[CategoryResponse]:
        """Get a single category by ID"""
        try:
            category = await self._get(db, category_id)
            if not category:
                return None
            return CategoryResponse.model_validate(category)

        except SQLAlchemyError as e:
            logger.error(f"Error getting category {category_id}: {e}")
            raise StoreError(f"Failed to fetch category {category_id}") from e

    async def create_category(self, db: AsyncSession, category_data: CategoryCreate) -> CategoryResponse:
        """Create a new category with a slug derived from its name"""
        name = self._clean_name(category_data.name)
        slug = self._slug_for(name)

        try:
            existing = await db.execute(
                select(Category.id).where(func.lower(Category.name) == name.lower())
            )
            if existing.first():
                raise ConflictError("A category with this name already exists")

            category = Category(
                name=name,
                slug=slug,
                description=category_data.description or None,
            )
            db.add(category)
            await db.commit()
            await db.refresh(category)

            logger.info(f"Created category '{category.name}' (ID: {category.id}, slug: {category.slug})")
            return CategoryResponse.model_validate(category)

        except ConflictError:
            raise
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Slug collision creating category '{name}': {e}")
            raise ConflictError(f"A category with the slug '{slug}' already exists") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error creating category: {e}")
            raise StoreError("Failed to create category") from e

    async def update_category(self, db: AsyncSession, category_id: int, category_data: CategoryUpdate) -> Optional[CategoryResponse]:
        """Rename a category and regenerate its slug; None if the category does not exist"""
        name = self._clean_name(category_data.name)
        slug = self._slug_for(name)

        try:
            category = await self._get(db, category_id)
            if not category:
                return None

            category.name = name
            category.slug = slug
            if category_data.description is not None:
                category.description = category_data.description

            await db.commit()
            await db.refresh(category)

            logger.info(f"Updated category {category_id} -> '{category.name}' (slug: {category.slug})")
            return CategoryResponse.model_validate(category)

        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Slug collision updating category {category_id}: {e}")
            raise ConflictError(f"A category with the slug '{slug}' already exists") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error updating category {category_id}: {e}")
            raise StoreError(f"Failed to update category {category_id}") from e

    async def delete_category(self, db: AsyncSession, category_id: int) -> bool:
        """Delete a category. Posts referencing it are left untouched."""
        try:
            result = await db.execute(
                delete(Category).where(Category.id == category_id)
            )
            await db.commit()

            deleted = result.rowcount > 0
            if deleted:
                logger.info(f"Deleted category {category_id}")
            return deleted

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error deleting category {category_id}: {e}")
            raise StoreError(f"Failed to delete category {category_id}") from e

    async def seed_default_categories(self, db: AsyncSession, defaults: Optional[List[dict]] = None) -> int:
        """Insert the given categories whose names are not taken yet. Returns the number created."""
        defaults = DEFAULT_CATEGORIES if defaults is None else defaults

        result = await db.execute(select(func.lower(Category.name)))
        existing_names = {row[0] for row in result.all()}

        created = 0
        try:
            for item in defaults:
                if item["name"].lower() in existing_names:
                    logger.debug(f"Skipped '{item['name']}' (already exists)")
                    continue
                db.add(Category(
                    name=item["name"],
                    slug=slugify(item["name"]),
                    description=item.get("description"),
                ))
                existing_names.add(item["name"].lower())
                created += 1

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if created:
            logger.info(f"Seeded {created} default categories")
        return created

    async def _list_categories(self, db: AsyncSession) -> List[Category]:
        result = await db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def _get(self, db: AsyncSession, category_id: int) -> Optional[Category]:
        result = await db.execute(select(Category).where(Category.id == category_id))
        return result.scalar_one_or_none()

    async def _count_posts(self, db: AsyncSession) -> Dict[int, int]:
        """Number of posts per category_id"""
        result = await db.execute(
            select(Post.category_id, func.count(Post.id))
            .where(Post.category_id.is_not(None))
            .group_by(Post.category_id)
        )
        return {category_id: count for category_id, count in result.all()}

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        name = (name or "").strip()
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationError(f"Category name must be at least {MIN_NAME_LENGTH} characters")
        return name

    @staticmethod
    def _slug_for(name: str) -> str:
        slug = slugify(name)
        if not slug:
            raise ValidationError("Category name must contain at least one letter or digit")
        if len(slug) > MAX_SLUG_LENGTH:
            raise ValidationError(f"Category name is too long (slug over {MAX_SLUG_LENGTH} characters)")
        return slug
