"""Service for reading and writing blog posts"""
import logging
from typing import List, Optional
from unidecode import unidecode
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from app.exceptions import ValidationError, ConflictError, StoreError
from app.models.post import Post, PostCreate, PostUpdate, PostResponse, PostFilters, utcnow
from app.services.slug import slugify, MAX_SLUG_LENGTH

logger = logging.getLogger(__name__)


def normalize_text(text: Optional[str]) -> str:
    """Lowercase and strip diacritics so "Café" matches "cafe" """
    if not text:
        return ""
    return unidecode(text.lower())


def matches_search(post: Post, search: str) -> bool:
    needle = normalize_text(search.strip())
    if not needle:
        return True
    return needle in normalize_text(post.title) or needle in normalize_text(post.content)


class PostService:
    """Service for post CRUD operations"""

    async def get_all_posts(self, db: AsyncSession, filters: Optional[PostFilters] = None) -> List[PostResponse]:
        """Get all posts with their category, newest first unless filters say otherwise"""
        filters = filters or PostFilters()

        query = self._select_posts()
        if filters.published_only:
            query = query.where(Post.published.is_(True))
        if filters.category_id is not None:
            query = query.where(Post.category_id == filters.category_id)

        if filters.sort == "oldest":
            query = query.order_by(Post.created_at.asc(), Post.id.asc())
        elif filters.sort == "title":
            query = query.order_by(Post.title.asc(), Post.id.asc())
        else:
            query = query.order_by(Post.created_at.desc(), Post.id.desc())

        try:
            result = await db.execute(query)
            posts = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting posts: {e}")
            raise StoreError("Failed to fetch posts") from e

        # Accent-insensitive matching is done here rather than in SQL so it
        # behaves the same on SQLite and PostgreSQL
        if filters.search:
            posts = [post for post in posts if matches_search(post, filters.search)]

        return [PostResponse.model_validate(post) for post in posts]

    async def get_post_by_id(self, db: AsyncSession, post_id: int) -> Optional[PostResponse]:
        """Get a single post by ID"""
        try:
            post = await self._get(db, post_id)
        except SQLAlchemyError as e:
            logger.error(f"Error getting post {post_id}: {e}")
            raise StoreError(f"Failed to fetch post {post_id}") from e

        return PostResponse.model_validate(post) if post else None

    async def get_posts_by_category(self, db: AsyncSession, category_id: int) -> List[PostResponse]:
        """Get all posts whose category_id matches"""
        return await self.get_all_posts(db, PostFilters(category_id=category_id))

    async def create_post(self, db: AsyncSession, post_data: PostCreate) -> PostResponse:
        """Create a post; drafts are stored unpublished"""
        self._require_text(post_data.title, post_data.content)
        slug = self._slug_for(post_data.title)
        now = utcnow()

        try:
            post = Post(
                title=post_data.title,
                content=post_data.content,
                slug=slug,
                category_id=post_data.category_id,
                published=not post_data.is_draft,
                created_at=now,
                updated_at=now,
            )
            db.add(post)
            await db.commit()

            logger.info(f"Created post '{post.title}' (ID: {post.id}, slug: {slug}, published: {post.published})")
            return await self.get_post_by_id(db, post.id)

        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Slug collision creating post '{post_data.title}': {e}")
            raise ConflictError(f"A post with the slug '{slug}' already exists") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error creating post: {e}")
            raise StoreError("Failed to create post") from e

    async def update_post(self, db: AsyncSession, post_id: int, post_data: PostUpdate) -> Optional[PostResponse]:
        """Replace a post's title, content and category; None if the post does not exist"""
        self._require_text(post_data.title, post_data.content)
        slug = self._slug_for(post_data.title)

        try:
            post = await self._get(db, post_id)
            if not post:
                return None

            post.title = post_data.title
            post.content = post_data.content
            post.slug = slug
            post.category_id = post_data.category_id
            if post_data.published is not None:
                post.published = post_data.published
            post.updated_at = utcnow()

            await db.commit()

            logger.info(f"Updated post {post_id} (slug: {slug}, published: {post.published})")
            return await self.get_post_by_id(db, post_id)

        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Slug collision updating post {post_id}: {e}")
            raise ConflictError(f"A post with the slug '{slug}' already exists") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error updating post {post_id}: {e}")
            raise StoreError(f"Failed to update post {post_id}") from e

    async def delete_post(self, db: AsyncSession, post_id: int) -> bool:
        """Delete a post by ID"""
        try:
            result = await db.execute(delete(Post).where(Post.id == post_id))
            await db.commit()

            deleted = result.rowcount > 0
            if deleted:
                logger.info(f"Deleted post {post_id}")
            return deleted

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error deleting post {post_id}: {e}")
            raise StoreError(f"Failed to delete post {post_id}") from e

    @staticmethod
    def _select_posts():
        # populate_existing reloads the category of posts already in the session after an update
        return (
            select(Post)
            .options(selectinload(Post.category))
            .execution_options(populate_existing=True)
        )

    async def _get(self, db: AsyncSession, post_id: int) -> Optional[Post]:
        result = await db.execute(self._select_posts().where(Post.id == post_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _require_text(title: Optional[str], content: Optional[str]) -> None:
        if not title or not title.strip() or not content or not content.strip():
            raise ValidationError("Title and content are required")

    @staticmethod
    def _slug_for(title: str) -> str:
        slug = slugify(title)
        if not slug:
            raise ValidationError("Title must contain at least one letter or digit")
        if len(slug) > MAX_SLUG_LENGTH:
            raise ValidationError(f"Title is too long (slug over {MAX_SLUG_LENGTH} characters)")
        return slug
