"""API routes for blog posts"""
from fastapi import APIRouter, HTTPException, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.database import get_db, MAX_ID
from app.dependencies import get_post_service
from app.exceptions import ValidationError, ConflictError
from app.models.post import PostCreate, PostUpdate, PostResponse, PostList, PostFilters
from app.services.post_service import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=PostList)
async def get_posts(
    published_only: bool = False,
    category_id: Optional[int] = Query(None, ge=1, le=MAX_ID),
    search: Optional[str] = Query(None, max_length=200),
    sort: str = Query("newest", pattern="^(newest|oldest|title)$"),
    db: AsyncSession = Depends(get_db),
    post_service: PostService = Depends(get_post_service)
):
    """
    List posts with their category embedded.

    - **published_only**: Hide drafts (public listing)
    - **category_id**: Only posts in this category
    - **search**: Match title or content, ignoring case and accents
    - **sort**: newest (default), oldest or title
    """
    try:
        filters = PostFilters(
            published_only=published_only,
            category_id=category_id,
            search=search,
            sort=sort
        )
        posts = await post_service.get_all_posts(db, filters)
        return PostList(posts=posts, total=len(posts))
    except Exception as e:
        logger.error(f"Error getting posts: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    post_service: PostService = Depends(get_post_service)
):
    """Get a single post by ID"""
    try:
        post = await post_service.get_post_by_id(db, post_id)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        return post
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting post {post_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/", response_model=PostResponse, status_code=201)
async def create_post(
    post_data: PostCreate,
    db: AsyncSession = Depends(get_db),
    post_service: PostService = Depends(get_post_service)
):
    """
    Create a post. The slug is derived from the title.

    - **title**, **content**: required
    - **categoryId**: optional category
    - **isDraft**: store the post unpublished (default: false)
    """
    try:
        return await post_service.create_post(db, post_data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        logger.error(f"Error creating post: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_data: PostUpdate,
    post_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    post_service: PostService = Depends(get_post_service)
):
    """Update a post's title, content, category and optionally its published flag"""
    try:
        post = await post_service.update_post(db, post_id, post_data)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        return post
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating post {post_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    post_service: PostService = Depends(get_post_service)
):
    """Delete a post"""
    try:
        success = await post_service.delete_post(db, post_id)
        if not success:
            raise HTTPException(status_code=404, detail="Post not found")
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting post {post_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
