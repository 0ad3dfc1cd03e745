"""API routes for category management"""
from fastapi import APIRouter, HTTPException, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from app.database import get_db, MAX_ID
from app.dependencies import get_category_service, get_post_service
from app.exceptions import ValidationError, ConflictError
from app.models.category import CategoryCreate, CategoryUpdate, CategoryResponse, CategoryList
from app.models.post import PostResponse
from app.services.category_service import CategoryService
from app.services.post_service import PostService

router = APIRouter(prefix="/api/categories", tags=["categories"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=CategoryList)
async def get_categories(
    include_post_count: bool = False,
    db: AsyncSession = Depends(get_db),
    category_service: CategoryService = Depends(get_category_service)
):
    """
    Get all categories ordered by name. An empty table is seeded with the default categories.

    - **include_post_count**: Whether to include the number of posts in each category (default: false)
    """
    try:
        categories = await category_service.get_all_categories(db, include_post_count=include_post_count)
        return CategoryList(categories=categories, total=len(categories))
    except Exception as e:
        logger.error(f"Error getting categories: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    category_service: CategoryService = Depends(get_category_service)
):
    """
    Get a specific category by ID.

    - **category_id**: The category ID
    """
    try:
        category = await category_service.get_category_by_id(db, category_id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")
        return category
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting category {category_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{category_id}/posts", response_model=List[PostResponse])
async def get_category_posts(
    category_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    post_service: PostService = Depends(get_post_service)
):
    """
    Get all posts assigned to a category, newest first.

    - **category_id**: The category ID
    """
    try:
        return await post_service.get_posts_by_category(db, category_id)
    except Exception as e:
        logger.error(f"Error getting posts for category {category_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/", response_model=CategoryResponse, status_code=201)
async def create_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    category_service: CategoryService = Depends(get_category_service)
):
    """
    Create a new category.

    - **name**: Category name (at least 2 characters, unique ignoring case)
    - **description**: Category description (optional)
    """
    try:
        return await category_service.create_category(db, category_data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        logger.error(f"Error creating category: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_data: CategoryUpdate,
    category_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    category_service: CategoryService = Depends(get_category_service)
):
    """
    Rename an existing category. The slug is regenerated from the new name.

    - **category_id**: The category ID
    - **name**: New category name
    - **description**: New category description (optional, unchanged when omitted)
    """
    try:
        category = await category_service.update_category(db, category_id, category_data)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")
        return category
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating category {category_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    category_service: CategoryService = Depends(get_category_service)
):
    """
    Delete a category. Posts in the category are kept and still reference its ID.

    - **category_id**: The category ID
    """
    try:
        success = await category_service.delete_category(db, category_id)
        if not success:
            raise HTTPException(status_code=404, detail="Category not found")
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting category {category_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
