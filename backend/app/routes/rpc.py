"""Typed procedure endpoints (category.* / post.*) for the front-end client

Queries can be called with GET /rpc/<name>?input=<json> or POST; mutations
only with POST and a JSON body. Successful calls return
{"result": {"data": ...}}, failures {"error": {"code": ..., "message": ...}}.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Type

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pydantic import ValidationError as InputValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, MAX_ID
from app.dependencies import get_category_service, get_post_service
from app.exceptions import BlogError, NotFoundError
from app.models.category import CategoryCreate, CategoryUpdate
from app.models.post import PostCreate, PostUpdate
from app.services.category_service import CategoryService
from app.services.post_service import PostService

router = APIRouter(prefix="/rpc", tags=["rpc"])
logger = logging.getLogger(__name__)


# Procedure inputs

class IdInput(BaseModel):
    id: int = Field(..., ge=1, le=MAX_ID)


class CategoryIdInput(BaseModel):
    category_id: int = Field(..., ge=1, le=MAX_ID)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CategoryUpdateInput(CategoryUpdate):
    id: int = Field(..., ge=1, le=MAX_ID)


class PostUpdateInput(PostUpdate):
    id: int = Field(..., ge=1, le=MAX_ID)


@dataclass
class Procedure:
    name: str
    kind: str  # "query" or "mutation"
    handler: Callable[..., Awaitable[Any]]
    input_model: Optional[Type[BaseModel]] = None


class ProcedureContext:
    """What a procedure handler can reach: the request session and the services"""

    def __init__(self, db: AsyncSession, categories: CategoryService, posts: PostService):
        self.db = db
        self.categories = categories
        self.posts = posts


# Category procedures

async def category_all(ctx: ProcedureContext, _: None):
    return await ctx.categories.get_all_categories(ctx.db)


async def category_create(ctx: ProcedureContext, data: CategoryCreate):
    return await ctx.categories.create_category(ctx.db, data)


async def category_update(ctx: ProcedureContext, data: CategoryUpdateInput):
    category = await ctx.categories.update_category(ctx.db, data.id, data)
    if not category:
        raise NotFoundError(f"Category {data.id} not found")
    return category


async def category_delete(ctx: ProcedureContext, data: IdInput):
    if not await ctx.categories.delete_category(ctx.db, data.id):
        raise NotFoundError(f"Category {data.id} not found")
    return {"success": True, "id": data.id}


# Post procedures

async def post_all(ctx: ProcedureContext, _: None):
    return await ctx.posts.get_all_posts(ctx.db)


async def post_by_id(ctx: ProcedureContext, data: IdInput):
    post = await ctx.posts.get_post_by_id(ctx.db, data.id)
    if not post:
        raise NotFoundError(f"Post {data.id} not found")
    return post


async def post_by_category(ctx: ProcedureContext, data: CategoryIdInput):
    return await ctx.posts.get_posts_by_category(ctx.db, data.category_id)


async def post_create(ctx: ProcedureContext, data: PostCreate):
    return await ctx.posts.create_post(ctx.db, data)


async def post_update(ctx: ProcedureContext, data: PostUpdateInput):
    post = await ctx.posts.update_post(ctx.db, data.id, data)
    if not post:
        raise NotFoundError(f"Post {data.id} not found")
    return post


async def post_delete(ctx: ProcedureContext, data: IdInput):
    if not await ctx.posts.delete_post(ctx.db, data.id):
        raise NotFoundError(f"Post {data.id} not found")
    return {"success": True, "id": data.id}


PROCEDURES: Dict[str, Procedure] = {
    p.name: p for p in [
        Procedure("category.all", "query", category_all),
        Procedure("category.create", "mutation", category_create, CategoryCreate),
        Procedure("category.update", "mutation", category_update, CategoryUpdateInput),
        Procedure("category.delete", "mutation", category_delete, IdInput),
        Procedure("post.all", "query", post_all),
        Procedure("post.byId", "query", post_by_id, IdInput),
        Procedure("post.byCategory", "query", post_by_category, CategoryIdInput),
        Procedure("post.create", "mutation", post_create, PostCreate),
        Procedure("post.update", "mutation", post_update, PostUpdateInput),
        Procedure("post.delete", "mutation", post_delete, IdInput),
    ]
}


def error_response(status_code: int, code: str, message: str, details: Any = None) -> JSONResponse:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


def get_context(
    db: AsyncSession = Depends(get_db),
    category_service: CategoryService = Depends(get_category_service),
    post_service: PostService = Depends(get_post_service)
) -> ProcedureContext:
    return ProcedureContext(db=db, categories=category_service, posts=post_service)


async def run_procedure(procedure: Procedure, raw_input: Any, ctx: ProcedureContext) -> JSONResponse:
    data = None
    if procedure.input_model is not None:
        try:
            data = procedure.input_model.model_validate(raw_input if raw_input is not None else {})
        except InputValidationError as e:
            return error_response(400, "BAD_REQUEST", "Invalid input", jsonable_encoder(e.errors()))

    try:
        result = await procedure.handler(ctx, data)
    except BlogError as e:
        if e.status_code >= 500:
            logger.error(f"Procedure {procedure.name} failed: {e.message}")
            return error_response(e.status_code, e.code, "Internal server error")
        return error_response(e.status_code, e.code, e.message)
    except Exception as e:
        logger.error(f"Procedure {procedure.name} failed: {e}")
        return error_response(500, "INTERNAL_SERVER_ERROR", "Internal server error")

    return JSONResponse(content={"result": {"data": jsonable_encoder(result, by_alias=True)}})


@router.get("/{name}")
async def call_query(
    name: str,
    input: Optional[str] = None,
    ctx: ProcedureContext = Depends(get_context)
):
    """Run a query procedure; input is passed as a JSON-encoded query parameter"""
    procedure = PROCEDURES.get(name)
    if not procedure:
        return error_response(404, "NOT_FOUND", f"No procedure named '{name}'")
    if procedure.kind != "query":
        return error_response(405, "METHOD_NOT_SUPPORTED", f"'{name}' is a mutation and must be called with POST")

    raw_input = None
    if input:
        try:
            raw_input = json.loads(input)
        except json.JSONDecodeError:
            return error_response(400, "PARSE_ERROR", "input is not valid JSON")

    return await run_procedure(procedure, raw_input, ctx)


@router.post("/{name}")
async def call_procedure(
    name: str,
    request: Request,
    ctx: ProcedureContext = Depends(get_context)
):
    """Run any procedure with a JSON body as its input"""
    procedure = PROCEDURES.get(name)
    if not procedure:
        return error_response(404, "NOT_FOUND", f"No procedure named '{name}'")

    raw_input = None
    body = await request.body()
    if body:
        try:
            raw_input = json.loads(body)
        except json.JSONDecodeError:
            return error_response(400, "PARSE_ERROR", "Request body is not valid JSON")

    return await run_procedure(procedure, raw_input, ctx)
