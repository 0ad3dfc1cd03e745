# app/dependencies.py
from fastapi import Request

from app.services.category_service import CategoryService
from app.services.post_service import PostService


def get_category_service(request: Request) -> CategoryService:
    return request.app.state.category_service


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service
