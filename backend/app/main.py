from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging

from app.config import Settings, settings
from app.database import Database
from app.routes import categories, posts, rpc
from app.services.category_service import CategoryService
from app.services.post_service import PostService

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    app_settings: Settings = app.state.settings
    database: Database = app.state.database
    logger.info(f"Starting {app_settings.app_name}...")
    logger.info(f"Database: {database.engine.url.render_as_string(hide_password=True)}")

    # Initialize database
    if app_settings.auto_create_tables:
        try:
            await database.create_tables()
            logger.info("Database initialized")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await database.dispose()


def create_app(app_settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the API with its own database handle and services"""
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.app_name,
        description="Posts and categories for the blog front-end and admin dashboard",
        version=app_settings.app_version,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.database = database or Database(app_settings.database_url, echo=app_settings.sql_echo)
    app.state.category_service = CategoryService(seed_defaults=app_settings.seed_default_categories)
    app.state.post_service = PostService()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(categories.router)
    app.include_router(posts.router)
    app.include_router(rpc.router)

    @app.get("/")
    async def root():
        """Service banner"""
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
            "status": "running"
        }

    @app.get("/api/health")
    async def health(request: Request):
        """Health check endpoint"""
        database_ok = await request.app.state.database.ping()
        return {
            "status": "healthy" if database_ok else "degraded",
            "database": database_ok
        }

    return app


app = create_app()
