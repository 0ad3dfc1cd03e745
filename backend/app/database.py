"""Database engine and session management"""
import logging
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()

# Largest value an Integer primary or foreign key column holds (32-bit on PostgreSQL)
MAX_ID = 2**31 - 1


class Database:
    """Owns the async engine and session factory for one application instance.

    Created by the app factory, opened in the lifespan startup and disposed on
    shutdown. Every request borrows a session from ``session_maker``.
    """

    def __init__(self, url: str, echo: bool = False, engine: Optional[AsyncEngine] = None):
        self.url = url
        if engine is None:
            engine_kwargs = {"echo": echo}
            if url.startswith("sqlite") and ":memory:" in url:
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
                engine_kwargs["connect_args"] = {"check_same_thread": False}
            engine = create_async_engine(url, **engine_kwargs)
        self.engine = engine
        self.session_maker = async_sessionmaker(self.engine, expire_on_commit=False)

    async def create_tables(self) -> None:
        """Create any missing tables from the model metadata"""
        # Models register themselves on Base.metadata when imported
        from app.models import category, post  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def ping(self) -> bool:
        """Check that the database answers a trivial query"""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a session bound to the app's database"""
    database: Database = request.app.state.database
    async with database.session_maker() as db:
        yield db
