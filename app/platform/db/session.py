from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.platform.config import settings
from app.platform.db.base import Base
from app.platform.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Process-wide connection pool.

    Built once by the application lifespan and shared by reference with
    every request through ``get_db``; the engine's pool is safe for
    concurrent use by in-flight requests.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.DATABASE_URL
        self.engine: AsyncEngine = create_async_engine(self.url, **self._pool_options(self.url))
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, autoflush=False, autocommit=False
        )

    @staticmethod
    def _pool_options(url: str) -> dict:
        options = {"echo": False, "future": True, "pool_pre_ping": True}
        # sqlite (tests, local dev) runs on a static pool without sizing knobs
        if not url.startswith("sqlite"):
            options.update(
                pool_recycle=1800,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
            )
        return options

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database pool disposed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        yield session
