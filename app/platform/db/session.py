import asyncio
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.platform.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Owns the async engine and session factory for the process.

    Built once in the application lifespan, stored on `app.state.db` and
    disposed on shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs = {"echo": echo, "future": True, "pool_pre_ping": True}
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_recycle=1800,
                pool_size=20,
                max_overflow=30,
                pool_timeout=30,
            )
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, autoflush=False, autocommit=False
        )

    async def connect(self, retries: int = 5, max_delay: float = 30.0) -> None:
        """
        Probe the store until it answers, backing off exponentially.

        Authentication failures are raised immediately since retrying cannot fix them.
        """
        attempt = 0
        while True:
            try:
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info("Connected to database")
                return
            except Exception as e:
                attempt += 1
                if "authentication" in str(e).lower() or attempt >= retries:
                    logger.error(f"Database connection failed after {attempt} attempt(s): {e}")
                    raise
                delay = min(2**attempt, max_delay)
                logger.warning(f"Database unavailable ({e}); retrying in {delay}s")
                await asyncio.sleep(delay)

    async def create_all(self) -> None:
        from app.platform.db.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.db.session_factory() as session:
        yield session
