from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from storefront.config import Settings
from storefront.db.models import Base


def create_engine_from_settings(settings: Settings) -> AsyncEngine | None:
    """Build the async engine, or None when no database is configured."""
    if not settings.store_configured:
        return None
    if settings.database_url.startswith("sqlite"):
        # aiosqlite connections must not outlive the event loop that opened them
        return create_async_engine(settings.database_url, echo=False, poolclass=NullPool)
    return create_async_engine(settings.database_url, echo=False, pool_size=10, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
