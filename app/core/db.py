from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

engine = create_async_engine(settings.db_url, pool_pre_ping=True)


async def create_tables() -> None:
    """Create missing tables, used in development instead of migrations."""
    # Register every table on the metadata
    from app.models import (  # noqa: F401, PLC0415
        guild,
        level,
        member,
        school_class,
        verified_member,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def get_session() -> AsyncSession:
    return AsyncSession(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession]:
    async with get_session() as session:
        yield session
