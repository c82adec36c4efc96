from typing import Any, AsyncGenerator
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from marketplace.core.config import settings


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if settings.is_postgres:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options())
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_session_maker


async def get_db(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker)
) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session
