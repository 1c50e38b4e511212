from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from opsdeck.domain.models import Base


def create_engine(database_url: str) -> AsyncEngine:
    engine_kwargs: dict[str, Any] = {"pool_pre_ping": True}
    # The seeder is a short-lived batch job; keep the asyncpg pool small.
    if not database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = 2
        engine_kwargs["max_overflow"] = 0
        engine_kwargs["pool_timeout"] = 30
    return create_async_engine(database_url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    # Test and local bootstrap only; production schemas are owned by the API's migrations.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
