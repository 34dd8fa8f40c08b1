from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from typing import Optional

from checkers_arena.core.settings import settings

Base = declarative_base()

# Snapshot documents: JSONB on PostgreSQL, plain JSON elsewhere
SnapshotJSON = JSON().with_variant(JSONB(), "postgresql")


def get_database_url() -> str:
    """Helper to retrieve DB URL in scripts context"""
    return settings.database.url


def create_engine_for(url: Optional[str] = None) -> AsyncEngine:
    url = url or get_database_url()
    cfg = settings.database
    if url.startswith("sqlite"):
        # SQLite uses a static/null pool; pool sizing does not apply
        return create_async_engine(url, echo=cfg.echo)
    return create_async_engine(
        url,
        echo=cfg.echo,
        pool_size=cfg.pool_size,
        max_overflow=cfg.max_overflow,
    )


def get_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    # Import models so they register with Base.metadata
    from checkers_arena.models import counter_model, game_model, queue_model, stats_model, tournament_model  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
