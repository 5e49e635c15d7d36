"""Async engine and session factory construction."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core import settings


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Build an async engine for the given URL, defaulting to settings."""
    url = database_url or settings.database_url
    connect_args: dict[str, object] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_async_engine(url, connect_args=connect_args)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def connect(engine: AsyncEngine) -> None:
    """Open one connection so configuration errors surface before any write."""
    async with engine.connect() as connection:
        await connection.execute(text("SELECT 1"))
