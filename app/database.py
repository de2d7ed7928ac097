from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.middleware import install_query_counter


class Base(DeclarativeBase):
    pass


class Database:
    """
    Explicit handle around one async engine and its session factory.

    The application receives an instance through ``create_app`` and keeps it
    on ``app.state.db``; tests build their own instance against SQLite.
    Each request gets exactly one session (see ``get_db``), which is the
    unit of work: committed when the handler returns, rolled back when it
    raises.
    """

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs) -> None:
        self.url = url
        self.engine = create_async_engine(url, echo=echo, **engine_kwargs)
        # Register the per-request SQL query counter on this engine.
        install_query_counter(self.engine)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls) -> "Database":
        kwargs = {}
        if not settings.DATABASE_URL.startswith("sqlite"):
            kwargs["pool_pre_ping"] = True
        return cls(settings.DATABASE_URL, echo=settings.DEBUG, **kwargs)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request):
    async with request.app.state.db.session() as session:
        yield session
