from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from campus_hub.config import Settings


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    # SQLite ignores FOR UPDATE; taking the write lock at BEGIN serializes
    # transactions the way a row lock does on PostgreSQL.
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    engine: AsyncEngine
    sessionmaker: async_sessionmaker[AsyncSession]

    def __init__(self, settings: Settings):
        engine_options: dict[str, object] = {
            "echo": settings.DB_ECHO,
            "pool_pre_ping": True,
        }
        if not settings.is_sqlite:
            engine_options["pool_size"] = settings.DB_POOL_SIZE
            engine_options["max_overflow"] = settings.DB_MAX_OVERFLOW

        self.engine = create_async_engine(settings.DATABASE_URL, **engine_options)
        if settings.is_sqlite:
            _use_immediate_transactions(self.engine)

        self.sessionmaker = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_all(self) -> None:
        from campus_hub.models.base import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.database
    async with database.sessionmaker() as session:
        yield session


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on normal exit, roll back on any exception and re-raise."""
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise
