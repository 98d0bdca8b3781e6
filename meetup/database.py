from typing import AsyncIterator

from fastapi.requests import HTTPConnection
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from meetup.config import Settings


class Database:
    """Owns the async engine and hands out sessions.

    One instance is created per application in the lifespan hook and stored on
    ``app.state.database``; tests build their own against in-memory SQLite.
    """

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs = {"echo": echo}
        if url.startswith("sqlite") and ":memory:" in url:
            # every session must see the same in-memory database
            engine_kwargs["poolclass"] = StaticPool
        self.url = url
        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.DEBUG)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_tables(self):
        from meetup.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self):
        await self.engine.dispose()


async def get_db(connection: HTTPConnection) -> AsyncIterator[AsyncSession]:
    database: Database = connection.app.state.database
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
