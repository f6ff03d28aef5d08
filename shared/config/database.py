from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from shared.config.settings import Settings


class Database:
    """Owns the async engine, session factory and table metadata for one process."""

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        self.engine = create_async_engine(self.url, echo=settings.database_echo)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        # Repositories register their tables here, named from Settings.
        self.metadata = MetaData()

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(self.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.sessionmaker() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()
