import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from poker_settlement.db.models import Base


@pytest_asyncio.fixture
async def db_session(tmp_path):
    """
    AsyncSession bound to a throwaway SQLite file.

    A file (not :memory:) so every pooled connection sees the same tables.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'poker.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with maker() as session:
        yield session

    await engine.dispose()
