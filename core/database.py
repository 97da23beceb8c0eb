# core/database.py
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from settings import DATABASE_URL, DEBUG

engine = create_async_engine(
    DATABASE_URL,
    echo=False,
)


class Base(DeclarativeBase):
    pass


AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_tables() -> None:
    # models must be imported so their tables are registered on Base.metadata
    import models.career_chat  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if DEBUG:
        print(f"[DEBUG] tables ready on {engine.url.render_as_string(hide_password=True)}")


async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session
