from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
  pass


def normalize_database_url(database_url: str) -> str:
  """Pick async drivers for the plain URLs operators usually configure."""
  if database_url.startswith("postgresql://"):
    return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

  if database_url.startswith("sqlite://"):
    return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)

  return database_url


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
  """Create an async engine for the configured database."""
  return create_async_engine(normalize_database_url(database_url), echo=echo, future=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
  return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


async def create_schema(engine: AsyncEngine) -> None:
  """Create any missing tables for the ORM models."""
  # Import for side effects so every model registers on Base.metadata.
  from app.schema import sql  # noqa: F401

  async with engine.begin() as connection:
    await connection.run_sync(Base.metadata.create_all)
