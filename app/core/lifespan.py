import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import Settings
from app.core.database import build_engine, build_session_factory, create_schema
from app.core.logging import initialize_logging
from app.services.learning import LearningService
from app.storage.learning_repo import LearningRepository
from app.storage.memory_learning_repo import InMemoryLearningRepository
from app.storage.seed import ensure_demo_user, ensure_topic_catalog
from app.storage.sql_learning_repo import SqlLearningRepository

logger = logging.getLogger("app.core.lifespan")


def _redact_dsn(raw: str | None) -> str:
  """Redact credentials from a DSN while keeping host/db visible."""
  if not raw:
    return "<unset>"

  parsed = urlparse(raw)
  if not parsed.scheme:
    return "<invalid>"

  host = parsed.hostname or ""
  port = f":{parsed.port}" if parsed.port else ""
  user = f"{parsed.username}@" if parsed.username else ""
  return f"{parsed.scheme}://{user}{host}{port}{parsed.path}"


async def build_repository(settings: Settings) -> tuple[LearningRepository, AsyncEngine | None]:
  """Create the configured store, seeded with the topic catalog."""
  if settings.storage_backend == "sql":
    if not settings.database_url:
      raise RuntimeError("SQL storage selected but no database URL is configured.")
    logger.info("Using SQL storage at %s", _redact_dsn(settings.database_url))
    engine = build_engine(settings.database_url, echo=settings.debug)
    await create_schema(engine)
    repo: LearningRepository = SqlLearningRepository(build_session_factory(engine))
    await ensure_topic_catalog(repo)
    return repo, engine

  logger.info("Using in-memory storage; data lasts for the process lifetime only.")
  return InMemoryLearningRepository(), None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Configure logging, build the store and attach the learning service to app.state."""
  from app.config import get_settings

  settings = get_settings()
  try:
    initialize_logging(settings)
  except RuntimeError:
    # Keep serving with stdout logging when the log directory is not writable.
    logging.basicConfig(level=logging.INFO)
    logger.warning("File logging unavailable; continuing with stdout only.", exc_info=True)

  repo, engine = await build_repository(settings)
  if settings.seed_demo_user:
    await ensure_demo_user(repo)

  app.state.learning_service = LearningService(repo)
  logger.info("Startup complete environment=%s storage=%s auth_bypass=%s", settings.environment, settings.storage_backend, settings.auth_bypass)

  try:
    yield
  finally:
    app.state.learning_service = None
    if engine is not None:
      await engine.dispose()
