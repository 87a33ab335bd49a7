"""Shared fixtures: a fresh in-memory store per test and an ASGI client bound to it."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_learning_service
from app.main import app
from app.services.learning import LearningService
from app.storage.memory_learning_repo import InMemoryLearningRepository


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture
def repo() -> InMemoryLearningRepository:
  return InMemoryLearningRepository()


@pytest.fixture
def service(repo) -> LearningService:
  return LearningService(repo)


@pytest.fixture
async def async_client(service):
  app.dependency_overrides[get_learning_service] = lambda: service
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
