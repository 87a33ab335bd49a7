"""Shared FastAPI dependencies for the learning service and acting-user resolution."""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, Request, status

from app.config import Settings, get_settings
from app.services.learning import LearningService

logger = logging.getLogger(__name__)


def get_learning_service(request: Request) -> LearningService:
  """Return the service the lifespan attached to the application."""
  service = getattr(request.app.state, "learning_service", None)
  if service is None:
    raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Learning store is not initialized")
  return service


def resolve_acting_user_id(settings: Settings, *, header_user_id: int | None, body_user_id: int | None = None) -> int:
  """Pick the acting user: header, then request body, then the bypass placeholder."""
  if header_user_id is not None:
    return header_user_id

  if body_user_id is not None:
    logger.debug("Using user_id from request body: %s", body_user_id)
    return body_user_id

  if settings.auth_bypass:
    logger.debug("Using placeholder user_id=%s", settings.placeholder_user_id)
    return settings.placeholder_user_id

  raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized - no user ID provided")


async def get_header_user_id(x_user_id: int | None = Header(default=None)) -> int | None:  # noqa: B008
  return x_user_id


async def get_acting_user_id(header_user_id: int | None = Depends(get_header_user_id), settings: Settings = Depends(get_settings)) -> int:  # noqa: B008
  """Acting user for requests without a body."""
  return resolve_acting_user_id(settings, header_user_id=header_user_id)
