"""User registration, credential checks and star totals."""

from __future__ import annotations

import logging

from app.core.security import hash_password, verify_password
from app.storage.learning_repo import LearningRepository, NewUser, UserRecord

logger = logging.getLogger(__name__)


class UsernameTakenError(Exception):
  """Raised when registering a username that already exists."""

  def __init__(self, username: str) -> None:
    super().__init__(f"Username already exists: {username}")
    self.username = username


async def register_user(repo: LearningRepository, *, username: str, password: str, display_name: str | None = None, grade: int | None = None) -> UserRecord:
  """Create a learner account; the store does not enforce unique usernames, so check here."""
  if await repo.get_user_by_username(username) is not None:
    raise UsernameTakenError(username)

  user = await repo.create_user(NewUser(username=username, password=hash_password(password), display_name=display_name, grade=grade))
  logger.info("Registered user id=%s username=%s", user.id, user.username)
  return user


async def authenticate_user(repo: LearningRepository, username: str, password: str) -> UserRecord | None:
  user = await repo.get_user_by_username(username)
  if user is None or not verify_password(password, user.password):
    return None
  return user


async def get_user(repo: LearningRepository, user_id: int) -> UserRecord | None:
  return await repo.get_user(user_id)


async def add_stars(repo: LearningRepository, user_id: int, stars: int) -> UserRecord | None:
  """Add to the user's running total by reading it and writing the new absolute value."""
  user = await repo.get_user(user_id)
  if user is None:
    logger.warning("Skipping star update for unknown user_id=%s", user_id)
    return None

  updated = await repo.update_user_stars(user_id, user.stars + stars)
  if updated is not None:
    logger.info("Updated user stars user_id=%s stars=%s", user_id, updated.stars)
  return updated
