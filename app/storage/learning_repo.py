"""Storage interfaces and records for users, topics and learning progress."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Protocol

PROGRESS_FLAG_FIELDS: tuple[str, ...] = ("watch_completed", "test_completed", "practice_completed", "teach_completed")
PROGRESS_UPDATE_FIELDS: tuple[str, ...] = (*PROGRESS_FLAG_FIELDS, "stars_earned")


@dataclass(frozen=True)
class NewUser:
  """Fields accepted when registering a user."""

  username: str
  password: str
  display_name: str | None = None
  grade: int | None = None


@dataclass(frozen=True)
class UserRecord:
  """Record stored in the users table."""

  id: int
  username: str
  password: str
  display_name: str | None = None
  grade: int | None = None
  role: str = "student"
  stars: int = 0


@dataclass(frozen=True)
class NewTopic:
  """Fields accepted when adding a topic to the catalog."""

  name: str
  description: str
  grade: int
  category: str
  order: int
  island: str
  is_locked: bool = True


@dataclass(frozen=True)
class TopicRecord:
  """Record stored in the topics table."""

  id: int
  name: str
  description: str
  grade: int
  category: str
  order: int
  island: str
  is_locked: bool = True


@dataclass(frozen=True)
class ProgressRecord:
  """Completion state for one (user, topic) pair.

  `id` and `updated_at` stay None until the record is first persisted.
  """

  user_id: int
  topic_id: int
  watch_completed: bool = False
  test_completed: bool = False
  practice_completed: bool = False
  teach_completed: bool = False
  stars_earned: int = 0
  updated_at: datetime.datetime | None = None
  id: int | None = None

  @property
  def is_persisted(self) -> bool:
    return self.id is not None


class LearningRepository(Protocol):
  """Repository contract for users, topics and progress persistence."""

  async def create_user(self, new_user: NewUser) -> UserRecord:
    """Assign the next id, apply defaults and persist a user."""

  async def get_user(self, user_id: int) -> UserRecord | None:
    """Fetch a user by identifier."""

  async def get_user_by_username(self, username: str) -> UserRecord | None:
    """Fetch the first user with a matching username."""

  async def update_user_stars(self, user_id: int, stars: int) -> UserRecord | None:
    """Replace the user's star total with an absolute value."""

  async def add_topic(self, new_topic: NewTopic) -> TopicRecord:
    """Assign the next id and persist a topic."""

  async def get_topic(self, topic_id: int) -> TopicRecord | None:
    """Fetch a topic by identifier."""

  async def get_topics(self, grade: int | None = None, category: str | None = None) -> list[TopicRecord]:
    """Return topics matching every given filter, sorted ascending by order."""

  async def unlock_topic(self, topic_id: int) -> TopicRecord | None:
    """Mark a topic unlocked."""

  async def get_progress(self, user_id: int, topic_id: int) -> ProgressRecord | None:
    """Fetch the stored progress record for a (user, topic) pair."""

  async def save_progress(self, record: ProgressRecord) -> ProgressRecord:
    """Insert or replace the progress record for its (user, topic) pair."""

  async def list_progress(self, user_id: int) -> list[ProgressRecord]:
    """Return every progress record owned by a user."""
