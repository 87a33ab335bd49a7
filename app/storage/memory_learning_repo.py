"""In-memory repository for users, topics and progress."""

from __future__ import annotations

import itertools
import logging
from dataclasses import replace

from app.storage.learning_repo import LearningRepository, NewTopic, NewUser, ProgressRecord, TopicRecord, UserRecord
from app.storage.seed import DEFAULT_TOPICS
from app.utils.ids import require_id

logger = logging.getLogger(__name__)


class InMemoryLearningRepository(LearningRepository):
  """Keep every table in process-local dictionaries.

  The repository is owned by whoever constructs it (the application lifespan
  in production, fixtures in tests). Records are frozen dataclasses, so callers
  only ever hold snapshots; writes replace entries rather than mutating them.
  """

  def __init__(self, *, seed_topics: bool = True) -> None:
    self._users: dict[int, UserRecord] = {}
    self._topics: dict[int, TopicRecord] = {}
    self._progress: dict[tuple[int, int], ProgressRecord] = {}
    self._user_ids = itertools.count(1)
    self._topic_ids = itertools.count(1)
    self._progress_ids = itertools.count(1)
    if seed_topics:
      for topic in DEFAULT_TOPICS:
        self._insert_topic(topic)

  async def create_user(self, new_user: NewUser) -> UserRecord:
    """Insert a user with role and star defaults applied."""
    user = UserRecord(id=next(self._user_ids), username=new_user.username, password=new_user.password, display_name=new_user.display_name, grade=new_user.grade)
    self._users[user.id] = user
    return user

  async def get_user(self, user_id: int) -> UserRecord | None:
    return self._users.get(require_id(user_id, "user_id"))

  async def get_user_by_username(self, username: str) -> UserRecord | None:
    return next((user for user in self._users.values() if user.username == username), None)

  async def update_user_stars(self, user_id: int, stars: int) -> UserRecord | None:
    """Replace the star total; absent users yield None."""
    user = self._users.get(require_id(user_id, "user_id"))
    if user is None:
      return None

    updated = replace(user, stars=stars)
    self._users[user.id] = updated
    return updated

  async def add_topic(self, new_topic: NewTopic) -> TopicRecord:
    return self._insert_topic(new_topic)

  async def get_topic(self, topic_id: int) -> TopicRecord | None:
    return self._topics.get(require_id(topic_id, "topic_id"))

  async def get_topics(self, grade: int | None = None, category: str | None = None) -> list[TopicRecord]:
    """Filter by grade and category (both when given), ordered by `order`."""
    topics = list(self._topics.values())
    if grade is not None:
      topics = [topic for topic in topics if topic.grade == grade]

    if category is not None:
      topics = [topic for topic in topics if topic.category == category]

    # sorted() is stable, so equal orders keep insertion sequence.
    return sorted(topics, key=lambda topic: topic.order)

  async def unlock_topic(self, topic_id: int) -> TopicRecord | None:
    topic = self._topics.get(require_id(topic_id, "topic_id"))
    if topic is None:
      return None

    unlocked = replace(topic, is_locked=False)
    self._topics[topic.id] = unlocked
    return unlocked

  async def get_progress(self, user_id: int, topic_id: int) -> ProgressRecord | None:
    return self._progress.get((require_id(user_id, "user_id"), require_id(topic_id, "topic_id")))

  async def save_progress(self, record: ProgressRecord) -> ProgressRecord:
    """Upsert by (user, topic); the first save assigns the record id."""
    key = (require_id(record.user_id, "user_id"), require_id(record.topic_id, "topic_id"))
    existing = self._progress.get(key)
    if existing is not None:
      stored = replace(record, id=existing.id)
    elif record.id is None:
      stored = replace(record, id=next(self._progress_ids))
      logger.debug("Created progress record user_id=%s topic_id=%s id=%s", record.user_id, record.topic_id, stored.id)
    else:
      stored = record

    self._progress[key] = stored
    return stored

  async def list_progress(self, user_id: int) -> list[ProgressRecord]:
    user_id = require_id(user_id, "user_id")
    return [record for record in self._progress.values() if record.user_id == user_id]

  def _insert_topic(self, new_topic: NewTopic) -> TopicRecord:
    topic = TopicRecord(
      id=next(self._topic_ids),
      name=new_topic.name,
      description=new_topic.description,
      grade=new_topic.grade,
      category=new_topic.category,
      order=new_topic.order,
      island=new_topic.island,
      is_locked=new_topic.is_locked,
    )
    self._topics[topic.id] = topic
    return topic
