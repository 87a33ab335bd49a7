"""SQL-backed repository for users, topics and progress using SQLAlchemy."""

from __future__ import annotations

import datetime
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.schema.sql import Progress, Topic, User
from app.storage.learning_repo import LearningRepository, NewTopic, NewUser, ProgressRecord, TopicRecord, UserRecord
from app.utils.ids import require_id

logger = logging.getLogger(__name__)


def _user_record(row: User) -> UserRecord:
  return UserRecord(id=row.id, username=row.username, password=row.password, display_name=row.display_name, grade=row.grade, role=row.role, stars=row.stars)


def _topic_record(row: Topic) -> TopicRecord:
  return TopicRecord(id=row.id, name=row.name, description=row.description, grade=row.grade, category=row.category, order=row.order, island=row.island, is_locked=bool(row.is_locked))


def _as_utc(value: datetime.datetime | None) -> datetime.datetime | None:
  # SQLite drops tzinfo on the way back out.
  if value is not None and value.tzinfo is None:
    return value.replace(tzinfo=datetime.UTC)
  return value


def _progress_record(row: Progress) -> ProgressRecord:
  return ProgressRecord(
    id=row.id,
    user_id=row.user_id,
    topic_id=row.topic_id,
    watch_completed=bool(row.watch_completed),
    test_completed=bool(row.test_completed),
    practice_completed=bool(row.practice_completed),
    teach_completed=bool(row.teach_completed),
    stars_earned=row.stars_earned,
    updated_at=_as_utc(row.updated_at),
  )


class SqlLearningRepository(LearningRepository):
  """Persist users, topics and progress through an async SQLAlchemy session factory."""

  def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
    self._session_factory = session_factory

  async def create_user(self, new_user: NewUser) -> UserRecord:
    """Insert a user row and return it with its assigned id."""
    async with self._session_factory() as session:
      row = User(username=new_user.username, password=new_user.password, display_name=new_user.display_name, grade=new_user.grade, role="student", stars=0)
      session.add(row)
      await session.commit()
      return _user_record(row)

  async def get_user(self, user_id: int) -> UserRecord | None:
    async with self._session_factory() as session:
      row = await session.get(User, require_id(user_id, "user_id"))
      return _user_record(row) if row else None

  async def get_user_by_username(self, username: str) -> UserRecord | None:
    async with self._session_factory() as session:
      result = await session.execute(select(User).where(User.username == username).order_by(User.id).limit(1))
      row = result.scalar_one_or_none()
      return _user_record(row) if row else None

  async def update_user_stars(self, user_id: int, stars: int) -> UserRecord | None:
    async with self._session_factory() as session:
      row = await session.get(User, require_id(user_id, "user_id"))
      if row is None:
        return None

      row.stars = stars
      await session.commit()
      return _user_record(row)

  async def add_topic(self, new_topic: NewTopic) -> TopicRecord:
    async with self._session_factory() as session:
      row = Topic(
        name=new_topic.name,
        description=new_topic.description,
        grade=new_topic.grade,
        category=new_topic.category,
        order=new_topic.order,
        island=new_topic.island,
        is_locked=new_topic.is_locked,
      )
      session.add(row)
      await session.commit()
      return _topic_record(row)

  async def get_topic(self, topic_id: int) -> TopicRecord | None:
    async with self._session_factory() as session:
      row = await session.get(Topic, require_id(topic_id, "topic_id"))
      return _topic_record(row) if row else None

  async def get_topics(self, grade: int | None = None, category: str | None = None) -> list[TopicRecord]:
    """Filter by grade and category, ordered by `order` then id."""
    query = select(Topic)
    if grade is not None:
      query = query.where(Topic.grade == grade)

    if category is not None:
      query = query.where(Topic.category == category)

    # Tie-break on id so equal orders keep insertion sequence like the in-memory store.
    query = query.order_by(Topic.order, Topic.id)
    async with self._session_factory() as session:
      result = await session.execute(query)
      return [_topic_record(row) for row in result.scalars().all()]

  async def unlock_topic(self, topic_id: int) -> TopicRecord | None:
    async with self._session_factory() as session:
      row = await session.get(Topic, require_id(topic_id, "topic_id"))
      if row is None:
        return None

      row.is_locked = False
      await session.commit()
      return _topic_record(row)

  async def get_progress(self, user_id: int, topic_id: int) -> ProgressRecord | None:
    async with self._session_factory() as session:
      row = await self._find_progress(session, require_id(user_id, "user_id"), require_id(topic_id, "topic_id"))
      return _progress_record(row) if row else None

  async def save_progress(self, record: ProgressRecord) -> ProgressRecord:
    """Upsert the row for the record's (user, topic) pair."""
    user_id = require_id(record.user_id, "user_id")
    topic_id = require_id(record.topic_id, "topic_id")
    async with self._session_factory() as session:
      row = await self._find_progress(session, user_id, topic_id)
      if row is None:
        row = Progress(user_id=user_id, topic_id=topic_id)
        session.add(row)
        logger.debug("Creating progress row user_id=%s topic_id=%s", user_id, topic_id)

      row.watch_completed = record.watch_completed
      row.test_completed = record.test_completed
      row.practice_completed = record.practice_completed
      row.teach_completed = record.teach_completed
      row.stars_earned = record.stars_earned
      row.updated_at = record.updated_at or datetime.datetime.now(datetime.UTC)
      await session.commit()
      return _progress_record(row)

  async def list_progress(self, user_id: int) -> list[ProgressRecord]:
    async with self._session_factory() as session:
      result = await session.execute(select(Progress).where(Progress.user_id == require_id(user_id, "user_id")))
      return [_progress_record(row) for row in result.scalars().all()]

  async def _find_progress(self, session: AsyncSession, user_id: int, topic_id: int) -> Progress | None:
    result = await session.execute(select(Progress).where(Progress.user_id == user_id, Progress.topic_id == topic_id))
    return result.scalar_one_or_none()
