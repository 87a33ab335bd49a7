"""Topic lookup and gating."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from app.storage.learning_repo import LearningRepository, TopicRecord

logger = logging.getLogger(__name__)


def is_topic_playable(topic: TopicRecord) -> bool:
  return topic.is_locked is False


async def list_topics(repo: LearningRepository, *, grade: int | None = None, category: str | None = None) -> list[TopicRecord]:
  return await repo.get_topics(grade, category)


async def get_topic(repo: LearningRepository, topic_id: int) -> TopicRecord | None:
  return await repo.get_topic(topic_id)


async def unlock_topic(repo: LearningRepository, topic_id: int) -> TopicRecord | None:
  """Open a topic for learners; repeating the call is a no-op that returns the same state.

  Only the requested topic changes. Nothing else is unlocked alongside it.
  """
  topic = await repo.unlock_topic(topic_id)
  if topic is None:
    logger.info("Unlock requested for unknown topic_id=%s", topic_id)
    return None

  logger.info("Topic unlocked topic_id=%s name=%s", topic.id, topic.name)
  return topic


def next_playable_topic(topics: Iterable[TopicRecord], current: TopicRecord) -> TopicRecord | None:
  """Return the first unlocked topic ordered after `current`, if any."""
  for topic in sorted(topics, key=lambda item: item.order):
    if topic.id != current.id and topic.order > current.order and is_topic_playable(topic):
      return topic
  return None
