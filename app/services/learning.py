"""Operation surface the HTTP routes call into."""

from __future__ import annotations

import asyncio
import datetime
import logging
import weakref
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from app.services import progress as progress_engine
from app.services import topics as topic_gating
from app.services.learning_cycle import STAGE_FLAGS, Stage, completed_stages, is_complete, next_stage, stars_for_stage
from app.services.users import add_stars
from app.storage.learning_repo import PROGRESS_FLAG_FIELDS, LearningRepository, ProgressRecord, TopicRecord, UserRecord

logger = logging.getLogger(__name__)

# Finishing the teach stage of a key topic opens the mapped follow-up topic.
UNLOCK_ON_TEACH: dict[int, int] = {1: 2}


@dataclass(frozen=True)
class StageCompletion:
  """Outcome of finishing one stage of a topic."""

  progress: ProgressRecord
  next_stage: Stage
  stars_awarded: int
  unlocked_topic: TopicRecord | None = None


@dataclass(frozen=True)
class TopicSummary:
  topic_id: int
  next_stage: Stage
  stars_earned: int
  completed_stages: list[Stage] = field(default_factory=list)
  updated_at: datetime.datetime | None = None


@dataclass(frozen=True)
class LearnerSummary:
  """Per-learner rollup shown on the parent dashboard."""

  user: UserRecord
  total_stars_earned: int
  completed_topics: int
  topics: list[TopicSummary]


class LearningService:
  """Coordinate the progress engine, topic gating and user star totals.

  The service owns one lock per user so the two-step star update (write the
  progress row, then add to the user's total) cannot interleave with another
  request for the same user inside this process.
  """

  def __init__(self, repo: LearningRepository, *, unlock_on_teach: Mapping[int, int] | None = None) -> None:
    self.repo = repo
    self._unlock_on_teach = dict(UNLOCK_ON_TEACH if unlock_on_teach is None else unlock_on_teach)
    # Entries disappear once no update for that user holds the lock.
    self._star_locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

  async def list_topics(self, *, grade: int | None = None, category: str | None = None) -> list[TopicRecord]:
    return await topic_gating.list_topics(self.repo, grade=grade, category=category)

  async def get_topic(self, topic_id: int) -> TopicRecord | None:
    return await topic_gating.get_topic(self.repo, topic_id)

  async def unlock_topic(self, topic_id: int) -> TopicRecord | None:
    return await topic_gating.unlock_topic(self.repo, topic_id)

  async def next_topic(self, topic_id: int) -> TopicRecord | None:
    """Return the next unlocked topic in the same grade, or None."""
    current = await self.repo.get_topic(topic_id)
    if current is None:
      return None

    same_grade = await self.repo.get_topics(current.grade)
    return topic_gating.next_playable_topic(same_grade, current)

  async def get_progress(self, user_id: int, topic_id: int) -> ProgressRecord:
    return await progress_engine.get_progress(self.repo, user_id, topic_id)

  async def list_progress(self, user_id: int) -> list[ProgressRecord]:
    return await progress_engine.list_progress(self.repo, user_id)

  async def record_progress(self, user_id: int, topic_id: int, changes: Mapping[str, Any]) -> ProgressRecord:
    """Merge a partial update, then add any submitted stars to the user's total.

    Stars are additive across calls: resubmitting the same `stars_earned`
    counts it again. Unknown users keep their progress row but get no total.
    """
    lock = self._star_lock(user_id)
    async with lock:
      record = await progress_engine.update_progress(self.repo, user_id, topic_id, changes)
      stars = changes.get("stars_earned")
      if stars is not None:
        await add_stars(self.repo, user_id, stars)
    return record

  def _star_lock(self, user_id: int) -> asyncio.Lock:
    lock = self._star_locks.get(user_id)
    if lock is None:
      lock = asyncio.Lock()
      self._star_locks[user_id] = lock
    return lock

  async def complete_stage(self, user_id: int, topic_id: int, stage: Stage, *, score: int | None = None, total: int | None = None) -> StageCompletion | None:
    """Mark one stage done with its reward and apply the teach unlock policy.

    Returns None when the topic does not exist.
    """
    if stage is Stage.COMPLETE:
      raise ValueError("COMPLETE is not a playable stage.")

    topic = await self.repo.get_topic(topic_id)
    if topic is None:
      return None

    stars = stars_for_stage(stage, score=score, total=total)
    record = await self.record_progress(user_id, topic_id, {STAGE_FLAGS[stage]: True, "stars_earned": stars})

    unlocked: TopicRecord | None = None
    follow_up = self._unlock_on_teach.get(topic_id)
    if stage is Stage.TEACH and follow_up is not None:
      unlocked = await topic_gating.unlock_topic(self.repo, follow_up)

    return StageCompletion(progress=record, next_stage=next_stage(record), stars_awarded=stars, unlocked_topic=unlocked)

  async def restart_topic(self, user_id: int, topic_id: int) -> ProgressRecord:
    """Clear every stage flag and the topic's stars; the user's total is untouched."""
    changes: dict[str, Any] = {flag: False for flag in PROGRESS_FLAG_FIELDS}
    changes["stars_earned"] = 0
    return await self.record_progress(user_id, topic_id, changes)

  async def summarize_user(self, user_id: int) -> LearnerSummary | None:
    user = await self.repo.get_user(user_id)
    if user is None:
      return None

    records = sorted(await self.repo.list_progress(user_id), key=lambda record: record.topic_id)
    topics = [
      TopicSummary(topic_id=record.topic_id, next_stage=next_stage(record), stars_earned=record.stars_earned, completed_stages=completed_stages(record), updated_at=record.updated_at)
      for record in records
    ]
    return LearnerSummary(
      user=user,
      total_stars_earned=sum(record.stars_earned for record in records),
      completed_topics=sum(1 for record in records if is_complete(record)),
      topics=topics,
    )
