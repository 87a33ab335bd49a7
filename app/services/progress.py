"""Read and merge-update the completion state for a (user, topic) pair."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from app.storage.learning_repo import PROGRESS_UPDATE_FIELDS, LearningRepository, ProgressRecord
from app.utils.ids import require_id

logger = logging.getLogger(__name__)


def default_progress(user_id: int, topic_id: int) -> ProgressRecord:
  """Return the unsaved all-false record used before a pair's first update."""
  return ProgressRecord(user_id=require_id(user_id, "user_id"), topic_id=require_id(topic_id, "topic_id"))


def _next_timestamp(previous: datetime.datetime | None) -> datetime.datetime:
  now = datetime.datetime.now(datetime.UTC)
  # Keep updated_at strictly increasing even when the clock does not advance.
  if previous is not None and now <= previous:
    return previous + datetime.timedelta(microseconds=1)
  return now


async def get_progress(repo: LearningRepository, user_id: int, topic_id: int) -> ProgressRecord:
  """Return the stored record or a virtual default; reading never persists."""
  record = await repo.get_progress(user_id, topic_id)
  if record is None:
    return default_progress(user_id, topic_id)
  return record


async def update_progress(repo: LearningRepository, user_id: int, topic_id: int, changes: Mapping[str, Any]) -> ProgressRecord:
  """Merge `changes` over the stored record (or a fresh default) and persist it.

  Only keys present in `changes` are applied; `stars_earned` replaces the
  stored value rather than adding to it.
  """
  unknown = sorted(set(changes) - set(PROGRESS_UPDATE_FIELDS))
  if unknown:
    raise ValueError(f"Unsupported progress fields: {', '.join(unknown)}")

  base = await repo.get_progress(user_id, topic_id)
  if base is None:
    logger.info("Creating progress record user_id=%s topic_id=%s", user_id, topic_id)
    base = default_progress(user_id, topic_id)

  merged = replace(base, **dict(changes), updated_at=_next_timestamp(base.updated_at))
  saved = await repo.save_progress(merged)
  logger.info("Progress updated user_id=%s topic_id=%s fields=%s", user_id, topic_id, sorted(changes))
  return saved


async def list_progress(repo: LearningRepository, user_id: int) -> list[ProgressRecord]:
  records = await repo.list_progress(user_id)
  logger.debug("Retrieved %d progress records for user_id=%s", len(records), user_id)
  return records
