"""Four-stage learning cycle derived from progress flags, plus stage rewards."""

from __future__ import annotations

from enum import Enum

from app.storage.learning_repo import ProgressRecord


class Stage(str, Enum):
  WATCH = "watch"
  TEST = "test"
  PRACTICE = "practice"
  TEACH = "teach"
  COMPLETE = "complete"


# Fixed order of the playable stages and the progress flag each one sets.
STAGE_FLAGS: dict[Stage, str] = {
  Stage.WATCH: "watch_completed",
  Stage.TEST: "test_completed",
  Stage.PRACTICE: "practice_completed",
  Stage.TEACH: "teach_completed",
}

STAGE_STARS: dict[Stage, int] = {Stage.WATCH: 1, Stage.TEST: 1, Stage.PRACTICE: 1, Stage.TEACH: 2}

TEST_PASS_RATIO = 0.7


def next_stage(progress: ProgressRecord) -> Stage:
  """Return the first incomplete stage in fixed order, or COMPLETE.

  Flags set out of order are reported as stored: a record with teach done but
  test pending still routes the learner back to TEST.
  """
  for stage, flag in STAGE_FLAGS.items():
    if not getattr(progress, flag):
      return stage
  return Stage.COMPLETE


def is_complete(progress: ProgressRecord) -> bool:
  return next_stage(progress) is Stage.COMPLETE


def completed_stages(progress: ProgressRecord) -> list[Stage]:
  return [stage for stage, flag in STAGE_FLAGS.items() if getattr(progress, flag)]


def stars_for_test(score: int, total: int) -> int:
  """One star when at least 70% of the questions were answered correctly."""
  if total <= 0:
    raise ValueError("total must be a positive integer.")
  if score < 0 or score > total:
    raise ValueError("score must be between 0 and total.")
  return STAGE_STARS[Stage.TEST] if score >= total * TEST_PASS_RATIO else 0


def stars_for_stage(stage: Stage, *, score: int | None = None, total: int | None = None) -> int:
  """Stars awarded for finishing a stage; the test stage needs its score."""
  if stage is Stage.COMPLETE:
    raise ValueError("COMPLETE is not a playable stage.")

  if stage is Stage.TEST:
    if score is None or total is None:
      raise ValueError("score and total are required to reward the test stage.")
    return stars_for_test(score, total)

  return STAGE_STARS[stage]
