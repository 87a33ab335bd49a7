from __future__ import annotations

import pytest

from app.services.learning_cycle import Stage, completed_stages, is_complete, next_stage, stars_for_stage, stars_for_test
from app.storage.learning_repo import ProgressRecord


def _progress(**flags: bool) -> ProgressRecord:
  return ProgressRecord(user_id=1, topic_id=1, **flags)


@pytest.mark.parametrize(
  ("flags", "expected"),
  [
    ({}, Stage.WATCH),
    ({"watch_completed": True}, Stage.TEST),
    ({"watch_completed": True, "test_completed": True}, Stage.PRACTICE),
    ({"watch_completed": True, "test_completed": True, "practice_completed": True}, Stage.TEACH),
    ({"watch_completed": True, "test_completed": True, "practice_completed": True, "teach_completed": True}, Stage.COMPLETE),
  ],
)
def test_next_stage_follows_fixed_order(flags: dict[str, bool], expected: Stage) -> None:
  assert next_stage(_progress(**flags)) is expected


def test_next_stage_reports_first_missing_flag_when_set_out_of_order() -> None:
  record = _progress(watch_completed=True, teach_completed=True)

  assert next_stage(record) is Stage.TEST
  assert not is_complete(record)
  assert completed_stages(record) == [Stage.WATCH, Stage.TEACH]


def test_is_complete_requires_every_flag() -> None:
  assert is_complete(_progress(watch_completed=True, test_completed=True, practice_completed=True, teach_completed=True))
  assert not is_complete(_progress())


@pytest.mark.parametrize(("score", "total", "stars"), [(7, 10, 1), (10, 10, 1), (6, 10, 0), (3, 5, 0), (4, 5, 1), (0, 3, 0)])
def test_stars_for_test_uses_seventy_percent_threshold(score: int, total: int, stars: int) -> None:
  assert stars_for_test(score, total) == stars


@pytest.mark.parametrize(("score", "total"), [(1, 0), (-1, 5), (6, 5)])
def test_stars_for_test_rejects_impossible_scores(score: int, total: int) -> None:
  with pytest.raises(ValueError):
    stars_for_test(score, total)


def test_stars_for_stage_rewards() -> None:
  assert stars_for_stage(Stage.WATCH) == 1
  assert stars_for_stage(Stage.PRACTICE) == 1
  assert stars_for_stage(Stage.TEACH) == 2
  assert stars_for_stage(Stage.TEST, score=8, total=10) == 1


def test_stars_for_stage_requires_score_for_test() -> None:
  with pytest.raises(ValueError, match="score and total"):
    stars_for_stage(Stage.TEST)


def test_stars_for_stage_rejects_complete() -> None:
  with pytest.raises(ValueError):
    stars_for_stage(Stage.COMPLETE)
