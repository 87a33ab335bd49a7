from __future__ import annotations

import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from app.services.learning import LearnerSummary, StageCompletion
from app.services.learning_cycle import Stage


class ApiModel(BaseModel):
  """Base for API payloads; JSON keys are camelCase, Python attributes snake_case."""

  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RequestModel(ApiModel):
  model_config = ConfigDict(extra="forbid")


class TopicResponse(ApiModel):
  id: int
  name: str
  description: str
  grade: int
  category: str
  order: int
  island: str
  is_locked: bool


class ProgressResponse(ApiModel):
  """Progress for a (user, topic) pair; `id` and `updatedAt` are null until first saved."""

  id: int | None = None
  user_id: int
  topic_id: int
  watch_completed: bool
  test_completed: bool
  practice_completed: bool
  teach_completed: bool
  stars_earned: int
  updated_at: datetime.datetime | None = None


class ProgressUpdateRequest(RequestModel):
  """Partial progress update; omitted or null fields keep their stored values."""

  user_id: StrictInt | None = Field(default=None, ge=1, description="Acting user when no X-User-Id header is sent.")
  watch_completed: StrictBool | None = None
  test_completed: StrictBool | None = None
  practice_completed: StrictBool | None = None
  teach_completed: StrictBool | None = None
  stars_earned: StrictInt | None = Field(default=None, ge=0, le=100, description="Stars for this topic; also added to the user's total.")

  def changes(self) -> dict[str, Any]:
    return self.model_dump(exclude={"user_id"}, exclude_none=True)


class StageCompletionRequest(RequestModel):
  user_id: StrictInt | None = Field(default=None, ge=1)
  score: StrictInt | None = Field(default=None, ge=0, description="Correct answers; required for the test stage.")
  total: StrictInt | None = Field(default=None, ge=1, description="Question count; required for the test stage.")


class ActingUserRequest(RequestModel):
  user_id: StrictInt | None = Field(default=None, ge=1)


class StageCompletionResponse(ApiModel):
  progress: ProgressResponse
  next_stage: Stage
  stars_awarded: int
  unlocked_topic: TopicResponse | None = None

  @classmethod
  def from_completion(cls, completion: StageCompletion) -> StageCompletionResponse:
    unlocked = TopicResponse.model_validate(completion.unlocked_topic) if completion.unlocked_topic else None
    return cls(progress=ProgressResponse.model_validate(completion.progress), next_stage=completion.next_stage, stars_awarded=completion.stars_awarded, unlocked_topic=unlocked)


class NextStageResponse(ApiModel):
  topic_id: int
  next_stage: Stage


class UserPublic(ApiModel):
  id: int
  username: str
  display_name: str | None = None
  grade: int | None = None
  role: str
  stars: int


class RegisterRequest(RequestModel):
  username: StrictStr = Field(min_length=3, max_length=64)
  password: StrictStr = Field(min_length=6, max_length=128)
  display_name: StrictStr | None = Field(default=None, max_length=128)
  grade: StrictInt | None = Field(default=None, ge=1, le=4)


class LoginRequest(RequestModel):
  username: StrictStr = Field(min_length=1)
  password: StrictStr = Field(min_length=1)


class TopicSummaryResponse(ApiModel):
  topic_id: int
  next_stage: Stage
  stars_earned: int
  completed_stages: list[Stage] = Field(default_factory=list)
  updated_at: datetime.datetime | None = None


class LearnerSummaryResponse(ApiModel):
  user: UserPublic
  total_stars_earned: int
  completed_topics: int
  topics: list[TopicSummaryResponse]

  @classmethod
  def from_summary(cls, summary: LearnerSummary) -> LearnerSummaryResponse:
    return cls(
      user=UserPublic.model_validate(summary.user),
      total_stars_earned=summary.total_stars_earned,
      completed_topics=summary.completed_topics,
      topics=[TopicSummaryResponse.model_validate(topic) for topic in summary.topics],
    )
