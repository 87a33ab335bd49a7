from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_acting_user_id, get_header_user_id, get_learning_service, resolve_acting_user_id
from app.api.models import ActingUserRequest, NextStageResponse, ProgressResponse, ProgressUpdateRequest, StageCompletionRequest, StageCompletionResponse
from app.config import Settings, get_settings
from app.services.learning import LearningService
from app.services.learning_cycle import Stage, next_stage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[ProgressResponse])
async def list_my_progress(user_id: int = Depends(get_acting_user_id), service: LearningService = Depends(get_learning_service)) -> list[ProgressResponse]:  # noqa: B008
  """Every progress record of the acting user."""
  records = await service.list_progress(user_id)
  return [ProgressResponse.model_validate(record) for record in records]


@router.get("/user/{user_id}", response_model=list[ProgressResponse])
async def list_user_progress(user_id: int, service: LearningService = Depends(get_learning_service)) -> list[ProgressResponse]:  # noqa: B008
  """Every progress record of a given learner, for the parent dashboard."""
  records = await service.list_progress(user_id)
  return [ProgressResponse.model_validate(record) for record in records]


@router.get("/{topic_id}", response_model=ProgressResponse)
async def get_progress(topic_id: int, user_id: int = Depends(get_acting_user_id), service: LearningService = Depends(get_learning_service)) -> ProgressResponse:  # noqa: B008
  """Progress for one topic; an all-false default when nothing was recorded yet."""
  record = await service.get_progress(user_id, topic_id)
  return ProgressResponse.model_validate(record)


@router.post("/{topic_id}", response_model=ProgressResponse)
async def update_progress(
  topic_id: int,
  payload: ProgressUpdateRequest,
  header_user_id: int | None = Depends(get_header_user_id),  # noqa: B008
  settings: Settings = Depends(get_settings),  # noqa: B008
  service: LearningService = Depends(get_learning_service),  # noqa: B008
) -> ProgressResponse:
  """
  Apply a partial progress update and return the merged record.

  When `starsEarned` is present it replaces the topic's stars and is added to
  the user's running total.
  """
  user_id = resolve_acting_user_id(settings, header_user_id=header_user_id, body_user_id=payload.user_id)
  record = await service.record_progress(user_id, topic_id, payload.changes())
  return ProgressResponse.model_validate(record)


@router.get("/{topic_id}/next-stage", response_model=NextStageResponse)
async def get_next_stage(topic_id: int, user_id: int = Depends(get_acting_user_id), service: LearningService = Depends(get_learning_service)) -> NextStageResponse:  # noqa: B008
  record = await service.get_progress(user_id, topic_id)
  return NextStageResponse(topic_id=topic_id, next_stage=next_stage(record))


@router.post("/{topic_id}/stages/{stage}", response_model=StageCompletionResponse)
async def complete_stage(
  topic_id: int,
  stage: Stage,
  payload: StageCompletionRequest | None = None,
  header_user_id: int | None = Depends(get_header_user_id),  # noqa: B008
  settings: Settings = Depends(get_settings),  # noqa: B008
  service: LearningService = Depends(get_learning_service),  # noqa: B008
) -> StageCompletionResponse:
  """
  Finish one stage of a topic and award its stars.

  Watch and practice earn 1 star, teach earns 2, and the test earns 1 star
  when `score` is at least 70% of `total`. Finishing teach on the first topic
  unlocks the next one.
  """
  payload = payload or StageCompletionRequest()
  if stage is Stage.COMPLETE:
    raise HTTPException(status_code=422, detail="complete is not a playable stage")

  if stage is Stage.TEST:
    if payload.score is None or payload.total is None:
      raise HTTPException(status_code=422, detail="score and total are required for the test stage")
    if payload.score > payload.total:
      raise HTTPException(status_code=422, detail="score must not exceed total")

  user_id = resolve_acting_user_id(settings, header_user_id=header_user_id, body_user_id=payload.user_id)
  completion = await service.complete_stage(user_id, topic_id, stage, score=payload.score, total=payload.total)
  if completion is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Topic not found")

  if completion.unlocked_topic is not None:
    logger.info("Stage %s on topic_id=%s unlocked topic_id=%s", stage.value, topic_id, completion.unlocked_topic.id)
  return StageCompletionResponse.from_completion(completion)


@router.post("/{topic_id}/restart", response_model=ProgressResponse)
async def restart_topic(
  topic_id: int,
  payload: ActingUserRequest | None = None,
  header_user_id: int | None = Depends(get_header_user_id),  # noqa: B008
  settings: Settings = Depends(get_settings),  # noqa: B008
  service: LearningService = Depends(get_learning_service),  # noqa: B008
) -> ProgressResponse:
  """Reset every stage of a topic so the learner can start over."""
  body_user_id = payload.user_id if payload else None
  user_id = resolve_acting_user_id(settings, header_user_id=header_user_id, body_user_id=body_user_id)
  record = await service.restart_topic(user_id, topic_id)
  return ProgressResponse.model_validate(record)
