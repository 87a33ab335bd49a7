from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_learning_service
from app.api.models import TopicResponse
from app.services.learning import LearningService

router = APIRouter()


@router.get("", response_model=list[TopicResponse])
async def list_topics(
  grade: int | None = Query(None),  # noqa: B008
  category: str | None = Query(None),  # noqa: B008
  service: LearningService = Depends(get_learning_service),  # noqa: B008
) -> list[TopicResponse]:
  """
  List topics sorted by their order.

  - **grade**: Only topics for this grade.
  - **category**: Only topics in this category (e.g. `Numbers`).
  """
  topics = await service.list_topics(grade=grade, category=category)
  return [TopicResponse.model_validate(topic) for topic in topics]


@router.get("/{topic_id}", response_model=TopicResponse)
async def get_topic(topic_id: int, service: LearningService = Depends(get_learning_service)) -> TopicResponse:  # noqa: B008
  topic = await service.get_topic(topic_id)
  if topic is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Topic not found")
  return TopicResponse.model_validate(topic)


@router.post("/{topic_id}/unlock", response_model=TopicResponse)
async def unlock_topic(topic_id: int, service: LearningService = Depends(get_learning_service)) -> TopicResponse:  # noqa: B008
  """Unlock a topic. Unlocking an already open topic succeeds with the same state."""
  topic = await service.unlock_topic(topic_id)
  if topic is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Topic not found")
  return TopicResponse.model_validate(topic)


@router.get("/{topic_id}/next", response_model=TopicResponse)
async def get_next_topic(topic_id: int, service: LearningService = Depends(get_learning_service)) -> TopicResponse:  # noqa: B008
  """Return the next unlocked topic in the same grade after this one."""
  if await service.get_topic(topic_id) is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Topic not found")

  next_topic = await service.next_topic(topic_id)
  if next_topic is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No unlocked topic follows this one")
  return TopicResponse.model_validate(next_topic)
