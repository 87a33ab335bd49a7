from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_acting_user_id, get_learning_service
from app.api.models import LearnerSummaryResponse, LoginRequest, RegisterRequest, UserPublic
from app.services.learning import LearningService
from app.services.users import UsernameTakenError, authenticate_user, get_user, register_user

router = APIRouter()


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, service: LearningService = Depends(get_learning_service)) -> UserPublic:  # noqa: B008
  try:
    user = await register_user(service.repo, username=payload.username.strip(), password=payload.password, display_name=payload.display_name, grade=payload.grade)
  except UsernameTakenError as exc:
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists") from exc
  return UserPublic.model_validate(user)


@router.post("/login", response_model=UserPublic)
async def login(payload: LoginRequest, service: LearningService = Depends(get_learning_service)) -> UserPublic:  # noqa: B008
  user = await authenticate_user(service.repo, payload.username.strip(), payload.password)
  if user is None:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")
  return UserPublic.model_validate(user)


@router.get("/user", response_model=UserPublic)
async def get_acting_user(user_id: int = Depends(get_acting_user_id), service: LearningService = Depends(get_learning_service)) -> UserPublic:  # noqa: B008
  """The acting learner's profile, including the running star total."""
  user = await get_user(service.repo, user_id)
  if user is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
  return UserPublic.model_validate(user)


@router.get("/users/{user_id}", response_model=UserPublic)
async def get_user_profile(user_id: int, service: LearningService = Depends(get_learning_service)) -> UserPublic:  # noqa: B008
  user = await get_user(service.repo, user_id)
  if user is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
  return UserPublic.model_validate(user)


@router.get("/users/{user_id}/summary", response_model=LearnerSummaryResponse)
async def get_user_summary(user_id: int, service: LearningService = Depends(get_learning_service)) -> LearnerSummaryResponse:  # noqa: B008
  """Stars and completed topics for the parent dashboard."""
  summary = await service.summarize_user(user_id)
  if summary is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
  return LearnerSummaryResponse.from_summary(summary)
