import datetime
from dataclasses import replace

import pytest
from httpx import AsyncClient

from app.config import get_settings
from app.main import app
from app.services.learning import LearningService
from app.storage.learning_repo import NewUser


@pytest.fixture
async def learner_id(service: LearningService) -> int:
  user = await service.repo.create_user(NewUser(username="ada", password="hash", grade=1))
  return user.id


@pytest.fixture
def auth_required():
  app.dependency_overrides[get_settings] = lambda: replace(get_settings(), auth_bypass=False)
  yield
  app.dependency_overrides.pop(get_settings, None)


@pytest.mark.anyio
async def test_unrecorded_progress_is_all_false(async_client: AsyncClient):
  response = await async_client.get("/api/progress/3", headers={"X-User-Id": "7"})

  assert response.status_code == 200
  assert response.json() == {
    "id": None,
    "userId": 7,
    "topicId": 3,
    "watchCompleted": False,
    "testCompleted": False,
    "practiceCompleted": False,
    "teachCompleted": False,
    "starsEarned": 0,
    "updatedAt": None,
  }
  assert (await async_client.get("/api/progress", headers={"X-User-Id": "7"})).json() == []


@pytest.mark.anyio
async def test_update_progress_merges_and_adds_stars(async_client: AsyncClient, learner_id: int):
  headers = {"X-User-Id": str(learner_id)}

  first = await async_client.post("/api/progress/1", json={"watchCompleted": True}, headers=headers)
  second = await async_client.post("/api/progress/1", json={"testCompleted": True, "starsEarned": 2}, headers=headers)

  assert first.status_code == 200
  body = second.json()
  assert body["id"] == first.json()["id"]
  assert (body["watchCompleted"], body["testCompleted"], body["practiceCompleted"]) == (True, True, False)
  assert body["starsEarned"] == 2
  assert datetime.datetime.fromisoformat(body["updatedAt"]) > datetime.datetime.fromisoformat(first.json()["updatedAt"])

  user = (await async_client.get("/api/user", headers=headers)).json()
  assert user["stars"] == 2


@pytest.mark.anyio
async def test_body_user_id_is_used_without_header(async_client: AsyncClient, learner_id: int):
  response = await async_client.post("/api/progress/1", json={"userId": learner_id, "practiceCompleted": True})

  assert response.status_code == 200
  assert response.json()["userId"] == learner_id


@pytest.mark.anyio
async def test_header_wins_over_body_user_id(async_client: AsyncClient):
  response = await async_client.post("/api/progress/1", json={"userId": 5, "watchCompleted": True}, headers={"X-User-Id": "6"})

  assert response.json()["userId"] == 6


@pytest.mark.anyio
async def test_placeholder_user_when_bypass_is_on(async_client: AsyncClient):
  response = await async_client.get("/api/progress/1")

  assert response.json()["userId"] == 1


@pytest.mark.anyio
async def test_missing_user_is_unauthorized_when_bypass_is_off(async_client: AsyncClient, auth_required):
  read = await async_client.get("/api/progress/1")
  write = await async_client.post("/api/progress/1", json={"watchCompleted": True})
  allowed = await async_client.get("/api/progress/1", headers={"X-User-Id": "3"})

  assert read.status_code == 401
  assert read.json()["detail"] == "Unauthorized - no user ID provided"
  assert write.status_code == 401
  assert allowed.status_code == 200


@pytest.mark.anyio
@pytest.mark.parametrize(
  "payload",
  [
    {"watchCompleted": "yes"},
    {"starsEarned": -1},
    {"starsEarned": 101},
    {"bonusStars": 1},
    {"userId": 0},
  ],
)
async def test_invalid_progress_payloads_are_rejected(async_client: AsyncClient, payload):
  response = await async_client.post("/api/progress/1", json=payload, headers={"X-User-Id": "1"})

  assert response.status_code == 422
  assert isinstance(response.json()["detail"], list)


@pytest.mark.anyio
async def test_next_stage_tracks_the_cycle(async_client: AsyncClient):
  headers = {"X-User-Id": "4"}

  assert (await async_client.get("/api/progress/1/next-stage", headers=headers)).json() == {"topicId": 1, "nextStage": "watch"}

  await async_client.post("/api/progress/1", json={"watchCompleted": True, "teachCompleted": True}, headers=headers)

  assert (await async_client.get("/api/progress/1/next-stage", headers=headers)).json()["nextStage"] == "test"


@pytest.mark.anyio
async def test_stage_completion_awards_stars_and_unlocks(async_client: AsyncClient, learner_id: int):
  headers = {"X-User-Id": str(learner_id)}

  watch = await async_client.post("/api/progress/1/stages/watch", headers=headers)
  test = await async_client.post("/api/progress/1/stages/test", json={"score": 7, "total": 10}, headers=headers)
  await async_client.post("/api/progress/1/stages/practice", headers=headers)
  teach = await async_client.post("/api/progress/1/stages/teach", headers=headers)

  assert watch.status_code == 200
  assert watch.json()["starsAwarded"] == 1
  assert watch.json()["nextStage"] == "test"
  assert test.json()["starsAwarded"] == 1
  assert teach.json()["nextStage"] == "complete"
  assert teach.json()["unlockedTopic"]["id"] == 2
  assert teach.json()["progress"]["teachCompleted"] is True
  assert (await async_client.get(f"/api/users/{learner_id}", headers=headers)).json()["stars"] == 5


@pytest.mark.anyio
async def test_failed_test_stage_earns_nothing(async_client: AsyncClient, learner_id: int):
  response = await async_client.post("/api/progress/1/stages/test", json={"userId": learner_id, "score": 3, "total": 5})

  assert response.status_code == 200
  assert response.json()["starsAwarded"] == 0
  assert response.json()["progress"]["testCompleted"] is True


@pytest.mark.anyio
@pytest.mark.parametrize(
  ("stage", "payload"),
  [
    ("complete", None),
    ("test", None),
    ("test", {"score": 5}),
    ("test", {"score": 11, "total": 10}),
    ("dance", None),
  ],
)
async def test_invalid_stage_requests(async_client: AsyncClient, stage, payload):
  response = await async_client.post(f"/api/progress/1/stages/{stage}", json=payload, headers={"X-User-Id": "1"})

  assert response.status_code == 422


@pytest.mark.anyio
async def test_stage_on_unknown_topic_is_not_found(async_client: AsyncClient):
  response = await async_client.post("/api/progress/99/stages/watch", headers={"X-User-Id": "1"})

  assert response.status_code == 404


@pytest.mark.anyio
async def test_restart_topic_resets_progress(async_client: AsyncClient, learner_id: int):
  headers = {"X-User-Id": str(learner_id)}
  await async_client.post("/api/progress/1/stages/watch", headers=headers)

  response = await async_client.post("/api/progress/1/restart", headers=headers)

  assert response.status_code == 200
  assert response.json()["watchCompleted"] is False
  assert response.json()["starsEarned"] == 0
  assert (await async_client.get("/api/progress/1/next-stage", headers=headers)).json()["nextStage"] == "watch"


@pytest.mark.anyio
async def test_list_progress_for_a_learner(async_client: AsyncClient, learner_id: int):
  await async_client.post("/api/progress/1", json={"userId": learner_id, "watchCompleted": True})
  await async_client.post("/api/progress/3", json={"userId": learner_id, "watchCompleted": True})
  await async_client.post("/api/progress/1", json={"userId": 50, "watchCompleted": True})

  mine = await async_client.get("/api/progress", headers={"X-User-Id": str(learner_id)})
  theirs = await async_client.get(f"/api/progress/user/{learner_id}")

  assert sorted(record["topicId"] for record in mine.json()) == [1, 3]
  assert sorted(record["topicId"] for record in theirs.json()) == [1, 3]


@pytest.mark.anyio
async def test_zero_user_header_is_bad_request(async_client: AsyncClient):
  response = await async_client.get("/api/progress/1", headers={"X-User-Id": "0"})

  assert response.status_code == 400
