from __future__ import annotations

import pytest

from app.storage.learning_repo import NewTopic, NewUser, ProgressRecord
from app.storage.memory_learning_repo import InMemoryLearningRepository
from app.utils.ids import InvalidIdentifierError


def _topic(name: str, order: int, category: str = "Numbers", grade: int = 1) -> NewTopic:
  return NewTopic(name=name, description=f"{name} description", grade=grade, category=category, order=order, island=category)


@pytest.mark.anyio
async def test_seed_numbers_topics_are_ordered_with_first_unlocked(repo: InMemoryLearningRepository) -> None:
  topics = await repo.get_topics(1, "Numbers")

  assert [topic.name for topic in topics] == ["Counting Numbers 1-10", "Numbers 11-20"]
  assert [topic.is_locked for topic in topics] == [False, True]


@pytest.mark.anyio
async def test_seed_catalog_has_five_topics_with_one_unlocked(repo: InMemoryLearningRepository) -> None:
  topics = await repo.get_topics()

  assert len(topics) == 5
  assert {topic.category for topic in topics} == {"Numbers", "Addition", "Shapes", "Time"}
  assert [topic.name for topic in topics if not topic.is_locked] == ["Counting Numbers 1-10"]


@pytest.mark.anyio
async def test_get_topics_sorts_by_order_regardless_of_insertion() -> None:
  repo = InMemoryLearningRepository(seed_topics=False)
  for name, order in (("third", 3), ("first", 1), ("second", 2)):
    await repo.add_topic(_topic(name, order))

  topics = await repo.get_topics(1, "Numbers")

  assert [topic.name for topic in topics] == ["first", "second", "third"]


@pytest.mark.anyio
async def test_get_topics_combines_filters(repo: InMemoryLearningRepository) -> None:
  shapes = await repo.get_topics(grade=1, category="Shapes")

  assert [topic.name for topic in shapes] == ["Basic 2D Shapes"]
  assert await repo.get_topics(grade=2) == []
  assert await repo.get_topics(grade=2, category="Shapes") == []


@pytest.mark.anyio
async def test_create_user_applies_defaults_and_increments_ids(repo: InMemoryLearningRepository) -> None:
  first = await repo.create_user(NewUser(username="ada", password="hash"))
  second = await repo.create_user(NewUser(username="bo", password="hash", display_name="Bo", grade=2))

  assert (first.id, second.id) == (1, 2)
  assert first.role == "student"
  assert first.stars == 0
  assert first.display_name is None
  assert first.grade is None
  assert second.display_name == "Bo"
  assert second.grade == 2


@pytest.mark.anyio
async def test_user_lookups_return_none_when_absent(repo: InMemoryLearningRepository) -> None:
  created = await repo.create_user(NewUser(username="ada", password="hash"))

  assert await repo.get_user(created.id) == created
  assert await repo.get_user(42) is None
  assert await repo.get_user_by_username("ada") == created
  assert await repo.get_user_by_username("nobody") is None


@pytest.mark.anyio
async def test_update_user_stars_replaces_total(repo: InMemoryLearningRepository) -> None:
  user = await repo.create_user(NewUser(username="ada", password="hash"))

  await repo.update_user_stars(user.id, 5)
  updated = await repo.update_user_stars(user.id, 3)

  assert updated is not None
  assert updated.stars == 3
  assert (await repo.get_user(user.id)).stars == 3
  assert await repo.update_user_stars(99, 10) is None


@pytest.mark.anyio
async def test_unlock_topic_is_idempotent_and_does_not_cascade(repo: InMemoryLearningRepository) -> None:
  first = await repo.unlock_topic(2)
  second = await repo.unlock_topic(2)

  assert first is not None and first.is_locked is False
  assert second is not None and second.is_locked is False
  assert (await repo.get_topic(2)).is_locked is False
  still_locked = [topic.id for topic in await repo.get_topics() if topic.is_locked]
  assert still_locked == [3, 4, 5]


@pytest.mark.anyio
async def test_unlock_unknown_topic_returns_none(repo: InMemoryLearningRepository) -> None:
  assert await repo.unlock_topic(99) is None
  assert await repo.get_topic(99) is None


@pytest.mark.anyio
@pytest.mark.parametrize("bad_id", [0, -3, True])
async def test_invalid_identifiers_are_rejected(repo: InMemoryLearningRepository, bad_id) -> None:
  with pytest.raises(InvalidIdentifierError):
    await repo.get_topic(bad_id)

  with pytest.raises(InvalidIdentifierError):
    await repo.get_progress(bad_id, 1)


@pytest.mark.anyio
async def test_save_progress_assigns_id_once_per_pair(repo: InMemoryLearningRepository) -> None:
  created = await repo.save_progress(ProgressRecord(user_id=1, topic_id=1, watch_completed=True))
  updated = await repo.save_progress(ProgressRecord(user_id=1, topic_id=1, test_completed=True))
  other = await repo.save_progress(ProgressRecord(user_id=1, topic_id=2))

  assert created.id is not None
  assert updated.id == created.id
  assert other.id != created.id
  stored = await repo.get_progress(1, 1)
  assert stored == updated
  assert stored.watch_completed is False


@pytest.mark.anyio
async def test_list_progress_only_returns_the_users_records(repo: InMemoryLearningRepository) -> None:
  await repo.save_progress(ProgressRecord(user_id=1, topic_id=1))
  await repo.save_progress(ProgressRecord(user_id=1, topic_id=3))
  await repo.save_progress(ProgressRecord(user_id=2, topic_id=1))

  records = await repo.list_progress(1)

  assert sorted(record.topic_id for record in records) == [1, 3]
  assert await repo.list_progress(5) == []
