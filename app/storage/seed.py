"""Fixed topic catalog and demo account loaded when a store starts empty."""

from __future__ import annotations

import logging

from app.storage.learning_repo import LearningRepository, NewTopic, NewUser, UserRecord

logger = logging.getLogger(__name__)

# Grade 1 catalog; only the first Numbers topic is open on a fresh store.
DEFAULT_TOPICS: tuple[NewTopic, ...] = (
  NewTopic(name="Counting Numbers 1-10", description="Learn to count from 1 to 10 with fun animations and activities!", grade=1, category="Numbers", order=1, island="Numbers", is_locked=False),
  NewTopic(name="Numbers 11-20", description="Discover numbers from 11 to 20 and how to count them.", grade=1, category="Numbers", order=2, island="Numbers", is_locked=True),
  NewTopic(name="Addition Within 10", description="Learn how to add numbers together up to a sum of 10.", grade=1, category="Addition", order=1, island="Addition", is_locked=True),
  NewTopic(name="Basic 2D Shapes", description="Explore circles, triangles, squares, and rectangles.", grade=1, category="Shapes", order=1, island="Shapes", is_locked=True),
  NewTopic(name="Reading Clock Hours", description="Learn to tell time to the hour on an analog clock.", grade=1, category="Time", order=1, island="Time", is_locked=True),
)

# Password is "password123", stored in the `<digest>.<salt>` scrypt format.
DEMO_USER = NewUser(
  username="sammy",
  password="47e08e336559243f6d4c77f7c88a42887acdb53a6654e80f0e4fc50cc937e6d28f9121abb60540cc861bb3e711c0e3a3502e19ffb69266c9d13a73ebd41564b0.36e16e0bac780eefa985c82cd67176e2",
  display_name="Sammy Student",
  grade=1,
)


async def ensure_topic_catalog(repo: LearningRepository) -> int:
  """Insert the default topics when the store has none; return how many were added."""
  existing = await repo.get_topics()
  if existing:
    return 0

  for topic in DEFAULT_TOPICS:
    await repo.add_topic(topic)

  logger.info("Seeded %d default topics", len(DEFAULT_TOPICS))
  return len(DEFAULT_TOPICS)


async def ensure_demo_user(repo: LearningRepository) -> UserRecord:
  """Create the demo learner account unless a user with that name exists."""
  existing = await repo.get_user_by_username(DEMO_USER.username)
  if existing is not None:
    return existing

  user = await repo.create_user(DEMO_USER)
  logger.info("Created demo user username=%s id=%s", user.username, user.id)
  return user
