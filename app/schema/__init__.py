"""ORM models for the SQL storage backend."""

from .sql import Progress, Topic, User

__all__ = ["Progress", "Topic", "User"]
