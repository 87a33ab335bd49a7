from . import progress, topics, users

__all__ = ["progress", "topics", "users"]
