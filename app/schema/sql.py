from __future__ import annotations

import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class User(Base):
  __tablename__ = "users"

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  username: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
  password: Mapped[str] = mapped_column(String, nullable=False)
  display_name: Mapped[str | None] = mapped_column(String, nullable=True)
  grade: Mapped[int | None] = mapped_column(Integer, nullable=True)
  role: Mapped[str] = mapped_column(String, nullable=False, default="student")
  stars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Topic(Base):
  __tablename__ = "topics"

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  name: Mapped[str] = mapped_column(String, nullable=False)
  description: Mapped[str] = mapped_column(Text, nullable=False)
  grade: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
  category: Mapped[str] = mapped_column(String, nullable=False, index=True)
  order: Mapped[int] = mapped_column("order", Integer, nullable=False)
  island: Mapped[str] = mapped_column(String, nullable=False)
  is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Progress(Base):
  __tablename__ = "progress"
  __table_args__ = (UniqueConstraint("user_id", "topic_id", name="uq_progress_user_topic"),)

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
  topic_id: Mapped[int] = mapped_column(Integer, nullable=False)
  watch_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
  test_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
  practice_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
  teach_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
  stars_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
