"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from app.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

StorageBackend = Literal["memory", "sql"]

_DEFAULT_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


@dataclass(frozen=True)
class Settings:
  """Typed settings for the Math Islands service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  storage_backend: StorageBackend
  database_url: str | None
  auth_bypass: bool
  placeholder_user_id: int
  seed_demo_user: bool
  log_dir: str | None
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  origins = [origin.strip() for origin in (raw or _DEFAULT_ORIGINS).split(",") if origin.strip()]

  if not origins:
    raise ValueError("MATHLAND_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("MATHLAND_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None, *, default: bool = False) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None or raw.strip() == "":
    return default

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _parse_storage_backend(raw: str | None) -> StorageBackend:
  value = (raw or "memory").strip().lower()
  if value == "memory":
    return "memory"
  if value == "sql":
    return "sql"
  raise ValueError("MATHLAND_STORAGE_BACKEND must be 'memory' or 'sql'.")


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("MATHLAND_ENV", "development").lower()
  debug = _parse_bool(os.getenv("MATHLAND_DEBUG"))

  storage_backend = _parse_storage_backend(os.getenv("MATHLAND_STORAGE_BACKEND"))
  database_url = _optional_str(os.getenv("MATHLAND_DATABASE_URL")) or _optional_str(os.getenv("DATABASE_URL"))
  if storage_backend == "sql" and not database_url:
    raise ValueError("MATHLAND_DATABASE_URL must be set when MATHLAND_STORAGE_BACKEND is 'sql'.")

  # The placeholder identity stands in for a signed-in learner while auth is bypassed.
  auth_bypass = _parse_bool(os.getenv("MATHLAND_AUTH_BYPASS"), default=True)
  placeholder_user_id = int(os.getenv("MATHLAND_PLACEHOLDER_USER_ID", "1"))
  if placeholder_user_id <= 0:
    raise ValueError("MATHLAND_PLACEHOLDER_USER_ID must be a positive integer.")

  log_max_bytes = int(os.getenv("MATHLAND_LOG_MAX_BYTES", "5242880"))  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("MATHLAND_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = int(os.getenv("MATHLAND_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("MATHLAND_LOG_BACKUP_COUNT must be zero or a positive integer.")

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("MATHLAND_ALLOWED_ORIGINS")),
    storage_backend=storage_backend,
    database_url=database_url,
    auth_bypass=auth_bypass,
    placeholder_user_id=placeholder_user_id,
    seed_demo_user=_parse_bool(os.getenv("MATHLAND_SEED_DEMO_USER"), default=True),
    log_dir=_optional_str(os.getenv("MATHLAND_LOG_DIR")),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    # Allow opt-in logging of 4xx HTTPExceptions for diagnostics.
    log_http_4xx=_parse_bool(os.getenv("MATHLAND_LOG_HTTP_4XX")),
  )

