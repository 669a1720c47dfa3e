from __future__ import annotations

"""backend/app/config/settings.py

Application configuration using environment-driven settings.

This module centralizes:
- logging level
- CORS configuration
- pipeline stage delays (how long each stage stays observable)
- event hub limits (per-subscriber queue size, overflow policy, keepalives)
- aggregate store limits (history length, last-processed preview)
- Statsig telemetry credentials
"""
from functools import lru_cache
from typing import List, Literal

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  app_name: str = "error-worker"
  environment: str = "development"
  log_level: str = "INFO"

  # CORS
  allowed_origins: List[AnyHttpUrl] = [
      "http://localhost:3000",
      "http://127.0.0.1:3000",
      "http://localhost:5173",
      "http://127.0.0.1:5173",
  ]

  # Pipeline stage delays (seconds)
  validation_delay_seconds: float = Field(default=0.5, ge=0)
  workflow_delay_seconds: float = Field(default=1.0, ge=0)

  # Event hub
  keepalive_interval_seconds: float = Field(default=15.0, gt=0)
  subscriber_queue_size: int = Field(default=100, ge=1)
  subscriber_overflow: Literal["drop_oldest", "disconnect"] = "drop_oldest"

  # Aggregate store
  history_limit: int = Field(default=10, ge=1)
  last_processed_chars: int = Field(default=100, ge=1)

  # Telemetry
  statsig_server_secret: str | None = None

  model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Return a cached Settings instance."""
  return Settings()
