from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpinionIndexSettings(BaseSettings):
    """Configuration for the opinion index.

    Environment variables are prefixed with OPINION_INDEX_.
    """

    model_config = SettingsConfigDict(env_prefix="OPINION_INDEX_", extra="ignore")

    backend: Literal["redis", "memory"] = Field(default="redis", description="redis|memory")
    redis_url: str = "redis://localhost:6379/0"
    scan_count: int = Field(default=500, ge=1, description="SCAN COUNT hint")

    log_level: str = Field(default="INFO", description="Python logging level")


settings = OpinionIndexSettings()
