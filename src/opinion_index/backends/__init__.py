"""Hash store backends."""

from __future__ import annotations

import logging

from ..settings import OpinionIndexSettings
from .base import HashBackend
from .memory_impl import InMemoryHashBackend
from .redis_impl import RedisHashBackend

logger = logging.getLogger(__name__)


def build_backend(cfg: OpinionIndexSettings) -> HashBackend:
    """Build the backend named by ``cfg.backend``."""
    if cfg.backend == "redis":
        return RedisHashBackend.from_url(cfg.redis_url, scan_count=cfg.scan_count)
    if cfg.backend == "memory":
        logger.info("Using in-memory hash backend")
        return InMemoryHashBackend()
    raise ValueError(f"Unknown backend: {cfg.backend}. Available: redis, memory")


__all__ = [
    "HashBackend",
    "InMemoryHashBackend",
    "RedisHashBackend",
    "build_backend",
]
