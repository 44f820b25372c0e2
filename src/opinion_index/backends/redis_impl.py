"""Redis hash backend.

Batches run inside ``MULTI``/``EXEC`` pipelines; enumeration uses ``SCAN``
rather than ``KEYS`` so large keyspaces do not block the server.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

import redis

from ..errors import BackendError

logger = logging.getLogger(__name__)


class RedisHashBackend:
    def __init__(self, client: redis.Redis, *, scan_count: int = 500):
        self.client = client
        self.scan_count = scan_count

    @classmethod
    def from_url(cls, redis_url: str, *, scan_count: int = 500) -> RedisHashBackend:
        client = redis.from_url(redis_url, decode_responses=True)
        logger.info("Redis hash backend: %s", redis_url)
        return cls(client, scan_count=scan_count)

    def hset_many(self, batch: Mapping[str, Mapping[str, str]]) -> None:
        try:
            with self.client.pipeline(transaction=True) as pipe:
                for key, fields in batch.items():
                    if fields:
                        pipe.hset(key, mapping=dict(fields))
                pipe.execute()
        except redis.RedisError as e:
            raise BackendError(f"HSET batch failed: {e}", details={"keys": list(batch)}) from e

    def hgetall(self, key: str) -> dict[str, str]:
        try:
            return dict(self.client.hgetall(key))
        except redis.RedisError as e:
            raise BackendError(f"HGETALL {key} failed: {e}", details={"key": key}) from e

    def hget(self, key: str, field: str) -> str | None:
        try:
            return self.client.hget(key, field)
        except redis.RedisError as e:
            raise BackendError(f"HGET {key} {field} failed: {e}", details={"key": key}) from e

    def delete(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        try:
            with self.client.pipeline(transaction=True) as pipe:
                for key in keys:
                    pipe.delete(key)
                pipe.execute()
        except redis.RedisError as e:
            raise BackendError(f"DEL batch failed: {e}", details={"keys": keys}) from e

    def hdel_many(self, pairs: Iterable[tuple[str, str]]) -> None:
        pairs = list(pairs)
        if not pairs:
            return
        try:
            with self.client.pipeline(transaction=True) as pipe:
                for key, field in pairs:
                    pipe.hdel(key, field)
                pipe.execute()
        except redis.RedisError as e:
            raise BackendError(
                f"HDEL batch failed: {e}", details={"keys": [k for k, _ in pairs]}
            ) from e

    def scan_keys(self, pattern: str) -> set[str]:
        try:
            return set(self.client.scan_iter(match=pattern, count=self.scan_count))
        except redis.RedisError as e:
            raise BackendError(f"SCAN {pattern} failed: {e}", details={"pattern": pattern}) from e
