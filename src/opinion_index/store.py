"""Ordered hash-store operations used by the relation index."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .backends import HashBackend

logger = logging.getLogger(__name__)


class Store:
    """Thin wrapper over a :class:`HashBackend`.

    Field names and values are stringified on the way in. Backend failures
    propagate unchanged; nothing is retried at this layer.
    """

    def __init__(self, backend: HashBackend):
        self.backend = backend

    def write_fields(self, key: str, fields: Mapping[object, object]) -> None:
        self.write_many({key: fields})

    def write_many(self, batch: Mapping[str, Mapping[object, object]]) -> None:
        normalized = {
            key: {str(f): str(v) for f, v in fields.items()} for key, fields in batch.items()
        }
        logger.debug("write %d key(s): %s", len(normalized), list(normalized))
        self.backend.hset_many(normalized)

    def read_all(self, key: str) -> dict[str, str]:
        return self.backend.hgetall(key)

    def read_field(self, key: str, field: object) -> str | None:
        return self.backend.hget(key, str(field))

    def delete_keys(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        logger.debug("delete keys: %s", keys)
        self.backend.delete(keys)

    def delete_fields(self, pairs: Iterable[tuple[str, object]]) -> None:
        pairs = [(key, str(field)) for key, field in pairs]
        logger.debug("delete fields: %s", pairs)
        self.backend.hdel_many(pairs)

    def keys_matching(self, pattern: str) -> set[str]:
        return self.backend.scan_keys(pattern)
