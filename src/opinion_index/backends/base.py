from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol


class HashBackend(Protocol):
    """Key-value hash store the index is written to.

    ``hset_many``, ``delete`` and ``hdel_many`` each apply as one indivisible
    unit: a concurrent reader sees all of a batch or none of it.
    """

    def hset_many(self, batch: Mapping[str, Mapping[str, str]]) -> None: ...

    def hgetall(self, key: str) -> dict[str, str]: ...

    def hget(self, key: str, field: str) -> str | None: ...

    def delete(self, keys: Iterable[str]) -> None: ...

    def hdel_many(self, pairs: Iterable[tuple[str, str]]) -> None: ...

    def scan_keys(self, pattern: str) -> set[str]: ...
