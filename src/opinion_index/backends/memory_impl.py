from __future__ import annotations

import re
import threading
from collections.abc import Iterable, Mapping
from functools import lru_cache


@lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    """Compile a Redis-style glob (``*``, ``?``, ``[...]``, ``\\`` escapes)."""
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "\\" and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if c == "*":
            out.append(".*")
        elif c == "?":
            out.append(".")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                negate = body.startswith("^")
                if negate:
                    body = body[1:]
                body = re.escape(body).replace("\\-", "-")
                out.append(f"[{'^' if negate else ''}{body}]")
                i = end
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out), re.DOTALL)


class InMemoryHashBackend:
    """Process-local hash store with Redis-like semantics.

    A single lock makes every batch atomic. Hashes left without fields are
    dropped, as Redis does.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    def hset_many(self, batch: Mapping[str, Mapping[str, str]]) -> None:
        with self._lock:
            for key, fields in batch.items():
                if fields:
                    self._data.setdefault(key, {}).update(
                        {str(f): str(v) for f, v in fields.items()}
                    )

    def hgetall(self, key: str) -> dict[str, str]:
        with self._lock:
            return dict(self._data.get(key, {}))

    def hget(self, key: str, field: str) -> str | None:
        with self._lock:
            return self._data.get(key, {}).get(field)

    def delete(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def hdel_many(self, pairs: Iterable[tuple[str, str]]) -> None:
        with self._lock:
            for key, field in pairs:
                fields = self._data.get(key)
                if fields is None:
                    continue
                fields.pop(field, None)
                if not fields:
                    del self._data[key]

    def scan_keys(self, pattern: str) -> set[str]:
        rx = _glob_regex(pattern)
        with self._lock:
            return {k for k in self._data if rx.fullmatch(k)}

    def dump(self) -> dict[str, dict[str, str]]:
        with self._lock:
            return {k: dict(v) for k, v in self._data.items()}
