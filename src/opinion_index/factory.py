"""Rebuild opinion records from one stored relation key.

The anchor entity named by the key is resolved once; every counterpart id in
the key's hash is resolved with a single batch call. Counterparts the
resolver does not return are dangling references and are skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from datetime import datetime
from typing import Any, Protocol

from . import keys
from .errors import MalformedKey, NotFound
from .models import Direction, EntityId, Opinion, coerce_id
from .store import Store

logger = logging.getLogger(__name__)


class EntityResolver(Protocol):
    """Entity layer the index resolves ids through."""

    def find(self, type_tag: str, id: EntityId) -> Any:
        """Return the entity or raise :class:`~opinion_index.errors.NotFound`."""
        ...

    def find_many(self, type_tag: str, ids: Collection[EntityId]) -> Mapping[EntityId, Any]:
        """Return the entities found; missing ids are simply absent."""
        ...


def parse_timestamp(value: str) -> datetime | str:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return value


class RelationFactory:
    def __init__(self, store: Store, resolver: EntityResolver):
        self.store = store
        self.resolver = resolver

    def build(
        self,
        key: str,
        direction: Direction,
        *,
        fields: Mapping[str, str] | None = None,
        anchor: Any = None,
    ) -> list[Opinion]:
        """Return one :class:`Opinion` per resolvable field of ``key``.

        Args:
            key: Full relation key (with counterpart type).
            direction: ``INBOUND`` when the key's anchor received the opinions,
                ``OUTBOUND`` when it expressed them.
            fields: Hash contents if already read; read from the store otherwise.
            anchor: Already loaded anchor entity; skips the anchor lookup.

        Raises:
            MalformedKey: ``key`` is not a full relation key.
            NotFound: The anchor entity does not resolve.
        """
        decoded = keys.decode(key)
        if decoded.counterpart_type is None:
            raise MalformedKey(
                f"relation key without counterpart type: {key!r}", details={"key": key}
            )
        if fields is None:
            fields = self.store.read_all(key)
        if not fields:
            return []

        if anchor is None:
            anchor = self.resolver.find(decoded.anchor_type, decoded.anchor_id)
            if anchor is None:
                raise NotFound(
                    f"{decoded.anchor_type}#{decoded.anchor_id} not found",
                    details={"type_tag": decoded.anchor_type, "id": decoded.anchor_id},
                )

        ids = {field: coerce_id(field) for field in fields}
        counterparts = self.resolver.find_many(decoded.counterpart_type, set(ids.values()))

        opinions: list[Opinion] = []
        for field, stamp in fields.items():
            counterpart_id = ids[field]
            counterpart = counterparts.get(counterpart_id)
            if counterpart is None:
                counterpart = counterparts.get(field)
            if counterpart is None:
                logger.warning(
                    "Skipping dangling %s#%s in %s", decoded.counterpart_type, field, key
                )
                continue
            if direction is Direction.INBOUND:
                target, obj = anchor, counterpart
            else:
                target, obj = counterpart, anchor
            opinions.append(
                Opinion(
                    target=target,
                    object=obj,
                    opinion=decoded.kind,
                    created_at=parse_timestamp(stamp),
                )
            )
        return opinions
