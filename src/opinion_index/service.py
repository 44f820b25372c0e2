"""Generic opinion API.

Opinion kinds are plain strings passed as data. :class:`KindView` binds one
kind for callers that prefer ``likes.by(user, post)`` over
``service.persist("like", user, post)``.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from . import keys
from .factory import EntityResolver, RelationFactory
from .index import RelationIndex, count_entries
from .models import Direction, EntityRef, Opinion
from .purger import PurgeReport, RelationPurger
from .registry import OpinionRegistry
from .store import Store


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OpinionService:
    def __init__(
        self,
        store: Store,
        resolver: EntityResolver,
        registry: OpinionRegistry | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.registry = registry or OpinionRegistry()
        self.factory = RelationFactory(store, resolver)
        self.purger = RelationPurger(store, self.registry)
        self.clock = clock

    def index(self, kind: str, obj: Any, target: Any) -> RelationIndex:
        return RelationIndex(self.store, EntityRef.of(obj), EntityRef.of(target), kind)

    def persist(self, kind: str, obj: Any, target: Any, time: datetime | None = None) -> Opinion:
        """Record that ``obj`` expressed ``kind`` on ``target``."""
        created_at = time or self.clock()
        self.index(kind, obj, target).persist(created_at)
        return Opinion(target=target, object=obj, opinion=kind, created_at=created_at)

    def remove(self, kind: str, obj: Any, target: Any) -> None:
        self.index(kind, obj, target).remove()

    def exists(self, kind: str, obj: Any, target: Any) -> bool:
        return self.index(kind, obj, target).exists()

    def query(
        self,
        kind: str,
        entity: Any,
        direction: Direction,
        *,
        counterpart_type: str | None = None,
    ) -> list[Opinion]:
        """Opinions of ``kind`` received (``INBOUND``) or expressed (``OUTBOUND``) by ``entity``.

        ``entity`` may be a loaded entity or an :class:`EntityRef`; a loaded
        entity is reused as the anchor of every record.
        """
        ref = EntityRef.of(entity)
        anchor = None if isinstance(entity, EntityRef) else entity
        opinions: list[Opinion] = []
        for key in sorted(self.store.keys_matching(keys.pattern(ref, kind, counterpart_type))):
            built = self.factory.build(key, direction, anchor=anchor)
            if built and anchor is None:
                anchor = built[0].target if direction is Direction.INBOUND else built[0].object
            opinions.extend(built)
        return opinions

    def count(self, kind: str, entity: Any, *, counterpart_type: str | None = None) -> int:
        """Number of index entries of ``kind`` anchored on ``entity``; resolves nothing."""
        return count_entries(self.store, EntityRef.of(entity), kind, counterpart_type)

    def has_opinion_on(self, kind: str, obj: Any, target: Any) -> bool:
        """True when ``obj``'s own index lists ``target`` under ``kind``."""
        index = self.index(kind, obj, target)
        return self.store.read_field(index.object_key(), index.target.id) is not None

    def purge(self, entity: Any) -> PurgeReport:
        return self.purger.purge(EntityRef.of(entity))

    def kind(self, kind: str) -> KindView:
        return KindView(self, kind)


class KindView:
    """Per-kind convenience verbs over an :class:`OpinionService`."""

    def __init__(self, service: OpinionService, kind: str):
        self.service = service
        self.kind = kind

    def by(self, obj: Any, target: Any, time: datetime | None = None) -> Opinion:
        return self.service.persist(self.kind, obj, target, time)

    def cancel(self, obj: Any, target: Any) -> None:
        self.service.remove(self.kind, obj, target)

    def votes(self, target: Any) -> list[Opinion]:
        return self.service.query(self.kind, target, Direction.INBOUND)

    def opinions(self, obj: Any, counterpart_type: str | None = None) -> list[Opinion]:
        return self.service.query(
            self.kind, obj, Direction.OUTBOUND, counterpart_type=counterpart_type
        )

    def count(self, entity: Any) -> int:
        return self.service.count(self.kind, entity)

    def have_on(self, obj: Any, target: Any) -> bool:
        return self.service.has_opinion_on(self.kind, obj, target)
