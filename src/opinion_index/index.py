"""Dual-write / dual-delete protocol for one opinion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from . import keys
from .models import EntityRef
from .store import Store

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RelationIndex:
    """The two mirrored index entries of ``object`` --kind--> ``target``.

    ``target_key`` lists who expressed ``kind`` on the target; ``object_key``
    lists what the object expressed ``kind`` on. Both are written and removed
    in one atomic batch.
    """

    store: Store
    object: EntityRef
    target: EntityRef
    kind: str

    def target_key(self) -> str:
        return keys.encode(self.target, self.kind, self.object.type_tag)

    def object_key(self) -> str:
        return keys.encode(self.object, self.kind, self.target.type_tag)

    def persist(self, time: datetime | str) -> None:
        stamp = time.isoformat() if isinstance(time, datetime) else str(time)
        self.store.write_many(
            {
                self.target_key(): {str(self.object.id): stamp},
                self.object_key(): {str(self.target.id): stamp},
            }
        )

    def exists(self) -> bool:
        target_side = self.store.read_field(self.target_key(), self.object.id)
        object_side = self.store.read_field(self.object_key(), self.target.id)
        if (target_side is None) != (object_side is None):
            # Half-written mirror pair. Reported, never repaired here.
            logger.warning(
                "Half-written mirror for %s %s %s: target side=%s object side=%s",
                self.object,
                self.kind,
                self.target,
                target_side is not None,
                object_side is not None,
            )
        return target_side is not None and object_side is not None

    def remove(self) -> None:
        self.store.delete_fields(
            [
                (self.target_key(), self.object.id),
                (self.object_key(), self.target.id),
            ]
        )


def entries(
    store: Store, entity: EntityRef, kind: str, counterpart_type: str | None = None
) -> dict[str, dict[str, str]]:
    """Raw hashes of every key of ``kind`` anchored on ``entity``, by key."""
    return {
        key: store.read_all(key)
        for key in sorted(store.keys_matching(keys.pattern(entity, kind, counterpart_type)))
    }


def count_entries(
    store: Store, entity: EntityRef, kind: str, counterpart_type: str | None = None
) -> int:
    return sum(len(fields) for fields in entries(store, entity, kind, counterpart_type).values())
