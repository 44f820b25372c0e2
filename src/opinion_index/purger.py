from __future__ import annotations

import logging
from dataclasses import dataclass, field

from . import keys
from .errors import MalformedKey, NoOpinionsRegistered, OpinionIndexError
from .models import EntityRef
from .registry import OpinionRegistry
from .store import Store

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PurgeReport:
    entity: EntityRef
    kinds: list[str] = field(default_factory=list)
    keys_removed: list[str] = field(default_factory=list)
    mirror_fields_removed: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class RelationPurger:
    """Remove every opinion involving one entity, in both directions.

    For each registered kind, every key anchored on the entity is read; the
    key itself is dropped, then the mirror field of each of its entries is
    deleted from the counterpart's key. A failure on one kind or key is
    recorded in the report and does not stop the others.
    """

    def __init__(self, store: Store, registry: OpinionRegistry):
        self.store = store
        self.registry = registry

    def purge(self, entity: EntityRef) -> PurgeReport:
        report = PurgeReport(entity=entity)
        try:
            report.kinds = self.registry.kinds_for(entity.type_tag)
        except NoOpinionsRegistered:
            logger.debug("Nothing to purge for %s: no opinions registered", entity)
            return report

        for kind in report.kinds:
            glob = keys.pattern(entity, kind)
            try:
                matched = sorted(self.store.keys_matching(glob))
            except OpinionIndexError as e:
                logger.warning("Failed to enumerate %s: %s", glob, e)
                report.failures[glob] = str(e)
                continue
            for key in matched:
                try:
                    report.mirror_fields_removed += self._purge_key(key)
                except OpinionIndexError as e:
                    logger.warning("Failed to purge %s: %s", key, e)
                    report.failures[key] = str(e)
                    continue
                report.keys_removed.append(key)

        logger.info(
            "Purged %s: %d key(s), %d mirror field(s), %d failure(s)",
            entity,
            len(report.keys_removed),
            report.mirror_fields_removed,
            len(report.failures),
        )
        return report

    def _purge_key(self, key: str) -> int:
        decoded = keys.decode(key)
        if decoded.counterpart_type is None:
            raise MalformedKey(
                f"relation key without counterpart type: {key!r}", details={"key": key}
            )
        fields = self.store.read_all(key)
        mirrors = [keys.mirror(decoded, counterpart_id) for counterpart_id in fields]
        # Key before mirrors: a failure in between leaves only orphaned mirror
        # fields, which a purge of the counterpart removes.
        self.store.delete_keys([key])
        if mirrors:
            self.store.delete_fields(mirrors)
        return len(mirrors)
