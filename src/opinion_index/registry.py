from __future__ import annotations

from collections.abc import Iterable, Mapping

from .errors import NoOpinionsRegistered


class OpinionRegistry:
    """Explicit mapping of entity type tag to the opinion kinds it takes part in.

    Kinds keep their registration order; registering a kind twice is a no-op.
    """

    def __init__(self, kinds: Mapping[str, Iterable[str]] | None = None):
        self._kinds: dict[str, list[str]] = {}
        for type_tag, type_kinds in (kinds or {}).items():
            self.register(type_tag, *type_kinds)

    def register(self, type_tag: str, *kinds: str) -> None:
        registered = self._kinds.setdefault(type_tag, [])
        for kind in kinds:
            if kind not in registered:
                registered.append(kind)

    def kinds_for(self, type_tag: str) -> list[str]:
        kinds = self._kinds.get(type_tag)
        if not kinds:
            raise NoOpinionsRegistered(
                f"No opinions registered for {type_tag}", details={"type_tag": type_tag}
            )
        return list(kinds)
