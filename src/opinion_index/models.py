from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

EntityId = str | int


def coerce_id(value: EntityId) -> EntityId:
    """Return ``value`` as an int when it is the canonical decimal form of one.

    Keys only carry strings, so ``"7"`` read back from the store and ``7``
    handed in by a caller must name the same entity. ``"007"`` stays a string.
    """
    if isinstance(value, bool):
        raise TypeError("entity id must be str or int, not bool")
    if isinstance(value, int):
        return value
    token = str(value)
    try:
        number = int(token)
    except ValueError:
        return token
    return number if str(number) == token else token


@dataclass(frozen=True, slots=True)
class EntityRef:
    """Type tag plus id of a participant; resolved through an EntityResolver."""

    type_tag: str
    id: EntityId

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", coerce_id(self.id))

    @classmethod
    def of(cls, entity: Any) -> EntityRef:
        if isinstance(entity, EntityRef):
            return entity
        return cls(type(entity).__name__, entity.id)

    @classmethod
    def parse(cls, text: str) -> EntityRef:
        """Parse the ``Type:id`` notation used on the command line."""
        type_tag, sep, raw_id = text.partition(":")
        if not sep or not type_tag or not raw_id:
            raise ValueError(f"expected Type:id, got {text!r}")
        return cls(type_tag, raw_id)

    def __str__(self) -> str:
        return f"{self.type_tag}#{self.id}"


class Direction(str, Enum):
    """Which side of an opinion the anchor entity of a key is on."""

    INBOUND = "inbound"  # anchor received the opinion
    OUTBOUND = "outbound"  # anchor expressed the opinion


@dataclass(eq=False, slots=True)
class Opinion:
    """One reconstructed opinion: ``object`` expressed ``opinion`` on ``target``."""

    target: Any
    object: Any
    opinion: str
    created_at: datetime | str | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Opinion):
            raise TypeError(f"can't compare {other!r} with {self!r}")
        return (
            self.opinion == other.opinion
            and self.target == other.target
            and self.object == other.object
        )

    __hash__ = None  # type: ignore[assignment]
