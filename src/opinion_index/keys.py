"""Relation key codec.

A relation key addresses one directional index hash::

    <anchor-type>:<kind>:<anchor-id>[:<counterpart-type>]

Its fields are counterpart ids, its values opinion timestamps. Without the
trailing counterpart type the key is only useful as an enumeration prefix.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import InvalidKeyToken, MalformedKey
from .models import EntityId, EntityRef, coerce_id

DELIMITER = ":"

_GLOB_SPECIAL = re.compile(r"([\[\]*?\\])")


@dataclass(frozen=True, slots=True)
class DecodedKey:
    anchor_type: str
    kind: str
    anchor_id: EntityId
    counterpart_type: str | None = None

    @property
    def anchor(self) -> EntityRef:
        return EntityRef(self.anchor_type, self.anchor_id)


def _token(value: object, what: str) -> str:
    token = str(value)
    if not token:
        raise InvalidKeyToken(f"empty {what}", details={"field": what})
    if DELIMITER in token:
        raise InvalidKeyToken(
            f"{what} {token!r} contains {DELIMITER!r}",
            details={"field": what, "token": token},
        )
    return token


def encode(anchor: EntityRef, kind: str, counterpart_type: str | None = None) -> str:
    parts = [
        _token(anchor.type_tag, "type tag"),
        _token(kind, "opinion kind"),
        _token(anchor.id, "entity id"),
    ]
    if counterpart_type is not None:
        parts.append(_token(counterpart_type, "counterpart type"))
    return DELIMITER.join(parts)


def decode(key: str) -> DecodedKey:
    parts = key.split(DELIMITER)
    if len(parts) < 3 or len(parts) > 4 or not all(parts):
        raise MalformedKey(f"not a relation key: {key!r}", details={"key": key})
    counterpart_type = parts[3] if len(parts) == 4 else None
    return DecodedKey(parts[0], parts[1], coerce_id(parts[2]), counterpart_type)


def glob_escape(text: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", text)


def pattern(anchor: EntityRef, kind: str, counterpart_type: str | None = None) -> str:
    """Glob matching the keys of ``anchor``/``kind``.

    With ``counterpart_type`` the pattern names exactly one key; without it
    every counterpart type is covered. The delimiter before ``*`` keeps
    ``User:like:1`` from matching ``User:like:10:Post``.
    """
    prefix = glob_escape(encode(anchor, kind))
    if counterpart_type is not None:
        return f"{prefix}{DELIMITER}{glob_escape(_token(counterpart_type, 'counterpart type'))}"
    return f"{prefix}{DELIMITER}*"


def mirror(key: str | DecodedKey, counterpart_id: EntityId) -> tuple[str, str]:
    """Return ``(mirror_key, mirror_field)`` for one field of ``key``.

    The field ``counterpart_id`` in ``A:K:a:B`` is mirrored by the field ``a``
    in ``B:K:counterpart_id:A``.
    """
    decoded = decode(key) if isinstance(key, str) else key
    if decoded.counterpart_type is None:
        raise MalformedKey(
            "prefix key has no mirror",
            details={"key": encode(decoded.anchor, decoded.kind)},
        )
    counterpart = EntityRef(decoded.counterpart_type, counterpart_id)
    return encode(counterpart, decoded.kind, decoded.anchor_type), str(decoded.anchor_id)
