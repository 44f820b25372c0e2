"""
Opinion Index - mirrored opinion relations on a key-value hash store.
"""

from .backends import HashBackend, InMemoryHashBackend, RedisHashBackend, build_backend
from .errors import (
    BackendError,
    InvalidKeyToken,
    MalformedKey,
    NoOpinionsRegistered,
    NotFound,
    OpinionIndexError,
)
from .factory import EntityResolver, RelationFactory
from .index import RelationIndex
from .models import Direction, EntityRef, Opinion
from .purger import PurgeReport, RelationPurger
from .registry import OpinionRegistry
from .service import KindView, OpinionService
from .store import Store

__version__ = "0.1.0"

__all__ = [
    "BackendError",
    "Direction",
    "EntityRef",
    "EntityResolver",
    "HashBackend",
    "InMemoryHashBackend",
    "InvalidKeyToken",
    "KindView",
    "MalformedKey",
    "NoOpinionsRegistered",
    "NotFound",
    "Opinion",
    "OpinionIndexError",
    "OpinionRegistry",
    "OpinionService",
    "PurgeReport",
    "RedisHashBackend",
    "RelationFactory",
    "RelationIndex",
    "RelationPurger",
    "Store",
    "build_backend",
]
