"""Exceptions raised by the opinion index."""

from __future__ import annotations

from typing import Any


class OpinionIndexError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidKeyToken(OpinionIndexError):
    """A type tag, kind or id cannot be embedded in a relation key."""


class MalformedKey(OpinionIndexError):
    """A stored key does not have the relation key shape."""


class NotFound(OpinionIndexError):
    """The entity resolver has no entity for the requested type and id."""


class NoOpinionsRegistered(OpinionIndexError):
    """An entity type has no opinion kinds in the registry."""


class BackendError(OpinionIndexError):
    """The key-value backend failed; never retried here."""
