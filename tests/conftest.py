"""Pytest fixtures for opinion-index tests."""

from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from opinion_index import (
    EntityRef,
    InMemoryHashBackend,
    NotFound,
    OpinionRegistry,
    OpinionService,
    Store,
)

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
T1 = datetime(2024, 2, 1, 8, 30, tzinfo=timezone.utc)


@dataclass(frozen=True)
class User:
    id: int
    name: str = ""


@dataclass(frozen=True)
class Post:
    id: int
    title: str = ""


class RecordingResolver:
    """In-memory entity resolver that records every call it receives."""

    def __init__(self, *entities):
        self.entities = {(type(e).__name__, e.id): e for e in entities}
        self.find_calls = []
        self.find_many_calls = []

    def add(self, *entities):
        for e in entities:
            self.entities[(type(e).__name__, e.id)] = e

    def find(self, type_tag, id):
        self.find_calls.append((type_tag, id))
        try:
            return self.entities[(type_tag, id)]
        except KeyError:
            raise NotFound(f"{type_tag}#{id} not found") from None

    def find_many(self, type_tag, ids):
        self.find_many_calls.append((type_tag, set(ids)))
        return {i: self.entities[(type_tag, i)] for i in ids if (type_tag, i) in self.entities}


@pytest.fixture
def backend():
    return InMemoryHashBackend()


@pytest.fixture
def store(backend):
    return Store(backend)


@pytest.fixture
def users():
    return {i: User(i, f"user-{i}") for i in (1, 2, 3, 10)}


@pytest.fixture
def posts():
    return {i: Post(i, f"post-{i}") for i in (7, 8)}


@pytest.fixture
def resolver(users, posts):
    return RecordingResolver(*users.values(), *posts.values())


@pytest.fixture
def registry():
    return OpinionRegistry({"User": ["like", "follow"], "Post": ["like"]})


@pytest.fixture
def service(store, resolver, registry):
    return OpinionService(store, resolver, registry, clock=lambda: T0)


@pytest.fixture
def user1():
    return EntityRef("User", 1)


@pytest.fixture
def post7():
    return EntityRef("Post", 7)
