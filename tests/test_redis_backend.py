"""Tests for the Redis backend against a mocked client."""

from unittest.mock import MagicMock

import pytest
import redis

from opinion_index import BackendError, InMemoryHashBackend, RedisHashBackend, build_backend
from opinion_index.settings import OpinionIndexSettings


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def pipe(client):
    return client.pipeline.return_value.__enter__.return_value


@pytest.fixture
def redis_backend(client):
    return RedisHashBackend(client, scan_count=100)


class TestBatches:
    """Multi-key writes and deletes run in one MULTI/EXEC pipeline."""

    def test_hset_many_uses_transaction(self, redis_backend, client, pipe):
        redis_backend.hset_many({"Post:like:7:User": {"1": "t"}, "User:like:1:Post": {"7": "t"}})

        client.pipeline.assert_called_once_with(transaction=True)
        pipe.hset.assert_any_call("Post:like:7:User", mapping={"1": "t"})
        pipe.hset.assert_any_call("User:like:1:Post", mapping={"7": "t"})
        pipe.execute.assert_called_once()

    def test_hdel_many_uses_transaction(self, redis_backend, client, pipe):
        redis_backend.hdel_many([("Post:like:7:User", "1"), ("User:like:1:Post", "7")])

        client.pipeline.assert_called_once_with(transaction=True)
        assert pipe.hdel.call_count == 2
        pipe.execute.assert_called_once()

    def test_delete_uses_transaction(self, redis_backend, client, pipe):
        redis_backend.delete(["a", "b"])

        client.pipeline.assert_called_once_with(transaction=True)
        assert pipe.delete.call_count == 2

    def test_empty_batches_skip_round_trip(self, redis_backend, client):
        redis_backend.delete([])
        redis_backend.hdel_many([])

        client.pipeline.assert_not_called()


class TestReads:
    def test_hgetall_and_hget(self, redis_backend, client):
        client.hgetall.return_value = {"1": "t"}
        client.hget.return_value = "t"

        assert redis_backend.hgetall("k") == {"1": "t"}
        assert redis_backend.hget("k", "1") == "t"

    def test_scan_keys(self, redis_backend, client):
        client.scan_iter.return_value = iter(["a", "b", "a"])

        assert redis_backend.scan_keys("User:like:1:*") == {"a", "b"}
        client.scan_iter.assert_called_once_with(match="User:like:1:*", count=100)


class TestErrors:
    """Redis errors surface as BackendError and are not retried."""

    def test_read_error_translated(self, redis_backend, client):
        client.hgetall.side_effect = redis.ConnectionError("down")

        with pytest.raises(BackendError) as exc:
            redis_backend.hgetall("k")

        assert isinstance(exc.value.__cause__, redis.ConnectionError)
        assert client.hgetall.call_count == 1

    def test_pipeline_error_translated(self, redis_backend, pipe):
        pipe.execute.side_effect = redis.ResponseError("WRONGTYPE")

        with pytest.raises(BackendError):
            redis_backend.hset_many({"k": {"1": "t"}})


class TestBuildBackend:
    def test_memory_backend_from_env(self, monkeypatch):
        monkeypatch.setenv("OPINION_INDEX_BACKEND", "memory")

        assert isinstance(build_backend(OpinionIndexSettings()), InMemoryHashBackend)

    def test_redis_backend_from_settings(self):
        cfg = OpinionIndexSettings(
            backend="redis", redis_url="redis://example:6379/3", scan_count=50
        )

        backend = build_backend(cfg)

        assert isinstance(backend, RedisHashBackend)
        assert backend.scan_count == 50
