"""Tests for the Store wrapper and the in-memory backend."""

import threading

from opinion_index import EntityRef, InMemoryHashBackend, RelationIndex, Store


class TestStoreOperations:
    """Each Store operation maps onto one backend primitive."""

    def test_write_and_read_fields(self, store):
        store.write_fields("Post:like:7:User", {1: "t0", "2": "t1"})

        assert store.read_all("Post:like:7:User") == {"1": "t0", "2": "t1"}
        assert store.read_field("Post:like:7:User", 1) == "t0"
        assert store.read_field("Post:like:7:User", 3) is None

    def test_read_all_missing_key_is_empty(self, store):
        assert store.read_all("nope") == {}

    def test_rewrite_overwrites_field(self, store):
        store.write_fields("k", {"1": "old"})
        store.write_fields("k", {"1": "new"})

        assert store.read_all("k") == {"1": "new"}

    def test_write_many(self, store):
        store.write_many({"a": {"1": "x"}, "b": {"2": "y"}})

        assert store.read_all("a") == {"1": "x"}
        assert store.read_all("b") == {"2": "y"}

    def test_delete_keys(self, store):
        store.write_many({"a": {"1": "x"}, "b": {"2": "y"}, "c": {"3": "z"}})

        store.delete_keys(["a", "b", "missing"])

        assert store.keys_matching("*") == {"c"}

    def test_delete_fields_drops_empty_hashes(self, store):
        store.write_many({"a": {"1": "x", "2": "y"}, "b": {"3": "z"}})

        store.delete_fields([("a", 1), ("b", "3"), ("missing", "9")])

        assert store.read_all("a") == {"2": "y"}
        assert store.keys_matching("*") == {"a"}


class TestGlobMatching:
    """The in-memory backend follows Redis glob rules."""

    def test_prefix_star(self, store):
        store.write_many({"User:like:1:Post": {"7": "t"}, "User:like:10:Post": {"8": "t"}})

        assert store.keys_matching("User:like:1:*") == {"User:like:1:Post"}
        assert store.keys_matching("User:like:1*") == {"User:like:1:Post", "User:like:10:Post"}

    def test_question_mark_and_class(self, store):
        store.write_many({"a1": {"f": "v"}, "a2": {"f": "v"}, "b1": {"f": "v"}})

        assert store.keys_matching("a?") == {"a1", "a2"}
        assert store.keys_matching("[ab]1") == {"a1", "b1"}
        assert store.keys_matching("[^a]1") == {"b1"}

    def test_escaped_metacharacters_are_literal(self, store):
        store.write_many({"Us*er:like:1:Post": {"7": "t"}, "User:like:1:Post": {"7": "t"}})

        assert store.keys_matching(r"Us\*er:like:1:*") == {"Us*er:like:1:Post"}


class TestAtomicity:
    """Batches are applied under one lock."""

    def test_concurrent_batches_never_interleave(self):
        backend = InMemoryHashBackend()
        store = Store(backend)

        def writer(stamp):
            for _ in range(200):
                store.write_many({"a": {"1": stamp}, "b": {"1": stamp}})

        threads = [threading.Thread(target=writer, args=(str(i),)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        dump = backend.dump()
        assert dump["a"] == dump["b"]

    def test_concurrent_persist_and_remove_keep_mirrors_paired(self):
        backend = InMemoryHashBackend()
        index = RelationIndex(Store(backend), EntityRef("User", 1), EntityRef("Post", 7), "like")
        done = threading.Event()
        torn = []

        def toggler():
            for i in range(300):
                index.persist(f"t{i}")
                index.remove()
            done.set()

        def reader():
            while not done.is_set():
                dump = backend.dump()
                target_side = dump.get("Post:like:7:User", {}).get("1")
                object_side = dump.get("User:like:1:Post", {}).get("7")
                if (target_side is None) != (object_side is None):
                    torn.append(dump)

        threads = [threading.Thread(target=toggler), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert torn == []
        assert backend.dump() == {}

    def test_concurrent_key_deletes_are_all_or_nothing(self):
        backend = InMemoryHashBackend()
        store = Store(backend)
        done = threading.Event()
        torn = []

        def churn():
            for _ in range(300):
                store.write_many({"a": {"1": "x"}, "b": {"1": "x"}})
                store.delete_keys(["a", "b"])
            done.set()

        def reader():
            while not done.is_set():
                dump = backend.dump()
                if ("a" in dump) != ("b" in dump):
                    torn.append(dump)

        threads = [threading.Thread(target=churn), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert torn == []
