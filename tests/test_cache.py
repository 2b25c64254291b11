from __future__ import annotations

import json

from blueprint_showcase.cache import CacheStore, FileStorage, MemoryStorage
from blueprint_showcase.errors import StorageError

TTL = 6 * 60 * 60


class BrokenStorage:
    def get_item(self, key: str) -> str | None:
        raise StorageError("storage disabled")

    def set_item(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded")

    def remove_item(self, key: str) -> None:
        raise StorageError("storage disabled")


def test_save_then_load_round_trips(clock):
    store = CacheStore(MemoryStorage(), ttl_seconds=TTL, clock=clock)
    items = [{"id": 1, "name": "Nebula"}, {"id": 2, "name": "Recolor"}]

    store.save("products", items)

    assert store.load("products") == items


def test_load_ignores_entries_older_than_ttl(clock):
    store = CacheStore(MemoryStorage(), ttl_seconds=TTL, clock=clock)
    store.save("products", [{"id": 1}])

    clock.now += TTL
    assert store.load("products") == [{"id": 1}]

    clock.now += 1
    assert store.load("products") is None


def test_keys_are_independent(clock):
    storage = MemoryStorage()
    products = CacheStore(storage, ttl_seconds=TTL, clock=clock)
    repos = CacheStore(storage, ttl_seconds=60, clock=clock)

    products.save("products", [{"id": 1}])
    repos.save("repos", [{"name": "Nebula"}])
    clock.now += 120

    assert products.load("products") == [{"id": 1}]
    assert repos.load("repos") is None


def test_load_treats_bad_content_as_missing(clock):
    storage = MemoryStorage(
        {
            "garbage": "{not json",
            "no-items": json.dumps({"ts": clock.now}),
            "items-not-list": json.dumps({"ts": clock.now, "items": {"a": 1}}),
            "zero-ts": json.dumps({"ts": 0, "items": []}),
            "array": json.dumps([1, 2, 3]),
        }
    )
    store = CacheStore(storage, ttl_seconds=TTL, clock=clock)

    for key in ("garbage", "no-items", "items-not-list", "zero-ts", "array", "absent"):
        assert store.load(key) is None


def test_storage_failures_never_raise(clock):
    store = CacheStore(BrokenStorage(), ttl_seconds=TTL, clock=clock)

    store.save("products", [{"id": 1}])

    assert store.load("products") is None


def test_file_storage_persists_each_key(tmp_path, clock):
    storage = FileStorage(tmp_path / "cache")
    store = CacheStore(storage, ttl_seconds=TTL, clock=clock)

    store.save("blueprintProductsCache:v2", [{"id": 1}])

    path = storage.path_for("blueprintProductsCache:v2")
    assert path.name == "blueprintProductsCache_v2.json"
    assert json.loads(path.read_text(encoding="utf-8")) == {"ts": clock.now, "items": [{"id": 1}]}
    assert CacheStore(FileStorage(tmp_path / "cache"), ttl_seconds=TTL, clock=clock).load(
        "blueprintProductsCache:v2"
    ) == [{"id": 1}]

    storage.remove_item("blueprintProductsCache:v2")
    assert store.load("blueprintProductsCache:v2") is None
