import json

import pytest

from utils.cache import ClientCache


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, minutes):
        self.now += minutes * 60


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return {}


@pytest.fixture
def cache(storage, clock):
    return ClientCache("lgm_cache_", storage, clock)


def test_get_after_set(cache):
    cache.set("spots_all", [{"id": 1}], ttl_minutes=5)

    assert cache.get("spots_all") == [{"id": 1}]


def test_entry_expires_after_ttl(cache, clock):
    cache.set("spots_all", [1, 2], ttl_minutes=5)

    clock.advance(4.9)
    assert cache.get("spots_all") == [1, 2]

    clock.advance(0.2)
    assert cache.get("spots_all") is None


def test_entries_are_namespaced_json(cache, storage, clock):
    cache.set("categories", {"a": 1}, ttl_minutes=60)

    entry = json.loads(storage["lgm_cache_categories"])
    assert entry["data"] == {"a": 1}
    assert entry["timestamp"] == int(clock() * 1000)
    assert entry["expiry"] == entry["timestamp"] + 60 * 60 * 1000


def test_clear_only_touches_namespace(cache, storage):
    storage["other_app_key"] = "keep"
    cache.set("a", 1)
    cache.set("b", 2)

    cache.clear()

    assert cache.get("a") is None and cache.get("b") is None
    assert storage == {"other_app_key": "keep"}


def test_malformed_entry_reads_as_missing(cache, storage):
    storage["lgm_cache_bad"] = "{not json"

    assert cache.get("bad") is None
    assert "lgm_cache_bad" not in storage


def test_clear_expired_counts_expired_and_malformed(cache, storage, clock):
    cache.set("short", 1, ttl_minutes=1)
    cache.set("long", 2, ttl_minutes=10)
    storage["lgm_cache_broken"] = "oops"
    clock.advance(2)

    assert cache.clear_expired() == 2
    assert cache.get("long") == 2


def test_stats(cache, clock):
    cache.set("short", 1, ttl_minutes=1)
    cache.set("long", 2, ttl_minutes=10)
    clock.advance(2)

    stats = cache.stats()

    assert (stats["total"], stats["valid"], stats["expired"]) == (2, 1, 1)
    assert stats["size"] > 0


def test_remove_prefix(cache):
    cache.set("spots_all", 1)
    cache.set("spots_search=x", 2)
    cache.set("spot_3", 3)

    assert cache.remove_prefix("spots_") == 2
    assert cache.get("spot_3") == 3


def test_with_cache_calls_producer_once(cache):
    calls = []

    def producer():
        calls.append(1)
        return ["fresh"]

    assert cache.with_cache("k", producer) == ["fresh"]
    assert cache.with_cache("k", producer) == ["fresh"]
    assert len(calls) == 1


def test_with_cache_does_not_cache_failures(cache):
    def failing():
        raise RuntimeError("backend down")

    with pytest.raises(RuntimeError):
        cache.with_cache("k", failing)

    assert cache.get("k") is None


def test_unserializable_value_is_not_stored(cache, storage):
    assert cache.set("k", object()) is False
    assert storage == {}
