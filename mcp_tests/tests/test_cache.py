import pytest

import core.cache as cache_mod
from core.cache import MemoryCache
from core.errors import ValidationError


@pytest.fixture
def clock(monkeypatch):
    t = {"now": 0.0}

    def fake_monotonic():
        return t["now"]

    monkeypatch.setattr(cache_mod.time, "monotonic", fake_monotonic)
    return t


def test_memory_cache_set_get_and_expire(clock):
    c = MemoryCache(ttl_seconds=10.0, max_size=10)

    c.set("k", "v", ttl_seconds=0.1)

    clock["now"] = 0.05
    assert c.get("k") == "v"

    clock["now"] = 0.15
    assert c.get("k") is None
    assert c.size() == 0


def test_memory_cache_entry_alive_at_exact_expiry(clock):
    c = MemoryCache(ttl_seconds=10.0, max_size=10)
    c.set("k", "v")

    clock["now"] = 10.0
    assert c.get("k") == "v"


def test_memory_cache_has_deletes_expired_entry(clock):
    c = MemoryCache(ttl_seconds=1.0, max_size=10)
    c.set("k", "v")
    assert c.has("k") is True

    clock["now"] = 2.0
    assert c.has("k") is False
    assert c.size() == 0


def test_memory_cache_evicts_oldest_at_capacity(clock):
    c = MemoryCache(ttl_seconds=100.0, max_size=2)

    c.set("a", 1)
    clock["now"] = 1.0
    c.set("b", 2)
    clock["now"] = 2.0
    c.set("c", 3)

    assert c.get("a") is None
    assert c.get("b") == 2
    assert c.get("c") == 3
    assert c.size() == 2


def test_memory_cache_eviction_ties_use_insertion_order(clock):
    c = MemoryCache(ttl_seconds=100.0, max_size=2)

    c.set("a", 1)
    c.set("b", 2)
    c.set("c", 3)

    assert c.has("a") is False
    assert c.has("b") is True
    assert c.has("c") is True


def test_memory_cache_overwrite_does_not_grow_or_evict(clock):
    c = MemoryCache(ttl_seconds=100.0, max_size=2)

    c.set("k", "v1")
    c.set("other", "x")
    c.set("k", "v2")

    assert c.size() == 2
    assert c.get("k") == "v2"
    assert c.get("other") == "x"


def test_memory_cache_overwrite_refreshes_age(clock):
    c = MemoryCache(ttl_seconds=100.0, max_size=2)

    c.set("a", 1)
    clock["now"] = 1.0
    c.set("b", 2)
    clock["now"] = 2.0
    c.set("a", 10)  # "a" is now the newest entry
    clock["now"] = 3.0
    c.set("c", 3)

    assert c.get("b") is None
    assert c.get("a") == 10
    assert c.get("c") == 3


def test_memory_cache_single_slot_scenario(clock):
    c = MemoryCache(ttl_seconds=1.0, max_size=1)

    c.set("x", 42)
    c.set("y", 7)

    assert c.get("x") is None
    assert c.get("y") == 7


def test_memory_cache_delete_and_clear(clock):
    c = MemoryCache(ttl_seconds=10.0, max_size=10)
    c.set("a", 1)
    c.set("b", 2)

    assert c.delete("a") is True
    assert c.delete("a") is False
    assert c.get("a") is None

    c.clear()
    assert len(c) == 0


def test_memory_cache_stats_partitions_by_expiry(clock):
    c = MemoryCache(ttl_seconds=10.0, max_size=5)
    c.set("short", 1, ttl_seconds=1.0)
    c.set("long", 2)

    clock["now"] = 5.0
    stats = c.stats()

    assert stats.to_dict() == {
        "total_entries": 2,
        "valid_entries": 1,
        "expired_entries": 1,
        "max_size": 5,
        "ttl": 10.0,
    }


def test_memory_cache_sweep_removes_only_expired(clock):
    c = MemoryCache(ttl_seconds=10.0, max_size=5)
    c.set("short", 1, ttl_seconds=1.0)
    c.set("long", 2)

    clock["now"] = 5.0
    assert c.size() == 2
    assert c.sweep() == 1
    assert c.size() == 1
    assert c.get("long") == 2


@pytest.mark.parametrize("kwargs", [{"ttl_seconds": 0, "max_size": 1}, {"ttl_seconds": 1, "max_size": 0}])
def test_memory_cache_rejects_bad_config(kwargs):
    with pytest.raises(ValidationError):
        MemoryCache(**kwargs)


def test_memory_cache_rejects_non_positive_entry_ttl():
    c = MemoryCache(ttl_seconds=10.0, max_size=5)
    with pytest.raises(ValidationError):
        c.set("k", "v", ttl_seconds=0)
