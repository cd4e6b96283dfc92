import json

from prepcards.cache import LocalCache, MemoryCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_memory_cache_roundtrip():
    cache = MemoryCache()
    assert cache.get("deck-cache:v2:leetcode") is None
    cache.set("deck-cache:v2:leetcode", [1, 2])
    assert cache.get("deck-cache:v2:leetcode") == [1, 2]
    cache.remove("deck-cache:v2:leetcode")
    assert cache.get("deck-cache:v2:leetcode") is None


def test_memory_caches_are_independent():
    a, b = MemoryCache(), MemoryCache()
    a.set("k", "v")
    assert b.get("k") is None


def test_local_cache_persists_between_instances(tmp_path):
    LocalCache(tmp_path).set("deck-cache:v2:leetcode", [{"id": "1"}])
    assert LocalCache(tmp_path).get("deck-cache:v2:leetcode") == [{"id": "1"}]
    files = list(tmp_path.glob("*.json"))
    assert len(files) == 1
    assert ":" not in files[0].name


def test_local_cache_ttl_eviction(tmp_path):
    clock = FakeClock()
    cache = LocalCache(tmp_path, ttl_seconds=60, clock=clock)
    cache.set("k", "v")
    clock.now += 60
    assert cache.get("k") == "v"
    clock.now += 1
    assert cache.get("k") is None
    assert list(tmp_path.glob("*.json")) == []


def test_local_cache_ttl_override(tmp_path):
    clock = FakeClock()
    cache = LocalCache(tmp_path, ttl_seconds=3600, clock=clock)
    cache.set("k", "v")
    clock.now += 120
    assert cache.get("k", ttl_seconds=60) is None


def test_local_cache_discards_corrupt_entries(tmp_path, caplog):
    cache = LocalCache(tmp_path)
    cache.set("k", "v")
    path = next(tmp_path.glob("*.json"))
    path.write_text("{not json", encoding="utf-8")
    caplog.set_level("WARNING")
    assert cache.get("k") is None
    assert not path.exists()
    assert any("Cache" in r.message for r in caplog.records)


def test_local_cache_discards_wrong_shape(tmp_path):
    cache = LocalCache(tmp_path)
    cache.set("k", "v")
    path = next(tmp_path.glob("*.json"))
    path.write_text(json.dumps({"value": "v"}), encoding="utf-8")
    assert cache.get("k") is None
    assert not path.exists()


def test_local_cache_missing_dir(tmp_path):
    cache = LocalCache(tmp_path / "nested" / "dir")
    assert cache.get("k") is None
    cache.set("k", {"a": 1})
    assert cache.get("k") == {"a": 1}
