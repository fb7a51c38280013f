"""
Tests for the persisted translation cache and its storage backends.
"""

import json

import pytest

from conftest import FakeClock
from utils.cache import TranslationCache
from utils.storage import JSONFileStorage, MemoryStorage, StorageError, StorageQuotaError


DAY = 24 * 60 * 60


class FailingStorage(MemoryStorage):
    def set_item(self, key: str, value: str) -> None:
        raise StorageQuotaError("quota exceeded")


# =============================================================================
# Lookups
# =============================================================================


class TestLookup:
    def test_put_then_get(self, cache):
        cache.put("bn", "Home", "হোম")

        assert cache.get("bn", "Home") == "হোম"
        assert cache.get("en", "Home") is None

    def test_miss_returns_none(self, cache):
        assert cache.get("bn", "Unknown") is None

    def test_blank_text_passes_through(self, cache):
        cache.put("bn", "   ", "ignored")

        assert cache.get("bn", "") == ""
        assert cache.get("bn", "   ") == "   "
        assert cache.stats() == {"en": 0, "bn": 0}

    def test_entry_expires_after_ttl(self, cache, clock: FakeClock):
        cache.put("bn", "Home", "হোম")
        clock.advance(DAY + 1)

        assert cache.get("bn", "Home") is None

    def test_entry_live_just_inside_ttl(self, cache, clock: FakeClock):
        cache.put("bn", "Home", "হোম")
        clock.advance(DAY - 1)

        assert cache.get("bn", "Home") == "হোম"


# =============================================================================
# Persistence
# =============================================================================


class TestPersistence:
    def test_save_and_reload(self, storage, clock):
        first = TranslationCache(storage, clock=clock)
        first.put("bn", "About", "সম্পর্কে")
        first.save()

        second = TranslationCache(storage, clock=clock)
        data = second.load()

        assert data["bn"]["About"].value == "সম্পর্কে"
        assert second.get("bn", "About") == "সম্পর্কে"

    def test_payload_is_versioned(self, storage, clock):
        cache = TranslationCache(storage, clock=clock)
        cache.put("bn", "Home", "হোম")
        cache.save()

        payload = json.loads(storage.get_item("translation_cache_v2"))
        assert payload["version"] == 2
        assert payload["data"]["bn"]["Home"] == {"value": "হোম", "timestamp": int(clock() * 1000)}

    def test_load_prunes_expired_entries(self, storage, clock: FakeClock):
        cache = TranslationCache(storage, clock=clock)
        cache.put("bn", "Old", "পুরনো")
        clock.advance(DAY - 10)
        cache.put("bn", "New", "নতুন")
        cache.save()
        clock.advance(20)

        data = TranslationCache(storage, clock=clock).load()

        assert "Old" not in data["bn"]
        assert "New" in data["bn"]

    def test_missing_blob_loads_empty(self, cache):
        assert cache.load() == {"en": {}, "bn": {}}

    def test_corrupt_blob_loads_empty(self, clock):
        storage = MemoryStorage({"translation_cache_v2": "{not json"})

        assert TranslationCache(storage, clock=clock).load() == {"en": {}, "bn": {}}

    def test_old_version_loads_empty(self, clock):
        legacy = {"en": {}, "bn": {"Home": {"value": "হোম", "timestamp": 0}}}
        storage = MemoryStorage({"translation_cache_v2": json.dumps(legacy)})

        assert TranslationCache(storage, clock=clock).load() == {"en": {}, "bn": {}}

    def test_bad_entries_are_skipped(self, clock):
        now = int(clock() * 1000)
        payload = {
            "version": 2,
            "data": {"bn": {"Good": {"value": "ভাল", "timestamp": now}, "Bad": {"value": 3}}},
        }
        storage = MemoryStorage({"translation_cache_v2": json.dumps(payload)})

        data = TranslationCache(storage, clock=clock).load()

        assert list(data["bn"]) == ["Good"]

    def test_save_failure_is_not_raised(self, clock):
        cache = TranslationCache(FailingStorage(), clock=clock)
        cache.put("bn", "Home", "হোম")

        cache.save()

        assert cache.get("bn", "Home") == "হোম"

    def test_save_merges_other_writers(self, storage, clock):
        first = TranslationCache(storage, clock=clock)
        second = TranslationCache(storage, clock=clock)
        first.load()
        second.load()

        first.put("bn", "Home", "হোম")
        first.save()
        second.put("bn", "About", "সম্পর্কে")
        second.save()

        merged = TranslationCache(storage, clock=clock).load()
        assert set(merged["bn"]) == {"Home", "About"}

    def test_newer_entry_wins_on_merge(self, storage, clock: FakeClock):
        stale = TranslationCache(storage, clock=clock)
        stale.put("bn", "Home", "পুরনো")
        clock.advance(5)
        fresh = TranslationCache(storage, clock=clock)
        fresh.put("bn", "Home", "হোম")
        fresh.save()

        stale.save()

        assert TranslationCache(storage, clock=clock).load()["bn"]["Home"].value == "হোম"

    def test_clear_drops_blob(self, storage, cache):
        cache.put("bn", "Home", "হোম")
        cache.save()

        cache.clear()

        assert storage.get_item("translation_cache_v2") is None
        assert cache.get("bn", "Home") is None


# =============================================================================
# JSON file storage
# =============================================================================


class TestJSONFileStorage:
    def test_roundtrip(self, tmp_path):
        storage = JSONFileStorage(tmp_path / "nested" / "store.json")
        storage.set_item("siteLanguage", "bn")

        assert JSONFileStorage(tmp_path / "nested" / "store.json").get_item("siteLanguage") == "bn"

    def test_remove_item(self, tmp_path):
        storage = JSONFileStorage(tmp_path / "store.json")
        storage.set_item("a", "1")
        storage.remove_item("a")

        assert storage.get_item("a") is None

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("garbage", encoding="utf-8")

        assert JSONFileStorage(path).get_item("a") is None

    def test_quota_exceeded(self, tmp_path):
        storage = JSONFileStorage(tmp_path / "store.json", max_bytes=32)

        with pytest.raises(StorageQuotaError):
            storage.set_item("key", "x" * 100)

    def test_quota_error_is_storage_error(self):
        assert issubclass(StorageQuotaError, StorageError)
