"""
Tests for the two-tier cache store.

Metadata TTL expiry, corruption handling, sweeping, stats and the
non-expiring package tier.
"""

import json

import pytest

from cdnsync.cache import CacheStore, metadata_key


class TestMetadataTier:
    """Tests for expiring metadata entries."""

    def test_set_then_get_hits(self, cache):
        cache.set("k", {"files": ["a.js"]})
        assert cache.get("k") == (True, {"files": ["a.js"]})

    def test_missing_key_misses(self, cache):
        assert cache.get("nope") == (False, None)

    def test_entry_present_at_half_ttl(self, cache, clock):
        """Written at T with ttl=D: still readable at T + D/2."""
        cache.set("k", [1, 2, 3])
        clock.advance(cache.ttl / 2)
        hit, value = cache.get("k")
        assert hit
        assert value == [1, 2, 3]

    def test_entry_absent_at_double_ttl(self, cache, clock):
        """Written at T with ttl=D: a miss at T + 2D."""
        cache.set("k", [1, 2, 3])
        clock.advance(cache.ttl * 2)
        assert cache.get("k") == (False, None)

    def test_entry_readable_exactly_at_ttl(self, cache, clock):
        cache.set("k", "v")
        clock.advance(cache.ttl)
        assert cache.get("k") == (True, "v")

    def test_expired_read_deletes_file(self, cache, clock):
        cache.set("k", "v")
        assert len(list(cache.metadata_dir.glob("*.json"))) == 1
        clock.advance(cache.ttl + 1)
        cache.get("k")
        assert list(cache.metadata_dir.glob("*.json")) == []

    def test_filename_is_hash_with_json_extension(self, cache):
        cache.set(metadata_key("unpkg", "files", "jquery", "3.7.1"), {})
        files = list(cache.metadata_dir.iterdir())
        assert len(files) == 1
        assert files[0].suffix == ".json"
        assert len(files[0].stem) == 64

    def test_record_stores_key_timestamp_and_ttl(self, cache, clock):
        cache.set("k", {"a": 1})
        record = json.loads(next(cache.metadata_dir.glob("*.json")).read_text())
        assert record["key"] == "k"
        assert record["timestamp"] == clock.now
        assert record["ttl"] == cache.ttl
        assert record["data"] == {"a": 1}


class TestCorruption:
    """Corrupt records are misses, never errors."""

    def test_garbage_file_is_miss(self, cache):
        cache.set("k", "v")
        path = next(cache.metadata_dir.glob("*.json"))
        path.write_text("{not json")
        assert cache.get("k") == (False, None)

    def test_wrong_shape_is_miss(self, cache):
        cache.set("k", "v")
        path = next(cache.metadata_dir.glob("*.json"))
        path.write_text(json.dumps(["a", "list"]))
        assert cache.get("k") == (False, None)

    def test_bad_timestamp_is_miss(self, cache):
        cache.set("k", "v")
        path = next(cache.metadata_dir.glob("*.json"))
        path.write_text(json.dumps({"key": "k", "data": "v", "timestamp": "yesterday", "ttl": 10}))
        assert cache.get("k") == (False, None)

    def test_set_overwrites_corrupt_record(self, cache):
        cache.set("k", "v")
        next(cache.metadata_dir.glob("*.json")).write_text("\x00\x01")
        cache.set("k", "fresh")
        assert cache.get("k") == (True, "fresh")

    def test_unserializable_value_not_written(self, cache):
        assert cache.set("k", {"bad": object()}) is False
        assert cache.get("k") == (False, None)


class TestMetadataKey:
    def test_version_distinguishes_keys(self):
        assert metadata_key("unpkg", "files", "jquery", "1.0.0") != metadata_key("unpkg", "files", "jquery", "2.0.0")

    def test_absent_version_differs_from_empty(self):
        assert metadata_key("cdnjs", "versions", "vue") != metadata_key("cdnjs", "versions", "vue", "")

    def test_provider_distinguishes_keys(self):
        assert metadata_key("unpkg", "versions", "vue") != metadata_key("jsdelivr", "versions", "vue")


class TestClearExpired:
    def test_removes_only_expired(self, cache, clock):
        cache.set("old", 1)
        clock.advance(cache.ttl + 10)
        cache.set("new", 2)
        assert cache.clear_expired() == 1
        assert cache.get("new") == (True, 2)

    def test_skips_corrupt_records(self, cache, clock):
        cache.set("k", 1)
        (cache.metadata_dir / "broken.json").write_text("nope")
        clock.advance(cache.ttl * 3)
        assert cache.clear_expired() == 1
        assert (cache.metadata_dir / "broken.json").exists()

    def test_leaves_package_files(self, cache, clock):
        cache.set_package_file("unpkg", "jquery", "3.7.1", "dist/jquery.js", b"x")
        clock.advance(cache.ttl * 100)
        cache.clear_expired()
        assert cache.get_package_file("unpkg", "jquery", "3.7.1", "dist/jquery.js") == (True, b"x")


class TestPackageTier:
    def test_roundtrip_uses_hierarchical_path(self, cache):
        cache.set_package_file("jsdelivr", "jquery", "3.7.1", "dist/jquery.min.js", b"abc")
        expected = cache.packages_dir / "jsdelivr" / "jquery" / "3.7.1" / "dist" / "jquery.min.js"
        assert expected.read_bytes() == b"abc"
        assert cache.get_package_file("jsdelivr", "jquery", "3.7.1", "dist/jquery.min.js") == (True, b"abc")

    def test_miss(self, cache):
        assert cache.get_package_file("cdnjs", "vue", "3.0.0", "vue.js") == (False, None)

    def test_rejects_escaping_path(self, cache):
        with pytest.raises(ValueError):
            cache.package_path("unpkg", "x", "1.0.0", "../../etc/passwd")

    def test_package_cache_disabled(self, temp_dir):
        store = CacheStore(temp_dir / "c", package_cache=False)
        assert store.set_package_file("unpkg", "x", "1", "a.js", b"1") is False
        assert store.get_package_file("unpkg", "x", "1", "a.js") == (False, None)


class TestClearing:
    def test_clear_removes_both_tiers(self, cache):
        cache.set("k", 1)
        cache.set_package_file("unpkg", "x", "1", "a.js", b"1")
        cache.clear()
        assert cache.get("k") == (False, None)
        assert cache.get_package_file("unpkg", "x", "1", "a.js") == (False, None)
        assert cache.metadata_dir.is_dir()
        assert cache.packages_dir.is_dir()

    def test_clear_packages_keeps_metadata(self, cache):
        cache.set("k", 1)
        cache.set_package_file("unpkg", "x", "1", "a.js", b"1")
        cache.clear_packages()
        assert cache.get("k") == (True, 1)
        assert cache.get_package_file("unpkg", "x", "1", "a.js") == (False, None)


class TestStats:
    def test_counts_and_sizes(self, cache, clock):
        cache.set("a", 1)
        cache.set("b", 2)
        clock.advance(cache.ttl + 1)
        cache.set("c", 3)
        cache.set_package_file("unpkg", "x", "1", "a.js", b"12345")
        cache.set_package_file("unpkg", "x", "1", "dist/b.js", b"123")

        stats = cache.stats()
        assert stats.metadata_entries == 3
        assert stats.expired_entries == 2
        assert stats.metadata_size > 0
        assert stats.package_files == 2
        assert stats.package_size == 8
        assert stats.total_size == stats.metadata_size + 8

    def test_stats_do_not_delete_expired(self, cache, clock):
        cache.set("a", 1)
        clock.advance(cache.ttl + 1)
        cache.stats()
        assert len(list(cache.metadata_dir.glob("*.json"))) == 1


class TestDisabledStore:
    """A disabled store is how cache bypass works."""

    def test_always_misses_and_never_writes(self, temp_dir):
        store = CacheStore(temp_dir / "bypass", enabled=False)
        assert store.set("k", 1) is False
        assert store.get("k") == (False, None)
        assert store.set_package_file("unpkg", "x", "1", "a.js", b"1") is False
        assert not (temp_dir / "bypass").exists()

    def test_stats_report_disabled(self, temp_dir):
        stats = CacheStore(temp_dir / "bypass", enabled=False).stats()
        assert stats.enabled is False
        assert stats.metadata_entries == 0
