"""Tests for content fingerprints and the review cache."""

import json
from datetime import datetime, timedelta, timezone

import pytest


class Clock:
    """Settable clock for cache age checks."""

    def __init__(self):
        self.now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def cache(tmp_path, clock):
    from ci_reviewer.storage.cache import ReviewCache

    return ReviewCache(tmp_path / "cache", max_age_days=7, now=clock)


class TestFingerprint:
    """Tests for fingerprint helpers."""

    def test_fingerprint_is_deterministic_sha256(self):
        """Test fingerprint is a deterministic SHA-256 hex digest."""
        from ci_reviewer.storage.fingerprint import fingerprint

        assert fingerprint("abc") == fingerprint(b"abc")
        assert fingerprint("abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_single_byte_change_changes_fingerprint(self):
        """Test single byte change changes fingerprint."""
        from ci_reviewer.storage.fingerprint import fingerprint

        assert fingerprint("let a = 1;") != fingerprint("let a = 2;")

    def test_normalize_path(self):
        """Test normalize path."""
        from ci_reviewer.storage.fingerprint import normalize_path

        assert normalize_path("./src/App.svelte") == "src/App.svelte"
        assert normalize_path("src\\lib\\x.ts") == "src/lib/x.ts"


class TestReviewCache:
    """Tests for ReviewCache."""

    def test_lookup_after_store_returns_findings(self, cache, make_finding):
        """Test lookup after store returns findings."""
        findings = [make_finding(line=3), make_finding(line=8)]

        cache.store("src/App.svelte", "content v1", findings)

        assert cache.lookup("src/App.svelte", "content v1") == findings

    def test_miss_before_store(self, cache):
        """Test lookup misses before anything is stored."""
        assert cache.lookup("src/App.svelte", "content v1") is None

    def test_changed_content_never_hits(self, cache, make_finding):
        """Test changed content at the same path never hits the cache."""
        cache.store("src/App.svelte", "content v1", [make_finding()])

        assert cache.cache_key("src/App.svelte", "content v1") != cache.cache_key(
            "src/App.svelte", "content v2"
        )
        assert cache.lookup("src/App.svelte", "content v2") is None

    def test_line_endings_are_part_of_the_key(self, cache, make_finding):
        """Test byte content differing only in line endings never hits."""
        cache.store("src/App.svelte", b"let a = 1;\nlet b = 2;\n", [make_finding()])

        assert cache.lookup("src/App.svelte", b"let a = 1;\r\nlet b = 2;\r\n") is None
        assert cache.lookup("src/App.svelte", b"let a = 1;\nlet b = 2;\n") is not None

    def test_same_content_different_path_misses(self, cache, make_finding):
        """Test same content different path misses."""
        cache.store("src/a.svelte", "same", [make_finding()])

        assert cache.lookup("src/b.svelte", "same") is None

    def test_equivalent_path_spellings_hit(self, cache, make_finding):
        """Test equivalent path spellings hit."""
        cache.store("./src/App.svelte", "content", [make_finding()])

        assert cache.lookup("src/App.svelte", "content") is not None

    def test_empty_findings_are_cached(self, cache):
        """Test empty findings are cached."""
        cache.store("src/App.svelte", "clean", [])

        assert cache.lookup("src/App.svelte", "clean") == []

    def test_entry_expires_after_max_age(self, cache, clock, make_finding):
        """Test entry expires after max age."""
        cache.store("src/App.svelte", "content", [make_finding()])

        clock.advance(days=6, hours=23)
        assert cache.lookup("src/App.svelte", "content") is not None

        clock.advance(hours=2)
        assert cache.lookup("src/App.svelte", "content") is None

    def test_corrupt_record_is_a_miss(self, cache, make_finding):
        """Test corrupt record is a miss."""
        cache.store("src/App.svelte", "content", [make_finding()])
        record = cache.directory / f"{cache.cache_key('src/App.svelte', 'content')}.json"
        record.write_text("{not json", encoding="utf-8")

        assert cache.lookup("src/App.svelte", "content") is None

    def test_record_with_invalid_finding_is_a_miss(self, cache, make_finding):
        """Test record with invalid finding is a miss."""
        cache.store("src/App.svelte", "content", [make_finding()])
        record = cache.directory / f"{cache.cache_key('src/App.svelte', 'content')}.json"
        data = json.loads(record.read_text(encoding="utf-8"))
        data["findings"][0]["severity"] = "bogus"
        record.write_text(json.dumps(data), encoding="utf-8")

        assert cache.lookup("src/App.svelte", "content") is None

    def test_record_shape(self, cache, make_finding):
        """Test the on-disk record carries path, version and timestamp."""
        cache.store("src/App.svelte", "content", [make_finding(line=4)])
        record = cache.directory / f"{cache.cache_key('src/App.svelte', 'content')}.json"
        data = json.loads(record.read_text(encoding="utf-8"))

        assert data["filePath"] == "src/App.svelte"
        assert data["version"] == "1.0"
        assert data["timestamp"].startswith("2024-06-01T12:00:00")
        assert data["findings"][0]["line"] == 4

    def test_evict_older_than(self, cache, clock, make_finding):
        """Test eviction removes only records past the age threshold."""
        cache.store("src/old.svelte", "old", [make_finding()])
        clock.advance(days=5)
        cache.store("src/new.svelte", "new", [make_finding()])
        clock.advance(days=3)

        removed = cache.evict_older_than(7)

        assert removed == 1
        assert cache.lookup("src/new.svelte", "new") is not None
        assert len(list(cache.directory.glob("*.json"))) == 1

    def test_evict_without_directory(self, tmp_path):
        """Test evict without directory."""
        from ci_reviewer.storage.cache import ReviewCache

        assert ReviewCache(tmp_path / "nope").evict_older_than(7) == 0

    def test_clear_removes_directory(self, cache, make_finding):
        """Test clear removes directory."""
        cache.store("src/a.svelte", "a", [make_finding()])
        cache.store("src/b.svelte", "b", [])

        assert cache.clear() == 2
        assert not cache.directory.exists()
        assert cache.clear() == 0
