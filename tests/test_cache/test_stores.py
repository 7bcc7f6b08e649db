"""Tests for the diskcache-backed FallbackCache and TaggedCache."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from apiconnector.cache import FallbackCache, TaggedCache
from apiconnector.exceptions import CacheError


@pytest.fixture()
def fallback(tmp_path: Path):
    c = FallbackCache(tmp_path)
    yield c
    c.close()


@pytest.fixture()
def tagged(tmp_path: Path):
    c = TaggedCache(tmp_path)
    yield c
    c.close()


def _raise_operational(*args, **kwargs):
    raise sqlite3.OperationalError("database is locked")


# ------------------------------------------------------------------ #
# FallbackCache
# ------------------------------------------------------------------ #


class TestFallbackCache:
    def test_set_and_get(self, fallback: FallbackCache) -> None:
        fallback.set("k", '{"temp": 21}')
        assert fallback.get("k") == '{"temp": 21}'

    def test_miss_returns_none(self, fallback: FallbackCache) -> None:
        assert fallback.get("missing") is None

    def test_empty_body_is_a_hit(self, fallback: FallbackCache) -> None:
        fallback.set("k", "")
        assert fallback.get("k") == ""

    def test_non_string_entry_reads_as_miss(self, fallback: FallbackCache) -> None:
        fallback._cache.set("k", {"not": "a string"})
        assert fallback.get("k") is None

    def test_overwrite(self, fallback: FallbackCache) -> None:
        fallback.set("k", "old")
        fallback.set("k", "new")
        assert fallback.get("k") == "new"

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        first = FallbackCache(tmp_path)
        first.set("k", "body")
        first.close()
        second = FallbackCache(tmp_path)
        try:
            assert second.get("k") == "body"
        finally:
            second.close()

    def test_remove_and_remove_missing(self, fallback: FallbackCache) -> None:
        fallback.set("k", "body")
        fallback.remove("k")
        fallback.remove("k")
        assert fallback.get("k") is None

    def test_clear(self, fallback: FallbackCache) -> None:
        fallback.set("a", "1")
        fallback.set("b", "2")
        fallback.clear()
        assert fallback.get("a") is None
        assert fallback.stats()["size"] == 0

    def test_stats(self, fallback: FallbackCache, tmp_path: Path) -> None:
        fallback.set("a", "1")
        stats = fallback.stats()
        assert stats == {"size": 1, "directory": str(tmp_path / "fallback"), "ttl_seconds": None}

    def test_write_failure_raises_cache_error(
        self, fallback: FallbackCache, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(fallback._cache, "set", _raise_operational)
        with pytest.raises(CacheError, match="write failed"):
            fallback.set("k", "body")

    def test_read_failure_raises_cache_error(
        self, fallback: FallbackCache, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(fallback._cache, "get", _raise_operational)
        with pytest.raises(CacheError, match="read failed"):
            fallback.get("k")

    def test_double_close(self, tmp_path: Path) -> None:
        c = FallbackCache(tmp_path)
        c.close()
        c.close()


# ------------------------------------------------------------------ #
# TaggedCache
# ------------------------------------------------------------------ #


class TestTaggedCache:
    @pytest.mark.parametrize("value", [{"id": 1}, [1, 2, 3], 42, "text", 0, False])
    def test_set_and_get_values(self, tagged: TaggedCache, value) -> None:
        tagged.set("k", value)
        assert tagged.get("k") == value

    def test_miss_returns_none(self, tagged: TaggedCache) -> None:
        assert tagged.get("missing") is None

    def test_tags_are_stored(self, tagged: TaggedCache) -> None:
        tagged.set("k", 1, tags=["b", "a", "a"])
        assert tagged.get_tags("k") == ["a", "b"]
        assert tagged.get_tags("missing") == []

    def test_invalidate_tag(self, tagged: TaggedCache) -> None:
        tagged.set("berlin", 1, tags=["forecast", "de"])
        tagged.set("paris", 2, tags=["forecast"])
        tagged.set("munich", 3, tags=["de"])

        removed = tagged.invalidate_tag("forecast")

        assert sorted(removed) == ["berlin", "paris"]
        assert tagged.get("berlin") is None
        assert tagged.get("paris") is None
        assert tagged.get("munich") == 3

    def test_invalidate_unknown_tag(self, tagged: TaggedCache) -> None:
        assert tagged.invalidate_tag("nothing") == []

    def test_retagged_entry_survives_old_tag(self, tagged: TaggedCache) -> None:
        tagged.set("k", 1, tags=["old"])
        tagged.set("k", 2, tags=["new"])
        assert tagged.invalidate_tag("old") == []
        assert tagged.get("k") == 2

    def test_stats_count_entries_only(self, tagged: TaggedCache) -> None:
        tagged.set("a", 1, tags=["t1", "t2"])
        tagged.set("b", 2)
        assert tagged.stats()["size"] == 2

    def test_remove_missing_is_noop(self, tagged: TaggedCache) -> None:
        tagged.remove("missing")

    def test_write_failure_raises_cache_error(
        self, tagged: TaggedCache, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(tagged._cache, "set", _raise_operational)
        with pytest.raises(CacheError):
            tagged.set("k", 1, tags=["t"])

    def test_directory(self, tagged: TaggedCache, tmp_path: Path) -> None:
        assert tagged.directory == tmp_path / "objects"
