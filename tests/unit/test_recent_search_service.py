"""Tests for the recent search store."""

import json

import pytest

from cvelookup.services.recent_search_service import POPULAR_EXAMPLES, RecentSearchStore
from cvelookup.utils.storage import JSONFileStorage, MemoryStorage, StorageError


class FailingStorage(MemoryStorage):
    """Storage whose writes and removals always fail."""

    def set_item(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded")

    def remove_item(self, key: str) -> None:
        raise StorageError("storage disabled")


class BrokenStorage:
    """Storage that fails on every access."""

    def get_item(self, key: str) -> str | None:
        raise OSError("disk unavailable")

    def set_item(self, key: str, value: str) -> None:
        raise OSError("disk unavailable")

    def remove_item(self, key: str) -> None:
        raise OSError("disk unavailable")


class TestRecord:
    """Tests for RecentSearchStore.record."""

    def test_most_recent_first(self, recent_store):
        """Test newer searches come first."""
        recent_store.record("nginx")
        recent_store.record("postgres")

        assert recent_store.list_searches() == ["postgres", "nginx"]

    def test_no_duplicates(self, recent_store):
        """Test recording the same query twice keeps one entry."""
        recent_store.record("nginx")
        recent_store.record("nginx")

        assert recent_store.list_searches() == ["nginx"]

    def test_repeat_moves_to_front(self, recent_store):
        """Test re-recording an older query moves it to the front."""
        for query in ("nginx", "postgres", "redis"):
            recent_store.record(query)
        recent_store.record("nginx")

        assert recent_store.list_searches() == ["nginx", "redis", "postgres"]

    def test_bounded_to_five(self, recent_store):
        """Test only the five most recent queries are kept."""
        for query in ("a", "b", "c", "d", "e", "f"):
            recent_store.record(query)

        assert recent_store.list_searches() == ["f", "e", "d", "c", "b"]

    def test_custom_bound(self, memory_storage):
        """Test the bound is configurable."""
        store = RecentSearchStore(memory_storage, max_entries=2)
        for query in ("a", "b", "c"):
            store.record(query)

        assert store.list_searches() == ["c", "b"]

    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    def test_blank_queries_ignored(self, recent_store, query):
        """Test blank queries leave the list unchanged."""
        recent_store.record("nginx")
        recent_store.record(query)

        assert recent_store.list_searches() == ["nginx"]

    def test_query_stored_as_given(self, recent_store):
        """Test surrounding whitespace is not stripped from stored queries."""
        recent_store.record(" nginx ")

        assert recent_store.list_searches() == [" nginx "]

    def test_persisted_format(self, recent_store, memory_storage):
        """Test the list is stored as a JSON array under the fixed key."""
        recent_store.record("nginx")
        recent_store.record("postgres")

        assert json.loads(memory_storage.get_item("recent-searches")) == ["postgres", "nginx"]

    def test_storage_failure_is_swallowed(self):
        """Test write failures do not reach the caller."""
        store = RecentSearchStore(FailingStorage())

        store.record("nginx")

        assert store.list_searches() == []

    def test_broken_storage_is_swallowed(self):
        """Test OS-level failures do not reach the caller."""
        store = RecentSearchStore(BrokenStorage())

        store.record("nginx")
        store.clear()

        assert store.list_searches() == []

    def test_storage_unavailable(self):
        """Test a store without storage is a no-op."""
        store = RecentSearchStore(None)

        store.record("nginx")
        store.clear()

        assert not store.available
        assert store.list_searches() == []


class TestListSearches:
    """Tests for RecentSearchStore.list_searches."""

    def test_empty_when_unset(self, recent_store):
        """Test a fresh store is empty."""
        assert recent_store.list_searches() == []

    @pytest.mark.parametrize("raw", ["{not json", '"nginx"', '{"a": 1}', "[1, 2]", "null"])
    def test_unparseable_data_is_empty(self, raw):
        """Test invalid stored data reads as no data."""
        store = RecentSearchStore(MemoryStorage({"recent-searches": raw}))

        assert store.list_searches() == []

    def test_recovers_after_bad_data(self):
        """Test recording over invalid data starts a fresh list."""
        store = RecentSearchStore(MemoryStorage({"recent-searches": "{not json"}))

        store.record("nginx")

        assert store.list_searches() == ["nginx"]

    def test_recovers_after_corrupt_file(self, tmp_path):
        """Test a corrupt storage file is replaced by record and clear."""
        path = tmp_path / "recent.json"
        path.write_text("{truncated")
        store = RecentSearchStore(JSONFileStorage(path))

        assert store.list_searches() == []

        store.record("nginx")
        assert store.list_searches() == ["nginx"]

        path.write_text("{truncated")
        store.clear()
        store.record("postgres")

        assert store.list_searches() == ["postgres"]

    def test_idempotent(self, recent_store):
        """Test repeated reads return the same list."""
        recent_store.record("nginx")
        recent_store.record("redis")

        assert recent_store.list_searches() == recent_store.list_searches()


class TestClear:
    """Tests for RecentSearchStore.clear."""

    def test_clear(self, recent_store, memory_storage):
        """Test clearing removes the stored key."""
        recent_store.record("nginx")

        recent_store.clear()

        assert recent_store.list_searches() == []
        assert memory_storage.get_item("recent-searches") is None

    def test_clear_failure_is_swallowed(self):
        """Test removal failures do not reach the caller."""
        RecentSearchStore(FailingStorage()).clear()


class TestFromSettings:
    """Tests for building a store from settings."""

    def test_file_backed(self, mock_settings):
        """Test searches survive a new store over the same file."""
        RecentSearchStore.from_settings(mock_settings).record("nginx")

        store = RecentSearchStore.from_settings(mock_settings)

        assert isinstance(store.storage, JSONFileStorage)
        assert store.list_searches() == ["nginx"]

    def test_disabled(self, mock_settings):
        """Test disabling recent searches leaves no storage."""
        mock_settings.recent_searches.enabled = False

        store = RecentSearchStore.from_settings(mock_settings)
        store.record("nginx")

        assert store.storage is None
        assert not mock_settings.recent_searches.storage_path.exists()


def test_popular_examples():
    """Test the example image names offered to users."""
    assert POPULAR_EXAMPLES == (
        "nginx:latest",
        "ubuntu:22.04",
        "postgres:15",
        "node:22",
        "mongo:latest",
    )
