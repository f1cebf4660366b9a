"""Recent search history.

Keeps the last few queries a user searched for, most recent first,
in a single storage slot holding a JSON array of strings. Storage
problems never reach the caller: a history that cannot be read is
empty, and one that cannot be written is simply not updated.
"""

import json

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from cvelookup.config import RECENT_SEARCHES_FILE, Settings
from cvelookup.utils.storage import JSONFileStorage, KeyValueStorage, StorageError

# Example image names offered to users; no effect on behaviour.
POPULAR_EXAMPLES: tuple[str, ...] = (
    "nginx:latest",
    "ubuntu:22.04",
    "postgres:15",
    "node:22",
    "mongo:latest",
)

DEFAULT_KEY = "recent-searches"
DEFAULT_MAX_ENTRIES = 5

_search_list = TypeAdapter(list[str])


class RecentSearchStore:
    """Bounded, de-duplicated list of recent search queries.

    Read-modify-write is not atomic; two interleaved ``record`` calls
    may lose one update.
    """

    def __init__(
        self,
        storage: KeyValueStorage | None,
        key: str = DEFAULT_KEY,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        """Initialize the store.

        Args:
            storage: Backing storage, or None when no storage is
                available in this environment.
            key: Storage key holding the list.
            max_entries: Maximum number of queries kept.
        """
        self.storage = storage
        self.key = key
        self.max_entries = max_entries

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecentSearchStore":
        """Build a file-backed store from application settings."""
        config = settings.recent_searches
        path = config.storage_path or settings.data_dir / RECENT_SEARCHES_FILE
        storage = JSONFileStorage(path) if config.enabled else None
        return cls(storage, key=config.key, max_entries=config.max_entries)

    @property
    def available(self) -> bool:
        """Check if there is storage to persist to."""
        return self.storage is not None

    def record(self, query: str) -> None:
        """Remember a query as the most recent search.

        Blank queries are ignored. An existing identical entry moves to
        the front instead of being duplicated.

        Args:
            query: The search query, stored as given.
        """
        if self.storage is None or not query.strip():
            return

        try:
            searches = [item for item in self.list_searches() if item != query]
            updated = [query, *searches][: self.max_entries]
            self.storage.set_item(self.key, json.dumps(updated))
        except (StorageError, OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not save recent search: {e}")

    def list_searches(self) -> list[str]:
        """Get recent searches, most recent first.

        Returns:
            Stored queries, or an empty list if storage is unavailable,
            unset or holds data that is not a list of strings.
        """
        if self.storage is None:
            return []

        try:
            raw = self.storage.get_item(self.key)
            if raw is None:
                return []
            return _search_list.validate_json(raw)
        except ValidationError:
            logger.debug(f"Ignoring unreadable recent searches under {self.key!r}")
            return []
        except (StorageError, OSError) as e:
            logger.debug(f"Recent searches unavailable: {e}")
            return []

    def clear(self) -> None:
        """Forget all recent searches."""
        if self.storage is None:
            return

        try:
            self.storage.remove_item(self.key)
        except (StorageError, OSError) as e:
            logger.warning(f"Could not clear recent searches: {e}")
