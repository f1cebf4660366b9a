"""Key-value storage backends for locally persisted state.

A storage holds string values under string keys, in the manner of a
browser's per-origin local storage. Backends raise ``StorageError`` for
any failure; callers decide whether to absorb it.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger


class StorageError(Exception):
    """Base exception for storage failures."""


@runtime_checkable
class KeyValueStorage(Protocol):
    """Minimal get/set/remove capability over string values."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage that lives as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Storage values must be strings, got {type(value).__name__}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)


class JSONFileStorage:
    """Storage persisted as a single JSON object file.

    Every key maps to a string value. Writes go to a temporary file in
    the same directory which then replaces the target, so a reader never
    sees a half-written file.
    """

    def __init__(self, path: Path | str):
        """Initialize file storage.

        Args:
            path: Location of the JSON file. Parent directories are
                created on first write.
        """
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt storage file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Corrupt storage file {self.path}: expected a JSON object")
        return data

    def _read_for_update(self) -> dict[str, str]:
        """Read current items, starting over if the file is unreadable."""
        try:
            return self._read()
        except StorageError as e:
            logger.warning(f"Discarding unreadable storage file: {e}")
            return {}

    def _write(self, items: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(items, f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

        logger.debug(f"Saved {len(items)} key(s) to {self.path}")

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        if value is None or isinstance(value, str):
            return value
        # Values written by other tools are handed back re-encoded.
        return json.dumps(value)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Storage values must be strings, got {type(value).__name__}")
        items = self._read_for_update()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        try:
            items = self._read()
        except StorageError as e:
            logger.warning(f"Discarding unreadable storage file: {e}")
            self._write({})
            return

        if key in items:
            del items[key]
            self._write(items)
