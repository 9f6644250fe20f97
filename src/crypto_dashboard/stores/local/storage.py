"""Origin-local key/value storage backends.

Stand-ins for a browser's origin-scoped storage: string keys mapping to
string values. Writes are atomic per key; a failed write leaves the previous
value in place.
"""
import os
from pathlib import Path
from typing import Protocol
from urllib.parse import quote


class StorageFullError(OSError):
    """Raised when a write would exceed the storage quota."""


class KeyValueStorage(Protocol):
    """Minimal origin-local storage interface (getItem/setItem/removeItem)."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage with an optional total-size quota (in characters)."""

    def __init__(self, quota: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota = quota

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(value) > self._quota:
                raise StorageFullError(f"Storage quota of {self._quota} exceeded writing '{key}'")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """Directory-backed storage: one file per key, replaced atomically on write."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            tmp_path.replace(path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
