"""
Storage Provider Module

Key-value storage used for the signed-in identity snapshot. Values are raw
bytes; callers own the serialization format.

Example Usage:
    from internship_portal.utils.storage import FileStorage

    storage = FileStorage(".portal-storage")
    storage.set("user", b'{"id": "1"}')
    storage.get("user")   # b'{"id": "1"}'
    storage.remove("user")
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageProvider(ABC):
    """Interface for the local key-value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored value for ``key`` or None."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing a missing key is not an error."""


class MemoryStorage(StorageProvider):
    """In-process storage, lost when the process exits."""

    def __init__(self) -> None:
        self._values: dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._values.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._values[key] = bytes(value)

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class FileStorage(StorageProvider):
    """Storage that keeps one file per key inside a directory."""

    def __init__(self, storage_dir: str | Path = ".portal-storage"):
        """
        Initialize FileStorage.

        Args:
            storage_dir: Directory for stored values (created if missing)
        """
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.storage_dir / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise IOError(f"Failed to read storage key {key}: {e}") from e

    def set(self, key: str, value: bytes) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_bytes(value)
            tmp_path.replace(path)
        except OSError as e:
            raise IOError(f"Failed to write storage key {key}: {e}") from e
        logger.debug("storage_value_written", key=key, size=len(value))

    def remove(self, key: str) -> None:
        path = self._path(key)
        path.unlink(missing_ok=True)
        logger.debug("storage_value_removed", key=key)
