"""
Unit tests for the identity storage providers.
"""

import pytest

from internship_portal.utils.storage import FileStorage, MemoryStorage


class TestMemoryStorage:
    """Test cases for MemoryStorage."""

    def test_set_then_get_returns_value(self):
        storage = MemoryStorage()
        storage.set("user", b'{"id": "1"}')
        assert storage.get("user") == b'{"id": "1"}'

    def test_get_missing_key_returns_none(self):
        assert MemoryStorage().get("user") is None

    def test_remove_deletes_value_and_tolerates_missing_key(self):
        storage = MemoryStorage()
        storage.set("user", b"x")

        storage.remove("user")
        storage.remove("user")

        assert storage.get("user") is None


class TestFileStorage:
    """Test cases for FileStorage."""

    def test_creates_directory(self, tmp_path):
        """Test that the storage directory is created on init."""
        # Arrange
        storage_dir = tmp_path / "nested" / "storage"

        # Act
        FileStorage(storage_dir)

        # Assert
        assert storage_dir.is_dir()

    def test_value_written_to_key_file(self, tmp_path):
        """Test that set() writes <key>.json and leaves no temp file behind."""
        # Arrange
        storage = FileStorage(tmp_path)

        # Act
        storage.set("user", b'{"id": "2"}')

        # Assert
        assert (tmp_path / "user.json").read_bytes() == b'{"id": "2"}'
        assert not list(tmp_path.glob("*.tmp"))

    def test_value_survives_new_instance(self, tmp_path):
        """Test that a second FileStorage over the same directory sees the value."""
        FileStorage(tmp_path).set("user", b"snapshot")
        assert FileStorage(tmp_path).get("user") == b"snapshot"

    def test_overwrite_replaces_value(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("user", b"first")
        storage.set("user", b"second")
        assert storage.get("user") == b"second"

    def test_remove_missing_key_is_noop(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.remove("user")
        assert storage.get("user") is None

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "user key"])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        """Test that keys cannot point outside the storage directory."""
        storage = FileStorage(tmp_path)
        with pytest.raises(ValueError, match="Invalid storage key"):
            storage.set(key, b"x")
