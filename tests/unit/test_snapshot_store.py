"""
Unit tests for SnapshotStore.
"""

import pytest

from internship_portal.models.application import Application, ApplicationStatus
from internship_portal.utils.snapshot_store import SnapshotStore


def make_application(app_id: str, status: ApplicationStatus = ApplicationStatus.PENDING) -> Application:
    return Application(
        id=app_id, student_id="3", company_id="c1", phase_id="p1", priority=1, status=status
    )


class TestSnapshotStore:
    """Test cases for SnapshotStore."""

    def test_init_creates_directory(self, tmp_path):
        snapshot_dir = tmp_path / "snapshots"
        SnapshotStore(snapshot_dir)
        assert snapshot_dir.exists()

    def test_init_without_create_leaves_directory_missing(self, tmp_path):
        snapshot_dir = tmp_path / "missing"
        store = SnapshotStore(snapshot_dir, create=False)
        assert not snapshot_dir.exists()
        assert store.load_collection("users") == []

    def test_save_collection_writes_one_line_per_record(self, tmp_path):
        """Test that records are written as JSONL in order."""
        # Arrange
        store = SnapshotStore(tmp_path)
        apps = [make_application("a1"), make_application("a2")]

        # Act
        path = store.save_collection("applications", apps)

        # Assert
        assert path == tmp_path / "applications.jsonl"
        lines = path.read_text(encoding="utf-8").strip().splitlines()
        assert len(lines) == 2
        assert '"id": "a1"' in lines[0] or '"id":"a1"' in lines[0]

    def test_saved_records_use_wire_strings(self, tmp_path):
        """Test that enums and datetimes are dumped in JSON mode."""
        # Arrange
        store = SnapshotStore(tmp_path)
        store.save_collection("applications", [make_application("a1", ApplicationStatus.ACCEPTED)])

        # Act
        records = store.load_collection("applications")

        # Assert
        assert records[0]["status"] == "accepted"
        assert isinstance(records[0]["created_at"], str)

    def test_load_missing_collection_returns_empty_list(self, tmp_path):
        assert SnapshotStore(tmp_path).load_collection("phases") == []

    def test_load_keeps_last_record_for_duplicate_id(self, tmp_path):
        """Test that a later line with the same id replaces the earlier one in place."""
        # Arrange
        (tmp_path / "phases.jsonl").write_text(
            '{"id": "p1", "name": "Old"}\n{"id": "p2", "name": "Other"}\n{"id": "p1", "name": "New"}\n',
            encoding="utf-8",
        )

        # Act
        records = SnapshotStore(tmp_path).load_collection("phases")

        # Assert
        assert [r["id"] for r in records] == ["p1", "p2"]
        assert records[0]["name"] == "New"

    def test_load_corrupted_file_raises_ioerror(self, tmp_path):
        (tmp_path / "users.jsonl").write_text('{"id": "1"}\n{not json\n', encoding="utf-8")
        with pytest.raises(IOError, match="Corrupted snapshot file"):
            SnapshotStore(tmp_path).load_collection("users")

    def test_list_collections(self, tmp_path):
        store = SnapshotStore(tmp_path)
        store.save_collection("users", [])
        store.save_collection("phases", [])
        (tmp_path / "notes.txt").write_text("ignored")

        assert store.list_collections() == ["phases", "users"]
