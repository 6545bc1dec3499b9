"""
Snapshot Store Module

Saves and loads collections of registry records as JSONL files, one file per
collection. The bundled seed catalogue is stored this way, and admins can
export the live registry to a directory for reporting.

Example Usage:
    from internship_portal.utils.snapshot_store import SnapshotStore

    store = SnapshotStore("exports/2025-06-01")
    store.save_collection("applications", registry.applications)
    records = store.load_collection("applications")
"""

import json
from pathlib import Path
from typing import Sequence

import jsonlines
from pydantic import BaseModel


class SnapshotStore:
    """Reads and writes registry collections as JSONL snapshots."""

    def __init__(self, snapshot_dir: str | Path, create: bool = True):
        """
        Initialize SnapshotStore.

        Args:
            snapshot_dir: Directory containing <collection>.jsonl files
            create: Create the directory if it does not exist
        """
        self.snapshot_dir = Path(snapshot_dir)
        if create:
            self.snapshot_dir.mkdir(parents=True, exist_ok=True)

    def collection_path(self, collection: str) -> Path:
        return self.snapshot_dir / f"{collection}.jsonl"

    def save_collection(self, collection: str, data: Sequence[BaseModel]) -> Path:
        """
        Save a collection to its JSONL file, replacing previous content.

        Args:
            collection: Collection name (e.g., "applications")
            data: Pydantic records to save, in order

        Returns:
            Path of the written file

        Raises:
            IOError: If the snapshot file cannot be written
        """
        snapshot_file = self.collection_path(collection)

        try:
            with jsonlines.open(snapshot_file, mode="w") as writer:
                for item in data:
                    writer.write(item.model_dump(mode="json"))
        except Exception as e:
            raise IOError(f"Failed to save collection {collection}: {e}") from e

        return snapshot_file

    def load_collection(self, collection: str) -> list[dict]:
        """
        Load all records of a collection in file order.

        Args:
            collection: Collection name (e.g., "phases")

        Returns:
            List of raw record dicts. Returns an empty list if the file is missing.
            Later records override earlier ones if IDs collide, keeping the
            position of the first occurrence.

        Raises:
            IOError: If the snapshot file is corrupted or cannot be read
        """
        snapshot_file = self.collection_path(collection)
        if not snapshot_file.exists():
            return []

        records: dict[str, dict] = {}
        try:
            with jsonlines.open(snapshot_file) as reader:
                for record in reader:
                    record_id = record.get("id", str(record))
                    records[record_id] = record
        except (json.JSONDecodeError, jsonlines.InvalidLineError) as e:
            raise IOError(f"Corrupted snapshot file {snapshot_file}: {e}") from e
        except Exception as e:
            raise IOError(f"Failed to read snapshot file {snapshot_file}: {e}") from e

        return list(records.values())

    def list_collections(self) -> list[str]:
        """Return the names of the collections present in the directory."""
        return sorted(path.stem for path in self.snapshot_dir.glob("*.jsonl"))
