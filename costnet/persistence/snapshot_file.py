"""Aggregate snapshot serialization and deserialization.

This module handles converting a company's AggregateStore to/from JSON so
that aggregates can be inspected offline or restored into a fresh storage.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict
import logging

from pydantic import ValidationError

from ..aggregates.store import AggregateStore

logger = logging.getLogger(__name__)

#: Format version written into every snapshot
SNAPSHOT_FORMAT_VERSION = 1


class AggregateSnapshotFile:
    """Handles serialization/deserialization of aggregate stores to/from JSON files.

    File Format:
        {
            "format_version": 1,
            "saved_at": "2026-10-19T06:45:00",
            "company_id": "acme",
            "store": {
                "company_id": "acme",
                "tallies": {"labor": {"buckets": {...}}, ...},
                "windows": {"labor": {"capacity": 100, "entries": [...]}, ...}
            }
        }

    Window entries carry their contribution ledgers, so a restored store
    evicts exactly what the original would have.

    Example Usage:
        ```python
        snapshot = AggregateSnapshotFile("snapshots/acme.json")
        snapshot.save(storage.aggregate_store("acme"))

        store = snapshot.load()
        ```
    """

    def __init__(self, file_path: Path | str):
        """Initialize AggregateSnapshotFile.

        Args:
            file_path: Path to JSON file for save/load operations
        """
        self.file_path = Path(file_path)

    def save(self, store: AggregateStore) -> None:
        """Save an AggregateStore to the JSON file.

        Args:
            store: Company aggregates to save

        Raises:
            IOError: If file cannot be written
        """
        logger.info(f"Saving aggregate snapshot for {store.company_id} to {self.file_path}")

        self.file_path.parent.mkdir(parents=True, exist_ok=True)

        data = self._store_to_dict(store)
        with open(self.file_path, 'w') as f:
            json.dump(data, f, indent=2, sort_keys=True)

        logger.info(f"Successfully saved aggregate snapshot ({store})")

    def load(self) -> AggregateStore:
        """Load an AggregateStore from the JSON file.

        Returns:
            Loaded AggregateStore

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        logger.info(f"Loading aggregate snapshot from {self.file_path}")

        if not self.file_path.exists():
            raise FileNotFoundError(f"Snapshot file not found: {self.file_path}")

        with open(self.file_path, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Snapshot file is not valid JSON: {self.file_path}: {e}") from e

        store = self._dict_to_store(data)

        logger.info(f"Successfully loaded aggregate snapshot ({store})")
        return store

    def exists(self) -> bool:
        """Check if snapshot file exists.

        Returns:
            True if file exists, False otherwise
        """
        return self.file_path.exists()

    def _store_to_dict(self, store: AggregateStore) -> Dict[str, Any]:
        return {
            "format_version": SNAPSHOT_FORMAT_VERSION,
            "saved_at": datetime.now().isoformat(),
            "company_id": store.company_id,
            "store": store.model_dump(mode="json"),
        }

    def _dict_to_store(self, data: Any) -> AggregateStore:
        if not isinstance(data, dict) or "store" not in data:
            raise ValueError(f"Snapshot file has no 'store' section: {self.file_path}")

        version = data.get("format_version")
        if version != SNAPSHOT_FORMAT_VERSION:
            raise ValueError(
                f"Unsupported snapshot format version {version!r} "
                f"(expected {SNAPSHOT_FORMAT_VERSION})"
            )

        try:
            return AggregateStore.model_validate(data["store"])
        except ValidationError as e:
            raise ValueError(f"Invalid aggregate snapshot {self.file_path}: {e}") from e
