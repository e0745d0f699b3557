"""Persistence layer for aggregate snapshots."""

from .snapshot_file import AggregateSnapshotFile, SNAPSHOT_FORMAT_VERSION

__all__ = [
    'AggregateSnapshotFile',
    'SNAPSHOT_FORMAT_VERSION',
]
