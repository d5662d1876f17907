"""
Snapshot Ingestion Module
"""
from .database_loader import load_snapshot_from_database, load_snapshot_from_session
from .file_loader import FileFormat, SnapshotFileLoader, load_snapshot_from_directory

__all__ = [
    "FileFormat",
    "SnapshotFileLoader",
    "load_snapshot_from_directory",
    "load_snapshot_from_database",
    "load_snapshot_from_session",
]
