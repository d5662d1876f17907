"""
Snapshot File Loader

Reads the five source relations from a directory holding one file per
relation (``customers.csv``, ``products.csv``, ``orders.csv``,
``order_items.csv``, ``website_activity.csv``, or the Parquet / JSON Lines
equivalents) and builds a validated snapshot.

CSV files are read with every column as text; typing happens in the entity
models so that "12.50" reaches the money columns without float rounding.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl
import structlog

from ecommerce_reports.config import get_settings
from ecommerce_reports.data.snapshot import RELATIONS, Snapshot
from .checks import run_quality_checks

logger = structlog.get_logger(__name__)

NULL_VALUES = ["", "NULL", "null", "None", "NA", "N/A"]


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    JSONL = "jsonl"
    PARQUET = "parquet"


class SnapshotFileLoader:
    """
    Loads a snapshot from a directory of relation files.

    Example:
        loader = SnapshotFileLoader("data/snapshot", FileFormat.CSV)
        snapshot = loader.load()
    """

    def __init__(
        self,
        directory: Optional[Union[str, Path]] = None,
        file_format: Optional[Union[str, FileFormat]] = None,
        enable_validation: Optional[bool] = None,
        delimiter: str = ",",
        encoding: str = "utf8",
    ):
        settings = get_settings()
        self.directory = Path(directory or settings.data_source.snapshot_path)
        self.file_format = FileFormat(file_format or settings.data_source.file_format)
        self.enable_validation = (
            settings.data_quality.enable_data_quality_checks
            if enable_validation is None
            else enable_validation
        )
        self.delimiter = delimiter
        self.encoding = encoding

    def _read_csv(self, path: Path) -> pl.DataFrame:
        return pl.read_csv(
            path,
            separator=self.delimiter,
            encoding=self.encoding,
            null_values=NULL_VALUES,
            infer_schema_length=0,
        )

    def _read_jsonl(self, path: Path) -> pl.DataFrame:
        return pl.read_ndjson(path)

    def _read_parquet(self, path: Path) -> pl.DataFrame:
        return pl.read_parquet(path)

    def _read_file(self, path: Path) -> pl.DataFrame:
        """Read file based on format"""
        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.JSONL: self._read_jsonl,
            FileFormat.PARQUET: self._read_parquet,
        }
        return readers[self.file_format](path)

    def relation_paths(self) -> Dict[str, Path]:
        return {
            spec.name: self.directory / f"{spec.name}.{self.file_format.value}"
            for spec in RELATIONS
        }

    def load(self) -> Snapshot:
        """
        Read every relation file and build the snapshot.

        Raises:
            FileNotFoundError: If a relation file is missing
            SnapshotValidationError: If a relation is malformed
        """
        paths = self.relation_paths()
        missing: List[str] = [str(p) for p in paths.values() if not p.exists()]
        if missing:
            logger.error("Snapshot files missing", directory=str(self.directory), files=missing)
            raise FileNotFoundError(f"Snapshot files not found: {missing}")

        logger.info(
            "Loading snapshot files",
            directory=str(self.directory),
            file_format=self.file_format.value,
        )

        frames = {name: self._read_file(path) for name, path in paths.items()}
        snapshot = Snapshot.from_frames(frames)

        if self.enable_validation:
            run_quality_checks(snapshot)

        return snapshot


def load_snapshot_from_directory(
    directory: Optional[Union[str, Path]] = None,
    file_format: Optional[Union[str, FileFormat]] = None,
) -> Snapshot:
    """Load a snapshot with the configured file loader"""
    return SnapshotFileLoader(directory=directory, file_format=file_format).load()
