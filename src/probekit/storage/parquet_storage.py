"""
Parquet measure storage using Polars.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal

import polars as pl

from .base import FileMeasureStorage

logger = logging.getLogger(__name__)


class ParquetStorage(FileMeasureStorage):
    """
    Parquet storage implementation using Polars.

    Each collection is stored in ``<root>/<location>/<collection>.parquet``.
    Nested values (collected document content, for instance) are stored as
    JSON strings; the encoded column names of every collection are recorded
    in ``<location>/_encoded.json`` so that load_records can decode them.
    """

    ENCODED_FILE = "_encoded.json"

    def __init__(
        self,
        root_dir: Path,
        compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy",
    ):
        """
        Initialize Parquet storage with specified compression.

        Args:
            root_dir: Directory holding the storage locations
            compression: Compression algorithm to use
        """
        super().__init__(root_dir)
        self.compression = compression
        logger.debug(f"Initialized ParquetStorage in {self.root_dir} with compression: {compression}")

    def _collection_path(self, location: str, collection: str) -> Path:
        return self._location_dir(location) / f"{collection}.parquet"

    def _encoded_path(self, location: str) -> Path:
        return self._location_dir(location) / self.ENCODED_FILE

    def _append_records(self, location: str, collection: str, records: List[Dict[str, Any]]) -> None:
        rows = []
        encoded = set()
        for record in records:
            row = {}
            for key, value in record.items():
                if isinstance(value, (dict, list, tuple)):
                    row[key] = json.dumps(value, ensure_ascii=False, default=str)
                    encoded.add(key)
                else:
                    row[key] = value
            rows.append(row)

        df = pl.DataFrame(rows, infer_schema_length=None)
        self.append_dataframe(df, str(self._collection_path(location, collection)))

        if encoded:
            self._register_encoded_columns(location, collection, encoded)

    def _register_encoded_columns(self, location: str, collection: str, columns: set) -> None:
        path = self._encoded_path(location)
        registry = self.load_dict(str(path)) if path.exists() else {}
        known = set(registry.get(collection, []))
        if columns <= known:
            return
        registry[collection] = sorted(known | columns)
        self.save_dict(registry, str(path))

    def _collection_files(self, location: str) -> List[str]:
        directory = self._location_dir(location)
        if not directory.is_dir():
            return []
        return sorted(path.stem for path in directory.glob("*.parquet"))

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Save a Polars DataFrame to Parquet format.

        Args:
            df: Polars DataFrame to save
            path: File path to save to
        """
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            df.write_parquet(path, compression=self.compression)
            logger.debug(f"Saved DataFrame with {len(df)} rows to {path}")
        except Exception as e:
            logger.error(f"Failed to save DataFrame to {path}: {e}")
            raise

    def load_dataframe(self, path: str) -> pl.DataFrame:
        try:
            df = pl.read_parquet(path)
            logger.debug(f"Loaded DataFrame with {len(df)} rows from {path}")
            return df
        except Exception as e:
            logger.error(f"Failed to load DataFrame from {path}: {e}")
            raise

    def append_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Append a Polars DataFrame to an existing Parquet file.

        Columns missing on either side are filled with nulls.

        Args:
            df: Polars DataFrame to append
            path: File path to append to
        """
        try:
            if Path(path).exists():
                existing_df = self.load_dataframe(path)
                combined_df = pl.concat([existing_df, df], how="diagonal_relaxed")
                self.save_dataframe(combined_df, path)
                logger.debug(f"Appended {len(df)} rows to existing file {path}")
            else:
                self.save_dataframe(df, path)
                logger.debug(f"Created new file {path} with {len(df)} rows")
        except Exception as e:
            logger.error(f"Failed to append DataFrame to {path}: {e}")
            raise

    def load_records(self, location: str, collection: str) -> List[Dict[str, Any]]:
        """
        Read back every record of a collection, decoding nested values.

        Columns a record never had come back as None.
        """
        path = self._collection_path(location, collection)
        if not path.exists():
            return []

        encoded_path = self._encoded_path(location)
        registry = self.load_dict(str(encoded_path)) if encoded_path.exists() else {}
        encoded = set(registry.get(collection, []))

        records = self.load_dataframe(str(path)).to_dicts()
        for record in records:
            for column in encoded:
                value = record.get(column)
                if isinstance(value, str):
                    record[column] = json.loads(value)
        return records

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        """
        Save dictionary data to JSON format.

        Args:
            data: Dictionary data to save
            path: File path to save to
        """
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            logger.debug(f"Saved dictionary data to {path}")
        except Exception as e:
            logger.error(f"Failed to save dictionary to {path}: {e}")
            raise

    def load_dict(self, path: str) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except Exception as e:
            logger.error(f"Failed to load dictionary from {path}: {e}")
            raise
