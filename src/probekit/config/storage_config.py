"""
Storage configuration model and validation.

This module defines the StorageConfig dataclass which encapsulates the
measure storage options: backend format and Parquet compression. It provides
validation methods to ensure configuration consistency.
"""

from typing import Literal, Dict, Any
from dataclasses import dataclass

STORAGE_FORMATS = ("parquet", "json", "memory")
COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class StorageConfig:
    """
    Configuration model for measure storage settings.

    Attributes:
        format: Storage backend
            - 'parquet': one Parquet file per probe collection, written with Polars
            - 'json': one JSON-lines file per probe collection
            - 'memory': in-process storage, nothing is written to disk
        compression: Parquet compression codec, one of COMPRESSIONS. Ignored
            by the other backends.
    """

    format: Literal["parquet", "json", "memory"] = "parquet"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from a dictionary.

        Args:
            config_dict: Dictionary containing storage configuration

        Returns:
            StorageConfig instance

        Raises:
            ValueError: If invalid configuration values are provided
        """
        format_type = config_dict.get("format", "parquet")
        compression = config_dict.get("compression", "snappy")

        if format_type not in STORAGE_FORMATS:
            raise ValueError(f"Unsupported storage format: {format_type}")

        if format_type == "parquet" and compression not in COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        return cls(format=format_type, compression=compression)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the StorageConfig to a dictionary.

        Returns:
            Dictionary representation of the StorageConfig
        """
        return {
            "format": self.format,
            "compression": self.compression,
        }
