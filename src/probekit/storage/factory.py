"""
Factory for creating storage instances.
"""

import logging
from pathlib import Path
from typing import Literal, Union

from .base import MeasureStorage
from .json_storage import JsonStorage
from .memory_storage import MemoryStorage
from .parquet_storage import ParquetStorage

logger = logging.getLogger(__name__)


def create_storage(
    format_type: Literal["parquet", "json", "memory"] = "parquet",
    root_dir: Union[str, Path] = ".",
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy",
) -> MeasureStorage:
    """
    Create a storage instance based on the specified format type.

    Args:
        format_type: Storage format type ('parquet', 'json' or 'memory')
        root_dir: Directory the storage locations are created in (file formats only)
        compression: Compression algorithm (for Parquet only)

    Returns:
        MeasureStorage instance

    Raises:
        ValueError: If an unsupported format type is specified
    """
    if format_type == "parquet":
        logger.debug(f"Creating ParquetStorage in {root_dir} with compression: {compression}")
        return ParquetStorage(Path(root_dir), compression=compression)
    elif format_type == "json":
        logger.debug(f"Creating JsonStorage in {root_dir}")
        return JsonStorage(Path(root_dir))
    elif format_type == "memory":
        logger.debug("Creating MemoryStorage")
        return MemoryStorage()
    else:
        raise ValueError(f"Unsupported storage format: {format_type}")
