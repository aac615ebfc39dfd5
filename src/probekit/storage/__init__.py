"""
Measure storage backends.

This module provides the storage layer flushed measures are written to:
- Parquet files written with Polars, one file per probe collection
- JSON-lines files, one file per probe collection
- An in-memory backend for dry runs and tests

All backends implement the asynchronous MeasureStorage interface, so the
aggregation engine never blocks on disk while dispatching events.
"""

from .base import FileMeasureStorage, MeasureStorage
from .factory import create_storage
from .json_storage import JsonStorage
from .memory_storage import MemoryStorage
from .parquet_storage import ParquetStorage

__all__ = [
    "MeasureStorage",
    "FileMeasureStorage",
    "ParquetStorage",
    "JsonStorage",
    "MemoryStorage",
    "create_storage",
]
