"""
Abstract base classes for measure storage implementations.

This module defines the MeasureStorage interface every storage backend
implements. Measures are stored in a location (an index) holding one
collection per probe; each flushed measure becomes one record, or one record
per collected document for watcher and sampler probes.

The interface includes methods for:
- Creating a single record and creating records in bulk
- Checking, creating and listing storage locations and collections
- Registering the field mapping of a collection

All methods are coroutines: the engine never waits on storage while it
dispatches events.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MeasureStorage(ABC):
    """Abstract base class for measure storage implementations."""

    @abstractmethod
    async def create_record(self, location: str, collection: str, body: Dict[str, Any]) -> None:
        """
        Store a single record.

        Args:
            location: Storage location (index)
            collection: Collection, named after the probe
            body: Record body
        """
        pass

    @abstractmethod
    async def bulk_create(
        self, location: str, collection: str, records: List[Dict[str, Any]]
    ) -> int:
        """
        Store several records at once.

        Returns:
            Number of records stored
        """
        pass

    @abstractmethod
    async def index_exists(self, location: str) -> bool:
        """Check whether a storage location exists."""
        pass

    @abstractmethod
    async def create_index(self, location: str) -> None:
        """Create a storage location."""
        pass

    @abstractmethod
    async def list_collections(self, location: str) -> List[str]:
        """List the collections of a location that have a mapping or records."""
        pass

    @abstractmethod
    async def update_mapping(
        self, location: str, collection: str, schema: Dict[str, Any]
    ) -> None:
        """Create or update the field mapping of a collection."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        pass


class FileMeasureStorage(MeasureStorage):
    """
    Base class for storage backends writing files under a root directory.

    A location is a directory under ``root_dir``; collection mappings live in
    ``<location>/_mappings.json``. File operations run on a single writer
    thread so that writes to the same collection never interleave.
    """

    MAPPINGS_FILE = "_mappings.json"

    def __init__(self, root_dir: Path):
        self.root_dir = Path(root_dir)
        self._executor: Optional[ThreadPoolExecutor] = None

    def _location_dir(self, location: str) -> Path:
        return self.root_dir / location

    async def _run(self, func: Callable[..., T], *args) -> T:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="MeasureWriter"
            )
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args))

    @abstractmethod
    def _append_records(self, location: str, collection: str, records: List[Dict[str, Any]]) -> None:
        """Append records to a collection file (runs on the writer thread)."""
        pass

    @abstractmethod
    def _collection_files(self, location: str) -> List[str]:
        """Names of the collections that have a data file."""
        pass

    @abstractmethod
    def load_records(self, location: str, collection: str) -> List[Dict[str, Any]]:
        """Read back every record of a collection."""
        pass

    @abstractmethod
    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        """Save dictionary data to the specified path."""
        pass

    @abstractmethod
    def load_dict(self, path: str) -> Dict[str, Any]:
        """Load dictionary data from the specified path."""
        pass

    async def create_record(self, location: str, collection: str, body: Dict[str, Any]) -> None:
        await self._run(self._append_records, location, collection, [body])

    async def bulk_create(
        self, location: str, collection: str, records: List[Dict[str, Any]]
    ) -> int:
        if not records:
            return 0
        await self._run(self._append_records, location, collection, list(records))
        return len(records)

    async def index_exists(self, location: str) -> bool:
        return self._location_dir(location).is_dir()

    async def create_index(self, location: str) -> None:
        self._location_dir(location).mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created measure location {self._location_dir(location)}")

    async def list_collections(self, location: str) -> List[str]:
        return await self._run(self._list_collections_sync, location)

    def _list_collections_sync(self, location: str) -> List[str]:
        names = list(self.get_mappings(location))
        for name in self._collection_files(location):
            if name not in names:
                names.append(name)
        return names

    async def update_mapping(
        self, location: str, collection: str, schema: Dict[str, Any]
    ) -> None:
        await self._run(self._update_mapping_sync, location, collection, schema)

    def _update_mapping_sync(self, location: str, collection: str, schema: Dict[str, Any]) -> None:
        mappings = self.get_mappings(location)
        mappings[collection] = {**mappings.get(collection, {}), **schema}
        self.save_dict(mappings, str(self._location_dir(location) / self.MAPPINGS_FILE))

    def get_mappings(self, location: str) -> Dict[str, Any]:
        """Collection mappings registered in a location."""
        path = self._location_dir(location) / self.MAPPINGS_FILE
        if not path.exists():
            return {}
        return self.load_dict(str(path))

    async def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
