"""
In-memory measure storage.
"""

import copy
import logging
from typing import Any, Dict, List

from .base import MeasureStorage

logger = logging.getLogger(__name__)


class MemoryStorage(MeasureStorage):
    """
    Keeps records in process memory.

    Used for dry runs and tests. Records are deep-copied on write so later
    changes to the caller's objects do not leak into storage.
    """

    def __init__(self):
        self.records: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}
        self.mappings: Dict[str, Dict[str, Dict[str, Any]]] = {}

    async def create_record(self, location: str, collection: str, body: Dict[str, Any]) -> None:
        self.records.setdefault(location, {}).setdefault(collection, []).append(copy.deepcopy(body))

    async def bulk_create(
        self, location: str, collection: str, records: List[Dict[str, Any]]
    ) -> int:
        if not records:
            return 0
        stored = self.records.setdefault(location, {}).setdefault(collection, [])
        stored.extend(copy.deepcopy(record) for record in records)
        return len(records)

    async def index_exists(self, location: str) -> bool:
        return location in self.records

    async def create_index(self, location: str) -> None:
        self.records.setdefault(location, {})
        self.mappings.setdefault(location, {})
        logger.debug(f"Created in-memory location {location}")

    async def list_collections(self, location: str) -> List[str]:
        names = list(self.mappings.get(location, {}))
        for name in self.records.get(location, {}):
            if name not in names:
                names.append(name)
        return names

    async def update_mapping(
        self, location: str, collection: str, schema: Dict[str, Any]
    ) -> None:
        collections = self.mappings.setdefault(location, {})
        collections[collection] = {**collections.get(collection, {}), **copy.deepcopy(schema)}

    def load_records(self, location: str, collection: str) -> List[Dict[str, Any]]:
        return copy.deepcopy(self.records.get(location, {}).get(collection, []))

    def get_mappings(self, location: str) -> Dict[str, Any]:
        return copy.deepcopy(self.mappings.get(location, {}))
