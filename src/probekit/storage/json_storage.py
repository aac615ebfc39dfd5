"""
JSON-lines measure storage.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from .base import FileMeasureStorage

logger = logging.getLogger(__name__)


class JsonStorage(FileMeasureStorage):
    """
    Stores each collection as ``<root>/<location>/<collection>.jsonl``.

    One record per line. Appending never rewrites existing records.
    """

    def _collection_path(self, location: str, collection: str) -> Path:
        return self._location_dir(location) / f"{collection}.jsonl"

    def _append_records(self, location: str, collection: str, records: List[Dict[str, Any]]) -> None:
        path = self._collection_path(location, collection)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'a', encoding='utf-8') as f:
                for record in records:
                    f.write(json.dumps(record, ensure_ascii=False, default=str))
                    f.write("\n")
            logger.debug(f"Appended {len(records)} records to {path}")
        except Exception as e:
            logger.error(f"Failed to append records to {path}: {e}")
            raise

    def _collection_files(self, location: str) -> List[str]:
        directory = self._location_dir(location)
        if not directory.is_dir():
            return []
        return sorted(path.stem for path in directory.glob("*.jsonl"))

    def load_records(self, location: str, collection: str) -> List[Dict[str, Any]]:
        path = self._collection_path(location, collection)
        if not path.exists():
            return []
        with open(path, 'r', encoding='utf-8') as f:
            return [json.loads(line) for line in f if line.strip()]

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except Exception as e:
            logger.error(f"Failed to save dictionary to {path}: {e}")
            raise

    def load_dict(self, path: str) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
