"""
Collected data extraction for watcher and sampler probes.
"""

import copy
from typing import Any, Dict, Mapping, Optional

from ..models.probes import Collects

ID_FIELD = "_id"

_MISSING = object()


def get_path(source: Any, path: str, default: Any = None) -> Any:
    """
    Read a dotted path (``"foo.bar"``) from nested mappings.

    Returns:
        The value found, or ``default`` when any segment is missing
    """
    current = source
    for key in path.split("."):
        if isinstance(current, Mapping) and key in current:
            current = current[key]
        else:
            return default
    return current


def set_path(target: Dict[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at a dotted path, creating intermediate dicts."""
    keys = path.split(".")
    current = target
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = current[key] = {}
        current = child
    current[keys[-1]] = value


def collect(
    document_id: Optional[str],
    body: Any,
    collects: Collects
) -> Optional[Dict[str, Any]]:
    """
    Return the part of a document body a probe keeps.

    Args:
        document_id: Document identifier, may be None (e.g. realtime messages)
        body: Document body
        collects: What to collect

    Returns:
        The collected object, with the document identifier under ``_id`` when
        there is one. It shares no mutable value with ``body``. None when
        the probe collects nothing.
    """
    if collects.is_nothing:
        return None

    # collected values are copies: the host may change its document after
    # the event while the measure is still buffered
    if collects.everything:
        body = copy.deepcopy(body)
        collected = dict(body) if isinstance(body, Mapping) else {"body": body}
    else:
        collected = {}
        for field_path in collects.fields:
            value = get_path(body, field_path, _MISSING)
            if value is not _MISSING:
                set_path(collected, field_path, copy.deepcopy(value))

    if document_id:
        collected[ID_FIELD] = document_id

    return collected
