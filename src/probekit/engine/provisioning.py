"""
Measure storage provisioning.

Before the probes start, the measure location is created if needed and each
probe gets a collection with a field mapping matching the shape of its
measure. Collections that already exist are left untouched.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping

from ..models.probes import ContentProbe, CounterProbe, MonitorProbe, ProbeDefinition
from ..storage.base import MeasureStorage

logger = logging.getLogger(__name__)

TIMESTAMP_MAPPING = {"type": "date", "format": "epoch_millis"}
INTEGER_MAPPING = {"type": "integer"}


def collection_mapping(probe: ProbeDefinition) -> Dict[str, Any]:
    """
    Field mapping of the collection storing a probe's measures.

    Every measure has a ``timestamp``. Counters and count-only watchers store
    a ``count``, monitors one integer per hook, and content probes use the
    probe ``mapping`` for their ``content`` field when one is configured.
    """
    mapping: Dict[str, Any] = {"timestamp": dict(TIMESTAMP_MAPPING)}

    if isinstance(probe, MonitorProbe):
        for hook in probe.hooks:
            mapping[hook] = dict(INTEGER_MAPPING)
    elif isinstance(probe, CounterProbe):
        mapping["count"] = dict(INTEGER_MAPPING)
    elif isinstance(probe, ContentProbe):
        if probe.collects.is_nothing:
            mapping["count"] = dict(INTEGER_MAPPING)
        elif probe.mapping:
            mapping["content"] = {"properties": copy.deepcopy(probe.mapping)}

    return mapping


async def ensure_measure_index(storage: MeasureStorage, location: str) -> bool:
    """
    Create the measure location if it does not exist yet.

    Returns:
        True if the location was created
    """
    if await storage.index_exists(location):
        return False
    await storage.create_index(location)
    logger.info(f"Created measure index {location}")
    return True


async def ensure_measure_collections(
    storage: MeasureStorage,
    location: str,
    probes: Mapping[str, ProbeDefinition]
) -> List[str]:
    """
    Create the collection of every probe missing one.

    Volatile probes never write, so they get no collection.

    Returns:
        Names of the created collections
    """
    existing = set(await storage.list_collections(location))
    created = []

    for name, probe in probes.items():
        if probe.volatile or name in existing:
            continue
        await storage.update_mapping(location, name, collection_mapping(probe))
        logger.debug(f"Created measure collection {location}/{name}")
        created.append(name)

    return created
