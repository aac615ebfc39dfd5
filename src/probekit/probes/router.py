"""
Event routing.

Builds the lookup tables the aggregation engine uses to find the probes
interested in an event, and the hook list the host uses to know which probe
family to call for each event it emits.

The routing table is built as follows:

    monitor:   event name -> [probe names]
    counter:   increasers: event name -> [probe names]
               decreasers: event name -> [probe names]
    watcher:   filter id  -> [probe names]
    sampler:   filter id  -> [sampler probes]
"""

import inspect
import logging
from typing import Dict, List, Mapping

from ..matching.base import Matcher
from ..models.probes import (
    ContentProbe,
    CounterProbe,
    MonitorProbe,
    ProbeDefinition,
    SamplerProbe,
    WatcherProbe,
)
from ..models.routing import EventRoutingTable

logger = logging.getLogger(__name__)

# Host events carrying new documents and messages
DOCUMENT_EVENTS = (
    "data:beforePublish",
    "data:beforeCreate",
    "data:beforeCreateOrReplace",
)


def _append_unique(bucket: Dict[str, list], key: str, value) -> None:
    entries = bucket.setdefault(key, [])
    if value not in entries:
        entries.append(value)


async def register_filters(
    probes: Mapping[str, ProbeDefinition],
    matcher: Matcher
) -> Dict[str, ProbeDefinition]:
    """
    Register the filter of every watcher and sampler probe with the matcher.

    Each probe registers exactly once. Registration results may be plain
    values or awaitables.

    Returns:
        A new probe mapping where content probes carry their filter id
    """
    registered: Dict[str, ProbeDefinition] = {}

    for name, probe in probes.items():
        if isinstance(probe, ContentProbe):
            filter_id = matcher.register(probe.index, probe.collection, probe.filter)
            if inspect.isawaitable(filter_id):
                filter_id = await filter_id
            logger.debug(f"Registered filter {filter_id} for probe {name}")
            probe = probe.with_filter_id(filter_id)
        registered[name] = probe

    return registered


def build_routing_table(probes: Mapping[str, ProbeDefinition]) -> EventRoutingTable:
    """
    Create the mapping between events (or filter ids) and their probes.

    Methods called by the host only know the event name, or the filters
    a document matched, so this mapping is how they find the probes to update.

    Args:
        probes: Compiled probes. Watcher and sampler probes must already be
            registered with the matcher.

    Returns:
        The routing table
    """
    table = EventRoutingTable()

    for name, probe in probes.items():
        if isinstance(probe, MonitorProbe):
            for hook in probe.hooks:
                _append_unique(table.monitor, hook, name)

        elif isinstance(probe, CounterProbe):
            for event in probe.increasers:
                _append_unique(table.counter.increasers, event, name)
            for event in probe.decreasers:
                _append_unique(table.counter.decreasers, event, name)

        elif isinstance(probe, WatcherProbe):
            _require_filter_id(probe)
            _append_unique(table.watcher, probe.filter_id, name)

        elif isinstance(probe, SamplerProbe):
            _require_filter_id(probe)
            _append_unique(table.sampler, probe.filter_id, probe)

    return table


def build_hooks(probes: Mapping[str, ProbeDefinition]) -> Dict[str, List[str]]:
    """
    Create the host hook list: event name -> probe types to call.

    Monitor and counter probes listen to the events they declare, watcher and
    sampler probes listen to every event carrying a new document or message.
    """
    hooks: Dict[str, List[str]] = {}

    for probe in probes.values():
        if isinstance(probe, MonitorProbe):
            events = probe.hooks
        elif isinstance(probe, CounterProbe):
            events = probe.increasers + probe.decreasers
        else:
            events = DOCUMENT_EVENTS

        for event in events:
            _append_unique(hooks, event, probe.type.value)

    return hooks


def _require_filter_id(probe: ContentProbe) -> None:
    if probe.filter_id is None:
        raise ValueError(
            f"probe {probe.name} has no filter id: register_filters() must run first"
        )

