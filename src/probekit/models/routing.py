"""
Event routing table model.

The routing table maps what the host hands to the engine (an event name, or
the filter ids a document matched) to the probes interested in it. It is
derived from the compiled probes and rebuilt whenever they change.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .probes import SamplerProbe


@dataclass
class CounterRoutes:
    """Events raising and lowering counter probes."""

    increasers: Dict[str, List[str]] = field(default_factory=dict)
    decreasers: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class EventRoutingTable:
    """
    Lookup tables from events and filter ids to probes.

    Attributes:
        monitor: event name -> monitor probe names
        counter: increaser and decreaser event names -> counter probe names
        watcher: filter id -> watcher probe names
        sampler: filter id -> sampler probe definitions; sampling needs the
            sample size and the collected fields at dispatch time
    """

    monitor: Dict[str, List[str]] = field(default_factory=dict)
    counter: CounterRoutes = field(default_factory=CounterRoutes)
    watcher: Dict[str, List[str]] = field(default_factory=dict)
    sampler: Dict[str, List[SamplerProbe]] = field(default_factory=dict)

    def monitors_for(self, event: str) -> List[str]:
        return self.monitor.get(event, [])

    def increasers_for(self, event: str) -> List[str]:
        return self.counter.increasers.get(event, [])

    def decreasers_for(self, event: str) -> List[str]:
        return self.counter.decreasers.get(event, [])

    def watchers_for(self, filter_id: str) -> List[str]:
        return self.watcher.get(filter_id, [])

    def samplers_for(self, filter_id: str) -> List[SamplerProbe]:
        return self.sampler.get(filter_id, [])
