"""
Measurement store.

Holds the live measure of every probe, keyed by probe name and shaped
according to the probe type.
"""

from typing import Dict, Iterator, Mapping, Union

from ..models.measures import CounterMeasure, MonitorMeasure, SamplerMeasure, WatcherMeasure
from ..models.probes import CounterProbe, MonitorProbe, ProbeDefinition, SamplerProbe, WatcherProbe

Measure = Union[MonitorMeasure, CounterMeasure, WatcherMeasure, SamplerMeasure]


def new_measure(probe: ProbeDefinition) -> Measure:
    """Create the zero-state measure of a probe."""
    if isinstance(probe, MonitorProbe):
        return MonitorMeasure.for_hooks(probe.hooks)
    if isinstance(probe, CounterProbe):
        return CounterMeasure()
    if isinstance(probe, WatcherProbe):
        if probe.collects.is_nothing:
            return WatcherMeasure.counting()
        return WatcherMeasure.collecting()
    if isinstance(probe, SamplerProbe):
        return SamplerMeasure()
    raise TypeError(f"unsupported probe: {probe!r}")


class MeasurementStore:
    """
    Ongoing measures, one per probe.

    Structure:
        {
            probe_name_1: <measure>,
            probe_name_2: <measure>,
            ...
        }
    """

    def __init__(self, probes: Mapping[str, ProbeDefinition]):
        self._measures: Dict[str, Measure] = {
            name: new_measure(probe) for name, probe in probes.items()
        }

    def __getitem__(self, name: str) -> Measure:
        return self._measures[name]

    def __contains__(self, name: object) -> bool:
        return name in self._measures

    def __iter__(self) -> Iterator[str]:
        return iter(self._measures)

    def __len__(self) -> int:
        return len(self._measures)

    def to_dict(self) -> Dict[str, dict]:
        """Current value of every measure, in persisted shape."""
        return {name: measure.to_dict() for name, measure in self._measures.items()}
