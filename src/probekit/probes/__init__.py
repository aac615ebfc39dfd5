"""
Probe configuration, routing and accumulation primitives.

- interval: interval parsing ("10s", "1h", "none", milliseconds)
- compiler: raw probe definitions -> probe models
- router: routing tables and host hook list
- measures: per-probe measurement store
- reservoir: reservoir sampling for sampler probes
- collector: extraction of collected fields from documents
"""

from .collector import collect, get_path, set_path
from .compiler import compile_probe, compile_probes
from .interval import NO_INTERVAL, parse_duration, parse_interval
from .measures import MeasurementStore, new_measure
from .reservoir import ReservoirSampler
from .router import DOCUMENT_EVENTS, build_hooks, build_routing_table, register_filters

__all__ = [
    "collect",
    "get_path",
    "set_path",
    "compile_probe",
    "compile_probes",
    "NO_INTERVAL",
    "parse_duration",
    "parse_interval",
    "MeasurementStore",
    "new_measure",
    "ReservoirSampler",
    "DOCUMENT_EVENTS",
    "build_hooks",
    "build_routing_table",
    "register_filters",
]
