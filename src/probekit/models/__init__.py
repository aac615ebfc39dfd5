"""
Data models for the probe engine.

Configuration Models:
- Plugin and storage settings
- Application-wide configuration

Probe Models:
- Immutable probe definitions, one class per probe type
- Collected fields selection

Runtime Models:
- Per-probe measures (accumulators)
- Event routing tables
"""

from .config import AppConfig, PluginConfig

from .probes import (
    COLLECT_ALL,
    Collects,
    ContentProbe,
    CounterProbe,
    MonitorProbe,
    ProbeDefinition,
    ProbeType,
    SamplerProbe,
    WatcherProbe,
)

from .measures import (
    CounterMeasure,
    MonitorMeasure,
    SamplerMeasure,
    WatcherMeasure,
    detach,
)

from .routing import CounterRoutes, EventRoutingTable

__all__ = [
    # Configuration
    "AppConfig",
    "PluginConfig",
    # Probes
    "COLLECT_ALL",
    "Collects",
    "ContentProbe",
    "CounterProbe",
    "MonitorProbe",
    "ProbeDefinition",
    "ProbeType",
    "SamplerProbe",
    "WatcherProbe",
    # Measures
    "CounterMeasure",
    "MonitorMeasure",
    "SamplerMeasure",
    "WatcherMeasure",
    "detach",
    # Routing
    "CounterRoutes",
    "EventRoutingTable",
]
