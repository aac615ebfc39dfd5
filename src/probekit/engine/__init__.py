"""
Probe aggregation engine.

- aggregation: event and document dispatch to probe measures
- flush: persistence, notification and reset of measures
- timers: per-probe repeating flush timers
- provisioning: measure index and collection creation
- plugin: startup wiring for host applications
"""

from .aggregation import ProbeEngine
from .flush import FlushCoordinator, epoch_millis
from .plugin import ProbePlugin
from .provisioning import collection_mapping, ensure_measure_collections, ensure_measure_index
from .timers import IntervalTimer

__all__ = [
    "ProbeEngine",
    "FlushCoordinator",
    "epoch_millis",
    "ProbePlugin",
    "collection_mapping",
    "ensure_measure_collections",
    "ensure_measure_index",
    "IntervalTimer",
]
