"""
probekit: probe aggregation engine.

Observes application events, aggregates them per configured probe and
persists the aggregated measures, either on every update or periodically.

The package is organized into specialized modules:
- config: Configuration loading and validation (TOML)
- models: Probe definitions, measures and routing tables
- validation: Errors and input validators
- probes: Interval parsing, probe compilation, routing, sampling and collection
- matching: Document matchers for watcher and sampler probes
- storage: Measure storage backends
- engine: Aggregation, flush, timers, provisioning and the plugin facade
- cli: Command-line interface

Usage:
    From command line:
        probekit check probes.toml
        probekit replay probes.toml events.jsonl

    Programmatically:
        from probekit import ProbePlugin, load_config
        plugin = await ProbePlugin().init(load_config(path))
        await plugin.handle("some:event")
"""

# Main interfaces
from .config import clear_config_cache, get_config, load_config, set_config_path
from .engine import FlushCoordinator, IntervalTimer, ProbeEngine, ProbePlugin
from .cli import main_cli

# Model classes for external use
from .models import (
    AppConfig,
    Collects,
    CounterProbe,
    MonitorProbe,
    PluginConfig,
    ProbeDefinition,
    ProbeType,
    SamplerProbe,
    WatcherProbe,
)

# Collaborators
from .matching import Matcher, SimpleMatcher
from .notifications import MEASURE_EVENT, CallbackNotifier, NotificationSink
from .storage import MeasureStorage, create_storage

# Probe primitives
from .probes import compile_probes, parse_interval

from .validation import ProbeConfigurationError, ValidationError

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "load_config",
    "clear_config_cache",
    "set_config_path",
    "ProbePlugin",
    "ProbeEngine",
    "FlushCoordinator",
    "IntervalTimer",
    "main_cli",
    # Models
    "AppConfig",
    "PluginConfig",
    "Collects",
    "ProbeDefinition",
    "ProbeType",
    "MonitorProbe",
    "CounterProbe",
    "WatcherProbe",
    "SamplerProbe",
    # Collaborators
    "Matcher",
    "SimpleMatcher",
    "NotificationSink",
    "CallbackNotifier",
    "MEASURE_EVENT",
    "MeasureStorage",
    "create_storage",
    # Probe primitives
    "compile_probes",
    "parse_interval",
    # Errors
    "ValidationError",
    "ProbeConfigurationError",
]
