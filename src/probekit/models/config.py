"""
Configuration data models.

This module contains the configuration structures loaded from the probe
configuration file: the plugin settings, the storage settings, and the raw
probe definitions that the probe compiler turns into probe models.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    from ..config.storage_config import StorageConfig


@dataclass
class PluginConfig:
    """
    Plugin-level settings, loaded from the ``[plugin]`` table.
    """

    # Location (index) where measures are stored. Each probe gets its own
    # collection inside it, named after the probe.
    storage_index: str
    # Target databases. For the file backends the first entry is the root
    # directory the storage index is created in.
    databases: List[str]


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    # The plugin settings.
    plugin: PluginConfig
    # The storage backend settings.
    storage: "StorageConfig"
    # Raw probe definitions keyed by probe name, validated by the compiler.
    probes: Dict[str, Any] = field(default_factory=dict)
