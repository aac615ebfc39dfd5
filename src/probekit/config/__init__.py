"""
Configuration management for the probekit package.

This module provides a clean interface for loading, validating, and accessing
the probe configuration from TOML files with singleton pattern management.
"""

from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    load_config,
    set_config_path,
)

from .loader import load_probe_file, load_toml_file, resolve_databases
from .storage_config import StorageConfig
from .validators import (
    validate_app_config,
    validate_plugin_config,
    validate_probes_section,
)

__all__ = [
    # Main interface
    "get_config",
    "load_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "load_toml_file",
    "load_probe_file",
    "resolve_databases",
    "StorageConfig",
    "validate_app_config",
    "validate_plugin_config",
    "validate_probes_section",
]
