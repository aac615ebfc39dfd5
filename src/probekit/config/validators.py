"""
Configuration validation utilities.

This module validates the plugin-level settings and assembles the
AppConfig. Probe definitions are only checked for shape here: the probe
compiler validates each probe on its own so that one invalid probe does not
take the others down.
"""

import logging
from typing import Any, Dict, Mapping

from ..models.config import AppConfig, PluginConfig
from ..validation import ValidationError, validate_non_empty_string
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

# camelCase spellings accepted for backward compatibility
_PLUGIN_ALIASES = {"storageIndex": "storage_index"}


def _normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {_PLUGIN_ALIASES.get(key, key): value for key, value in data.items()}


def validate_plugin_config(plugin_data: Mapping[str, Any]) -> PluginConfig:
    """
    Validate and create a PluginConfig from raw configuration data.

    Args:
        plugin_data: Raw plugin settings (``[plugin]`` table or a flat mapping)

    Returns:
        Validated PluginConfig instance

    Raises:
        ValidationError: If validation fails
    """
    if not plugin_data:
        raise ValidationError("no configuration provided", field_name="plugin")

    data = _normalize_keys(plugin_data)

    databases = data.get("databases")
    if not isinstance(databases, list) or not databases:
        raise ValidationError(
            "no target database set: plugin.databases must be a non-empty list",
            field_name="plugin.databases",
            value=databases,
        )
    for i, database in enumerate(databases):
        validate_non_empty_string(database, field_name=f"plugin.databases[{i}]")

    storage_index = data.get("storage_index")
    if not isinstance(storage_index, str) or not storage_index:
        raise ValidationError(
            "no storage index defined: plugin.storage_index must be a string",
            field_name="plugin.storage_index",
            value=storage_index,
        )

    return PluginConfig(storage_index=storage_index, databases=list(databases))


def validate_probes_section(probes_data: Any) -> Dict[str, Any]:
    """
    Check that the probes section maps probe names to definitions.

    Definitions are not checked here: the compiler drops each invalid one,
    including a definition that is not a table.

    Returns:
        A copy of the raw probe definitions, tables copied shallowly

    Raises:
        ValidationError: If the section itself is not a table
    """
    if probes_data is None:
        return {}
    if not isinstance(probes_data, Mapping):
        raise ValidationError(
            "probes must be a table of probe definitions",
            field_name="probes",
            value=probes_data,
        )

    probes: Dict[str, Any] = {}
    for name, definition in probes_data.items():
        probes[name] = dict(definition) if isinstance(definition, Mapping) else definition
    return probes


def validate_app_config(config_data: Mapping[str, Any]) -> AppConfig:
    """
    Validate a complete configuration mapping.

    Both the TOML layout (``plugin``, ``storage`` and ``probes`` tables) and
    the flat layout (``databases``, ``storageIndex`` and ``probes`` at the top
    level) are accepted.

    Raises:
        ValidationError: If validation fails
    """
    if not config_data:
        raise ValidationError("no configuration provided")

    plugin_data = config_data.get("plugin")
    if plugin_data is None:
        plugin_data = {
            key: value for key, value in config_data.items()
            if key not in ("storage", "probes")
        }

    plugin = validate_plugin_config(plugin_data)

    try:
        storage = StorageConfig.from_dict(config_data.get("storage", {}) or {})
    except ValueError as e:
        raise ValidationError(str(e), field_name="storage") from e

    probes = validate_probes_section(config_data.get("probes"))

    logger.debug(f"Validated configuration with {len(probes)} probe definitions")
    return AppConfig(plugin=plugin, storage=storage, probes=probes)
