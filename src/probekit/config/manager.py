"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, ValidationError, handle_config_error
from .loader import load_probe_file
from .validators import validate_app_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# Default configuration file, relative to the current working directory.
# Overridden by the CLI and by tests through set_config_path().
_CONFIG_FILE_PATH = Path("probes.toml")


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path.

    Args:
        config_path: Path to the probes.toml file

    Note:
        The cached configuration is dropped, the next get_config() call
        loads the new file.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """
    Clear the cached configuration, forcing a reload on next access.
    """
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def load_config(config_path: Path) -> AppConfig:
    """
    Load and validate the configuration file at ``config_path``.

    Args:
        config_path: Path to the probes.toml file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    config_path = Path(config_path)
    config_data = load_probe_file(config_path)
    try:
        app_config = validate_app_config(config_data)
    except ValidationError as e:
        handle_config_error(
            error=e,
            context=f"validating {config_path.name}",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise

    logger.info(f"Loaded {len(app_config.probes)} probe definition(s) from {config_path}")
    return app_config


def get_config() -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    Returns:
        The singleton AppConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    """Check if configuration has been loaded and cached."""
    return _CONFIG is not None


def get_config_info() -> dict:
    """
    Get information about the current configuration state.

    Returns:
        Dictionary with configuration metadata
    """
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "probes_count": len(_CONFIG.probes) if _CONFIG else 0,
        "storage_format": _CONFIG.storage.format if _CONFIG else None,
    }
