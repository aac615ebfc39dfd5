"""
Probe configuration file loading.

Reads ``probes.toml`` with tomllib. Relative database directories are
resolved against the directory of the file, so a configuration behaves the
same whatever the working directory of the process.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import handle_config_error, ErrorSeverity

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse a TOML file.

    Raises:
        FileNotFoundError: If ``file_path`` is not a file
        tomllib.TOMLDecodeError: If the file is malformed
    """
    if not file_path.is_file():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    logger.info(f"Reading {description} {file_path}")
    try:
        return tomllib.loads(file_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {file_path.name}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def resolve_databases(config_data: Dict[str, Any], base_dir: Path) -> Dict[str, Any]:
    """
    Make relative ``databases`` entries relative to ``base_dir``.

    Entries that are not strings are left untouched for the validators to
    report. Both the ``[plugin]`` table and the flat layout are handled.
    """
    section = config_data.get("plugin")
    if not isinstance(section, dict):
        section = config_data

    databases = section.get("databases")
    if isinstance(databases, list):
        section["databases"] = [
            str(base_dir / entry) if isinstance(entry, str) and entry and not Path(entry).is_absolute()
            else entry
            for entry in databases
        ]
    return config_data


def load_probe_file(config_path: Path) -> Dict[str, Any]:
    """
    Load the probe configuration file (probes.toml).

    Args:
        config_path: Path to the probes.toml file

    Returns:
        Parsed configuration data, database directories resolved
    """
    config_data = load_toml_file(config_path, "probe configuration file")
    return resolve_databases(config_data, config_path.resolve().parent)
