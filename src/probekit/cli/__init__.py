"""
Command-line interface for the probekit package.

This module provides the main CLI entry point of the probe engine.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
