"""
Validation and error handling for the probekit package.

This module provides input validation, the probe configuration error
taxonomy, and consistent error reporting across the application.
"""

from .exceptions import (
    ErrorSeverity,
    ValidationError,
    ProbeConfigurationError,
    MissingTypeError,
    UnknownProbeTypeError,
    MissingIntervalError,
    InvalidIntervalError,
    MissingHooksError,
    MissingCounterEventsError,
    ConflictingCounterEventsError,
    MissingLocationError,
    InvalidCollectsError,
    InvalidSampleSizeError,
    handle_error,
    handle_config_error,
    handle_storage_error,
    handle_cli_error,
)

from .validators import (
    validate_boolean,
    validate_event_list,
    validate_non_empty_string,
    validate_positive_integer,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_storage_error",
    "handle_cli_error",
    # Probe configuration errors
    "ProbeConfigurationError",
    "MissingTypeError",
    "UnknownProbeTypeError",
    "MissingIntervalError",
    "InvalidIntervalError",
    "MissingHooksError",
    "MissingCounterEventsError",
    "ConflictingCounterEventsError",
    "MissingLocationError",
    "InvalidCollectsError",
    "InvalidSampleSizeError",
    # Validators
    "validate_boolean",
    "validate_event_list",
    "validate_non_empty_string",
    "validate_positive_integer",
]
