"""
Exception types and error handling for probekit.

This module provides the error taxonomy used across the package: the generic
ValidationError raised by the validators, the probe configuration errors
raised while compiling probe definitions, and a small set of helpers that
log errors consistently before optionally re-raising them.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when validation fails.

    This is the main exception type used throughout the validation system.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class ProbeConfigurationError(ValidationError):
    """
    A single probe definition is invalid.

    The compiler drops the offending probe when it catches one of these,
    unless it runs in strict mode.
    """

    def __init__(self, probe_name: str, message: str,
                 field_name: Optional[str] = None, value: Any = None):
        super().__init__(
            f"[probe: {probe_name}] {message}",
            field_name=field_name,
            value=value,
        )
        self.probe_name = probe_name


class MissingTypeError(ProbeConfigurationError):
    """The probe has no "type" parameter."""

    def __init__(self, probe_name: str):
        super().__init__(probe_name, '"type" parameter missing', field_name="type")


class UnknownProbeTypeError(ProbeConfigurationError):
    """The probe "type" is not one of the supported probe types."""

    def __init__(self, probe_name: str, value: Any):
        super().__init__(
            probe_name,
            f'unknown probe type "{value}"',
            field_name="type",
            value=value,
        )


class MissingIntervalError(ProbeConfigurationError):
    """A probe type that requires an interval was configured without one."""

    def __init__(self, probe_name: str, value: Any = None):
        super().__init__(
            probe_name,
            'an "interval" parameter is required for sampler probes',
            field_name="interval",
            value=value,
        )


class InvalidIntervalError(ProbeConfigurationError):
    """The interval could not be parsed into a positive millisecond duration."""

    def __init__(self, probe_name: Optional[str], value: Any):
        super().__init__(
            probe_name or "<unnamed>",
            f'invalid interval "{value}"',
            field_name="interval",
            value=value,
        )


class MissingHooksError(ProbeConfigurationError):
    """A monitor probe has no event to listen to."""

    def __init__(self, probe_name: str, value: Any = None):
        super().__init__(
            probe_name,
            '"hooks" must be a non-empty list of event names',
            field_name="hooks",
            value=value,
        )


class MissingCounterEventsError(ProbeConfigurationError):
    """A counter probe lacks its "increasers" or "decreasers" list."""

    def __init__(self, probe_name: str, field_name: str, value: Any = None):
        super().__init__(
            probe_name,
            f'"{field_name}" must be a list of event names',
            field_name=field_name,
            value=value,
        )


class ConflictingCounterEventsError(ProbeConfigurationError):
    """An event is listed both as an increaser and a decreaser of a counter."""

    def __init__(self, probe_name: str, events: Any):
        super().__init__(
            probe_name,
            "an event cannot be set both to increase and to decrease a counter "
            f"(conflicting events: {', '.join(events)})",
            field_name="increasers",
            value=list(events),
        )


class MissingLocationError(ProbeConfigurationError):
    """A watcher or sampler probe is missing its index or collection."""

    def __init__(self, probe_name: str, field_name: str):
        super().__init__(
            probe_name,
            f'missing "{field_name}": watcher and sampler probes need an index and a collection',
            field_name=field_name,
        )


class InvalidCollectsError(ProbeConfigurationError):
    """The "collects" parameter has an unsupported shape or value."""

    def __init__(self, probe_name: str, message: str, value: Any = None):
        super().__init__(probe_name, message, field_name="collects", value=value)


class InvalidSampleSizeError(ProbeConfigurationError):
    """A sampler probe has a missing or non positive "sampleSize"."""

    def __init__(self, probe_name: str, value: Any = None):
        super().__init__(
            probe_name,
            f'"sampleSize" must be a positive integer, got {value!r}',
            field_name="sampleSize",
            value=value,
        )


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    # Handle both enum and string severity values
    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_storage_error(error: Exception, context: str, **kwargs) -> None:
    """Handle measure storage errors."""
    handle_error(error, f"storage {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors and exit."""
    exit_code = kwargs.pop('exit_code', 1)
    include_traceback = kwargs.pop('include_traceback', False)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    if include_traceback:
        severity = ErrorSeverity.CRITICAL
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
