"""
Simplified validation functions.

This module provides the validation functions shared by the probe compiler
and the plugin configuration loader.
"""

from typing import Any, List, Optional

from .exceptions import ValidationError


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value",
    strict: bool = False
) -> int:
    """
    Validate that a value is a positive integer.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated
        strict: Reject anything that is not already an integer (or an
            integral float) instead of coercing it

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if strict:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            raise ValidationError(
                f"{field_name} must be an integer, got {type(value).__name__}",
                field_name=field_name,
                value=value
            )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """
    Validate that a value is a non-empty string.

    Raises:
        ValidationError: If the value is not a string or is blank
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=value
        )
    return value


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    """Validate that a value is a real boolean."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a boolean, got {value!r}",
            field_name=field_name,
            value=value
        )
    return value


def validate_event_list(
    value: Any,
    field_name: str = "events",
    allow_empty: bool = False
) -> List[str]:
    """
    Validate a list of event names and remove duplicates.

    The order of first appearance is preserved.

    Args:
        value: Value to validate
        field_name: Name of the field being validated
        allow_empty: Whether an empty list is accepted

    Returns:
        Deduplicated list of event names

    Raises:
        ValidationError: If the value is not a list of non-empty strings
    """
    if not isinstance(value, (list, tuple)):
        raise ValidationError(
            f"{field_name} must be a list of event names",
            field_name=field_name,
            value=value
        )
    if not value and not allow_empty:
        raise ValidationError(
            f"{field_name} cannot be empty",
            field_name=field_name,
            value=value
        )

    events: List[str] = []
    for i, event in enumerate(value):
        validate_non_empty_string(event, field_name=f"{field_name}[{i}]")
        if event not in events:
            events.append(event)
    return events
