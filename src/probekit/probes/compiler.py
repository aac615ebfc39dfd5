"""
Probe configuration compiler.

Turns the raw probe definitions found in the configuration into immutable
probe models. Each probe is validated on its own: an invalid probe is logged
and dropped, the others are compiled normally. Strict mode raises on the first
invalid probe instead.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ..models.probes import (
    COLLECT_ALL,
    Collects,
    CounterProbe,
    MonitorProbe,
    ProbeDefinition,
    ProbeType,
    SamplerProbe,
    WatcherProbe,
)
from ..validation import (
    ConflictingCounterEventsError,
    InvalidCollectsError,
    InvalidSampleSizeError,
    MissingCounterEventsError,
    MissingHooksError,
    MissingIntervalError,
    MissingLocationError,
    MissingTypeError,
    ProbeConfigurationError,
    UnknownProbeTypeError,
    ValidationError,
    validate_boolean,
    validate_event_list,
    validate_positive_integer,
)
from .interval import is_no_interval, parse_interval

logger = logging.getLogger(__name__)

_SAMPLE_SIZE_KEYS = ("sampleSize", "sample_size")
# monitor measures store one field per hook next to the flush timestamp
RESERVED_HOOKS = ("timestamp",)


def compile_probes(
    raw_probes: Optional[Mapping[str, Mapping[str, Any]]],
    strict: bool = False
) -> Dict[str, ProbeDefinition]:
    """
    Compile raw probe definitions.

    Args:
        raw_probes: Probe name -> raw definition
        strict: Raise the first configuration error instead of dropping
            the offending probe

    Returns:
        Probe name -> compiled probe, in configuration order, without the
        probes that failed validation

    Raises:
        ProbeConfigurationError: In strict mode, for the first invalid probe
    """
    compiled: Dict[str, ProbeDefinition] = {}

    if not raw_probes:
        return compiled

    for name, raw in raw_probes.items():
        try:
            compiled[name] = compile_probe(name, raw)
        except ProbeConfigurationError as e:
            if strict:
                raise
            logger.error(f"Dropping probe: {e}")

    dropped = len(raw_probes) - len(compiled)
    if dropped:
        logger.warning(f"{dropped} probe(s) dropped because of configuration errors")

    return compiled


def compile_probe(name: str, raw: Mapping[str, Any]) -> ProbeDefinition:
    """
    Validate a single raw probe definition.

    Raises:
        ProbeConfigurationError: If the definition is invalid
    """
    if not isinstance(raw, Mapping):
        raise ProbeConfigurationError(name, "probe definition must be a mapping", value=raw)

    probe_type = _probe_type(name, raw)
    raw_interval = raw.get("interval")

    if probe_type is ProbeType.SAMPLER and is_no_interval(raw_interval):
        raise MissingIntervalError(name, raw_interval)

    interval_ms = parse_interval(raw_interval, probe_name=name)
    volatile = _volatile(name, raw)

    if probe_type is ProbeType.MONITOR:
        return MonitorProbe(
            name=name,
            interval_ms=interval_ms,
            volatile=volatile,
            hooks=_hooks(name, raw),
        )

    if probe_type is ProbeType.COUNTER:
        increasers, decreasers = _counter_events(name, raw)
        return CounterProbe(
            name=name,
            interval_ms=interval_ms,
            volatile=volatile,
            increasers=increasers,
            decreasers=decreasers,
        )

    index, collection = _location(name, raw)
    collects = _collects(name, raw, required=probe_type is ProbeType.SAMPLER)
    probe_filter = raw.get("filter")
    if probe_filter is None:
        probe_filter = {}
    elif not isinstance(probe_filter, Mapping):
        raise ProbeConfigurationError(
            name, '"filter" must be a mapping', field_name="filter", value=probe_filter
        )
    mapping = raw.get("mapping")
    if mapping is not None and not isinstance(mapping, Mapping):
        raise ProbeConfigurationError(
            name, '"mapping" must be a mapping', field_name="mapping", value=mapping
        )

    common = dict(
        name=name,
        interval_ms=interval_ms,
        volatile=volatile,
        index=index,
        collection=collection,
        filter=dict(probe_filter),
        collects=collects,
        mapping=dict(mapping) if mapping is not None else None,
    )

    if probe_type is ProbeType.WATCHER:
        return WatcherProbe(**common)

    return SamplerProbe(sample_size=_sample_size(name, raw), **common)


def _probe_type(name: str, raw: Mapping[str, Any]) -> ProbeType:
    value = raw.get("type")
    if not value:
        raise MissingTypeError(name)
    try:
        return ProbeType(value)
    except ValueError:
        raise UnknownProbeTypeError(name, value)


def _volatile(name: str, raw: Mapping[str, Any]) -> bool:
    if "volatile" not in raw or raw["volatile"] is None:
        return False
    try:
        return validate_boolean(raw["volatile"], field_name="volatile")
    except ValidationError as e:
        raise ProbeConfigurationError(name, str(e), field_name="volatile", value=raw["volatile"])


def _hooks(name: str, raw: Mapping[str, Any]):
    try:
        hooks = validate_event_list(raw.get("hooks"), field_name="hooks")
    except ValidationError:
        raise MissingHooksError(name, raw.get("hooks"))

    reserved = [hook for hook in hooks if hook in RESERVED_HOOKS]
    if reserved:
        raise ProbeConfigurationError(
            name,
            f"hook name(s) {reserved} are reserved for the measure fields",
            field_name="hooks",
            value=raw.get("hooks"),
        )
    return tuple(hooks)


def _counter_events(name: str, raw: Mapping[str, Any]):
    events = {}
    for field_name in ("increasers", "decreasers"):
        try:
            events[field_name] = validate_event_list(
                raw.get(field_name), field_name=field_name, allow_empty=True
            )
        except ValidationError:
            raise MissingCounterEventsError(name, field_name, raw.get(field_name))

    increasers, decreasers = events["increasers"], events["decreasers"]
    if not increasers and not decreasers:
        raise ProbeConfigurationError(
            name,
            'a counter needs at least one event in "increasers" or "decreasers"',
            field_name="increasers",
        )

    conflicts = [event for event in increasers if event in decreasers]
    if conflicts:
        raise ConflictingCounterEventsError(name, conflicts)

    return tuple(increasers), tuple(decreasers)


def _location(name: str, raw: Mapping[str, Any]):
    for field_name in ("index", "collection"):
        value = raw.get(field_name)
        if not isinstance(value, str) or not value:
            raise MissingLocationError(name, field_name)
    return raw["index"], raw["collection"]


def _collects(name: str, raw: Mapping[str, Any], required: bool) -> Collects:
    value = raw.get("collects")
    collects = Collects.nothing()

    if value is not None and value != "" and value != []:
        if isinstance(value, str):
            if value != COLLECT_ALL:
                raise InvalidCollectsError(name, f'invalid "collects" value "{value}"', value)
            collects = Collects.all()
        elif isinstance(value, (list, tuple)):
            for field_path in value:
                if not isinstance(field_path, str) or not field_path:
                    raise InvalidCollectsError(
                        name, '"collects" must only list non-empty field names', value
                    )
            collects = Collects.of(dict.fromkeys(value))
        else:
            raise InvalidCollectsError(
                name,
                f'invalid "collects" format: expected array or string, got {type(value).__name__}',
                value,
            )

    if required and collects.is_nothing:
        raise InvalidCollectsError(
            name, 'a "collects" parameter is required for sampler probes', value
        )

    return collects


def _sample_size(name: str, raw: Mapping[str, Any]) -> int:
    value = next((raw[key] for key in _SAMPLE_SIZE_KEYS if key in raw), None)
    if value is None:
        raise InvalidSampleSizeError(name, value)
    try:
        return validate_positive_integer(value, field_name="sampleSize", strict=True)
    except ValidationError:
        raise InvalidSampleSizeError(name, value)
