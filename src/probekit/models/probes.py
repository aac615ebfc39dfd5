"""
Probe definition models.

Probe definitions are produced by the probe compiler from the raw
configuration and never change afterwards. Each probe type is its own frozen
dataclass so that the aggregation engine can dispatch on the type instead of
comparing configuration strings.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

COLLECT_ALL = "*"


class ProbeType(Enum):
    """Supported probe types."""

    MONITOR = "monitor"
    COUNTER = "counter"
    WATCHER = "watcher"
    SAMPLER = "sampler"

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class Collects:
    """
    What a watcher or sampler probe keeps from each matched document.

    A probe either collects everything (the whole document body), an ordered
    list of dotted field paths, or nothing at all, in which case it only
    counts matches.
    """

    everything: bool = False
    fields: Tuple[str, ...] = ()

    @classmethod
    def all(cls) -> "Collects":
        return cls(everything=True)

    @classmethod
    def nothing(cls) -> "Collects":
        return cls()

    @classmethod
    def of(cls, fields) -> "Collects":
        return cls(fields=tuple(fields))

    @property
    def is_nothing(self) -> bool:
        return not self.everything and not self.fields

    def to_config(self) -> Any:
        """Return the configuration spelling of this value."""
        if self.everything:
            return COLLECT_ALL
        if self.fields:
            return list(self.fields)
        return None


@dataclass(frozen=True, kw_only=True)
class ProbeDefinition:
    """
    Fields common to every probe.

    Attributes:
        name: Unique probe name, also the collection measures are stored in.
        interval_ms: Flush period in milliseconds. None means the measure is
            flushed after every update.
        volatile: Volatile probes are never persisted, only notified.
    """

    type: ClassVar[ProbeType]

    name: str
    interval_ms: Optional[int] = None
    volatile: bool = False

    @property
    def immediate(self) -> bool:
        """True when every update triggers a flush."""
        return self.interval_ms is None


@dataclass(frozen=True, kw_only=True)
class MonitorProbe(ProbeDefinition):
    """Counts how many times each listed event fired during a measure."""

    type: ClassVar[ProbeType] = ProbeType.MONITOR

    hooks: Tuple[str, ...]


@dataclass(frozen=True, kw_only=True)
class CounterProbe(ProbeDefinition):
    """Cumulative counter raised by some events and lowered by others."""

    type: ClassVar[ProbeType] = ProbeType.COUNTER

    increasers: Tuple[str, ...] = ()
    decreasers: Tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ContentProbe(ProbeDefinition):
    """
    Base for probes watching documents sent to an index/collection pair.

    Attributes:
        index: Watched index.
        collection: Watched collection.
        filter: Matcher filter, an empty filter matches every document.
        collects: What to keep from matched documents.
        mapping: Optional field mapping applied to the stored "content".
        filter_id: Identifier returned by the matcher on registration.
    """

    index: str
    collection: str
    filter: Mapping[str, Any] = field(default_factory=dict)
    collects: Collects = field(default_factory=Collects.nothing)
    mapping: Optional[Dict[str, Any]] = None
    filter_id: Optional[str] = None

    def with_filter_id(self, filter_id: str) -> "ContentProbe":
        return replace(self, filter_id=filter_id)


@dataclass(frozen=True, kw_only=True)
class WatcherProbe(ContentProbe):
    """Counts matched documents, or collects (part of) their content."""

    type: ClassVar[ProbeType] = ProbeType.WATCHER


@dataclass(frozen=True, kw_only=True)
class SamplerProbe(ContentProbe):
    """Keeps a uniform random sample of matched documents per interval."""

    type: ClassVar[ProbeType] = ProbeType.SAMPLER

    sample_size: int
