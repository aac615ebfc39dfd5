"""
Accumulator models.

A measure is the live, mutable state of one probe between two flushes. Its
shape depends on the probe type:

- monitor: one counter per configured hook
- counter: a single cumulative ``count``
- watcher: ``count`` when the probe collects nothing, ``content`` otherwise
- sampler: both ``count`` (documents seen this window) and ``content``
  (the current reservoir)

``to_dict`` returns the document shape that gets persisted and notified.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MonitorMeasure:
    """Per-hook event counts."""

    hits: Dict[str, int]

    @classmethod
    def for_hooks(cls, hooks) -> "MonitorMeasure":
        return cls(hits={hook: 0 for hook in hooks})

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.hits)

    def reset(self) -> None:
        for hook in self.hits:
            self.hits[hook] = 0

    def restore(self, detached: "MonitorMeasure") -> None:
        for hook, value in detached.hits.items():
            self.hits[hook] = self.hits.get(hook, 0) + value


@dataclass
class CounterMeasure:
    """Cumulative counter, kept for the whole process lifetime."""

    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count}

    def reset(self) -> None:
        # counters are cumulative
        pass

    def restore(self, detached: "CounterMeasure") -> None:
        pass


@dataclass
class WatcherMeasure:
    """Either a match counter or the list of collected documents."""

    count: Optional[int] = None
    content: Optional[List[Dict[str, Any]]] = None

    @classmethod
    def counting(cls) -> "WatcherMeasure":
        return cls(count=0)

    @classmethod
    def collecting(cls) -> "WatcherMeasure":
        return cls(content=[])

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.count is not None:
            data["count"] = self.count
        if self.content is not None:
            data["content"] = list(self.content)
        return data

    def reset(self) -> None:
        if self.count is not None:
            self.count = 0
        if self.content is not None:
            self.content = []

    def restore(self, detached: "WatcherMeasure") -> None:
        if self.count is not None and detached.count is not None:
            self.count += detached.count
        if self.content is not None and detached.content is not None:
            self.content = detached.content + self.content


@dataclass
class SamplerMeasure:
    """Reservoir of sampled documents and the number of documents seen."""

    count: int = 0
    content: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "content": list(self.content)}

    def reset(self) -> None:
        self.count = 0
        self.content = []


def detach(measure):
    """
    Return a deep copy of ``measure`` and reset the original in place.

    The copy is what a flush persists; the original keeps accumulating.
    """
    detached = copy.deepcopy(measure)
    measure.reset()
    return detached
