"""
Aggregation engine.

The engine owns the live measures of every probe. The host hands it events
(monitor and counter probes) and documents (watcher and sampler probes); the
engine looks up the interested probes in the routing table, updates their
measures and flushes the probes that have no interval. Probes with an
interval are flushed by one repeating timer each, started by ``start``.

A document is a mapping with the keys ``index``, ``collection``, ``body`` and
optionally ``_id``.
"""

import inspect
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..matching.base import Matcher
from ..models.probes import ProbeDefinition, ProbeType, WatcherProbe
from ..notifications import NotificationSink
from ..probes.collector import collect
from ..probes.measures import MeasurementStore
from ..probes.reservoir import ReservoirSampler
from ..probes.router import build_routing_table
from ..storage.base import MeasureStorage
from .flush import FlushCoordinator
from .timers import IntervalTimer

logger = logging.getLogger(__name__)


class ProbeEngine:
    """
    Routes events and documents to probe measures.

    Dispatch is synchronous up to the flush: an event updates every
    interested probe before the call returns, and writes run in the
    background. Dispatch is not transactional across probes.
    """

    def __init__(
        self,
        probes: Mapping[str, ProbeDefinition],
        storage: Optional[MeasureStorage],
        location: str,
        matcher: Optional[Matcher] = None,
        notifier: Optional[NotificationSink] = None,
        sampler: Optional[ReservoirSampler] = None,
    ):
        """
        Args:
            probes: Compiled probes. Watcher and sampler probes must already
                carry the filter id returned by the matcher.
            storage: Where measures are persisted
            location: Storage location (index) measures are written to
            matcher: Matcher the watcher and sampler filters are registered on
            notifier: Receives the flushed measures
            sampler: Reservoir sampler shared by the sampler probes
        """
        self.probes: Dict[str, ProbeDefinition] = dict(probes)
        self.routes = build_routing_table(self.probes)
        self.measures = MeasurementStore(self.probes)
        self.matcher = matcher
        self.reservoir = sampler or ReservoirSampler()
        self.flusher = FlushCoordinator(storage, location, notifier, self.reservoir)
        self._timers: Dict[str, IntervalTimer] = {}
        self._handlers = {
            ProbeType.MONITOR: self.monitor,
            ProbeType.COUNTER: self.counter,
            ProbeType.WATCHER: self.watcher,
            ProbeType.SAMPLER: self.sampler,
        }

    # --- Lifecycle ---

    def start(self) -> None:
        """Start one flush timer per probe having an interval."""
        logger.info("Starting probes")
        for name, probe in self.probes.items():
            logger.info(f"Starting probe: {name}")
            if probe.interval_ms is None or name in self._timers:
                continue
            timer = IntervalTimer(probe.interval_ms, lambda name=name: self.flush(name), name=name)
            timer.start()
            self._timers[name] = timer

    def stop(self) -> None:
        """Cancel the flush timers. Writes in flight are left to complete."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        logger.debug("Probe timers stopped")

    @property
    def timers(self) -> Dict[str, IntervalTimer]:
        return dict(self._timers)

    async def drain(self) -> None:
        """Wait for every pending write."""
        await self.flusher.drain()

    def flush(self, name: str):
        """Flush a single probe now. Returns the write task, if any."""
        return self.flusher.flush(self.probes[name], self.measures[name])

    def flush_all(self) -> List[Any]:
        """Flush every probe now."""
        tasks = [self.flush(name) for name in self.probes]
        return [task for task in tasks if task is not None]

    # --- Dispatch ---

    async def dispatch(self, probe_type: ProbeType, event: str, payload: Any = None) -> None:
        """
        Call the handler of a probe family.

        Monitor and counter handlers receive the event name, watcher and
        sampler handlers receive ``payload``, the document.
        """
        handler = self._handlers[probe_type]
        if probe_type in (ProbeType.MONITOR, ProbeType.COUNTER):
            handler(event)
        else:
            await handler(payload)

    def monitor(self, event: str) -> None:
        """Count ``event`` in every monitor probe listening to it."""
        for name in self.routes.monitors_for(event):
            self.measures[name].hits[event] += 1
            self._flush_if_immediate(name)

    def counter(self, event: str) -> None:
        """Raise or lower every counter probe listening to ``event``."""
        for name in self.routes.increasers_for(event):
            self.measures[name].count += 1
            self._flush_if_immediate(name)

        for name in self.routes.decreasers_for(event):
            self.measures[name].count -= 1
            self._flush_if_immediate(name)

    async def watcher(self, document: Mapping[str, Any]) -> None:
        """Count or collect a document in every watcher probe it matches."""
        filter_ids = await self._match(document)
        self._apply_watchers(filter_ids, document)

    async def sampler(self, document: Mapping[str, Any]) -> None:
        """Offer a document to every sampler probe it matches."""
        filter_ids = await self._match(document)
        self._apply_samplers(filter_ids, document)

    async def on_document(self, document: Mapping[str, Any]) -> None:
        """Feed a document to the watcher and sampler probes, matching it once."""
        filter_ids = await self._match(document)
        self._apply_watchers(filter_ids, document)
        self._apply_samplers(filter_ids, document)

    async def _match(self, document: Mapping[str, Any]) -> List[str]:
        if self.matcher is None or not (self.routes.watcher or self.routes.sampler):
            return []

        result = self.matcher.test(
            document["index"],
            document["collection"],
            document.get("body"),
            document.get("_id"),
        )
        if inspect.isawaitable(result):
            result = await result
        return _unique(result or [])

    def _apply_watchers(self, filter_ids: Iterable[str], document: Mapping[str, Any]) -> None:
        for filter_id in filter_ids:
            for name in self.routes.watchers_for(filter_id):
                probe: WatcherProbe = self.probes[name]
                measure = self.measures[name]
                record = collect(document.get("_id"), document.get("body"), probe.collects)
                if record is None:
                    measure.count += 1
                else:
                    measure.content.append(record)
                self._flush_if_immediate(name)

    def _apply_samplers(self, filter_ids: Iterable[str], document: Mapping[str, Any]) -> None:
        for filter_id in filter_ids:
            for probe in self.routes.samplers_for(filter_id):
                record = collect(document.get("_id"), document.get("body"), probe.collects)
                self.reservoir.offer(self.measures[probe.name], probe.sample_size, record)

    def _flush_if_immediate(self, name: str) -> None:
        if not self.probes[name].immediate:
            return
        try:
            self.flush(name)
        except Exception as e:
            logger.error(f"[{name}] Flush failed: {e}", exc_info=True)


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))
