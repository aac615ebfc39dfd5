"""
Flush/reset coordinator.

A flush takes the current measure of a probe, persists it, notifies it and
resets the live accumulator. Two shapes of measure exist:

- single record measures (monitor, counter, counting watcher): the whole
  measure is stored as one record, stamped with the flush time
- content measures (collecting watcher, sampler): one record per collected
  document, ``{"timestamp": ..., "content": ...}``

The live accumulator is detached (copied, then reset) when the flush starts,
so events arriving while the write is in flight keep accumulating into the
next measure. When the write fails the detached measure is folded back into
the live one and nothing is notified.
"""

import asyncio
import copy
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Set

from ..models.measures import SamplerMeasure, detach
from ..models.probes import ProbeDefinition, SamplerProbe
from ..notifications import MEASURE_EVENT, NotificationSink
from ..probes.measures import Measure
from ..probes.reservoir import ReservoirSampler
from ..storage.base import MeasureStorage

logger = logging.getLogger(__name__)


def epoch_millis() -> int:
    """Current wall clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class FlushCoordinator:
    """
    Persists, notifies and resets probe measures.

    Writes run in asyncio tasks: ``flush`` returns immediately and the
    dispatcher never waits on storage. The coordinator keeps a reference to
    every pending write so that they can be awaited with ``drain``.
    """

    def __init__(
        self,
        storage: Optional[MeasureStorage],
        location: str,
        notifier: Optional[NotificationSink] = None,
        sampler: Optional[ReservoirSampler] = None,
        clock: Callable[[], int] = epoch_millis,
    ):
        """
        Args:
            storage: Where measures are persisted. None behaves as if every
                probe were volatile.
            location: Storage location (index) measures are written to
            notifier: Receives a "probe:measure" event per successful flush
            sampler: Reservoir sampler used to put failed sampler flushes back
            clock: Returns the flush timestamp in epoch milliseconds
        """
        self.storage = storage
        self.location = location
        self.notifier = notifier
        self.sampler = sampler or ReservoirSampler()
        self.clock = clock
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of writes still in flight."""
        return len(self._pending)

    def flush(self, probe: ProbeDefinition, measure: Measure) -> Optional[asyncio.Task]:
        """
        Flush the measure of a probe.

        Args:
            probe: Probe being flushed
            measure: Live measure of the probe, reset in place

        Returns:
            The write task, or None when nothing had to be written
            (volatile probes). The task resolves to True on success.

        Raises:
            RuntimeError: If the measure must be written and no event loop
                is running. The measure is left untouched.
        """
        persist = not probe.volatile and self.storage is not None
        # raises RuntimeError outside a running loop, before anything is reset
        loop = asyncio.get_running_loop() if persist else None

        timestamp = self.clock()
        snapshot = detach(measure)
        body = snapshot.to_dict()

        if not persist:
            self._notify(probe, body, timestamp)
            return None

        task = loop.create_task(
            self._persist(probe, measure, snapshot, body, timestamp),
            name=f"flush:{probe.name}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every pending write to complete."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _persist(
        self,
        probe: ProbeDefinition,
        measure: Measure,
        snapshot: Measure,
        body: Dict[str, Any],
        timestamp: int,
    ) -> bool:
        try:
            if "content" in body:
                records = self._content_records(body["content"], timestamp)
                if records:
                    await self.storage.bulk_create(self.location, probe.name, records)
            else:
                await self.storage.create_record(
                    self.location, probe.name, {**body, "timestamp": timestamp}
                )
        except Exception as e:
            self._rollback(probe, measure, snapshot)
            logger.error(
                f"[{probe.name}] Failed to save the following measure: {body}. Reason: {e}",
                exc_info=True,
            )
            return False

        self._notify(probe, body, timestamp)
        return True

    @staticmethod
    def _content_records(content: List[Dict[str, Any]], timestamp: int) -> List[Dict[str, Any]]:
        return [{"timestamp": timestamp, "content": entry} for entry in content]

    def _rollback(self, probe: ProbeDefinition, measure: Measure, snapshot: Measure) -> None:
        if isinstance(probe, SamplerProbe) and isinstance(snapshot, SamplerMeasure):
            self.sampler.merge(measure, snapshot.count, snapshot.content, probe.sample_size)
        else:
            measure.restore(snapshot)

    def _notify(self, probe: ProbeDefinition, body: Dict[str, Any], timestamp: int) -> None:
        if self.notifier is None:
            return
        payload = {
            "probe": probe.name,
            "measure": {**copy.deepcopy(body), "timestamp": timestamp},
        }
        try:
            self.notifier.trigger(MEASURE_EVENT, payload)
        except Exception as e:
            logger.error(f"[{probe.name}] Measure notification failed: {e}", exc_info=True)
