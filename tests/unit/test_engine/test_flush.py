"""
Unit tests for the flush/reset coordinator.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, Mock

import pytest

from probekit.engine.flush import FlushCoordinator, epoch_millis
from probekit.models import CounterMeasure, MonitorMeasure, SamplerMeasure, WatcherMeasure
from probekit.notifications import MEASURE_EVENT
from probekit.probes.compiler import compile_probe

TIMESTAMP = 1_700_000_000_000


@pytest.fixture
def coordinator(mock_storage, notifier, fixed_clock):
    return FlushCoordinator(mock_storage, "measures", notifier, clock=fixed_clock)


@pytest.fixture
def monitor_probe():
    return compile_probe("foo", {"type": "monitor", "hooks": ["a:b", "c:d"]})


@pytest.fixture
def counter_probe():
    return compile_probe("bar", {"type": "counter", "increasers": ["x"], "decreasers": ["y"]})


@pytest.fixture
def watcher_probe():
    return compile_probe(
        "baz", {"type": "watcher", "index": "i", "collection": "c", "collects": "*"}
    )


@pytest.fixture
def sampler_probe():
    return compile_probe(
        "qux",
        {
            "type": "sampler",
            "index": "i",
            "collection": "c",
            "collects": "*",
            "sampleSize": 2,
            "interval": "1s",
        },
    )


@pytest.mark.unit
class TestSingleRecordFlush:
    """Test cases for measures stored as one record."""

    @pytest.mark.asyncio
    async def test_monitor_flush(self, coordinator, mock_storage, notifier, monitor_probe):
        measure = MonitorMeasure(hits={"a:b": 1, "c:d": 0})

        task = coordinator.flush(monitor_probe, measure)
        assert await task is True

        mock_storage.create_record.assert_awaited_once_with(
            "measures", "foo", {"a:b": 1, "c:d": 0, "timestamp": TIMESTAMP}
        )
        assert measure.hits == {"a:b": 0, "c:d": 0}
        notifier.trigger.assert_called_once_with(
            MEASURE_EVENT,
            {"probe": "foo", "measure": {"a:b": 1, "c:d": 0, "timestamp": TIMESTAMP}},
        )

    @pytest.mark.asyncio
    async def test_counter_never_reset(self, coordinator, mock_storage, counter_probe):
        measure = CounterMeasure(count=3)

        await coordinator.flush(counter_probe, measure)

        mock_storage.create_record.assert_awaited_once_with(
            "measures", "bar", {"count": 3, "timestamp": TIMESTAMP}
        )
        assert measure.count == 3

    @pytest.mark.asyncio
    async def test_counting_watcher(self, coordinator, mock_storage):
        probe = compile_probe("w", {"type": "watcher", "index": "i", "collection": "c"})
        measure = WatcherMeasure(count=4)

        await coordinator.flush(probe, measure)

        mock_storage.create_record.assert_awaited_once_with(
            "measures", "w", {"count": 4, "timestamp": TIMESTAMP}
        )
        assert measure.count == 0

    @pytest.mark.asyncio
    async def test_notification_is_a_copy(self, coordinator, notifier, watcher_probe):
        measure = WatcherMeasure(content=[{"foo": {"bar": 1}}])

        await coordinator.flush(watcher_probe, measure)
        payload = notifier.trigger.call_args.args[1]
        payload["measure"]["content"][0]["foo"]["bar"] = 2

        bulk_records = coordinator.storage.bulk_create.await_args.args[2]
        assert bulk_records[0]["content"] == {"foo": {"bar": 1}}


@pytest.mark.unit
class TestContentFlush:
    """Test cases for measures stored as one record per collected document."""

    @pytest.mark.asyncio
    async def test_one_record_per_entry(self, coordinator, mock_storage, notifier, watcher_probe):
        measure = WatcherMeasure(content=[{"a": 1}, {"a": 2}])

        assert await coordinator.flush(watcher_probe, measure) is True

        mock_storage.bulk_create.assert_awaited_once_with(
            "measures",
            "baz",
            [
                {"timestamp": TIMESTAMP, "content": {"a": 1}},
                {"timestamp": TIMESTAMP, "content": {"a": 2}},
            ],
        )
        mock_storage.create_record.assert_not_awaited()
        assert measure.content == []
        notifier.trigger.assert_called_once()

    @pytest.mark.asyncio
    async def test_sampler_flush(self, coordinator, mock_storage, sampler_probe):
        measure = SamplerMeasure(count=10, content=[{"a": 1}, {"a": 2}])

        await coordinator.flush(sampler_probe, measure)

        records = mock_storage.bulk_create.await_args.args[2]
        assert [record["content"] for record in records] == [{"a": 1}, {"a": 2}]
        assert measure.count == 0
        assert measure.content == []

    @pytest.mark.asyncio
    async def test_empty_content_skips_storage(self, coordinator, mock_storage, notifier, sampler_probe):
        measure = SamplerMeasure(count=0, content=[])

        assert await coordinator.flush(sampler_probe, measure) is True

        mock_storage.bulk_create.assert_not_awaited()
        mock_storage.create_record.assert_not_awaited()
        notifier.trigger.assert_called_once_with(
            MEASURE_EVENT,
            {"probe": "qux", "measure": {"count": 0, "content": [], "timestamp": TIMESTAMP}},
        )


@pytest.mark.unit
class TestVolatileFlush:
    """Test cases for volatile probes."""

    @pytest.mark.asyncio
    async def test_volatile_probe(self, coordinator, mock_storage, notifier):
        probe = compile_probe("v", {"type": "monitor", "hooks": ["a:b"], "volatile": True})
        measure = MonitorMeasure(hits={"a:b": 2})

        assert coordinator.flush(probe, measure) is None

        mock_storage.create_record.assert_not_awaited()
        assert measure.hits == {"a:b": 0}
        notifier.trigger.assert_called_once_with(
            MEASURE_EVENT, {"probe": "v", "measure": {"a:b": 2, "timestamp": TIMESTAMP}}
        )

    @pytest.mark.asyncio
    async def test_no_storage(self, notifier, fixed_clock, monitor_probe):
        coordinator = FlushCoordinator(None, "measures", notifier, clock=fixed_clock)
        measure = MonitorMeasure(hits={"a:b": 1, "c:d": 0})

        assert coordinator.flush(monitor_probe, measure) is None
        notifier.trigger.assert_called_once()


@pytest.mark.unit
class TestFailedFlush:
    """Test cases for persistence failures."""

    @pytest.mark.asyncio
    async def test_failed_persistence_preserves_state(
        self, failing_storage, notifier, fixed_clock, monitor_probe, caplog
    ):
        coordinator = FlushCoordinator(failing_storage, "measures", notifier, clock=fixed_clock)
        measure = MonitorMeasure(hits={"a:b": 3, "c:d": 1})

        with caplog.at_level(logging.ERROR):
            assert await coordinator.flush(monitor_probe, measure) is False

        assert measure.hits == {"a:b": 3, "c:d": 1}
        notifier.trigger.assert_not_called()
        assert "[foo]" in caplog.text
        assert "'a:b': 3" in caplog.text

    @pytest.mark.asyncio
    async def test_failed_content_flush(self, failing_storage, notifier, fixed_clock, watcher_probe):
        coordinator = FlushCoordinator(failing_storage, "measures", notifier, clock=fixed_clock)
        measure = WatcherMeasure(content=[{"a": 1}])

        await coordinator.flush(watcher_probe, measure)

        assert measure.content == [{"a": 1}]

    @pytest.mark.asyncio
    async def test_failed_sampler_flush(self, failing_storage, fixed_clock, sampler_probe):
        coordinator = FlushCoordinator(failing_storage, "measures", clock=fixed_clock)
        measure = SamplerMeasure(count=7, content=[{"a": 1}, {"a": 2}])

        await coordinator.flush(sampler_probe, measure)

        assert measure.count == 7
        assert measure.content == [{"a": 1}, {"a": 2}]

    @pytest.mark.asyncio
    async def test_updates_during_failed_write_are_kept(
        self, mock_storage, fixed_clock, monitor_probe
    ):
        release = asyncio.Event()

        async def slow_failure(*args):
            await release.wait()
            raise ConnectionError("storage unavailable")

        mock_storage.create_record = AsyncMock(side_effect=slow_failure)
        coordinator = FlushCoordinator(mock_storage, "measures", clock=fixed_clock)
        measure = MonitorMeasure(hits={"a:b": 2, "c:d": 0})

        task = coordinator.flush(monitor_probe, measure)
        await asyncio.sleep(0)
        measure.hits["a:b"] += 1
        release.set()
        await task

        assert measure.hits == {"a:b": 3, "c:d": 0}

    @pytest.mark.asyncio
    async def test_updates_during_successful_write_are_not_lost(
        self, mock_storage, fixed_clock, monitor_probe
    ):
        release = asyncio.Event()

        async def slow_write(*args):
            await release.wait()

        mock_storage.create_record = AsyncMock(side_effect=slow_write)
        coordinator = FlushCoordinator(mock_storage, "measures", clock=fixed_clock)
        measure = MonitorMeasure(hits={"a:b": 2, "c:d": 0})

        task = coordinator.flush(monitor_probe, measure)
        await asyncio.sleep(0)
        measure.hits["a:b"] += 1
        release.set()
        await task

        assert measure.hits == {"a:b": 1, "c:d": 0}

    def test_no_running_loop_keeps_measure(self, coordinator, mock_storage, notifier, monitor_probe):
        measure = MonitorMeasure(hits={"a:b": 2, "c:d": 0})

        with pytest.raises(RuntimeError):
            coordinator.flush(monitor_probe, measure)

        assert measure.hits == {"a:b": 2, "c:d": 0}
        assert coordinator.pending == 0
        notifier.trigger.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_notifier_does_not_propagate(self, mock_storage, fixed_clock, monitor_probe):
        notifier = Mock()
        notifier.trigger.side_effect = RuntimeError("boom")
        coordinator = FlushCoordinator(mock_storage, "measures", notifier, clock=fixed_clock)

        assert await coordinator.flush(monitor_probe, MonitorMeasure(hits={"a:b": 1})) is True


@pytest.mark.unit
class TestDrain:
    """Test cases for pending writes."""

    @pytest.mark.asyncio
    async def test_drain_waits_for_writes(self, coordinator, mock_storage, monitor_probe):
        for _ in range(3):
            coordinator.flush(monitor_probe, MonitorMeasure(hits={"a:b": 1, "c:d": 0}))

        assert coordinator.pending == 3
        await coordinator.drain()

        assert coordinator.pending == 0
        assert mock_storage.create_record.await_count == 3

    def test_epoch_millis(self):
        assert epoch_millis() > 1_600_000_000_000
