"""
Unit tests for probe measures and the measurement store.
"""

import pytest

from probekit.models import (
    CounterMeasure,
    MonitorMeasure,
    SamplerMeasure,
    WatcherMeasure,
    detach,
)
from probekit.probes.compiler import compile_probes
from probekit.probes.measures import MeasurementStore


@pytest.mark.unit
class TestMeasurementStore:
    """Test cases for the initial measure shapes."""

    def test_initial_measures(self, sample_probes_config):
        sample_probes_config["watcher_2"] = {
            "type": "watcher", "index": "shop", "collection": "orders",
        }
        store = MeasurementStore(compile_probes(sample_probes_config))

        assert len(store) == 5
        assert store.to_dict() == {
            "monitor_1": {"some:event": 0, "some:otherevent": 0},
            "counter_1": {"count": 0},
            "watcher_1": {"content": []},
            "sampler_1": {"count": 0, "content": []},
            "watcher_2": {"count": 0},
        }

    def test_lookup(self, sample_probes_config):
        store = MeasurementStore(compile_probes(sample_probes_config))

        assert "monitor_1" in store
        assert "unknown" not in store
        assert isinstance(store["counter_1"], CounterMeasure)
        assert list(store) == list(sample_probes_config)


@pytest.mark.unit
class TestMeasureReset:
    """Test cases for reset, detach and restore."""

    def test_monitor_reset(self):
        measure = MonitorMeasure(hits={"a": 3, "b": 1})
        measure.reset()
        assert measure.hits == {"a": 0, "b": 0}

    def test_counter_never_reset(self):
        measure = CounterMeasure(count=-4)
        measure.reset()
        assert measure.count == -4

    def test_watcher_reset(self):
        counting = WatcherMeasure(count=3)
        collecting = WatcherMeasure(content=[{"a": 1}])
        counting.reset()
        collecting.reset()

        assert counting.to_dict() == {"count": 0}
        assert collecting.to_dict() == {"content": []}

    def test_sampler_reset(self):
        measure = SamplerMeasure(count=10, content=[{"a": 1}])
        measure.reset()
        assert measure.to_dict() == {"count": 0, "content": []}

    def test_detach(self):
        measure = WatcherMeasure(content=[{"a": {"b": 1}}])

        detached = detach(measure)
        detached.content[0]["a"]["b"] = 2

        assert measure.content == []
        assert detached.content == [{"a": {"b": 2}}]

    def test_restore_adds_back(self):
        measure = MonitorMeasure(hits={"a": 1, "b": 0})
        measure.restore(MonitorMeasure(hits={"a": 2, "b": 5}))
        assert measure.hits == {"a": 3, "b": 5}

        watcher = WatcherMeasure(content=[{"new": 1}])
        watcher.restore(WatcherMeasure(content=[{"old": 1}]))
        assert watcher.content == [{"old": 1}, {"new": 1}]

        counting = WatcherMeasure(count=1)
        counting.restore(WatcherMeasure(count=4))
        assert counting.count == 5
