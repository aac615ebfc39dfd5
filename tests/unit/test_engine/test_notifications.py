"""
Unit tests for measure notifications.
"""

import logging
from unittest.mock import Mock

import pytest

from probekit.notifications import MEASURE_EVENT, CallbackNotifier


@pytest.mark.unit
class TestCallbackNotifier:
    """Test cases for CallbackNotifier."""

    def test_listeners_receive_payload(self):
        notifier = CallbackNotifier()
        first, second = Mock(), Mock()
        notifier.subscribe(MEASURE_EVENT, first)
        notifier.subscribe(MEASURE_EVENT, second)
        payload = {"probe": "foo", "measure": {"count": 1, "timestamp": 10}}

        notifier.trigger(MEASURE_EVENT, payload)

        first.assert_called_once_with(payload)
        second.assert_called_once_with(payload)

    def test_other_events_are_ignored(self):
        notifier = CallbackNotifier()
        listener = Mock()
        notifier.subscribe(MEASURE_EVENT, listener)

        notifier.trigger("other:event", {})

        listener.assert_not_called()

    def test_unsubscribe(self):
        notifier = CallbackNotifier()
        listener = Mock()
        notifier.subscribe(MEASURE_EVENT, listener)

        notifier.unsubscribe(MEASURE_EVENT, listener)
        notifier.unsubscribe(MEASURE_EVENT, listener)
        notifier.trigger(MEASURE_EVENT, {})

        listener.assert_not_called()

    def test_failing_listener_is_isolated(self, caplog):
        notifier = CallbackNotifier()
        failing = Mock(side_effect=RuntimeError("boom"))
        listener = Mock()
        notifier.subscribe(MEASURE_EVENT, failing)
        notifier.subscribe(MEASURE_EVENT, listener)

        with caplog.at_level(logging.ERROR):
            notifier.trigger(MEASURE_EVENT, {"probe": "foo"})

        listener.assert_called_once_with({"probe": "foo"})
        assert "boom" in caplog.text
