"""
Unit tests for the probe plugin facade.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from probekit.engine.plugin import ProbePlugin
from probekit.notifications import MEASURE_EVENT, CallbackNotifier
from probekit.probes.router import DOCUMENT_EVENTS
from probekit.storage import MemoryStorage
from probekit.validation import ValidationError


@pytest.fixture
def plugin():
    return ProbePlugin()


@pytest.mark.unit
class TestPluginInit:
    """Test cases for configuration checks and startup."""

    @pytest.mark.asyncio
    async def test_empty_configuration(self, plugin):
        with pytest.raises(ValidationError, match="no configuration provided"):
            await plugin.init({})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("databases", [None, [], "localhost"])
    async def test_no_target_database(self, plugin, databases):
        config = {"storageIndex": "measures", "probes": {}}
        if databases is not None:
            config["databases"] = databases

        with pytest.raises(ValidationError, match="no target database set"):
            await plugin.init(config)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("storage_index", [None, "", 42])
    async def test_no_storage_index(self, plugin, storage_index):
        config = {"databases": ["./data"], "probes": {}}
        if storage_index is not None:
            config["storageIndex"] = storage_index

        with pytest.raises(ValidationError, match="no storage index defined"):
            await plugin.init(config)

    @pytest.mark.asyncio
    async def test_dummy_mode_without_probes(self, plugin, mock_storage):
        await plugin.init(
            {"databases": ["./data"], "storageIndex": "measures"}, storage=mock_storage
        )

        assert plugin.dummy is True
        assert plugin.hooks == {}
        mock_storage.create_index.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dummy_mode_requested(self, plugin, sample_config_data, mock_storage):
        await plugin.init(sample_config_data, storage=mock_storage, dummy=True)

        assert plugin.dummy is True
        assert plugin.engine is None
        mock_storage.create_index.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dummy_mode_when_every_probe_is_invalid(self, plugin, mock_storage):
        config = {
            "databases": ["./data"],
            "storageIndex": "measures",
            "probes": {"bad": {"type": "foo"}},
        }

        await plugin.init(config, storage=mock_storage)

        assert plugin.dummy is True

    @pytest.mark.asyncio
    async def test_init(self, plugin, sample_config_data, mock_storage):
        await plugin.init(sample_config_data, storage=mock_storage)
        try:
            assert plugin.dummy is False
            assert plugin.index == "measures"
            assert set(plugin.probes) == set(sample_config_data["probes"])
            assert plugin.probes["watcher_1"].filter_id is not None
            assert plugin.hooks["some:event"] == ["monitor"]
            assert plugin.hooks["session:open"] == ["counter"]
            for event in DOCUMENT_EVENTS:
                assert plugin.hooks[event] == ["watcher", "sampler"]

            mock_storage.create_index.assert_awaited_once_with("measures")
            assert mock_storage.update_mapping.await_count == 4
            assert set(plugin.engine.timers) == set(sample_config_data["probes"])
        finally:
            await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_builds_storage_from_settings(self, plugin, sample_config_data):
        await plugin.init(sample_config_data)
        try:
            assert isinstance(plugin.storage, MemoryStorage)
        finally:
            await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_provisioning_failure_is_raised(self, plugin, sample_config_data, mock_storage):
        mock_storage.index_exists.side_effect = ConnectionError("storage unavailable")

        with pytest.raises(ConnectionError):
            await plugin.init(sample_config_data, storage=mock_storage)

    @pytest.mark.asyncio
    async def test_strict_mode(self, plugin, sample_config_data, mock_storage):
        sample_config_data["probes"]["bad"] = {"type": "monitor"}

        with pytest.raises(ValidationError):
            await plugin.init(sample_config_data, storage=mock_storage, strict=True)


@pytest.mark.unit
class TestPluginHandle:
    """Test cases for host event routing."""

    @pytest.mark.asyncio
    async def test_monitor_event(self, plugin, mock_storage):
        notifier = CallbackNotifier()
        measures = []
        notifier.subscribe(MEASURE_EVENT, measures.append)
        config = {
            "databases": ["./data"],
            "storageIndex": "measures",
            "probes": {"foo": {"type": "monitor", "hooks": ["a:b"]}},
        }
        await plugin.init(config, storage=mock_storage, notifier=notifier)

        await plugin.handle("a:b")
        await plugin.shutdown()

        assert mock_storage.create_record.await_args.args[2]["a:b"] == 1
        assert len(measures) == 1
        assert measures[0]["probe"] == "foo"
        assert measures[0]["measure"]["a:b"] == 1

    @pytest.mark.asyncio
    async def test_document_event(self, plugin, sample_config_data, mock_storage, test_utils):
        await plugin.init(sample_config_data, storage=mock_storage, seed=3)
        document = test_utils.document(
            {"status": "paid", "amount": 12, "customer": {"country": "fr"}}, id="o1"
        )

        with patch.object(plugin.engine, "on_document", AsyncMock()) as on_document:
            await plugin.handle("data:beforeCreate", document)
        on_document.assert_awaited_once_with(document)

        await plugin.handle("data:beforeCreate", document)
        try:
            assert plugin.engine.measures["watcher_1"].content == [
                {"amount": 12, "customer": {"country": "fr"}, "_id": "o1"}
            ]
            assert plugin.engine.measures["sampler_1"].count == 1
        finally:
            await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_document_event_without_payload(self, plugin, sample_config_data, mock_storage):
        await plugin.init(sample_config_data, storage=mock_storage)

        await plugin.handle("data:beforeCreate")
        try:
            assert plugin.engine.measures["sampler_1"].count == 0
        finally:
            await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_only_watchers_hooked(self, plugin, mock_storage, test_utils):
        config = {
            "databases": ["./data"],
            "storageIndex": "measures",
            "probes": {"w": {"type": "watcher", "index": "shop", "collection": "orders"}},
        }
        await plugin.init(config, storage=mock_storage)

        await plugin.handle("data:beforePublish", test_utils.document({"a": 1}))
        await plugin.shutdown()

        assert mock_storage.create_record.await_args.args[2]["count"] == 1

    @pytest.mark.asyncio
    async def test_dummy_plugin_ignores_events(self, plugin, sample_config_data, mock_storage):
        await plugin.init(sample_config_data, storage=mock_storage, dummy=True)

        await plugin.handle("some:event")

        mock_storage.create_record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_event(self, plugin, sample_config_data, mock_storage):
        await plugin.init(sample_config_data, storage=mock_storage)

        await plugin.handle("not:hooked")
        try:
            assert plugin.engine.measures["monitor_1"].hits == {"some:event": 0, "some:otherevent": 0}
        finally:
            await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_closes_storage(self, plugin, sample_config_data, mock_storage):
        await plugin.init(sample_config_data, storage=mock_storage)

        await plugin.shutdown()

        assert plugin.engine.timers == {}
        mock_storage.close.assert_awaited_once()
