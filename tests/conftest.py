"""
Pytest configuration and shared fixtures for the probekit test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the probekit project.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import AsyncMock, Mock

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_probes_config() -> Dict[str, Dict[str, Any]]:
    """Raw probe definitions covering every probe type."""
    return {
        "monitor_1": {
            "type": "monitor",
            "hooks": ["some:event", "some:otherevent"],
            "interval": "10s",
        },
        "counter_1": {
            "type": "counter",
            "increasers": ["session:open"],
            "decreasers": ["session:close"],
            "interval": "1h",
        },
        "watcher_1": {
            "type": "watcher",
            "index": "shop",
            "collection": "orders",
            "filter": {"equals": {"status": "paid"}},
            "collects": ["amount", "customer.country"],
            "interval": "1m",
        },
        "sampler_1": {
            "type": "sampler",
            "index": "shop",
            "collection": "orders",
            "collects": "*",
            "sampleSize": 10,
            "interval": "5m",
        },
    }


@pytest.fixture
def sample_config_data(sample_probes_config) -> Dict[str, Any]:
    """Complete configuration mapping, as loaded from probes.toml."""
    return {
        "plugin": {
            "storage_index": "measures",
            "databases": ["./data"],
        },
        "storage": {
            "format": "memory",
        },
        "probes": sample_probes_config,
    }


@pytest.fixture
def config_file(temp_dir):
    """Write a probes.toml file and return its path."""
    content = f"""
[plugin]
storage_index = "measures"
databases = ["{temp_dir.as_posix()}/data"]

[storage]
format = "json"

[probes.requests]
type = "monitor"
hooks = ["request:start", "request:end"]

[probes.sessions]
type = "counter"
increasers = ["session:open"]
decreasers = ["session:close"]
interval = "1h"

[probes.paid_orders]
type = "watcher"
index = "shop"
collection = "orders"
collects = ["amount"]
filter = {{ equals = {{ status = "paid" }} }}

[probes.broken]
type = "counter"
increasers = ["z"]
decreasers = ["z"]
"""
    path = temp_dir / "probes.toml"
    path.write_text(content, encoding="utf-8")
    return path


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_storage():
    """Measure storage double recording every call."""
    storage = Mock()
    storage.create_record = AsyncMock(return_value=None)
    storage.bulk_create = AsyncMock(side_effect=lambda location, collection, records: len(records))
    storage.index_exists = AsyncMock(return_value=False)
    storage.create_index = AsyncMock(return_value=None)
    storage.list_collections = AsyncMock(return_value=[])
    storage.update_mapping = AsyncMock(return_value=None)
    storage.close = AsyncMock(return_value=None)
    return storage


@pytest.fixture
def failing_storage(mock_storage):
    """Measure storage double rejecting every write."""
    mock_storage.create_record.side_effect = ConnectionError("storage unavailable")
    mock_storage.bulk_create.side_effect = ConnectionError("storage unavailable")
    return mock_storage


@pytest.fixture
def notifier():
    """Notification sink double."""
    sink = Mock()
    sink.trigger = Mock()
    return sink


@pytest.fixture
def fixed_clock():
    """Clock returning a constant flush timestamp."""
    return lambda: 1_700_000_000_000


# ============================================================================
# Test Utilities
# ============================================================================


class TestUtils:
    """Utility functions for testing."""

    @staticmethod
    def document(body: Dict[str, Any], index: str = "shop", collection: str = "orders", id: str = None):
        """Build a document as handed to watcher and sampler probes."""
        document = {"index": index, "collection": collection, "body": body}
        if id is not None:
            document["_id"] = id
        return document

    @staticmethod
    def written_records(storage: Mock) -> List[Dict[str, Any]]:
        """Every record written through create_record and bulk_create."""
        records = [call.args[2] for call in storage.create_record.await_args_list]
        for call in storage.bulk_create.await_args_list:
            records.extend(call.args[2])
        return records


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    yield

    from probekit.config import clear_config_cache

    clear_config_cache()
