"""
Unit test fixtures: fakes, manual clock and factory-built parameters.
"""

import pytest

from config import AppConfig, BatchConfig, MonitorConfig, StorageConfig
from core.models import CleanupPolicy
from tests.factories.fakes import FakeComputeRepository, FakeStorageRepository, ManualClock
from tests.factories.model_factories import make_export_params, make_import_params


@pytest.fixture
def compute():
    """Empty Batch account: no pool, no job, tasks complete on first poll."""
    return FakeComputeRepository()


@pytest.fixture
def storage():
    return FakeStorageRepository()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def app_config(dummy_account_key):
    """Fully populated AppConfig built without touching the environment."""
    return AppConfig(
        batch=BatchConfig(
            account_url="https://testbatch.westus2.batch.azure.com",
            account_name="testbatch",
            account_key=dummy_account_key,
        ),
        storage=StorageConfig(account_name="teststorage", account_key=dummy_account_key),
        monitor=MonitorConfig(timeout_minutes=5, poll_interval_seconds=10),
        cleanup_policy=CleanupPolicy.RETAIN,
    )


@pytest.fixture
def random_export_params():
    return make_export_params()


@pytest.fixture
def random_import_params():
    return make_import_params()
