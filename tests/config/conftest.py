"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest

from config import reset_config


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "BATCH_ACCOUNT_URL", "BATCH_ACCOUNT_NAME", "BATCH_ACCOUNT_KEY",
        "STORAGE_ACCOUNT_NAME", "STORAGE_ACCOUNT_KEY", "STORAGE_ENDPOINT_SUFFIX",
        "BATCH_POOL_ID", "BATCH_JOB_ID", "BATCH_POOL_VM_SIZE", "BATCH_POOL_NODE_COUNT",
        "BATCH_IMAGE_PUBLISHER", "BATCH_IMAGE_OFFER", "BATCH_IMAGE_SKU", "BATCH_IMAGE_VERSION",
        "BATCH_NODE_AGENT_SKU", "SQLPACKAGE_APP_ID", "SQLPACKAGE_APP_VERSION",
        "BATCH_REQUEST_RETRY_COUNT", "SAS_EXPIRY_HOURS",
        "TASK_MONITOR_TIMEOUT_MINUTES", "TASK_MONITOR_POLL_SECONDS", "FAIL_ON_TASK_EXIT_CODE",
        "CLEANUP_POLICY", "ENVIRONMENT", "LOG_LEVEL", "DEBUG_MODE",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield monkeypatch
    reset_config()
