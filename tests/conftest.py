"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without Azure credentials or network access.
"""

import base64
import os
import sys

import pytest

# Add project root to sys.path so 'core', 'services', 'config', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Syntactically valid shared key (base64) that signs SAS tokens offline
DUMMY_ACCOUNT_KEY = base64.b64encode(b"sqlpackage-batch-test-key-0123456789").decode()


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables so AppConfig.from_environment()
    succeeds without real Azure accounts.
    """
    defaults = {
        "BATCH_ACCOUNT_URL": "https://testbatch.westus2.batch.azure.com",
        "BATCH_ACCOUNT_NAME": "testbatch",
        "BATCH_ACCOUNT_KEY": DUMMY_ACCOUNT_KEY,
        "STORAGE_ACCOUNT_NAME": "teststorage",
        "STORAGE_ACCOUNT_KEY": DUMMY_ACCOUNT_KEY,
        "ENVIRONMENT": "dev",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture
def dummy_account_key():
    return DUMMY_ACCOUNT_KEY


@pytest.fixture
def export_params():
    """Valid export parameter dict, as read from the JSON file."""
    return {
        "Action": "Export",
        "ServerName": "myserver.database.windows.net",
        "DatabaseName": "sales",
        "SqlServerAdmin": "sqladmin",
        "SqlServerAdminPassword": "P@ssw0rd!",
        "TargetContainerName": "bacpacs",
        "TargetFileName": "sales.bacpac",
    }


@pytest.fixture
def import_params():
    """Valid import parameter dict, as read from the JSON file."""
    return {
        "Action": "Import",
        "ServerName": "myserver.database.windows.net",
        "DatabaseName": "sales_restored",
        "SqlServerAdmin": "sqladmin",
        "SqlServerAdminPassword": "P@ssw0rd!",
        "SourceContainerName": "bacpacs",
        "SourceFileName": "backup.bacpac",
    }
