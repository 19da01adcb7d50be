"""
AppConfig loading tests.

Covers environment parsing, credential presence checks, the singleton
and masked debug output.
"""

import pytest

from config import AppConfig, debug_config, get_config, reset_config
from config.defaults import BatchDefaults, MonitorDefaults, StorageDefaults
from core.models import CleanupPolicy
from exceptions import ConfigurationError


class TestFromEnvironment:
    """AppConfig.from_environment()"""

    def test_defaults_with_no_env(self, clean_env):
        config = AppConfig.from_environment()
        assert config.batch.pool_id == BatchDefaults.POOL_ID
        assert config.batch.job_id == BatchDefaults.JOB_ID
        assert config.batch.pool_node_count == BatchDefaults.POOL_NODE_COUNT
        assert config.storage.sas_expiry_hours == StorageDefaults.SAS_EXPIRY_HOURS
        assert config.monitor.timeout_minutes == MonitorDefaults.TIMEOUT_MINUTES
        assert config.monitor.fail_on_task_exit_code is False
        assert config.cleanup_policy == CleanupPolicy.RETAIN

    def test_overrides_read(self, clean_env):
        clean_env.setenv("BATCH_POOL_ID", "pool-b")
        clean_env.setenv("BATCH_JOB_ID", "job-b")
        clean_env.setenv("TASK_MONITOR_TIMEOUT_MINUTES", "30")
        clean_env.setenv("FAIL_ON_TASK_EXIT_CODE", "true")
        clean_env.setenv("CLEANUP_POLICY", "DELETE_JOB")
        clean_env.setenv("SAS_EXPIRY_HOURS", "48")

        config = AppConfig.from_environment()

        assert config.batch.pool_id == "pool-b"
        assert config.batch.job_id == "job-b"
        assert config.monitor.timeout_seconds == 1800
        assert config.monitor.fail_on_task_exit_code is True
        assert config.cleanup_policy == CleanupPolicy.DELETE_JOB
        assert config.storage.sas_expiry_hours == 48

    @pytest.mark.parametrize("var,value", [
        ("BATCH_POOL_NODE_COUNT", "many"),
        ("BATCH_POOL_NODE_COUNT", "0"),
        ("SAS_EXPIRY_HOURS", "169"),
        ("TASK_MONITOR_TIMEOUT_MINUTES", "-1"),
        ("CLEANUP_POLICY", "delete_everything"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values_raise_configuration_error(self, clean_env, var, value):
        clean_env.setenv(var, value)
        with pytest.raises(ConfigurationError):
            AppConfig.from_environment()


class TestValidateAccounts:
    """AppConfig.validate_accounts()"""

    def test_all_present_passes(self):
        reset_config()
        get_config().validate_accounts()

    def test_missing_credentials_listed(self, clean_env):
        clean_env.setenv("BATCH_ACCOUNT_URL", "https://mybatch.westus2.batch.azure.com")
        clean_env.setenv("BATCH_ACCOUNT_NAME", "mybatch")
        config = AppConfig.from_environment()

        assert config.missing_credentials() == [
            "BATCH_ACCOUNT_KEY", "STORAGE_ACCOUNT_NAME", "STORAGE_ACCOUNT_KEY"
        ]
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_accounts()
        assert exc_info.value.field == "BATCH_ACCOUNT_KEY"
        assert "have not been populated" in str(exc_info.value)


class TestSingleton:
    """get_config() caching."""

    def test_cached_until_reset(self, clean_env):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first


class TestDebugConfig:
    """debug_config() masks keys."""

    def test_keys_masked(self, clean_env, dummy_account_key):
        clean_env.setenv("BATCH_ACCOUNT_KEY", dummy_account_key)
        clean_env.setenv("STORAGE_ACCOUNT_KEY", dummy_account_key)
        info = debug_config()
        assert info['batch']['account_key'] == '***MASKED***'
        assert info['storage']['account_key'] == '***MASKED***'
        assert dummy_account_key not in str(info)
