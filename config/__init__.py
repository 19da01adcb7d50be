"""
Configuration Package - Domain-Specific Configuration Modules.

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── batch_config.py          # Batch account, pool, job, app package
    ├── storage_config.py        # Storage account, SAS horizon
    ├── monitor_config.py        # Task monitor deadline and polling
    ├── env_validation.py        # Regex validation of env vars
    └── defaults.py              # Default values

Usage:
    from config import get_config
    config = get_config()
    config.validate_accounts()
    pool_id = config.batch.pool_id

    from config import debug_config
    info = debug_config()  # Keys masked
"""

from typing import Optional

from .batch_config import BatchConfig
from .storage_config import StorageConfig
from .monitor_config import MonitorConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration (tests, or after env changes)."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, keys masked
    """
    try:
        config = get_config()
        return {
            'batch': config.batch.debug_dict(),
            'storage': config.storage.debug_dict(),
            'monitor': {
                'timeout_minutes': config.monitor.timeout_minutes,
                'poll_interval_seconds': config.monitor.poll_interval_seconds,
                'fail_on_task_exit_code': config.monitor.fail_on_task_exit_code,
            },
            'cleanup_policy': config.cleanup_policy.value,
            'debug_mode': config.debug_mode,
            'environment': config.environment,
            'log_level': config.log_level,
        }
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


__all__ = [
    'AppConfig',
    'BatchConfig',
    'StorageConfig',
    'MonitorConfig',
    'get_config',
    'reset_config',
    'debug_config',
]
