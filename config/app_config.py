"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - BatchConfig (account, pool, job, application package)
    - StorageConfig (account, SAS horizon)
    - MonitorConfig (deadline, poll interval, exit-code policy)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.defaults: Default value constants
    core.models.enums: CleanupPolicy

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from typing import List
from pydantic import BaseModel, Field, field_validator

from core.models.enums import CleanupPolicy
from exceptions import ConfigurationError
from .batch_config import BatchConfig
from .storage_config import StorageConfig
from .monitor_config import MonitorConfig
from .defaults import AppDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.

    Loaded once per process (get_config) and validated at startup.
    """

    # ========================================================================
    # Core Application Settings
    # ========================================================================

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Enable debug mode (masked config dump at startup)"
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, qa, prod)",
        examples=["dev", "qa", "prod"]
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Logging level",
        examples=["DEBUG", "INFO", "WARNING", "ERROR"]
    )

    cleanup_policy: CleanupPolicy = Field(
        default=CleanupPolicy(AppDefaults.CLEANUP_POLICY),
        description="What to delete after all tasks complete. "
                    "Never applied on failure or timeout."
    )

    # ========================================================================
    # Domain Configurations
    # ========================================================================

    batch: BatchConfig = Field(default_factory=BatchConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)

    @field_validator('log_level')
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {value}")
        return value

    # ========================================================================
    # Validation
    # ========================================================================

    def missing_credentials(self) -> List[str]:
        """Names of the credential env vars that are not populated."""
        required = {
            "BATCH_ACCOUNT_URL": self.batch.account_url,
            "BATCH_ACCOUNT_NAME": self.batch.account_name,
            "BATCH_ACCOUNT_KEY": self.batch.account_key,
            "STORAGE_ACCOUNT_NAME": self.storage.account_name,
            "STORAGE_ACCOUNT_KEY": self.storage.account_key,
        }
        return [name for name, value in required.items() if not value]

    def validate_accounts(self) -> None:
        """
        Verify Batch and Storage credentials have been supplied.

        Presence check only - a wrong key surfaces as RemoteServiceError
        on the first remote call.

        Raises:
            ConfigurationError: If any credential is missing
        """
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationError(
                "One or more account credentials have not been populated: "
                f"{', '.join(missing)}. Set them in the environment.",
                field=missing[0]
            )

    # ========================================================================
    # Factory Methods
    # ========================================================================

    @classmethod
    def from_environment(cls):
        """Load all configs from environment."""
        try:
            return cls(
                debug_mode=os.environ.get("DEBUG_MODE", str(AppDefaults.DEBUG_MODE)).lower() == "true",
                environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
                log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
                cleanup_policy=os.environ.get("CLEANUP_POLICY", AppDefaults.CLEANUP_POLICY).lower(),
                batch=BatchConfig.from_environment(),
                storage=StorageConfig.from_environment(),
                monitor=MonitorConfig.from_environment(),
            )
        except ValueError as e:
            # pydantic.ValidationError and int()/float() parse errors
            raise ConfigurationError(f"Invalid configuration: {e}") from e
