"""
Configuration Defaults - Single source of truth for all default values.

FAIL-FAST DESIGN:
Account credentials have NO defaults. AppConfig.validate_accounts() raises
ConfigurationError at startup if any of them is missing, before the
parameter file is even read.

Organization:
    - BatchDefaults: Pool/job identity, VM shape, request retry
    - SqlPackageDefaults: Application package carrying sqlpackage.exe
    - StorageDefaults: Endpoint suffix and SAS horizon
    - MonitorDefaults: Task monitor deadline and poll interval
    - OperationDefaults: CLI fallbacks for job constraints
    - AppDefaults: Logging, environment, cleanup policy

Required Environment Variables (no defaults):
    BATCH_ACCOUNT_URL - e.g. https://mybatch.westus2.batch.azure.com
    BATCH_ACCOUNT_NAME - Batch account name
    BATCH_ACCOUNT_KEY - Batch shared key
    STORAGE_ACCOUNT_NAME - Storage account without firewall rules or HNS
    STORAGE_ACCOUNT_KEY - Storage shared key (used to sign SAS tokens)

Usage:
    from config.defaults import BatchDefaults

    pool_id: str = Field(default=BatchDefaults.POOL_ID, ...)
"""


# =============================================================================
# AZURE BATCH DEFAULTS
# =============================================================================

class BatchDefaults:
    """
    Pool and job defaults.

    POOL_ID and JOB_ID are fixed identities shared by every run against
    the same Batch account. Creation is idempotent, so two operators
    running the tool at once converge on the same pool and job.
    """

    POOL_ID = "sqlpackage-pool"
    JOB_ID = "importexport"
    POOL_VM_SIZE = "STANDARD_D3_V2"
    POOL_NODE_COUNT = 1

    # Windows image - sqlpackage.exe is launched through cmd /c
    IMAGE_PUBLISHER = "MicrosoftWindowsServer"
    IMAGE_OFFER = "WindowsServer"
    IMAGE_SKU = "2016-datacenter-smalldisk"
    IMAGE_VERSION = "latest"
    NODE_AGENT_SKU_ID = "batch.node.windows amd64"

    # Request-level retry inside the Batch SDK (the only retry layer)
    REQUEST_RETRY_COUNT = 3


# =============================================================================
# SQLPACKAGE APPLICATION PACKAGE
# =============================================================================

class SqlPackageDefaults:
    """Application package uploaded to the Batch account ahead of time."""

    APP_PACKAGE_ID = "sqlpackagenetcore"
    APP_PACKAGE_VERSION = "15.0.4630.1"
    EXECUTABLE = "sqlpackage.exe"

    # Prefix of the env var Batch sets on the node for each mounted package
    APP_PACKAGE_ENV_PREFIX = "AZ_BATCH_APP_PACKAGE_"

    # Local directory (relative to the task working dir) for import inputs
    IMPORT_RESOURCE_DIR = "blobs"

    # Only public-cloud Azure SQL servers are supported
    PUBLIC_SERVER_DOMAIN = ".database.windows.net"


# =============================================================================
# STORAGE DEFAULTS
# =============================================================================

class StorageDefaults:
    """Blob storage defaults."""

    ENDPOINT_SUFFIX = "core.windows.net"

    # SAS horizon: tokens are never unlimited in time
    SAS_EXPIRY_HOURS = 24
    SAS_EXPIRY_MAX_HOURS = 168


# =============================================================================
# MONITOR DEFAULTS
# =============================================================================

class MonitorDefaults:
    """Task monitor defaults."""

    TIMEOUT_MINUTES = 5
    POLL_INTERVAL_SECONDS = 10
    FAIL_ON_TASK_EXIT_CODE = False


# =============================================================================
# OPERATION DEFAULTS (CLI fallbacks)
# =============================================================================

class OperationDefaults:
    """Fallbacks used when CLI numeric arguments are missing or unparseable."""

    MAX_WALL_CLOCK_TIME_HOURS = 12
    MAX_TASK_RETRY_COUNT = 3


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Application-wide defaults."""

    ENVIRONMENT = "dev"
    LOG_LEVEL = "INFO"
    DEBUG_MODE = False

    # retain | delete_job | delete_job_and_pool
    CLEANUP_POLICY = "retain"
