"""
Custom Exception Hierarchy.

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Configuration Errors (bad input detected before any remote call)
3. Business Logic Failures (expected runtime issues against Azure)

Every failure surfaces to the CLI entry point, which logs it and ends
the run. Nothing here is retried locally.

Exports:
    ContractViolationError: Programming error (wrong type, illegal transition)
    ConfigurationError: Bad parameters or missing account credentials
    BusinessLogicError: Base for runtime failures
    ConflictError: Pool or job already exists (mapped to success)
    PreconditionError: Import source blob missing
    RemoteServiceError: Any other Batch/Storage failure
    TaskMonitorTimeoutError: Monitoring deadline exceeded
    TaskExecutionError: Completed task reported a non-zero exit code
"""

from typing import Optional


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Wrong types passed to functions
    - Illegal pipeline state transitions
    - Unknown action reaching a direction table

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.
    """
    pass


class ConfigurationError(Exception):
    """
    Configuration or parameter error.

    Fatal, raised before any remote call is made.

    Examples:
        - Missing BATCH_ACCOUNT_KEY / STORAGE_ACCOUNT_KEY
        - ServerName without the .database.windows.net suffix
        - TargetFileName missing for an Export
        - Parameter file is not valid JSON
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures.

    Subclasses represent specific categories of failure against the
    Batch control plane or Blob Storage.
    """
    pass


class ConflictError(BusinessLogicError):
    """
    Remote service reported that the resource already exists.

    Not a failure: pool/job creation maps this to AlreadyExists.
    Carried on EnsureResult for logging only.
    """

    def __init__(self, message: str, resource_id: str, error_code: str):
        super().__init__(message)
        self.resource_id = resource_id
        self.error_code = error_code


class PreconditionError(BusinessLogicError):
    """
    Import requested but the source bacpac does not exist.

    Raised before job or task creation.
    """
    pass


class RemoteServiceError(BusinessLogicError):
    """
    Any other failure from Azure Batch or Azure Blob Storage.

    Examples:
        - Authentication failure (bad account key)
        - Quota exceeded on pool creation
        - Storage account unreachable
    """

    def __init__(
        self,
        message: str,
        service: str,
        operation: str,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.service = service
        self.operation = operation
        self.error_code = error_code


class TaskMonitorTimeoutError(BusinessLogicError, TimeoutError):
    """
    Tasks did not reach the target state before the monitoring deadline.

    The remote task may still be running. Pool and job are left in place.
    """

    def __init__(self, message: str, pending_task_ids=None, timeout_seconds: float = 0.0):
        super().__init__(message)
        self.pending_task_ids = list(pending_task_ids or [])
        self.timeout_seconds = timeout_seconds


class TaskExecutionError(BusinessLogicError):
    """
    A task reached Completed but sqlpackage exited non-zero.

    Only raised when FAIL_ON_TASK_EXIT_CODE is enabled.
    """

    def __init__(self, message: str, exit_codes=None):
        super().__init__(message)
        self.exit_codes = dict(exit_codes or {})


__all__ = [
    'ContractViolationError',
    'ConfigurationError',
    'BusinessLogicError',
    'ConflictError',
    'PreconditionError',
    'RemoteServiceError',
    'TaskMonitorTimeoutError',
    'TaskExecutionError',
]
