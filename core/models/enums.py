"""
Pure Enumeration Types for Core Framework.

Defines actions, remote states and outcomes.
No business logic - pure type definitions only.

Exports:
    OperationAction: Export or Import
    TaskState: Azure Batch task lifecycle states
    EnsureOutcome: Tagged result of pool/job creation
    MonitorOutcome: Result of waiting on tasks
    CapabilityPermission: SAS permission letters
    PipelineState: Orchestrator state machine
    CleanupPolicy: What to delete after a successful run
    OutputUploadCondition: When task output files are uploaded
"""

from enum import Enum


class OperationAction(str, Enum):
    """
    Direction of the data migration.

    Values match the sqlpackage /a: argument and the Action field of the
    parameter file.
    """

    EXPORT = "Export"
    IMPORT = "Import"

    @classmethod
    def from_string(cls, value: str) -> 'OperationAction':
        """Case-insensitive lookup. Raises ValueError on unknown values."""
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unknown action: {value}")


class TaskState(str, Enum):
    """
    Azure Batch task states.

    State transitions:
    - ACTIVE -> PREPARING -> RUNNING -> COMPLETED
    - ACTIVE -> RUNNING -> COMPLETED (no job preparation task)

    COMPLETED is terminal whether or not the process exited zero.
    """

    ACTIVE = "active"
    PREPARING = "preparing"
    RUNNING = "running"
    COMPLETED = "completed"


class EnsureOutcome(str, Enum):
    """
    Tagged result of an idempotent create.

    Callers branch on the tag instead of inspecting exceptions.
    """

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


class MonitorOutcome(str, Enum):
    """Result of waiting for tasks to reach a target state."""

    ALL_COMPLETED = "all_completed"
    TIMED_OUT = "timed_out"


class CapabilityPermission(str, Enum):
    """SAS permissions used by this tool (subset of the storage service's)."""

    READ = "r"
    LIST = "l"
    WRITE = "w"


class PipelineState(str, Enum):
    """
    Orchestrator states.

    State transitions (strictly sequential):
    - VALIDATING -> POOL_ENSURING -> JOB_ENSURING -> CAPABILITY_ISSUING
      -> TASK_SUBMITTING -> MONITORING -> SUCCEEDED
    - any non-terminal state -> FAILED
    """

    VALIDATING = "validating"
    POOL_ENSURING = "pool_ensuring"
    JOB_ENSURING = "job_ensuring"
    CAPABILITY_ISSUING = "capability_issuing"
    TASK_SUBMITTING = "task_submitting"
    MONITORING = "monitoring"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CleanupPolicy(str, Enum):
    """
    What to delete once every task has completed.

    RETAIN keeps pool and job for reuse by the next run (pool start-up is
    the slowest step). Never applied after a failure or timeout.
    """

    RETAIN = "retain"
    DELETE_JOB = "delete_job"
    DELETE_JOB_AND_POOL = "delete_job_and_pool"


class OutputUploadCondition(str, Enum):
    """
    When Batch uploads a task's output files.

    Values match the Batch REST API.
    """

    TASK_COMPLETION = "taskcompletion"
