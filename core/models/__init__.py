"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    OperationParameters, load_parameters_file: Parameter file model
    PoolSpec, JobSpec, TaskSpec: Batch resource descriptions
    Capability: Issued SAS capability
    EnsureResult, MonitorResult, OperationReport: Result types
    OperationAction, TaskState, PipelineState, ...: Enums
"""

# Enums
from .enums import (
    OperationAction,
    TaskState,
    EnsureOutcome,
    MonitorOutcome,
    CapabilityPermission,
    PipelineState,
    CleanupPolicy,
    OutputUploadCondition
)

# Parameter models
from .parameters import (
    OperationParameters,
    load_parameters_file
)

# Batch resource models
from .batch import (
    ApplicationPackageRef,
    ImageReference,
    PoolSpec,
    JobConstraints,
    JobSpec,
    ResourceFileSpec,
    OutputFileSpec,
    TaskSpec,
    TaskStatusSnapshot
)

# Storage capability
from .capability import (
    Capability,
    WRITE_ONLY,
    READ_LIST
)

# Result models
from .results import (
    EnsureResult,
    MonitorResult,
    OperationReport
)

__all__ = [
    # Enums
    'OperationAction',
    'TaskState',
    'EnsureOutcome',
    'MonitorOutcome',
    'CapabilityPermission',
    'PipelineState',
    'CleanupPolicy',
    'OutputUploadCondition',

    # Parameters
    'OperationParameters',
    'load_parameters_file',

    # Batch resources
    'ApplicationPackageRef',
    'ImageReference',
    'PoolSpec',
    'JobConstraints',
    'JobSpec',
    'ResourceFileSpec',
    'OutputFileSpec',
    'TaskSpec',
    'TaskStatusSnapshot',

    # Capability
    'Capability',
    'WRITE_ONLY',
    'READ_LIST',

    # Results
    'EnsureResult',
    'MonitorResult',
    'OperationReport',
]
