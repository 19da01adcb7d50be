"""
Service Layer - Export/Import Pipeline Components.

Every service receives its repositories explicitly; none of them builds
Azure clients. The Orchestrator is the only entry point the CLI uses.

Components (leaf-first):
    ParameterValidator: Action-specific parameter checks
    capability_issuer: Scoped, time-bounded SAS capabilities
    ComputeLifecycleManager: Idempotent pool provisioning and teardown
    JobSubmitter: Idempotent job creation, task assembly and submission
    TaskMonitor: Bounded wait for task completion
    Orchestrator: The pipeline
"""

from . import capability_issuer
from .parameter_validator import ParameterValidator
from .compute_lifecycle import ComputeLifecycleManager, build_pool_spec
from .job_submitter import (
    JobSubmitter,
    FLAG_MAPPINGS,
    build_command_line,
    mask_command_line,
    build_job_constraints
)
from .task_monitor import TaskMonitor
from .orchestrator import Orchestrator

__all__ = [
    'capability_issuer',
    'ParameterValidator',
    'ComputeLifecycleManager',
    'build_pool_spec',
    'JobSubmitter',
    'FLAG_MAPPINGS',
    'build_command_line',
    'mask_command_line',
    'build_job_constraints',
    'TaskMonitor',
    'Orchestrator',
]
