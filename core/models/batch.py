"""
Azure Batch Resource Models.

SDK-independent descriptions of what is sent to the Batch control plane.
The BatchRepository translates them to azure.batch.models at the boundary,
so services and tests never touch SDK types.

Exports:
    ApplicationPackageRef: Application id + version
    ImageReference: Marketplace image for pool nodes
    PoolSpec: Pool to ensure
    JobConstraints: Wall-clock and retry limits
    JobSpec: Job to ensure
    ResourceFileSpec: Input resource downloaded before the task runs
    OutputFileSpec: Output binding uploaded after the task runs
    TaskSpec: A single command invocation
    TaskStatusSnapshot: Observed task state
"""

from datetime import timedelta
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import TaskState, OutputUploadCondition


class ApplicationPackageRef(BaseModel):
    """Named, versioned bundle mounted on a node."""

    model_config = ConfigDict(frozen=True)

    application_id: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)


class ImageReference(BaseModel):
    """Marketplace image for pool nodes."""

    model_config = ConfigDict(frozen=True)

    publisher: str
    offer: str
    sku: str
    version: str = "latest"


class PoolSpec(BaseModel):
    """
    Pool to ensure.

    pool_id is stable across runs. An existing pool is never reconciled
    against the rest of these settings.
    """

    model_config = ConfigDict(frozen=True)

    pool_id: str = Field(..., min_length=1)
    vm_size: str
    target_dedicated_nodes: int = Field(default=1, ge=1)
    image: ImageReference
    node_agent_sku_id: str
    application_packages: List[ApplicationPackageRef] = Field(default_factory=list)


class JobConstraints(BaseModel):
    """Limits enforced by Batch on the job (task retries happen remotely)."""

    model_config = ConfigDict(frozen=True)

    max_wall_clock_time: timedelta = Field(default=timedelta(hours=12))
    max_task_retry_count: int = Field(default=3, ge=-1)


class JobSpec(BaseModel):
    """Job to ensure, bound to a pool."""

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(..., min_length=1)
    pool_id: str = Field(..., min_length=1)
    constraints: JobConstraints = Field(default_factory=JobConstraints)


class ResourceFileSpec(BaseModel):
    """
    Input resource downloaded to the node before the command runs.

    Blobs under blob_prefix in the container are placed below file_path
    (relative to the task working directory), keeping their names.
    """

    model_config = ConfigDict(frozen=True)

    storage_container_url: str = Field(..., repr=False)
    file_path: str
    blob_prefix: Optional[str] = None


class OutputFileSpec(BaseModel):
    """Output binding: files matching file_pattern go to container_url/path."""

    model_config = ConfigDict(frozen=True)

    file_pattern: str
    container_url: str = Field(..., repr=False)
    path: str
    upload_condition: OutputUploadCondition = OutputUploadCondition.TASK_COMPLETION


class TaskSpec(BaseModel):
    """
    A single command invocation submitted to a job.

    Created fresh per run; never reused. state stays ACTIVE locally, the
    remote system holds the authoritative state after submission.
    """

    model_config = ConfigDict(frozen=True)

    task_id: str = Field(..., min_length=1, max_length=64)
    command_line: str = Field(..., repr=False)
    resource_files: List[ResourceFileSpec] = Field(default_factory=list)
    output_files: List[OutputFileSpec] = Field(default_factory=list)
    application_packages: List[ApplicationPackageRef] = Field(default_factory=list)
    state: TaskState = TaskState.ACTIVE


class TaskStatusSnapshot(BaseModel):
    """
    Observed state of a submitted task.

    exit_code is recorded when Batch reports one but does not change
    whether the task counts as completed.
    """

    model_config = ConfigDict(frozen=True)

    task_id: str
    state: TaskState
    exit_code: Optional[int] = None
    failure_reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == TaskState.COMPLETED and self.exit_code == 0
