"""
Repository Abstract Base Classes - Single Point of Truth.

Enforces exact method signatures across all repository implementations,
preventing parameter name mismatches between the Azure-backed
repositories and the in-memory fakes used by the tests.

Philosophy: "Define once, enforce everywhere"

Error contract shared by every implementation:
    - "already exists" on create -> ConflictError (with the service code)
    - "not found" on delete -> return False
    - anything else -> RemoteServiceError

Exports:
    IComputeRepository: Azure Batch control plane interface
    IStorageRepository: Azure Blob Storage interface
    BatchErrorCodes: Batch service error codes the tool branches on
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import FrozenSet, List, Final

from core.models import (
    PoolSpec, JobSpec, TaskSpec, TaskStatusSnapshot, CapabilityPermission
)


# ============================================================================
# CANONICAL ERROR CODES - Single source of truth
# ============================================================================

class BatchErrorCodes:
    """
    Error codes returned by the Batch service that the tool branches on.

    Everything else becomes a RemoteServiceError carrying the raw code.
    """

    POOL_EXISTS: Final[str] = "PoolExists"
    JOB_EXISTS: Final[str] = "JobExists"
    POOL_NOT_FOUND: Final[str] = "PoolNotFound"
    JOB_NOT_FOUND: Final[str] = "JobNotFound"
    POOL_BEING_DELETED: Final[str] = "PoolBeingDeleted"
    JOB_BEING_DELETED: Final[str] = "JobBeingDeleted"


# ============================================================================
# ABSTRACT BASE CLASSES - Enforce exact signatures
# ============================================================================

class IComputeRepository(ABC):
    """
    Azure Batch interface with EXACT method signatures.
    All implementations MUST use these exact parameter names.
    """

    @abstractmethod
    def pool_exists(self, pool_id: str) -> bool:
        """Check whether a pool with this id exists"""
        pass

    @abstractmethod
    def create_pool(self, spec: PoolSpec) -> None:
        """Create pool - raises ConflictError if it already exists"""
        pass

    @abstractmethod
    def create_job(self, spec: JobSpec) -> None:
        """Create job - raises ConflictError if it already exists"""
        pass

    @abstractmethod
    def add_tasks(self, job_id: str, tasks: List[TaskSpec]) -> List[str]:
        """Add a task collection to a job, returns the submitted task ids"""
        pass

    @abstractmethod
    def get_task_states(self, job_id: str, task_ids: List[str]) -> List[TaskStatusSnapshot]:
        """Current state of each listed task, in the order given"""
        pass

    @abstractmethod
    def delete_job(self, job_id: str) -> bool:
        """Delete job - returns False if it does not exist"""
        pass

    @abstractmethod
    def delete_pool(self, pool_id: str) -> bool:
        """Delete pool - returns False if it does not exist"""
        pass


class IStorageRepository(ABC):
    """
    Azure Blob Storage interface with EXACT method signatures.
    """

    @property
    @abstractmethod
    def account_name(self) -> str:
        """Storage account the repository is bound to"""
        pass

    @abstractmethod
    def container_url(self, container: str) -> str:
        """Container URL without any query string"""
        pass

    @abstractmethod
    def create_container_if_not_exists(self, container: str) -> bool:
        """Create container - returns False if it already existed"""
        pass

    @abstractmethod
    def blob_exists(self, container: str, blob_path: str) -> bool:
        """Check if blob exists"""
        pass

    @abstractmethod
    def generate_container_sas(
        self,
        container: str,
        permissions: FrozenSet[CapabilityPermission],
        expiry: datetime
    ) -> str:
        """SAS query string granting exactly `permissions` until `expiry`"""
        pass


__all__ = [
    'BatchErrorCodes',
    'IComputeRepository',
    'IStorageRepository',
]
