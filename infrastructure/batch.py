"""
Azure Batch Repository Implementation.

Repository for the Azure Batch control plane: pools, jobs and tasks.
Translates the SDK-independent specs in core.models.batch into
azure.batch.models objects and maps Batch service errors onto the
exception hierarchy in exceptions.py.

Key Features:
    - Shared-key authentication (SharedKeyCredentials)
    - Request-level retry policy from BATCH_REQUEST_RETRY_COUNT
    - PoolExists / JobExists mapped to ConflictError
    - PoolNotFound / JobNotFound on delete mapped to False

Exports:
    BatchRepository: IComputeRepository backed by BatchServiceClient
"""

from typing import Any, List, Optional

from azure.batch import BatchServiceClient
from azure.batch.batch_auth import SharedKeyCredentials
from msrest.exceptions import ClientException
import azure.batch.models as batchmodels

from core.models import (
    PoolSpec, JobSpec, TaskSpec, TaskStatusSnapshot, TaskState,
    ApplicationPackageRef, OutputUploadCondition
)
from exceptions import ConflictError, RemoteServiceError
from util_logger import LoggerFactory, ComponentType
from .interface_repository import IComputeRepository, BatchErrorCodes

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "BatchRepository")

SERVICE_NAME = "azure_batch"

_UPLOAD_CONDITIONS = {
    OutputUploadCondition.TASK_COMPLETION: batchmodels.OutputFileUploadCondition.task_completion,
}


def _error_code(error: Exception) -> Optional[str]:
    """Service error code of a BatchErrorException, None for transport errors."""
    body = getattr(error, 'error', None)
    return getattr(body, 'code', None)


def _error_message(error: Exception) -> str:
    """Human-readable message of a BatchErrorException."""
    body = getattr(error, 'error', None)
    message = getattr(body, 'message', None)
    value = getattr(message, 'value', None)
    return value or str(error)


class BatchRepository(IComputeRepository):
    """
    Azure Batch repository.

    Not a singleton: one instance is created per run by RepositoryFactory
    and handed to the services that need it.

    Example:
        repo = BatchRepository(
            account_url="https://mybatch.westus2.batch.azure.com",
            account_name="mybatch",
            account_key="<key>",
        )
        repo.pool_exists("sqlpackage-pool")
    """

    def __init__(
        self,
        account_url: str,
        account_name: str,
        account_key: str,
        request_retry_count: int = 3,
        client: Optional[BatchServiceClient] = None
    ):
        """
        Args:
            account_url: https://<account>.<region>.batch.azure.com
            account_name: Batch account name
            account_key: Batch account shared key
            request_retry_count: Retries per HTTP request (SDK level)
            client: Pre-built client (tests)
        """
        self.account_url = account_url
        self.account_name = account_name

        if client is None:
            logger.info(f"Initializing BatchRepository for account: {account_name}")
            credentials = SharedKeyCredentials(account_name, account_key)
            client = BatchServiceClient(credentials, batch_url=account_url)
            client.config.retry_policy.retries = request_retry_count

        self.client = client
        logger.debug(
            f"BatchRepository ready: {account_url}",
            extra={'custom_dimensions': {'request_retry_count': request_retry_count}}
        )

    # ========================================================================
    # ERROR TRANSLATION
    # ========================================================================

    def _remote_error(self, operation: str, error: Exception) -> RemoteServiceError:
        code = _error_code(error)
        message = _error_message(error)
        logger.error(
            f"Batch {operation} failed: {message}",
            extra={'custom_dimensions': {
                'error_source': 'infrastructure',
                'operation': operation,
                'error_code': code,
                'error_type': type(error).__name__,
            }}
        )
        return RemoteServiceError(
            f"Azure Batch {operation} failed: {message}",
            service=SERVICE_NAME,
            operation=operation,
            error_code=code,
        )

    # ========================================================================
    # MODEL TRANSLATION
    # ========================================================================

    @staticmethod
    def _package_refs(packages: List[ApplicationPackageRef]) -> List[Any]:
        return [
            batchmodels.ApplicationPackageReference(
                application_id=p.application_id,
                version=p.version
            )
            for p in packages
        ]

    def _to_pool_parameter(self, spec: PoolSpec) -> Any:
        return batchmodels.PoolAddParameter(
            id=spec.pool_id,
            virtual_machine_configuration=batchmodels.VirtualMachineConfiguration(
                image_reference=batchmodels.ImageReference(
                    publisher=spec.image.publisher,
                    offer=spec.image.offer,
                    sku=spec.image.sku,
                    version=spec.image.version
                ),
                node_agent_sku_id=spec.node_agent_sku_id
            ),
            vm_size=spec.vm_size,
            target_dedicated_nodes=spec.target_dedicated_nodes,
            application_package_references=self._package_refs(spec.application_packages)
        )

    @staticmethod
    def _to_job_parameter(spec: JobSpec) -> Any:
        return batchmodels.JobAddParameter(
            id=spec.job_id,
            pool_info=batchmodels.PoolInformation(pool_id=spec.pool_id),
            constraints=batchmodels.JobConstraints(
                max_wall_clock_time=spec.constraints.max_wall_clock_time,
                max_task_retry_count=spec.constraints.max_task_retry_count
            )
        )

    def _to_task_parameter(self, spec: TaskSpec) -> Any:
        resource_files = [
            batchmodels.ResourceFile(
                storage_container_url=r.storage_container_url,
                blob_prefix=r.blob_prefix,
                file_path=r.file_path
            )
            for r in spec.resource_files
        ]
        output_files = [
            batchmodels.OutputFile(
                file_pattern=o.file_pattern,
                destination=batchmodels.OutputFileDestination(
                    container=batchmodels.OutputFileBlobContainerDestination(
                        container_url=o.container_url,
                        path=o.path
                    )
                ),
                upload_options=batchmodels.OutputFileUploadOptions(
                    upload_condition=_UPLOAD_CONDITIONS[o.upload_condition]
                )
            )
            for o in spec.output_files
        ]
        return batchmodels.TaskAddParameter(
            id=spec.task_id,
            command_line=spec.command_line,
            resource_files=resource_files or None,
            output_files=output_files or None,
            application_package_references=self._package_refs(spec.application_packages) or None
        )

    @staticmethod
    def _to_snapshot(task: Any) -> TaskStatusSnapshot:
        state = getattr(task.state, 'value', task.state)
        info = getattr(task, 'execution_info', None)
        exit_code = getattr(info, 'exit_code', None) if info is not None else None
        failure = getattr(info, 'failure_info', None) if info is not None else None
        return TaskStatusSnapshot(
            task_id=task.id,
            state=TaskState(str(state).lower()),
            exit_code=exit_code,
            failure_reason=getattr(failure, 'message', None) if failure is not None else None
        )

    # ========================================================================
    # IComputeRepository Implementation
    # ========================================================================

    def pool_exists(self, pool_id: str) -> bool:
        try:
            return bool(self.client.pool.exists(pool_id))
        except ClientException as e:
            raise self._remote_error("pool.exists", e) from e

    def create_pool(self, spec: PoolSpec) -> None:
        """
        Create the pool.

        Raises:
            ConflictError: Another run created the pool first (PoolExists)
            RemoteServiceError: Any other Batch failure
        """
        logger.info(
            f"Creating pool {spec.pool_id}",
            extra={'custom_dimensions': {
                'pool_id': spec.pool_id,
                'vm_size': spec.vm_size,
                'target_dedicated_nodes': spec.target_dedicated_nodes,
            }}
        )
        try:
            self.client.pool.add(self._to_pool_parameter(spec))
        except ClientException as e:
            if _error_code(e) == BatchErrorCodes.POOL_EXISTS:
                raise ConflictError(
                    f"Pool {spec.pool_id} already exists",
                    resource_id=spec.pool_id,
                    error_code=BatchErrorCodes.POOL_EXISTS
                ) from e
            raise self._remote_error("pool.add", e) from e

    def create_job(self, spec: JobSpec) -> None:
        """
        Create the job.

        Raises:
            ConflictError: Job already exists (JobExists)
            RemoteServiceError: Any other Batch failure
        """
        logger.info(
            f"Creating job {spec.job_id} on pool {spec.pool_id}",
            extra={'custom_dimensions': {'job_id': spec.job_id, 'pool_id': spec.pool_id}}
        )
        try:
            self.client.job.add(self._to_job_parameter(spec))
        except ClientException as e:
            if _error_code(e) == BatchErrorCodes.JOB_EXISTS:
                raise ConflictError(
                    f"Job {spec.job_id} already exists",
                    resource_id=spec.job_id,
                    error_code=BatchErrorCodes.JOB_EXISTS
                ) from e
            raise self._remote_error("job.add", e) from e

    def add_tasks(self, job_id: str, tasks: List[TaskSpec]) -> List[str]:
        """
        Add a task collection to the job.

        A per-task rejection inside an accepted collection is reported as
        a RemoteServiceError naming the first failed task.
        """
        parameters = [self._to_task_parameter(t) for t in tasks]
        try:
            result = self.client.task.add_collection(job_id, parameters)
        except ClientException as e:
            raise self._remote_error("task.add_collection", e) from e

        for entry in (getattr(result, 'value', None) or []):
            if entry.status != batchmodels.TaskAddStatus.success:
                error = getattr(entry, 'error', None)
                code = getattr(error, 'code', None)
                message = getattr(getattr(error, 'message', None), 'value', None) or str(entry.status)
                logger.error(
                    f"Task {entry.task_id} rejected: {message}",
                    extra={'custom_dimensions': {'job_id': job_id, 'task_id': entry.task_id, 'error_code': code}}
                )
                raise RemoteServiceError(
                    f"Azure Batch rejected task {entry.task_id}: {message}",
                    service=SERVICE_NAME,
                    operation="task.add_collection",
                    error_code=code
                )

        task_ids = [t.task_id for t in tasks]
        logger.info(f"Submitted {len(task_ids)} task(s) to job {job_id}: {task_ids}")
        return task_ids

    def get_task_states(self, job_id: str, task_ids: List[str]) -> List[TaskStatusSnapshot]:
        """
        Current state of each listed task.

        Tasks not (yet) visible in the job listing are reported as ACTIVE.
        Other tasks in the shared job are ignored.
        """
        options = batchmodels.TaskListOptions(select="id,state,executionInfo")
        try:
            listed = {
                task.id: self._to_snapshot(task)
                for task in self.client.task.list(job_id, task_list_options=options)
                if task.id in task_ids
            }
        except ClientException as e:
            raise self._remote_error("task.list", e) from e

        return [
            listed.get(task_id, TaskStatusSnapshot(task_id=task_id, state=TaskState.ACTIVE))
            for task_id in task_ids
        ]

    def delete_job(self, job_id: str) -> bool:
        try:
            self.client.job.delete(job_id)
        except ClientException as e:
            if _error_code(e) in (BatchErrorCodes.JOB_NOT_FOUND, BatchErrorCodes.JOB_BEING_DELETED):
                logger.warning(f"Job not found for deletion: {job_id}")
                return False
            raise self._remote_error("job.delete", e) from e
        logger.info(f"Deleted job: {job_id}")
        return True

    def delete_pool(self, pool_id: str) -> bool:
        try:
            self.client.pool.delete(pool_id)
        except ClientException as e:
            if _error_code(e) in (BatchErrorCodes.POOL_NOT_FOUND, BatchErrorCodes.POOL_BEING_DELETED):
                logger.warning(f"Pool not found for deletion: {pool_id}")
                return False
            raise self._remote_error("pool.delete", e) from e
        logger.info(f"Deleted pool: {pool_id}")
        return True


__all__ = ['BatchRepository']
