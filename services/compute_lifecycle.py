"""
Compute Lifecycle Service.

Ensures the shared Batch pool exists and, when a cleanup policy asks for
it, tears down the job and pool after a successful run.

Ensure semantics:
    - Pool found by id            -> ALREADY_EXISTS (never reconciled)
    - Created by this call        -> CREATED
    - PoolExists on create (race) -> ALREADY_EXISTS with conflict detail
    - Any other failure           -> FAILED with RemoteServiceError

No local retry: the Batch client's request retry policy is the only one.

Exports:
    ComputeLifecycleManager: ensure_pool() and teardown()
    build_pool_spec: PoolSpec from BatchConfig
"""

from typing import List

from config import BatchConfig
from core.models import (
    ApplicationPackageRef, CleanupPolicy, EnsureResult, ImageReference, PoolSpec
)
from exceptions import ConflictError, RemoteServiceError
from infrastructure.interface_repository import IComputeRepository
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ComputeLifecycleManager")


def build_pool_spec(batch: BatchConfig) -> PoolSpec:
    """Pool description from configuration, with the sqlpackage package attached."""
    return PoolSpec(
        pool_id=batch.pool_id,
        vm_size=batch.pool_vm_size,
        target_dedicated_nodes=batch.pool_node_count,
        image=ImageReference(
            publisher=batch.image_publisher,
            offer=batch.image_offer,
            sku=batch.image_sku,
            version=batch.image_version,
        ),
        node_agent_sku_id=batch.node_agent_sku_id,
        application_packages=[
            ApplicationPackageRef(
                application_id=batch.app_package_id,
                version=batch.app_package_version,
            )
        ],
    )


class ComputeLifecycleManager:
    """
    Pool provisioning and teardown over an IComputeRepository.

    Example:
        lifecycle = ComputeLifecycleManager(compute_repo)
        result = lifecycle.ensure_pool(build_pool_spec(config.batch))
        if result.outcome == EnsureOutcome.FAILED:
            raise result.error
    """

    def __init__(self, compute: IComputeRepository):
        self.compute = compute

    def ensure_pool(self, spec: PoolSpec) -> EnsureResult:
        """
        Ensure the pool exists.

        Args:
            spec: Pool to create when absent

        Returns:
            EnsureResult tagged CREATED, ALREADY_EXISTS or FAILED
        """
        logger.info(f"Checking if pool already exists [{spec.pool_id}]...")
        try:
            if self.compute.pool_exists(spec.pool_id):
                logger.info(f"Pool {spec.pool_id} already exists. Skipping.")
                return EnsureResult.already_exists(spec.pool_id)

            self.compute.create_pool(spec)
        except ConflictError as e:
            logger.info(
                f"The pool {spec.pool_id} already existed when we tried to create it",
                extra={'custom_dimensions': {'pool_id': spec.pool_id, 'error_code': e.error_code}}
            )
            return EnsureResult.already_exists(spec.pool_id, conflict=e)
        except RemoteServiceError as e:
            logger.error(
                f"Failed to ensure pool {spec.pool_id}: {e}",
                extra={'custom_dimensions': {'pool_id': spec.pool_id, 'error_code': e.error_code}}
            )
            return EnsureResult.failed(spec.pool_id, e)

        logger.info(f"✅ Created pool {spec.pool_id} ({spec.vm_size} x{spec.target_dedicated_nodes})")
        return EnsureResult.created(spec.pool_id)

    def teardown(self, policy: CleanupPolicy, job_id: str, pool_id: str) -> List[str]:
        """
        Apply the cleanup policy.

        Only called after every task completed. Resources that are already
        gone are skipped.

        Returns:
            Ids of the resources this call deleted, prefixed by kind
        """
        deleted: List[str] = []
        if policy == CleanupPolicy.RETAIN:
            logger.info(f"Cleanup policy {policy.value}: keeping job {job_id} and pool {pool_id}")
            return deleted

        if self.compute.delete_job(job_id):
            deleted.append(f"job:{job_id}")

        if policy == CleanupPolicy.DELETE_JOB_AND_POOL:
            if self.compute.delete_pool(pool_id):
                deleted.append(f"pool:{pool_id}")

        logger.info(
            f"Cleanup policy {policy.value} applied",
            extra={'custom_dimensions': {'deleted': deleted}}
        )
        return deleted


__all__ = ['ComputeLifecycleManager', 'build_pool_spec']
