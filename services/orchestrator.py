"""
Export/Import Orchestrator.

Runs one export or import as a single parameterized pipeline:

    VALIDATING -> POOL_ENSURING -> JOB_ENSURING -> CAPABILITY_ISSUING
        -> TASK_SUBMITTING -> MONITORING -> SUCCEEDED

Any error moves the pipeline to FAILED, is recorded on the report and is
re-raised with the report attached as `error.report`. There are no stage
retries. The two directions differ only in the capability issued and the
flag-mapping row used for the command line.

Exports:
    Orchestrator: run(), export(), import_()
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from config import AppConfig
from core.logic import require_pipeline_transition, is_pipeline_terminal
from core.models import (
    ApplicationPackageRef, EnsureOutcome, MonitorOutcome, OperationAction,
    OperationParameters, OperationReport, PipelineState, TaskState
)
from exceptions import (
    PreconditionError, TaskExecutionError, TaskMonitorTimeoutError
)
from infrastructure.interface_repository import IComputeRepository, IStorageRepository
from util_logger import LoggerFactory, ComponentType

from . import capability_issuer
from .compute_lifecycle import ComputeLifecycleManager, build_pool_spec
from .job_submitter import JobSubmitter, build_job_constraints
from .parameter_validator import ParameterValidator
from .task_monitor import TaskMonitor


class Orchestrator:
    """
    Sequences validation, provisioning, submission and monitoring.

    Repositories are injected; the orchestrator never builds Azure
    clients itself.

    Example:
        repos = RepositoryFactory.create_repositories(config)
        orchestrator = Orchestrator(config, repos['compute_repo'], repos['storage_repo'])
        report = orchestrator.run(OperationAction.EXPORT, params, 12, 3)
    """

    def __init__(
        self,
        config: AppConfig,
        compute: IComputeRepository,
        storage: IStorageRepository,
        monitor: Optional[TaskMonitor] = None
    ):
        self.config = config
        self.compute = compute
        self.storage = storage

        batch = config.batch
        self.package = ApplicationPackageRef(
            application_id=batch.app_package_id,
            version=batch.app_package_version,
        )
        self.lifecycle = ComputeLifecycleManager(compute)
        self.submitter = JobSubmitter(compute, self.package)
        self.monitor = monitor or TaskMonitor(
            compute,
            poll_interval_seconds=config.monitor.poll_interval_seconds,
        )

    # ========================================================================
    # STATE MACHINE
    # ========================================================================

    def _advance(self, report: OperationReport, target: PipelineState, logger) -> None:
        require_pipeline_transition(report.state, target)
        logger.debug(f"Pipeline {report.state.value} -> {target.value}")
        report.state = target
        report.history.append(target)

    # ========================================================================
    # PIPELINE
    # ========================================================================

    def run(
        self,
        action: OperationAction,
        params: Union[Mapping[str, Any], OperationParameters, None],
        max_wall_clock_time_hours: float,
        max_task_retry_count: int
    ) -> OperationReport:
        """
        Run one export or import end to end.

        Args:
            action: Direction
            params: Raw parameter dict or OperationParameters
            max_wall_clock_time_hours: Job wall clock limit (applied on job creation)
            max_task_retry_count: Remote task retries (applied on job creation)

        Returns:
            OperationReport in state SUCCEEDED

        Raises:
            ConfigurationError: Invalid parameters (no remote call made)
            PreconditionError: Import source bacpac missing
            RemoteServiceError: Batch or Storage failure
            TaskMonitorTimeoutError: Deadline passed; nothing torn down
            TaskExecutionError: Non-zero exit code with FAIL_ON_TASK_EXIT_CODE
        """
        run_id = uuid.uuid4().hex[:16]
        batch = self.config.batch
        logger = LoggerFactory.create_with_context(
            ComponentType.ORCHESTRATOR, "Orchestrator",
            run_id=run_id, action=action.value, pool_id=batch.pool_id, job_id=batch.job_id
        )
        report = OperationReport(
            run_id=run_id,
            action=action,
            started_at=datetime.now(timezone.utc),
        )
        logger.info(f"🚀 Starting {action.value} run {run_id}")

        try:
            # VALIDATING
            validated = ParameterValidator.validate(params, action)
            if action == OperationAction.IMPORT:
                if not capability_issuer.blob_exists(
                    self.storage, validated.source_container_name, validated.source_file_name
                ):
                    raise PreconditionError(
                        f"bacpac {validated.source_container_name}/{validated.source_file_name} "
                        f"does not exist in the storage account so an import cannot be performed."
                    )

            sas_hours = self.config.storage.sas_expiry_hours
            if sas_hours < max_wall_clock_time_hours:
                logger.warning(
                    f"SAS horizon ({sas_hours}h) is shorter than the job wall clock "
                    f"({max_wall_clock_time_hours}h); a long-running task may lose storage access"
                )

            # POOL_ENSURING
            self._advance(report, PipelineState.POOL_ENSURING, logger)
            report.pool = self.lifecycle.ensure_pool(build_pool_spec(batch))
            if report.pool.outcome == EnsureOutcome.FAILED:
                raise report.pool.error

            # JOB_ENSURING
            self._advance(report, PipelineState.JOB_ENSURING, logger)
            report.job = self.submitter.ensure_job(
                batch.job_id,
                batch.pool_id,
                build_job_constraints(max_wall_clock_time_hours, max_task_retry_count)
            )
            if report.job.outcome == EnsureOutcome.FAILED:
                raise report.job.error

            # CAPABILITY_ISSUING
            self._advance(report, PipelineState.CAPABILITY_ISSUING, logger)
            capability = capability_issuer.issue_for_action(
                self.storage, action, validated, hours=sas_hours
            )

            # TASK_SUBMITTING
            self._advance(report, PipelineState.TASK_SUBMITTING, logger)
            task = self.submitter.build_task(action, validated, capability)
            report.task_ids = self.submitter.submit(batch.job_id, [task])

            # MONITORING
            self._advance(report, PipelineState.MONITORING, logger)
            monitor_config = self.config.monitor
            report.monitor = self.monitor.wait_all(
                batch.job_id,
                report.task_ids,
                target_state=TaskState.COMPLETED,
                timeout_seconds=monitor_config.timeout_seconds
            )
            if report.monitor.outcome == MonitorOutcome.TIMED_OUT:
                raise TaskMonitorTimeoutError(
                    f"Tasks {report.monitor.pending_task_ids} did not complete within "
                    f"{monitor_config.timeout_seconds}s; they may still be running",
                    pending_task_ids=report.monitor.pending_task_ids,
                    timeout_seconds=monitor_config.timeout_seconds
                )
            logger.info("All tasks reached state Completed.")

            failures = report.monitor.non_zero_exit_codes
            if failures:
                if monitor_config.fail_on_task_exit_code:
                    raise TaskExecutionError(
                        f"sqlpackage exited non-zero: {failures}",
                        exit_codes=failures
                    )
                logger.warning(
                    f"Task(s) completed with non-zero exit code: {failures}",
                    extra={'custom_dimensions': {'exit_codes': failures}}
                )

            report.cleanup = self.lifecycle.teardown(
                self.config.cleanup_policy, batch.job_id, batch.pool_id
            )

            self._advance(report, PipelineState.SUCCEEDED, logger)

        except Exception as e:
            if not is_pipeline_terminal(report.state):
                failed_in = report.state
                self._advance(report, PipelineState.FAILED, logger)
                logger.error(
                    f"❌ {action.value} run {run_id} failed during {failed_in.value}: {e}",
                    extra={'custom_dimensions': {
                        'failed_state': failed_in.value,
                        'error_type': type(e).__name__,
                    }}
                )
            report.error = f"{type(e).__name__}: {e}"
            report.finished_at = datetime.now(timezone.utc)
            e.report = report
            raise

        report.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"✅ {action.value} run {run_id} succeeded",
            extra={'custom_dimensions': report.to_dict()}
        )
        return report

    def export(self, params, max_wall_clock_time_hours: float, max_task_retry_count: int) -> OperationReport:
        return self.run(OperationAction.EXPORT, params, max_wall_clock_time_hours, max_task_retry_count)

    def import_(self, params, max_wall_clock_time_hours: float, max_task_retry_count: int) -> OperationReport:
        return self.run(OperationAction.IMPORT, params, max_wall_clock_time_hours, max_task_retry_count)


__all__ = ['Orchestrator']
