"""
Task Monitor Service.

Polls submitted Batch tasks until every one reaches the target state or
the deadline passes. Returns a MonitorResult instead of raising on
timeout; the orchestrator decides what a timeout means.

Polling rules:
    - First poll happens immediately
    - Sleeps min(poll interval, time left), never past the deadline
    - ALL_COMPLETED only if every task is in the target state at a poll
      taken strictly before the deadline
    - RemoteServiceError while polling propagates

State changes between polls are checked against the Batch task state
machine. A task sent back to active (a remote retry under
max_task_retry_count) is recorded in requeued_task_ids; a change the
state machine does not allow is logged as a warning.

Exports:
    TaskMonitor: wait_all()
"""

import time
from typing import Callable, Dict, List

from config.defaults import MonitorDefaults
from core.logic import can_task_transition, is_task_terminal
from core.models import MonitorOutcome, MonitorResult, TaskState, TaskStatusSnapshot
from exceptions import ContractViolationError
from infrastructure.interface_repository import IComputeRepository
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "TaskMonitor")


class TaskMonitor:
    """
    Blocking task monitor.

    clock and sleep are injectable so tests can drive time manually.

    Example:
        monitor = TaskMonitor(compute_repo, poll_interval_seconds=10)
        result = monitor.wait_all("importexport", ["export-1a2b3c"], timeout_seconds=300)
        if result.outcome == MonitorOutcome.TIMED_OUT:
            ...
    """

    def __init__(
        self,
        compute: IComputeRepository,
        poll_interval_seconds: float = MonitorDefaults.POLL_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        if poll_interval_seconds <= 0:
            raise ValueError(f"poll_interval_seconds must be positive, got {poll_interval_seconds}")
        self.compute = compute
        self.poll_interval_seconds = poll_interval_seconds
        self.clock = clock
        self.sleep = sleep

    @staticmethod
    def _track_transitions(
        job_id: str,
        snapshots: List[TaskStatusSnapshot],
        previous: Dict[str, TaskState],
        requeued: List[str]
    ) -> None:
        """Compare each snapshot with the state seen at the previous poll."""
        for snapshot in snapshots:
            before = previous.get(snapshot.task_id)
            previous[snapshot.task_id] = snapshot.state
            if before is None or before == snapshot.state:
                continue

            dims = {
                'job_id': job_id,
                'task_id': snapshot.task_id,
                'from_state': before.value,
                'to_state': snapshot.state.value,
            }
            if not can_task_transition(before, snapshot.state):
                logger.warning(
                    f"⚠️ Task {snapshot.task_id} moved {before.value} -> {snapshot.state.value}, "
                    f"which the Batch task lifecycle does not allow",
                    extra={'custom_dimensions': dims}
                )
            elif snapshot.state == TaskState.ACTIVE:
                if snapshot.task_id not in requeued:
                    requeued.append(snapshot.task_id)
                logger.warning(
                    f"🔁 Task {snapshot.task_id} was requeued by Batch ({before.value} -> active)",
                    extra={'custom_dimensions': dims}
                )
            elif is_task_terminal(snapshot.state):
                logger.info(
                    f"Task {snapshot.task_id} completed with exit code {snapshot.exit_code}",
                    extra={'custom_dimensions': {**dims, 'exit_code': snapshot.exit_code}}
                )

    def wait_all(
        self,
        job_id: str,
        task_ids: List[str],
        target_state: TaskState = TaskState.COMPLETED,
        timeout_seconds: float = MonitorDefaults.TIMEOUT_MINUTES * 60
    ) -> MonitorResult:
        """
        Block until every task is in target_state or the deadline passes.

        Args:
            job_id: Job holding the tasks
            task_ids: Tasks submitted by this run (other tasks in the job are ignored)
            target_state: State to wait for
            timeout_seconds: Maximum wait

        Returns:
            MonitorResult with the last snapshots observed
        """
        if not task_ids:
            raise ContractViolationError("wait_all() requires at least one task id")
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")

        logger.info(
            f"Monitoring all tasks for '{target_state.value}' state, timeout in {timeout_seconds}s...",
            extra={'custom_dimensions': {
                'job_id': job_id,
                'task_ids': list(task_ids),
                'poll_interval_seconds': self.poll_interval_seconds,
            }}
        )

        start = self.clock()
        deadline = start + timeout_seconds
        polls = 0
        snapshots: List[TaskStatusSnapshot] = []
        previous: Dict[str, TaskState] = {}
        requeued: List[str] = []

        while True:
            now = self.clock()
            if now >= deadline:
                break

            snapshots = self.compute.get_task_states(job_id, list(task_ids))
            polls += 1
            observed_at = self.clock()
            self._track_transitions(job_id, snapshots, previous, requeued)

            pending = [s.task_id for s in snapshots if s.state != target_state]
            if not pending and observed_at < deadline:
                elapsed = observed_at - start
                logger.info(
                    f"🏁 All tasks reached state {target_state.value} after {elapsed:.1f}s",
                    extra={'custom_dimensions': {
                        'job_id': job_id,
                        'exit_codes': {s.task_id: s.exit_code for s in snapshots},
                        'polls': polls,
                        'requeued_task_ids': list(requeued),
                    }}
                )
                return MonitorResult(
                    outcome=MonitorOutcome.ALL_COMPLETED,
                    snapshots=snapshots,
                    elapsed_seconds=elapsed,
                    polls=polls,
                    requeued_task_ids=requeued,
                )

            remaining = deadline - observed_at
            if remaining <= 0:
                break

            logger.debug(
                f"⏳ {len(pending)} task(s) not yet {target_state.value}, "
                f"elapsed: {int(observed_at - start)}s, waiting {min(self.poll_interval_seconds, remaining):.0f}s...",
                extra={'custom_dimensions': {
                    'pending': pending,
                    'states': {s.task_id: s.state.value for s in snapshots},
                }}
            )
            self.sleep(min(self.poll_interval_seconds, remaining))

        elapsed = self.clock() - start
        pending = [s.task_id for s in snapshots if s.state != target_state] or list(task_ids)
        logger.error(
            f"⏰ Tasks did not reach {target_state.value} within {timeout_seconds}s",
            extra={'custom_dimensions': {
                'error_source': 'service',
                'job_id': job_id,
                'pending': pending,
                'polls': polls,
            }}
        )
        return MonitorResult(
            outcome=MonitorOutcome.TIMED_OUT,
            snapshots=snapshots,
            elapsed_seconds=max(elapsed, 0.0),
            polls=polls,
            requeued_task_ids=requeued,
        )


__all__ = ['TaskMonitor']
