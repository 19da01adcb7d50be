"""
Execution Result Data Models.

Represents results of pool/job ensure, task monitoring and the full run.
No business logic - pure data structures.

Exports:
    EnsureResult: Tagged result of an idempotent create
    MonitorResult: Result of waiting on submitted tasks
    OperationReport: Summary of one orchestration run
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from exceptions import ConflictError, RemoteServiceError
from .batch import TaskStatusSnapshot
from .enums import EnsureOutcome, MonitorOutcome, OperationAction, PipelineState, TaskState


class EnsureResult(BaseModel):
    """
    Result of ensuring a pool or job exists.

    Callers branch on `outcome`; on FAILED they raise `error`.
    `conflict` is set when the create lost a race to another run.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    outcome: EnsureOutcome
    resource_id: str
    error: Optional[RemoteServiceError] = None
    conflict: Optional[ConflictError] = None

    @classmethod
    def created(cls, resource_id: str) -> 'EnsureResult':
        return cls(outcome=EnsureOutcome.CREATED, resource_id=resource_id)

    @classmethod
    def already_exists(
        cls,
        resource_id: str,
        conflict: Optional[ConflictError] = None
    ) -> 'EnsureResult':
        return cls(outcome=EnsureOutcome.ALREADY_EXISTS, resource_id=resource_id, conflict=conflict)

    @classmethod
    def failed(cls, resource_id: str, error: RemoteServiceError) -> 'EnsureResult':
        return cls(outcome=EnsureOutcome.FAILED, resource_id=resource_id, error=error)

    @property
    def ok(self) -> bool:
        """CREATED and ALREADY_EXISTS both mean the resource is usable."""
        return self.outcome != EnsureOutcome.FAILED

    def to_dict(self) -> Dict[str, Any]:
        data = {'resource_id': self.resource_id, 'outcome': self.outcome.value}
        if self.error is not None:
            data['error'] = str(self.error)
            data['error_code'] = self.error.error_code
        if self.conflict is not None:
            data['conflict_code'] = self.conflict.error_code
        return data


class MonitorResult(BaseModel):
    """
    Result of waiting on submitted tasks.

    ALL_COMPLETED only when every task was observed in the target state
    before the deadline.
    """

    model_config = ConfigDict(frozen=True)

    outcome: MonitorOutcome
    snapshots: List[TaskStatusSnapshot] = Field(default_factory=list)
    elapsed_seconds: float = Field(default=0.0, ge=0)
    polls: int = Field(default=0, ge=0)
    requeued_task_ids: List[str] = Field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.outcome == MonitorOutcome.ALL_COMPLETED

    @property
    def exit_codes(self) -> Dict[str, Optional[int]]:
        return {s.task_id: s.exit_code for s in self.snapshots}

    @property
    def non_zero_exit_codes(self) -> Dict[str, int]:
        """Tasks that reported a non-zero exit code."""
        return {
            s.task_id: s.exit_code
            for s in self.snapshots
            if s.exit_code is not None and s.exit_code != 0
        }

    @property
    def pending_task_ids(self) -> List[str]:
        return [s.task_id for s in self.snapshots if s.state != TaskState.COMPLETED]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'outcome': self.outcome.value,
            'elapsed_seconds': round(self.elapsed_seconds, 3),
            'polls': self.polls,
            'tasks': [
                {
                    'task_id': s.task_id,
                    'state': s.state.value,
                    'exit_code': s.exit_code,
                }
                for s in self.snapshots
            ],
        }
        if self.requeued_task_ids:
            data['requeued_task_ids'] = list(self.requeued_task_ids)
        return data


class OperationReport(BaseModel):
    """
    Summary of one export/import run.

    Mutable: the orchestrator fills it in stage by stage, and it is
    attached to the raised error when the run fails.
    """

    run_id: str
    action: OperationAction
    state: PipelineState = PipelineState.VALIDATING
    history: List[PipelineState] = Field(default_factory=lambda: [PipelineState.VALIDATING])
    pool: Optional[EnsureResult] = None
    job: Optional[EnsureResult] = None
    task_ids: List[str] = Field(default_factory=list)
    monitor: Optional[MonitorResult] = None
    cleanup: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'action': self.action.value,
            'state': self.state.value,
            'history': [s.value for s in self.history],
            'pool': self.pool.to_dict() if self.pool else None,
            'job': self.job.to_dict() if self.job else None,
            'task_ids': list(self.task_ids),
            'monitor': self.monitor.to_dict() if self.monitor else None,
            'cleanup': list(self.cleanup),
            'error': self.error,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
        }
