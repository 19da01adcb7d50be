"""
Result model tests.

EnsureResult tagging, MonitorResult derived views and OperationReport
serialization.
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from core.models import (
    EnsureOutcome,
    EnsureResult,
    MonitorOutcome,
    MonitorResult,
    OperationAction,
    OperationReport,
    PipelineState,
    TaskState,
    TaskStatusSnapshot,
)
from exceptions import ConflictError, RemoteServiceError


def _snapshot(task_id, state=TaskState.COMPLETED, exit_code=0):
    return TaskStatusSnapshot(task_id=task_id, state=state, exit_code=exit_code)


# ============================================================================
# EnsureResult
# ============================================================================

class TestEnsureResult:

    def test_created(self):
        result = EnsureResult.created("sqlpackage-pool")
        assert result.outcome == EnsureOutcome.CREATED
        assert result.ok is True
        assert result.error is None
        assert result.to_dict() == {'resource_id': 'sqlpackage-pool', 'outcome': 'created'}

    def test_already_exists_carries_conflict(self):
        conflict = ConflictError("exists", resource_id="importexport", error_code="JobExists")
        result = EnsureResult.already_exists("importexport", conflict=conflict)
        assert result.outcome == EnsureOutcome.ALREADY_EXISTS
        assert result.ok is True
        assert result.to_dict()['conflict_code'] == "JobExists"

    def test_failed_carries_error(self):
        error = RemoteServiceError(
            "quota exceeded", service="azure_batch", operation="create_pool",
            error_code="AccountCoreQuotaReached"
        )
        result = EnsureResult.failed("sqlpackage-pool", error)
        assert result.ok is False
        assert result.error is error
        data = result.to_dict()
        assert data['outcome'] == 'failed'
        assert data['error_code'] == "AccountCoreQuotaReached"

    def test_frozen(self):
        result = EnsureResult.created("p")
        with pytest.raises(ValidationError):
            result.outcome = EnsureOutcome.FAILED


# ============================================================================
# MonitorResult
# ============================================================================

class TestMonitorResult:

    def test_completed_flag(self):
        assert MonitorResult(outcome=MonitorOutcome.ALL_COMPLETED).completed is True
        assert MonitorResult(outcome=MonitorOutcome.TIMED_OUT).completed is False

    def test_exit_code_views(self):
        result = MonitorResult(
            outcome=MonitorOutcome.ALL_COMPLETED,
            snapshots=[_snapshot("a", exit_code=0), _snapshot("b", exit_code=1)],
        )
        assert result.exit_codes == {"a": 0, "b": 1}
        assert result.non_zero_exit_codes == {"b": 1}

    def test_missing_exit_code_is_not_a_failure(self):
        result = MonitorResult(
            outcome=MonitorOutcome.ALL_COMPLETED,
            snapshots=[_snapshot("a", exit_code=None)],
        )
        assert result.non_zero_exit_codes == {}

    def test_pending_task_ids(self):
        result = MonitorResult(
            outcome=MonitorOutcome.TIMED_OUT,
            snapshots=[
                _snapshot("a"),
                _snapshot("b", state=TaskState.RUNNING, exit_code=None),
                _snapshot("c", state=TaskState.ACTIVE, exit_code=None),
            ],
        )
        assert result.pending_task_ids == ["b", "c"]

    def test_negative_elapsed_rejected(self):
        with pytest.raises(ValidationError):
            MonitorResult(outcome=MonitorOutcome.TIMED_OUT, elapsed_seconds=-1)

    def test_to_dict(self):
        result = MonitorResult(
            outcome=MonitorOutcome.ALL_COMPLETED,
            snapshots=[_snapshot("export-abc")],
            elapsed_seconds=12.34567,
            polls=3,
        )
        assert result.to_dict() == {
            'outcome': 'all_completed',
            'elapsed_seconds': 12.346,
            'polls': 3,
            'tasks': [{'task_id': 'export-abc', 'state': 'completed', 'exit_code': 0}],
        }


class TestTaskStatusSnapshot:

    @pytest.mark.parametrize("state,exit_code,expected", [
        (TaskState.COMPLETED, 0, True),
        (TaskState.COMPLETED, 1, False),
        (TaskState.COMPLETED, None, False),
        (TaskState.RUNNING, None, False),
    ])
    def test_succeeded(self, state, exit_code, expected):
        assert _snapshot("t", state=state, exit_code=exit_code).succeeded is expected


# ============================================================================
# OperationReport
# ============================================================================

class TestOperationReport:

    def test_starts_validating(self):
        report = OperationReport(run_id="r1", action=OperationAction.EXPORT)
        assert report.state == PipelineState.VALIDATING
        assert report.history == [PipelineState.VALIDATING]
        assert report.succeeded is False

    def test_history_not_shared_between_reports(self):
        first = OperationReport(run_id="r1", action=OperationAction.EXPORT)
        second = OperationReport(run_id="r2", action=OperationAction.IMPORT)
        first.history.append(PipelineState.POOL_ENSURING)
        assert second.history == [PipelineState.VALIDATING]

    def test_to_dict_is_json_serializable(self):
        report = OperationReport(
            run_id="r1",
            action=OperationAction.IMPORT,
            state=PipelineState.SUCCEEDED,
            history=[PipelineState.VALIDATING, PipelineState.SUCCEEDED],
            pool=EnsureResult.already_exists("sqlpackage-pool"),
            job=EnsureResult.created("importexport"),
            task_ids=["import-0123456789ab"],
            monitor=MonitorResult(outcome=MonitorOutcome.ALL_COMPLETED),
            started_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        data = json.loads(json.dumps(report.to_dict()))
        assert data['action'] == "Import"
        assert data['state'] == "succeeded"
        assert data['pool']['outcome'] == "already_exists"
        assert data['job']['outcome'] == "created"
        assert data['started_at'] == "2024-01-01T00:00:00+00:00"
        assert data['finished_at'] is None
        assert report.succeeded is True
