"""
State Transition Logic for the Pipeline and Batch Tasks.

Contains business rules for valid state transitions.
Separated from data models for clean architecture.

Exports:
    can_pipeline_transition: Check if pipeline state transition is valid
    require_pipeline_transition: Raise on an illegal pipeline transition
    can_task_transition: Check if a Batch task state transition is valid
    get_pipeline_terminal_states: Terminal states for the pipeline
    is_pipeline_terminal: Check if pipeline is in terminal state
    is_task_terminal: Check if a Batch task is in terminal state

Dependencies:
    core.models.enums: PipelineState, TaskState
"""

from typing import List

from exceptions import ContractViolationError
from ..models.enums import PipelineState, TaskState


def can_pipeline_transition(current: PipelineState, target: PipelineState) -> bool:
    """
    Check if the pipeline can move from current to target state.

    Stages advance strictly one at a time; MONITORING is the only stage
    that can reach SUCCEEDED. Every non-terminal stage can fail.

    Args:
        current: Current pipeline state
        target: Target pipeline state

    Returns:
        True if transition is valid, False otherwise
    """
    transitions = {
        PipelineState.VALIDATING: [PipelineState.POOL_ENSURING, PipelineState.FAILED],
        PipelineState.POOL_ENSURING: [PipelineState.JOB_ENSURING, PipelineState.FAILED],
        PipelineState.JOB_ENSURING: [PipelineState.CAPABILITY_ISSUING, PipelineState.FAILED],
        PipelineState.CAPABILITY_ISSUING: [PipelineState.TASK_SUBMITTING, PipelineState.FAILED],
        PipelineState.TASK_SUBMITTING: [PipelineState.MONITORING, PipelineState.FAILED],
        PipelineState.MONITORING: [PipelineState.SUCCEEDED, PipelineState.FAILED],
        PipelineState.SUCCEEDED: [],  # Terminal state
        PipelineState.FAILED: []  # Terminal state
    }

    return target in transitions.get(current, [])


def require_pipeline_transition(current: PipelineState, target: PipelineState) -> None:
    """
    Raise ContractViolationError unless current -> target is legal.

    An illegal transition is a sequencing bug in the orchestrator, never
    a runtime condition.
    """
    if not can_pipeline_transition(current, target):
        raise ContractViolationError(
            f"Illegal pipeline transition: {current.value} -> {target.value}"
        )


def can_task_transition(current: TaskState, target: TaskState) -> bool:
    """
    Check if a Batch task can move from current to target state.

    Preparing is skipped when the job has no preparation task. Remote
    retries (max_task_retry_count) send a running task back to active.
    """
    if current == target:
        return True

    transitions = {
        TaskState.ACTIVE: [TaskState.PREPARING, TaskState.RUNNING, TaskState.COMPLETED],
        TaskState.PREPARING: [TaskState.RUNNING, TaskState.ACTIVE, TaskState.COMPLETED],
        TaskState.RUNNING: [TaskState.COMPLETED, TaskState.ACTIVE],
        TaskState.COMPLETED: []  # Terminal state
    }

    return target in transitions.get(current, [])


def get_pipeline_terminal_states() -> List[PipelineState]:
    """
    Get list of terminal states for the pipeline.

    Returns:
        List of terminal pipeline states
    """
    return [
        PipelineState.SUCCEEDED,
        PipelineState.FAILED
    ]


def is_pipeline_terminal(state: PipelineState) -> bool:
    """Check if a pipeline state is terminal."""
    return state in get_pipeline_terminal_states()


def is_task_terminal(state: TaskState) -> bool:
    return state == TaskState.COMPLETED
