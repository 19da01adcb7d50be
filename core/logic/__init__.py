"""
Core Business Logic Package.

Contains business logic that operates on pure data models.
Separated from models to maintain clean architecture.

Exports:
    State transitions: can_pipeline_transition, require_pipeline_transition,
        can_task_transition, is_pipeline_terminal, is_task_terminal
"""

# State transitions
from .transitions import (
    can_pipeline_transition,
    require_pipeline_transition,
    can_task_transition,
    get_pipeline_terminal_states,
    is_pipeline_terminal,
    is_task_terminal
)

__all__ = [
    'can_pipeline_transition',
    'require_pipeline_transition',
    'can_task_transition',
    'get_pipeline_terminal_states',
    'is_pipeline_terminal',
    'is_task_terminal',
]
