"""
Task Monitor Configuration.

Controls how long the CLI blocks waiting for the submitted task, how often
it polls Batch, and whether a non-zero sqlpackage exit code fails the run.

Exports:
    MonitorConfig: Pydantic monitor configuration model
"""

import os
from pydantic import BaseModel, Field

from .defaults import MonitorDefaults


class MonitorConfig(BaseModel):
    """Task monitor configuration."""

    timeout_minutes: float = Field(
        default=MonitorDefaults.TIMEOUT_MINUTES,
        gt=0,
        le=24 * 60,
        description="Deadline for all tasks to reach Completed"
    )

    poll_interval_seconds: float = Field(
        default=MonitorDefaults.POLL_INTERVAL_SECONDS,
        gt=0,
        le=600,
        description="Seconds between task state queries"
    )

    fail_on_task_exit_code: bool = Field(
        default=MonitorDefaults.FAIL_ON_TASK_EXIT_CODE,
        description="Treat a Completed task with non-zero exit code as a failed run. "
                    "Off by default: Completed is reported as success regardless of exit code."
    )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_minutes * 60

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            timeout_minutes=float(os.environ.get("TASK_MONITOR_TIMEOUT_MINUTES", str(MonitorDefaults.TIMEOUT_MINUTES))),
            poll_interval_seconds=float(os.environ.get("TASK_MONITOR_POLL_SECONDS", str(MonitorDefaults.POLL_INTERVAL_SECONDS))),
            fail_on_task_exit_code=os.environ.get(
                "FAIL_ON_TASK_EXIT_CODE", str(MonitorDefaults.FAIL_ON_TASK_EXIT_CODE)
            ).lower() in ("true", "1", "yes"),
        )
