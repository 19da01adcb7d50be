"""
Job Submission Service.

Ensures the shared Batch job exists, assembles the sqlpackage task for an
export or import and submits it.

Export and import share one code path; the direction only selects a row
of FLAG_MAPPINGS and the storage binding:

| Field    | Export | Import | Value                                  |
|----------|--------|--------|----------------------------------------|
| server   | /ssn   | /tsn   | ServerName                             |
| database | /sdn   | /tdn   | DatabaseName                           |
| user     | /su    | /tu    | SqlServerAdmin                         |
| password | /sp    | /tp    | SqlServerAdminPassword                 |
| file     | /tf    | /sf    | TargetFileName / blobs\\SourceFileName |

Exports:
    JobSubmitter: ensure_job(), build_task(), submit()
    FLAG_MAPPINGS: Per-direction sqlpackage flags
    build_command_line: Pure command line assembly
    mask_command_line: Redact passwords for logging
    build_job_constraints: JobConstraints from CLI values
"""

import re
import uuid
from datetime import timedelta
from typing import Dict, List, NamedTuple, Optional

from config.defaults import OperationDefaults, SqlPackageDefaults
from core.models import (
    ApplicationPackageRef, Capability, CapabilityPermission, EnsureResult,
    JobConstraints, JobSpec, OperationAction, OperationParameters,
    OutputFileSpec, OutputUploadCondition, ResourceFileSpec, TaskSpec
)
from exceptions import ConflictError, ContractViolationError, RemoteServiceError
from infrastructure.interface_repository import IComputeRepository
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "JobSubmitter")


class FlagRow(NamedTuple):
    """sqlpackage flags for one direction."""
    server: str
    database: str
    user: str
    password: str
    file: str


FLAG_MAPPINGS: Dict[OperationAction, FlagRow] = {
    OperationAction.EXPORT: FlagRow(server="/ssn", database="/sdn", user="/su", password="/sp", file="/tf"),
    OperationAction.IMPORT: FlagRow(server="/tsn", database="/tdn", user="/tu", password="/tp", file="/sf"),
}

_PASSWORD_FLAGS = sorted({row.password.lstrip("/") for row in FLAG_MAPPINGS.values()})
_PASSWORD_PATTERN = re.compile(
    r'(/(?:' + "|".join(_PASSWORD_FLAGS) + r'):)("(?:\\.|[^"\\])*"|\S+)',
    re.IGNORECASE
)

_NEEDS_QUOTES = re.compile(r'[\s"&|<>^()]')

MASK = "********"


def _quote(value: str) -> str:
    """
    Double-quote values cmd would otherwise split or redirect.

    Whitespace and the cmd operators &|<>^() are literal inside quotes.
    Embedded quotes are backslash-escaped and backslashes that precede a
    quote are doubled, following the Windows argv parsing rules.
    """
    if not _NEEDS_QUOTES.search(value):
        return value
    escaped = re.sub(r'(\\*)"', r'\1\1\\"', value)
    escaped = re.sub(r'(\\+)$', r'\1\1', escaped)
    return f'"{escaped}"'


def executable_path(package: ApplicationPackageRef, executable: str = SqlPackageDefaults.EXECUTABLE) -> str:
    """
    Path of the executable on a Windows node.

    Batch exposes each package's install directory as
    AZ_BATCH_APP_PACKAGE_<APPID>#<VERSION>.
    """
    env_var = f"{SqlPackageDefaults.APP_PACKAGE_ENV_PREFIX}{package.application_id.upper()}#{package.version}"
    return f"%{env_var}%\\{executable}"


def build_command_line(
    action: OperationAction,
    params: OperationParameters,
    file_value: str,
    package: Optional[ApplicationPackageRef] = None
) -> str:
    """
    Assemble the task command line.

    Pure and deterministic: the same inputs always give the same string,
    and the two directions differ only in flag letters.
    """
    if action not in FLAG_MAPPINGS:
        raise ContractViolationError(f"No flag mapping for action {action!r}")
    package = package or ApplicationPackageRef(
        application_id=SqlPackageDefaults.APP_PACKAGE_ID,
        version=SqlPackageDefaults.APP_PACKAGE_VERSION,
    )
    flags = FLAG_MAPPINGS[action]
    arguments = [
        f"/a:{action.value}",
        f"{flags.server}:{_quote(params.server_name)}",
        f"{flags.database}:{_quote(params.database_name)}",
        f"{flags.user}:{_quote(params.sql_server_admin)}",
        f"{flags.password}:{_quote(params.sql_server_admin_password)}",
        f"{flags.file}:{_quote(file_value)}",
    ]
    return f"cmd /c {executable_path(package)} " + " ".join(arguments)


def mask_command_line(command_line: str) -> str:
    """Replace password flag values with a fixed mask."""
    return _PASSWORD_PATTERN.sub(lambda m: m.group(1) + MASK, command_line)


def build_job_constraints(
    max_wall_clock_time_hours: float = OperationDefaults.MAX_WALL_CLOCK_TIME_HOURS,
    max_task_retry_count: int = OperationDefaults.MAX_TASK_RETRY_COUNT
) -> JobConstraints:
    return JobConstraints(
        max_wall_clock_time=timedelta(hours=max_wall_clock_time_hours),
        max_task_retry_count=max_task_retry_count,
    )


def new_task_id(action: OperationAction) -> str:
    """Unique per invocation, e.g. export-3f9a0c1b2d4e."""
    return f"{action.value.lower()}-{uuid.uuid4().hex[:12]}"


class JobSubmitter:
    """
    Job and task submission over an IComputeRepository.

    Example:
        submitter = JobSubmitter(compute_repo, package)
        submitter.ensure_job("importexport", "sqlpackage-pool", constraints)
        task = submitter.build_task(OperationAction.EXPORT, params, capability)
        submitter.submit("importexport", [task])
    """

    def __init__(
        self,
        compute: IComputeRepository,
        package: ApplicationPackageRef,
        executable: str = SqlPackageDefaults.EXECUTABLE,
        resource_dir: str = SqlPackageDefaults.IMPORT_RESOURCE_DIR
    ):
        self.compute = compute
        self.package = package
        self.executable = executable
        self.resource_dir = resource_dir

    def ensure_job(self, job_id: str, pool_id: str, constraints: JobConstraints) -> EnsureResult:
        """
        Ensure the job exists on the pool.

        JobExists is success; constraints of an existing job are left as-is.
        """
        logger.info(f"Creating job [{job_id}]...")
        try:
            self.compute.create_job(JobSpec(job_id=job_id, pool_id=pool_id, constraints=constraints))
        except ConflictError as e:
            logger.info(
                f"The job {job_id} already existed when we tried to create it",
                extra={'custom_dimensions': {'job_id': job_id, 'error_code': e.error_code}}
            )
            return EnsureResult.already_exists(job_id, conflict=e)
        except RemoteServiceError as e:
            logger.error(
                f"Failed to ensure job {job_id}: {e}",
                extra={'custom_dimensions': {'job_id': job_id, 'error_code': e.error_code}}
            )
            return EnsureResult.failed(job_id, e)

        logger.info(
            f"✅ Created job {job_id} on pool {pool_id}",
            extra={'custom_dimensions': {
                'max_wall_clock_time': str(constraints.max_wall_clock_time),
                'max_task_retry_count': constraints.max_task_retry_count,
            }}
        )
        return EnsureResult.created(job_id)

    @staticmethod
    def _require(capability: Capability, *permissions: CapabilityPermission) -> None:
        missing = [p.value for p in permissions if p not in capability.permissions]
        if missing:
            raise ContractViolationError(
                f"Capability for {capability.resource_uri} lacks permissions {missing}"
            )

    def build_task(
        self,
        action: OperationAction,
        params: OperationParameters,
        capability: Capability,
        task_id: Optional[str] = None
    ) -> TaskSpec:
        """
        Build the sqlpackage task for one direction.

        Export binds the produced bacpac to the write capability, uploaded
        on task completion whether or not sqlpackage succeeded. Import
        downloads the source bacpac into the resource directory and points
        /sf at it.
        """
        resource_files: List[ResourceFileSpec] = []
        output_files: List[OutputFileSpec] = []

        if action == OperationAction.EXPORT:
            self._require(capability, CapabilityPermission.WRITE)
            file_value = params.target_file_name
            output_files.append(OutputFileSpec(
                file_pattern=params.target_file_name,
                container_url=capability.url,
                path=params.target_file_name,
                upload_condition=OutputUploadCondition.TASK_COMPLETION,
            ))
        elif action == OperationAction.IMPORT:
            self._require(capability, CapabilityPermission.READ, CapabilityPermission.LIST)
            file_value = f"{self.resource_dir}\\{params.source_file_name}"
            resource_files.append(ResourceFileSpec(
                storage_container_url=capability.url,
                blob_prefix=params.source_file_name,
                file_path=self.resource_dir,
            ))
        else:
            raise ContractViolationError(f"No task rule for action {action!r}")

        command_line = build_command_line(action, params, file_value, self.package)
        task = TaskSpec(
            task_id=task_id or new_task_id(action),
            command_line=command_line,
            resource_files=resource_files,
            output_files=output_files,
            application_packages=[self.package],
        )
        logger.debug(
            f"Built {action.value} task {task.task_id}",
            extra={'custom_dimensions': {
                'task_id': task.task_id,
                'command_line': mask_command_line(command_line),
            }}
        )
        return task

    def submit(self, job_id: str, tasks: List[TaskSpec]) -> List[str]:
        """Add the task collection to the job; returns the task ids."""
        if not tasks:
            raise ContractViolationError("submit() requires at least one task")
        logger.info(f"Adding {len(tasks)} task(s) to job [{job_id}]...")
        return self.compute.add_tasks(job_id, tasks)


__all__ = [
    'JobSubmitter',
    'FlagRow',
    'FLAG_MAPPINGS',
    'build_command_line',
    'mask_command_line',
    'build_job_constraints',
    'executable_path',
    'new_task_id',
]
