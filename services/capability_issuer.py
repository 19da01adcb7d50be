"""
Capability Issuer Service.

Issues container-scoped, time-bounded SAS capabilities for the Batch
task. The storage repository is always passed in explicitly.

Direction table:
| Action | Container            | Permissions | Side effect             |
|--------|----------------------|-------------|-------------------------|
| Export | TargetContainerName  | w           | container created if absent |
| Import | SourceContainerName  | r, l        | none                    |

Exports:
    ensure_container: Create a container if absent
    blob_exists: Probe for a blob
    issue_write_capability: Write-only container capability
    issue_read_capability: Read+list container capability
    issue_for_action: Pick the capability for an action
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, FrozenSet, Optional

from config.defaults import StorageDefaults
from core.models import (
    Capability, CapabilityPermission, OperationAction, OperationParameters,
    WRITE_ONLY, READ_LIST
)
from exceptions import ContractViolationError
from infrastructure.interface_repository import IStorageRepository
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "CapabilityIssuer")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_horizon(hours: int) -> None:
    if not isinstance(hours, int) or isinstance(hours, bool):
        raise ContractViolationError(f"SAS horizon must be an int, got {type(hours).__name__}")
    if hours < 1 or hours > StorageDefaults.SAS_EXPIRY_MAX_HOURS:
        raise ValueError(
            f"SAS horizon must be between 1 and {StorageDefaults.SAS_EXPIRY_MAX_HOURS} hours, got {hours}"
        )


def ensure_container(storage: IStorageRepository, name: str) -> bool:
    """
    Create the container if it does not exist.

    Returns:
        True if this call created it
    """
    created = storage.create_container_if_not_exists(name)
    if created:
        logger.info(f"Created container {name} in {storage.account_name}")
    else:
        logger.debug(f"Container {name} already present")
    return created


def blob_exists(storage: IStorageRepository, container: str, blob: str) -> bool:
    exists = storage.blob_exists(container, blob)
    logger.debug(f"Blob {container}/{blob} exists: {exists}")
    return exists


def _issue(
    storage: IStorageRepository,
    container: str,
    permissions: FrozenSet[CapabilityPermission],
    hours: int,
    blob: Optional[str],
    clock: Callable[[], datetime]
) -> Capability:
    _check_horizon(hours)
    expiry = clock() + timedelta(hours=hours)
    token = storage.generate_container_sas(container, permissions, expiry)
    capability = Capability(
        resource_uri=storage.container_url(container),
        blob_name=blob,
        permissions=permissions,
        expiry=expiry,
        token=token,
    )
    logger.info(
        f"Issued {capability.permission_string} capability for {container}",
        extra={'custom_dimensions': capability.to_log_dict()}
    )
    return capability


def issue_write_capability(
    storage: IStorageRepository,
    container: str,
    hours: int = StorageDefaults.SAS_EXPIRY_HOURS,
    clock: Callable[[], datetime] = _utcnow
) -> Capability:
    """
    Write-only capability for an export destination.

    The task can upload the bacpac but cannot read or list anything
    already in the container.
    """
    return _issue(storage, container, WRITE_ONLY, hours, None, clock)


def issue_read_capability(
    storage: IStorageRepository,
    container: str,
    blob: str,
    hours: int = StorageDefaults.SAS_EXPIRY_HOURS,
    clock: Callable[[], datetime] = _utcnow
) -> Capability:
    """
    Read+list capability for an import source.

    List is required because Batch resolves resource files by blob
    prefix. The token is container-scoped; blob_name narrows the
    resource file, not the signature.
    """
    return _issue(storage, container, READ_LIST, hours, blob, clock)


def issue_for_action(
    storage: IStorageRepository,
    action: OperationAction,
    params: OperationParameters,
    hours: int = StorageDefaults.SAS_EXPIRY_HOURS,
    clock: Callable[[], datetime] = _utcnow
) -> Capability:
    """Issue the capability the task needs for this direction."""
    if action == OperationAction.EXPORT:
        ensure_container(storage, params.target_container_name)
        return issue_write_capability(storage, params.target_container_name, hours, clock)
    if action == OperationAction.IMPORT:
        return issue_read_capability(
            storage, params.source_container_name, params.source_file_name, hours, clock
        )
    raise ContractViolationError(f"No capability rule for action {action!r}")


__all__ = [
    'ensure_container',
    'blob_exists',
    'issue_write_capability',
    'issue_read_capability',
    'issue_for_action',
]
