"""
Blob Storage Repository.

Azure Blob Storage access for the bacpac containers: container creation,
blob existence probes and container-scoped SAS generation. Authenticates
with the storage account shared key taken from the connection string.

Created once per run, after credentials are validated, and passed
explicitly to every storage operation.

Usage:
    from infrastructure import RepositoryFactory

    storage = RepositoryFactory.create_blob_repository(config.storage)
    storage.create_container_if_not_exists('bacpacs')
    token = storage.generate_container_sas('bacpacs', WRITE_ONLY, expiry)

Exports:
    BlobRepository: IStorageRepository backed by BlobServiceClient
    to_sas_permissions: CapabilityPermission set -> ContainerSasPermissions
"""

from datetime import datetime
from typing import Dict, FrozenSet, Optional

from azure.storage.blob import (
    BlobServiceClient, ContainerClient, ContainerSasPermissions, generate_container_sas
)
from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError

from core.models import CapabilityPermission
from exceptions import ContractViolationError, RemoteServiceError
from util_logger import LoggerFactory, ComponentType
from .interface_repository import IStorageRepository

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "BlobRepository")

SERVICE_NAME = "azure_blob_storage"


def to_sas_permissions(permissions: FrozenSet[CapabilityPermission]) -> ContainerSasPermissions:
    """
    Map capability permissions onto the SDK permission object.

    Only read, list and write can be granted; nothing else is ever set.
    """
    if not permissions:
        raise ContractViolationError("A capability must grant at least one permission")
    return ContainerSasPermissions(
        read=CapabilityPermission.READ in permissions,
        list=CapabilityPermission.LIST in permissions,
        write=CapabilityPermission.WRITE in permissions,
    )


class BlobRepository(IStorageRepository):
    """
    Blob storage repository with shared-key authentication.

    Design Principles:
    - One instance per run, injected (no module-level singleton)
    - Container clients cached per container name
    - SDK errors translated to RemoteServiceError
    """

    def __init__(self, connection_string: str, blob_service: Optional[BlobServiceClient] = None):
        """
        Args:
            connection_string: Shared-key storage connection string
            blob_service: Pre-built client (tests)
        """
        if blob_service is None:
            logger.info("Initializing BlobRepository with connection string")
            blob_service = BlobServiceClient.from_connection_string(connection_string)

        self.blob_service = blob_service
        self._container_clients: Dict[str, ContainerClient] = {}
        logger.info(f"✅ BlobRepository initialized for account: {self.account_name}")

    @property
    def account_name(self) -> str:
        return self.blob_service.account_name

    @property
    def _account_key(self) -> str:
        credential = self.blob_service.credential
        key = getattr(credential, 'account_key', None)
        if not key:
            raise ContractViolationError(
                "BlobRepository requires a shared-key credential to sign SAS tokens"
            )
        return key

    def _get_container_client(self, container: str) -> ContainerClient:
        """Get or create cached container client."""
        if container not in self._container_clients:
            self._container_clients[container] = self.blob_service.get_container_client(container)
            logger.debug(f"Created new container client for: {container}")
        return self._container_clients[container]

    def _remote_error(self, operation: str, error: Exception) -> RemoteServiceError:
        code = getattr(error, 'error_code', None)
        logger.error(
            f"Blob storage {operation} failed: {error}",
            extra={'custom_dimensions': {
                'error_source': 'infrastructure',
                'operation': operation,
                'error_code': code,
                'error_type': type(error).__name__,
            }}
        )
        return RemoteServiceError(
            f"Azure Blob Storage {operation} failed: {error}",
            service=SERVICE_NAME,
            operation=operation,
            error_code=str(code) if code is not None else None,
        )

    # ========================================================================
    # IStorageRepository Implementation
    # ========================================================================

    def container_url(self, container: str) -> str:
        return self._get_container_client(container).url

    def create_container_if_not_exists(self, container: str) -> bool:
        """
        Create container.

        Returns:
            True if created, False if it already existed
        """
        try:
            self._get_container_client(container).create_container()
        except ResourceExistsError:
            logger.debug(f"Container already exists: {container}")
            return False
        except AzureError as e:
            raise self._remote_error("create_container", e) from e
        logger.info(f"Created container: {container}")
        return True

    def blob_exists(self, container: str, blob_path: str) -> bool:
        """
        Check if blob exists.

        A missing container counts as a missing blob.
        """
        try:
            blob_client = self._get_container_client(container).get_blob_client(blob_path)
            blob_client.get_blob_properties()
            return True
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            raise self._remote_error("get_blob_properties", e) from e

    def generate_container_sas(
        self,
        container: str,
        permissions: FrozenSet[CapabilityPermission],
        expiry: datetime
    ) -> str:
        """
        Sign a container SAS locally with the account key.

        No network call; the token is valid for any blob in the container
        until `expiry`.
        """
        token = generate_container_sas(
            account_name=self.account_name,
            container_name=container,
            account_key=self._account_key,
            permission=to_sas_permissions(permissions),
            expiry=expiry,
        )
        logger.debug(
            f"Generated container SAS for {container}",
            extra={'custom_dimensions': {
                'container': container,
                'permissions': sorted(p.value for p in permissions),
                'expiry': expiry.isoformat(),
            }}
        )
        return token


__all__ = ['BlobRepository', 'to_sas_permissions']
