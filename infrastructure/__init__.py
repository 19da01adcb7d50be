"""
Infrastructure Package - Lazy Loading Implementation.

Provides the Azure-backed repository implementations with lazy loading,
so importing the package does not pull in the Azure SDKs or create
loggers until a repository is actually requested.

Exports:
    RepositoryFactory: Central creation point
    BatchRepository: Azure Batch (pools, jobs, tasks)
    BlobRepository: Azure Blob Storage (containers, SAS)
    IComputeRepository, IStorageRepository: Interfaces
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .factory import RepositoryFactory as _RepositoryFactory
    from .batch import BatchRepository as _BatchRepository
    from .blob import BlobRepository as _BlobRepository
    from .interface_repository import (
        IComputeRepository as _IComputeRepository,
        IStorageRepository as _IStorageRepository,
        BatchErrorCodes as _BatchErrorCodes,
    )


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    This prevents module-level code execution until needed.
    """
    # Factory - most common import
    if name == "RepositoryFactory":
        from .factory import RepositoryFactory
        return RepositoryFactory

    # Azure Batch repository
    elif name == "BatchRepository":
        from .batch import BatchRepository
        return BatchRepository

    # Blob repository
    elif name == "BlobRepository":
        from .blob import BlobRepository
        return BlobRepository

    # Interfaces
    elif name == "IComputeRepository":
        from .interface_repository import IComputeRepository
        return IComputeRepository
    elif name == "IStorageRepository":
        from .interface_repository import IStorageRepository
        return IStorageRepository
    elif name == "BatchErrorCodes":
        from .interface_repository import BatchErrorCodes
        return BatchErrorCodes

    raise AttributeError(f"module 'infrastructure' has no attribute '{name}'")


__all__ = [
    'RepositoryFactory',
    'BatchRepository',
    'BlobRepository',
    'IComputeRepository',
    'IStorageRepository',
    'BatchErrorCodes',
]
