"""
Repository Factory - Central Creation Point.

Single point of repository instantiation. Repositories are built from
the validated AppConfig once per run and passed explicitly to the
services; nothing here is cached at module level.

Exports:
    RepositoryFactory: Static factory methods for the Batch and Blob repositories
"""

from typing import Dict, Any, Optional

from config import AppConfig, BatchConfig, StorageConfig
from util_logger import LoggerFactory, ComponentType, log_exceptions
from .batch import BatchRepository
from .blob import BlobRepository

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "RepositoryFactory")


class RepositoryFactory:
    """
    Factory for creating repository instances.

    Design Philosophy:
    - Single factory for all repository types
    - Credentials flow from AppConfig only, never from source
    - Callers own the returned instances (no singletons)
    """

    @staticmethod
    @log_exceptions(ComponentType.FACTORY, "RepositoryFactory")
    def create_repositories(config: AppConfig) -> Dict[str, Any]:
        """
        Create every repository needed for one run.

        Args:
            config: Validated application configuration

        Returns:
            Dictionary with compute_repo and storage_repo

        Example:
            repos = RepositoryFactory.create_repositories(get_config())
            compute = repos['compute_repo']
            storage = repos['storage_repo']
        """
        logger.info("🏭 Creating Azure repositories")
        compute_repo = RepositoryFactory.create_batch_repository(config.batch)
        storage_repo = RepositoryFactory.create_blob_repository(config.storage)
        logger.info("✅ All repositories created successfully")

        return {
            'compute_repo': compute_repo,
            'storage_repo': storage_repo
        }

    @staticmethod
    def create_batch_repository(batch: BatchConfig, client: Optional[Any] = None) -> BatchRepository:
        """Create the Azure Batch repository from BatchConfig."""
        logger.debug(f"📦 Creating BatchRepository for {batch.account_name}")
        return BatchRepository(
            account_url=batch.account_url,
            account_name=batch.account_name,
            account_key=batch.account_key,
            request_retry_count=batch.request_retry_count,
            client=client
        )

    @staticmethod
    def create_blob_repository(storage: StorageConfig) -> BlobRepository:
        """Create the Blob Storage repository from StorageConfig."""
        logger.debug(f"📦 Creating BlobRepository for {storage.account_name}")
        return BlobRepository(storage.connection_string)


__all__ = ['RepositoryFactory']
