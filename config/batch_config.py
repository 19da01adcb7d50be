"""
Azure Batch Configuration.

Provides configuration for:
    - Batch account credentials (shared key)
    - Pool identity, VM size, node count and image
    - The sqlpackage application package reference
    - Job identity

Exports:
    BatchConfig: Pydantic Batch configuration model
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from .defaults import BatchDefaults, SqlPackageDefaults


class BatchConfig(BaseModel):
    """
    Azure Batch account, pool and job configuration.

    Credentials are optional at construction so that the config can be
    loaded and inspected (debug_dict) before AppConfig.validate_accounts()
    rejects a missing value.
    """

    # Account credentials
    account_url: Optional[str] = Field(
        default=None,
        description="Batch account URL, e.g. https://mybatch.westus2.batch.azure.com"
    )

    account_name: Optional[str] = Field(
        default=None,
        description="Batch account name"
    )

    account_key: Optional[str] = Field(
        default=None,
        repr=False,
        description="Batch account shared key"
    )

    # Pool
    pool_id: str = Field(
        default=BatchDefaults.POOL_ID,
        min_length=1,
        description="Fixed pool identity shared by every run"
    )

    pool_vm_size: str = Field(
        default=BatchDefaults.POOL_VM_SIZE,
        description="VM size for pool nodes"
    )

    pool_node_count: int = Field(
        default=BatchDefaults.POOL_NODE_COUNT,
        ge=1,
        le=100,
        description="Target dedicated node count"
    )

    image_publisher: str = Field(default=BatchDefaults.IMAGE_PUBLISHER)
    image_offer: str = Field(default=BatchDefaults.IMAGE_OFFER)
    image_sku: str = Field(default=BatchDefaults.IMAGE_SKU)
    image_version: str = Field(default=BatchDefaults.IMAGE_VERSION)

    node_agent_sku_id: str = Field(
        default=BatchDefaults.NODE_AGENT_SKU_ID,
        description="Node agent SKU matching the image"
    )

    # Job
    job_id: str = Field(
        default=BatchDefaults.JOB_ID,
        min_length=1,
        description="Fixed job identity shared by every run"
    )

    # Application package
    app_package_id: str = Field(
        default=SqlPackageDefaults.APP_PACKAGE_ID,
        description="Batch application id carrying sqlpackage.exe"
    )

    app_package_version: str = Field(
        default=SqlPackageDefaults.APP_PACKAGE_VERSION,
        description="Application package version"
    )

    request_retry_count: int = Field(
        default=BatchDefaults.REQUEST_RETRY_COUNT,
        ge=0,
        le=10,
        description="Request-level retries inside the Batch SDK"
    )

    def debug_dict(self) -> dict:
        """Configuration with the shared key masked."""
        return {
            'account_url': self.account_url,
            'account_name': self.account_name,
            'account_key': '***MASKED***' if self.account_key else None,
            'pool_id': self.pool_id,
            'pool_vm_size': self.pool_vm_size,
            'pool_node_count': self.pool_node_count,
            'image': f"{self.image_publisher}/{self.image_offer}/{self.image_sku}/{self.image_version}",
            'node_agent_sku_id': self.node_agent_sku_id,
            'job_id': self.job_id,
            'app_package': f"{self.app_package_id}#{self.app_package_version}",
            'request_retry_count': self.request_retry_count,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            account_url=os.environ.get("BATCH_ACCOUNT_URL") or None,
            account_name=os.environ.get("BATCH_ACCOUNT_NAME") or None,
            account_key=os.environ.get("BATCH_ACCOUNT_KEY") or None,
            pool_id=os.environ.get("BATCH_POOL_ID", BatchDefaults.POOL_ID),
            pool_vm_size=os.environ.get("BATCH_POOL_VM_SIZE", BatchDefaults.POOL_VM_SIZE),
            pool_node_count=int(os.environ.get("BATCH_POOL_NODE_COUNT", str(BatchDefaults.POOL_NODE_COUNT))),
            image_publisher=os.environ.get("BATCH_IMAGE_PUBLISHER", BatchDefaults.IMAGE_PUBLISHER),
            image_offer=os.environ.get("BATCH_IMAGE_OFFER", BatchDefaults.IMAGE_OFFER),
            image_sku=os.environ.get("BATCH_IMAGE_SKU", BatchDefaults.IMAGE_SKU),
            image_version=os.environ.get("BATCH_IMAGE_VERSION", BatchDefaults.IMAGE_VERSION),
            node_agent_sku_id=os.environ.get("BATCH_NODE_AGENT_SKU", BatchDefaults.NODE_AGENT_SKU_ID),
            job_id=os.environ.get("BATCH_JOB_ID", BatchDefaults.JOB_ID),
            app_package_id=os.environ.get("SQLPACKAGE_APP_ID", SqlPackageDefaults.APP_PACKAGE_ID),
            app_package_version=os.environ.get("SQLPACKAGE_APP_VERSION", SqlPackageDefaults.APP_PACKAGE_VERSION),
            request_retry_count=int(os.environ.get("BATCH_REQUEST_RETRY_COUNT", str(BatchDefaults.REQUEST_RETRY_COUNT))),
        )
