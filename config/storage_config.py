"""
Azure Storage Configuration.

Provides configuration for:
    - Storage account credentials (shared key, used to sign SAS tokens)
    - Endpoint suffix (public cloud by default)
    - SAS expiry horizon

The account must have no firewall rules and hierarchical namespace
disabled, otherwise Batch nodes cannot reach the container SAS URLs.

Exports:
    StorageConfig: Pydantic storage configuration model
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from .defaults import StorageDefaults


class StorageConfig(BaseModel):
    """Blob Storage account configuration."""

    account_name: Optional[str] = Field(
        default=None,
        description="Storage account name (lowercase alphanumeric, 3-24 chars)"
    )

    account_key: Optional[str] = Field(
        default=None,
        repr=False,
        description="Storage account shared key"
    )

    endpoint_suffix: str = Field(
        default=StorageDefaults.ENDPOINT_SUFFIX,
        description="Storage endpoint suffix"
    )

    sas_expiry_hours: int = Field(
        default=StorageDefaults.SAS_EXPIRY_HOURS,
        ge=1,
        le=StorageDefaults.SAS_EXPIRY_MAX_HOURS,
        description="Lifetime of every issued SAS token, in hours"
    )

    @property
    def connection_string(self) -> str:
        """Shared-key connection string for BlobServiceClient."""
        return (
            f"DefaultEndpointsProtocol=https;AccountName={self.account_name};"
            f"AccountKey={self.account_key};EndpointSuffix={self.endpoint_suffix}"
        )

    @property
    def account_url(self) -> str:
        return f"https://{self.account_name}.blob.{self.endpoint_suffix}"

    def debug_dict(self) -> dict:
        """Configuration with the shared key masked."""
        return {
            'account_name': self.account_name,
            'account_key': '***MASKED***' if self.account_key else None,
            'endpoint_suffix': self.endpoint_suffix,
            'sas_expiry_hours': self.sas_expiry_hours,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            account_name=os.environ.get("STORAGE_ACCOUNT_NAME") or None,
            account_key=os.environ.get("STORAGE_ACCOUNT_KEY") or None,
            endpoint_suffix=os.environ.get("STORAGE_ENDPOINT_SUFFIX", StorageDefaults.ENDPOINT_SUFFIX),
            sas_expiry_hours=int(os.environ.get("SAS_EXPIRY_HOURS", str(StorageDefaults.SAS_EXPIRY_HOURS))),
        )
