"""
Storage Capability Model.

A Capability is a SAS-signed URL: a time-bounded, permission-scoped
access token for one container, optionally narrowed to one blob.
Generated on demand, embedded in the task, never persisted.

Exports:
    Capability: Issued SAS capability
    WRITE_ONLY: Permission set for export destinations
    READ_LIST: Permission set for import sources
"""

from datetime import datetime, timezone
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import CapabilityPermission


WRITE_ONLY: FrozenSet[CapabilityPermission] = frozenset({CapabilityPermission.WRITE})
READ_LIST: FrozenSet[CapabilityPermission] = frozenset({CapabilityPermission.READ, CapabilityPermission.LIST})


class Capability(BaseModel):
    """
    Issued SAS capability.

    Attributes:
        resource_uri: Container URL (no query string)
        blob_name: Blob the capability was issued for, if any
        permissions: Exactly the permissions the token grants
        expiry: UTC expiry, always in the future at issuance
        token: SAS query string (secret)
    """

    model_config = ConfigDict(frozen=True)

    resource_uri: str
    blob_name: Optional[str] = None
    permissions: FrozenSet[CapabilityPermission]
    expiry: datetime
    token: str = Field(..., repr=False)

    @property
    def url(self) -> str:
        """Container URL with the SAS token appended."""
        return f"{self.resource_uri}?{self.token}"

    @property
    def permission_string(self) -> str:
        """Permissions in SAS order (r, l, w subset of racwdl)."""
        order = [CapabilityPermission.READ, CapabilityPermission.WRITE, CapabilityPermission.LIST]
        return "".join(p.value for p in order if p in self.permissions)

    def is_valid_at(self, moment: Optional[datetime] = None) -> bool:
        moment = moment or datetime.now(timezone.utc)
        return self.expiry > moment

    def to_log_dict(self) -> dict:
        """Everything except the token."""
        return {
            'resource_uri': self.resource_uri,
            'blob_name': self.blob_name,
            'permissions': self.permission_string,
            'expiry': self.expiry.isoformat(),
        }
