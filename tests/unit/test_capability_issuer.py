"""
Capability issuance tests.

Service behaviour is tested against the in-memory storage fake; SAS
signing is tested against a real BlobRepository (signing is offline).
"""

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs

import pytest

from core.models import CapabilityPermission, OperationAction, OperationParameters, READ_LIST, WRITE_ONLY
from exceptions import ContractViolationError
from infrastructure.blob import BlobRepository, to_sas_permissions
from services import capability_issuer
from tests.factories.fakes import FakeStorageRepository
from tests.factories.model_factories import make_export_params, make_import_params

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _fixed_clock():
    return FIXED_NOW


class TestIssueWriteCapability:

    def test_write_only_and_container_scoped(self, storage):
        capability = capability_issuer.issue_write_capability(storage, "bacpacs", clock=_fixed_clock)
        assert capability.permissions == WRITE_ONLY
        assert capability.blob_name is None
        assert capability.resource_uri == "https://teststorage.blob.core.windows.net/bacpacs"
        assert capability.url.startswith(capability.resource_uri + "?sp=w&")

    def test_default_horizon_is_24_hours(self, storage):
        capability = capability_issuer.issue_write_capability(storage, "bacpacs", clock=_fixed_clock)
        assert capability.expiry == FIXED_NOW + timedelta(hours=24)

    @pytest.mark.parametrize("hours", [1, 48, 168])
    def test_custom_horizon(self, storage, hours):
        capability = capability_issuer.issue_write_capability(
            storage, "bacpacs", hours=hours, clock=_fixed_clock
        )
        assert capability.expiry - FIXED_NOW == timedelta(hours=hours)

    @pytest.mark.parametrize("hours", [0, -1, 169])
    def test_horizon_out_of_range(self, storage, hours):
        with pytest.raises(ValueError):
            capability_issuer.issue_write_capability(storage, "bacpacs", hours=hours)
        assert storage.sas_requests == []

    @pytest.mark.parametrize("hours", [1.5, "24", True])
    def test_horizon_must_be_int(self, storage, hours):
        with pytest.raises(ContractViolationError):
            capability_issuer.issue_write_capability(storage, "bacpacs", hours=hours)


class TestIssueReadCapability:

    def test_read_list_and_names_blob(self, storage):
        capability = capability_issuer.issue_read_capability(
            storage, "bacpacs", "backup.bacpac", clock=_fixed_clock
        )
        assert capability.permissions == READ_LIST
        assert capability.blob_name == "backup.bacpac"
        assert CapabilityPermission.WRITE not in capability.permissions

    def test_token_still_container_scoped(self, storage):
        capability_issuer.issue_read_capability(storage, "bacpacs", "backup.bacpac")
        container, permissions, _ = storage.sas_requests[0]
        assert container == "bacpacs"
        assert permissions == READ_LIST


class TestIssueForAction:

    def test_export_creates_container_then_issues_write(self, storage):
        params = OperationParameters.model_validate(make_export_params())
        capability = capability_issuer.issue_for_action(storage, OperationAction.EXPORT, params)
        assert params.target_container_name in storage.containers
        assert storage.calls == ["create_container_if_not_exists", "generate_container_sas"]
        assert capability.permissions == WRITE_ONLY

    def test_export_to_existing_container(self):
        storage = FakeStorageRepository(blobs={("bacpacs", "old.bacpac")})
        params = OperationParameters.model_validate(make_export_params(TargetContainerName="bacpacs"))
        capability_issuer.issue_for_action(storage, OperationAction.EXPORT, params)
        assert storage.containers == {"bacpacs"}

    def test_import_issues_read_without_creating(self, storage):
        params = OperationParameters.model_validate(make_import_params())
        capability = capability_issuer.issue_for_action(storage, OperationAction.IMPORT, params)
        assert storage.containers == set()
        assert capability.blob_name == params.source_file_name
        assert capability.permissions == READ_LIST


class TestEnsureContainerAndBlobExists:

    def test_ensure_container_reports_creation(self, storage):
        assert capability_issuer.ensure_container(storage, "bacpacs") is True
        assert capability_issuer.ensure_container(storage, "bacpacs") is False

    def test_blob_exists(self):
        storage = FakeStorageRepository(blobs={("bacpacs", "backup.bacpac")})
        assert capability_issuer.blob_exists(storage, "bacpacs", "backup.bacpac") is True
        assert capability_issuer.blob_exists(storage, "bacpacs", "other.bacpac") is False


# ============================================================================
# Real SAS signing
# ============================================================================

@pytest.fixture
def blob_repo(dummy_account_key):
    connection_string = (
        "DefaultEndpointsProtocol=https;AccountName=teststorage;"
        f"AccountKey={dummy_account_key};EndpointSuffix=core.windows.net"
    )
    return BlobRepository(connection_string)


class TestBlobRepositorySas:

    def test_write_token(self, blob_repo):
        capability = capability_issuer.issue_write_capability(blob_repo, "bacpacs")
        query = parse_qs(capability.token)
        assert query["sp"] == ["w"]
        assert query["sr"] == ["c"]
        assert "sig" in query
        assert capability.resource_uri == "https://teststorage.blob.core.windows.net/bacpacs"

    def test_read_list_token(self, blob_repo):
        capability = capability_issuer.issue_read_capability(blob_repo, "bacpacs", "backup.bacpac")
        query = parse_qs(capability.token)
        assert query["sp"] == ["rl"]
        assert capability.is_valid_at() is True

    def test_expiry_in_token_matches_capability(self, blob_repo):
        capability = capability_issuer.issue_write_capability(blob_repo, "bacpacs", hours=2)
        query = parse_qs(capability.token)
        assert query["se"] == [capability.expiry.strftime("%Y-%m-%dT%H:%M:%SZ")]


class TestToSasPermissions:

    def test_empty_set_rejected(self):
        with pytest.raises(ContractViolationError):
            to_sas_permissions(frozenset())

    @pytest.mark.parametrize("permissions,expected", [
        (WRITE_ONLY, "w"),
        (READ_LIST, "rl"),
    ])
    def test_only_requested_letters(self, permissions, expected):
        assert str(to_sas_permissions(permissions)) == expected
