"""
Parameter and capability model tests.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from core.models import (
    Capability,
    CapabilityPermission,
    OperationParameters,
    READ_LIST,
    WRITE_ONLY,
    load_parameters_file,
)
from exceptions import ConfigurationError


class TestOperationParameters:

    def test_populated_from_json_names(self, export_params):
        params = OperationParameters.model_validate(export_params)
        assert params.server_name == export_params["ServerName"]
        assert params.target_file_name == export_params["TargetFileName"]
        assert params.source_file_name is None

    def test_unknown_fields_ignored(self, export_params):
        export_params["Comment"] = "nightly"
        params = OperationParameters.model_validate(export_params)
        assert not hasattr(params, "Comment")

    def test_password_not_in_repr(self, export_params):
        params = OperationParameters.model_validate(export_params)
        assert export_params["SqlServerAdminPassword"] not in repr(params)

    def test_log_dict_masks_password(self, export_params):
        data = OperationParameters.model_validate(export_params).to_log_dict()
        assert data["SqlServerAdminPassword"] == "***MASKED***"
        assert data["DatabaseName"] == export_params["DatabaseName"]

    def test_frozen(self, export_params):
        params = OperationParameters.model_validate(export_params)
        with pytest.raises(Exception):
            params.database_name = "other"


class TestLoadParametersFile:

    def test_reads_json_object(self, tmp_path, import_params):
        path = tmp_path / "import.json"
        path.write_text(json.dumps(import_params), encoding="utf-8")
        assert load_parameters_file(path) == import_params

    def test_reads_utf8_bom(self, tmp_path, import_params):
        path = tmp_path / "import.json"
        path.write_bytes(b"\xef\xbb\xbf" + json.dumps(import_params).encode("utf-8"))
        assert load_parameters_file(str(path))["Action"] == "Import"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_parameters_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="not parsable"):
            load_parameters_file(path)

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_parameters_file(path)


class TestCapability:

    def _capability(self, permissions, expiry=None):
        return Capability(
            resource_uri="https://teststorage.blob.core.windows.net/bacpacs",
            permissions=permissions,
            expiry=expiry or datetime.now(timezone.utc) + timedelta(hours=1),
            token="sv=2021-08-06&sp=w&sig=secret",
        )

    def test_url_appends_token(self):
        capability = self._capability(WRITE_ONLY)
        assert capability.url == (
            "https://teststorage.blob.core.windows.net/bacpacs?sv=2021-08-06&sp=w&sig=secret"
        )

    @pytest.mark.parametrize("permissions,expected", [
        (WRITE_ONLY, "w"),
        (READ_LIST, "rl"),
        (frozenset(CapabilityPermission), "rwl"),
    ])
    def test_permission_string_in_sas_order(self, permissions, expected):
        assert self._capability(permissions).permission_string == expected

    def test_token_hidden_from_repr_and_log_dict(self):
        capability = self._capability(READ_LIST)
        assert "secret" not in repr(capability)
        assert "secret" not in str(capability.to_log_dict())

    def test_is_valid_at(self):
        expiry = datetime(2030, 1, 1, tzinfo=timezone.utc)
        capability = self._capability(WRITE_ONLY, expiry=expiry)
        assert capability.is_valid_at(expiry - timedelta(seconds=1)) is True
        assert capability.is_valid_at(expiry) is False
