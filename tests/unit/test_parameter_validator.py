"""
ParameterValidator tests.

Each rule is checked in isolation against an otherwise valid parameter
set, plus the ordering guarantee (first violation wins).
"""

import pytest

from core.models import OperationAction, OperationParameters
from exceptions import ConfigurationError
from services.parameter_validator import ParameterValidator
from tests.factories.model_factories import make_export_params, make_import_params


class TestParseAction:

    @pytest.mark.parametrize("raw,expected", [
        ("Export", OperationAction.EXPORT),
        ("export", OperationAction.EXPORT),
        ("IMPORT", OperationAction.IMPORT),
        (OperationAction.IMPORT, OperationAction.IMPORT),
    ])
    def test_accepted(self, raw, expected):
        assert ParameterValidator.parse_action(raw) is expected

    @pytest.mark.parametrize("raw", [None, "", "   ", 42])
    def test_missing_action(self, raw):
        with pytest.raises(ConfigurationError, match="Action was not specified") as exc_info:
            ParameterValidator.parse_action(raw)
        assert exc_info.value.field == "Action"

    def test_unknown_action(self):
        with pytest.raises(ConfigurationError, match="Only Import and Export"):
            ParameterValidator.parse_action("Copy")


class TestValidateExport:

    def test_valid_export_returns_model(self):
        raw = make_export_params()
        params = ParameterValidator.validate(raw, OperationAction.EXPORT)
        assert isinstance(params, OperationParameters)
        assert params.target_container_name == raw["TargetContainerName"]

    def test_accepts_model_instance(self):
        model = OperationParameters.model_validate(make_export_params())
        assert ParameterValidator.validate(model, OperationAction.EXPORT) is model

    @pytest.mark.parametrize("field,message", [
        ("DatabaseName", "The database name was not specified."),
        ("SqlServerAdmin", "The SQL server admin login was not specified."),
        ("SqlServerAdminPassword", "The SQL server admin password was not specified."),
        ("TargetContainerName", "The target container name to save the bacpac to was not specified."),
        ("TargetFileName", "The target bacpac file name was not specified."),
    ])
    @pytest.mark.parametrize("blank", [None, "", "  "])
    def test_missing_field(self, field, message, blank):
        raw = make_export_params(**{field: blank})
        with pytest.raises(ConfigurationError) as exc_info:
            ParameterValidator.validate(raw, OperationAction.EXPORT)
        assert str(exc_info.value) == message
        assert exc_info.value.field == field

    @pytest.mark.parametrize("server", [
        None, "", "myserver", "myserver.database.azure.com", "database.windows.net.evil.com",
    ])
    def test_server_without_public_domain_rejected(self, server):
        raw = make_export_params(ServerName=server)
        with pytest.raises(ConfigurationError, match="missing the domain name") as exc_info:
            ParameterValidator.validate(raw, OperationAction.EXPORT)
        assert exc_info.value.field == "ServerName"

    def test_server_domain_case_insensitive(self):
        raw = make_export_params(ServerName="MyServer.DATABASE.Windows.NET")
        assert ParameterValidator.validate(raw, OperationAction.EXPORT).server_name == (
            "MyServer.DATABASE.Windows.NET"
        )

    def test_surrounding_whitespace_stripped(self):
        raw = make_export_params(
            ServerName="  srv.database.windows.net ",
            DatabaseName=" sales\t",
            TargetFileName=" sales.bacpac ",
        )
        params = ParameterValidator.validate(raw, OperationAction.EXPORT)
        assert params.server_name == "srv.database.windows.net"
        assert params.database_name == "sales"
        assert params.target_file_name == "sales.bacpac"

    def test_password_not_stripped(self):
        raw = make_export_params(SqlServerAdminPassword=" Pw-1 ")
        assert ParameterValidator.validate(raw, OperationAction.EXPORT).sql_server_admin_password == " Pw-1 "

    @pytest.mark.parametrize("field", ["SourceContainerName", "SourceFileName"])
    def test_import_field_rejected(self, field):
        raw = make_export_params(**{field: "something"})
        with pytest.raises(ConfigurationError, match="only valid for Import") as exc_info:
            ParameterValidator.validate(raw, OperationAction.EXPORT)
        assert exc_info.value.field == field


class TestValidateImport:

    def test_valid_import_returns_model(self):
        raw = make_import_params()
        params = ParameterValidator.validate(raw, OperationAction.IMPORT)
        assert params.source_file_name == raw["SourceFileName"]

    @pytest.mark.parametrize("field,message", [
        ("SourceContainerName", "The source container name containing the bacpac file was not specified."),
        ("SourceFileName", "The source bacpac file name was not specified."),
    ])
    def test_missing_source_field(self, field, message):
        raw = make_import_params(**{field: None})
        with pytest.raises(ConfigurationError) as exc_info:
            ParameterValidator.validate(raw, OperationAction.IMPORT)
        assert str(exc_info.value) == message

    @pytest.mark.parametrize("field", ["TargetContainerName", "TargetFileName"])
    def test_export_field_rejected(self, field):
        raw = make_import_params(**{field: "something"})
        with pytest.raises(ConfigurationError, match="only valid for Export"):
            ParameterValidator.validate(raw, OperationAction.IMPORT)


class TestValidationOrder:

    def test_none_params(self):
        with pytest.raises(ConfigurationError, match="not parsable"):
            ParameterValidator.validate(None, OperationAction.EXPORT)

    def test_non_mapping_params(self):
        with pytest.raises(ConfigurationError, match="JSON object"):
            ParameterValidator.validate(["Export"], OperationAction.EXPORT)

    def test_action_mismatch(self):
        raw = make_import_params()
        with pytest.raises(ConfigurationError, match="does not match"):
            ParameterValidator.validate(raw, OperationAction.EXPORT)

    def test_server_checked_before_database(self):
        raw = make_export_params(ServerName="myserver", DatabaseName=None)
        with pytest.raises(ConfigurationError) as exc_info:
            ParameterValidator.validate(raw, OperationAction.EXPORT)
        assert exc_info.value.field == "ServerName"

    def test_credentials_checked_before_direction_fields(self):
        raw = make_export_params(SqlServerAdminPassword=None, TargetFileName=None)
        with pytest.raises(ConfigurationError) as exc_info:
            ParameterValidator.validate(raw, OperationAction.EXPORT)
        assert exc_info.value.field == "SqlServerAdminPassword"
