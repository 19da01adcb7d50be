"""
Operation Parameter Models.

Defines OperationParameters, the immutable representation of the JSON
parameter file, plus the loader for that file.

Field names are snake_case in Python and PascalCase in JSON (aliases),
so the operator-facing file format is unchanged:

    {
        "Action": "Export",
        "ServerName": "myserver.database.windows.net",
        "DatabaseName": "sales",
        "SqlServerAdmin": "sqladmin",
        "SqlServerAdminPassword": "...",
        "TargetContainerName": "bacpacs",
        "TargetFileName": "sales.bacpac"
    }

Exports:
    OperationParameters: Frozen parameter model
    load_parameters_file: Read the JSON parameter file into a dict
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from exceptions import ConfigurationError


class OperationParameters(BaseModel):
    """
    Parameters of one export or import.

    Everything is optional at the model level: ParameterValidator decides
    which fields are required for which action, so a missing field yields
    a ConfigurationError with a domain message rather than a pydantic
    error dump.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    action: Optional[str] = Field(default=None, alias="Action")

    # Common
    server_name: Optional[str] = Field(default=None, alias="ServerName")
    database_name: Optional[str] = Field(default=None, alias="DatabaseName")
    sql_server_admin: Optional[str] = Field(default=None, alias="SqlServerAdmin")
    sql_server_admin_password: Optional[str] = Field(default=None, alias="SqlServerAdminPassword", repr=False)

    # Export only
    target_container_name: Optional[str] = Field(default=None, alias="TargetContainerName")
    target_file_name: Optional[str] = Field(default=None, alias="TargetFileName")

    # Import only
    source_container_name: Optional[str] = Field(default=None, alias="SourceContainerName")
    source_file_name: Optional[str] = Field(default=None, alias="SourceFileName")

    @field_validator(
        "server_name", "database_name", "sql_server_admin",
        "target_container_name", "target_file_name",
        "source_container_name", "source_file_name",
        mode="before"
    )
    @classmethod
    def _strip(cls, value: Any) -> Any:
        # Passwords are not stripped.
        return value.strip() if isinstance(value, str) else value

    def to_log_dict(self) -> Dict[str, Any]:
        """Parameters safe to log (password masked)."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if 'SqlServerAdminPassword' in data:
            data['SqlServerAdminPassword'] = '***MASKED***'
        return data


def load_parameters_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read the JSON parameter file.

    Args:
        path: Path to the Import/Export JSON file

    Returns:
        Raw dict, validated later by ParameterValidator

    Raises:
        ConfigurationError: Missing file, invalid JSON, or not a JSON object
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Parameter file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"sqlpackage parameters were not parsable from the json: {e}"
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"sqlpackage parameters must be a JSON object, got {type(data).__name__}"
        )
    return data
