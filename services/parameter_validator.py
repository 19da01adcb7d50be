"""
Parameter Validation Service.

Validates an export/import parameter set before any remote call is made.
Checks run in a fixed order and stop at the first violation, so the
operator always sees the most fundamental problem first.

Validation Order:
| # | Check                                           | Applies to |
|---|-------------------------------------------------|------------|
| 1 | Parameters present                              | both       |
| 2 | Action set and equal to the requested action    | both       |
| 3 | ServerName set, ends with .database.windows.net | both       |
| 4 | DatabaseName set                                | both       |
| 5 | SqlServerAdmin / SqlServerAdminPassword set     | both       |
| 6 | Target* (export) or Source* (import) set        | direction  |
| 7 | No field of the other direction set             | direction  |

Exports:
    ParameterValidator: validate() and parse_action()
    DIRECTION_FIELDS: Required fields per action
"""

from typing import Any, Dict, List, Mapping, Tuple, Union

from pydantic import ValidationError

from config.defaults import SqlPackageDefaults
from core.models import OperationAction, OperationParameters
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.VALIDATOR, "ParameterValidator")


# (attribute, JSON name, message when missing)
DIRECTION_FIELDS: Dict[OperationAction, List[Tuple[str, str, str]]] = {
    OperationAction.EXPORT: [
        ("target_container_name", "TargetContainerName",
         "The target container name to save the bacpac to was not specified."),
        ("target_file_name", "TargetFileName",
         "The target bacpac file name was not specified."),
    ],
    OperationAction.IMPORT: [
        ("source_container_name", "SourceContainerName",
         "The source container name containing the bacpac file was not specified."),
        ("source_file_name", "SourceFileName",
         "The source bacpac file name was not specified."),
    ],
}

_OTHER_DIRECTION = {
    OperationAction.EXPORT: OperationAction.IMPORT,
    OperationAction.IMPORT: OperationAction.EXPORT,
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ParameterValidator:
    """
    Stateless validator for OperationParameters.

    Example:
        params = ParameterValidator.validate(raw_json, OperationAction.EXPORT)
    """

    @staticmethod
    def parse_action(value: Any) -> OperationAction:
        """
        Map a raw Action string onto OperationAction (case-insensitive).

        Raises:
            ConfigurationError: Anything other than Import or Export
        """
        if isinstance(value, OperationAction):
            return value
        if _is_blank(value) or not isinstance(value, str):
            raise ConfigurationError(
                "Action was not specified. Accepted values are: [Export/Import]",
                field="Action"
            )
        try:
            return OperationAction.from_string(value)
        except ValueError:
            raise ConfigurationError(
                "Only Import and Export are allowed as actions",
                field="Action"
            ) from None

    @staticmethod
    def _coerce(params: Union[Mapping[str, Any], OperationParameters, None]) -> OperationParameters:
        if params is None:
            raise ConfigurationError("sqlpackage parameters were not parsable from the json")
        if isinstance(params, OperationParameters):
            return params
        if not isinstance(params, Mapping):
            raise ConfigurationError(
                f"sqlpackage parameters must be a JSON object, got {type(params).__name__}"
            )
        try:
            return OperationParameters.model_validate(dict(params))
        except ValidationError as e:
            raise ConfigurationError(
                f"sqlpackage parameters were not parsable from the json: {e.errors()[0]['msg']}"
            ) from e

    @classmethod
    def validate(
        cls,
        params: Union[Mapping[str, Any], OperationParameters, None],
        action: OperationAction
    ) -> OperationParameters:
        """
        Validate parameters for the given action.

        Args:
            params: Raw dict from the JSON file or an OperationParameters
            action: Direction being validated

        Returns:
            Frozen OperationParameters

        Raises:
            ConfigurationError: First violated rule (see module table)
        """
        model = cls._coerce(params)

        requested = cls.parse_action(model.action)
        if requested != action:
            raise ConfigurationError(
                f"Action {requested.value} does not match the requested {action.value} operation",
                field="Action"
            )

        server = model.server_name
        if _is_blank(server) or not server.lower().endswith(SqlPackageDefaults.PUBLIC_SERVER_DOMAIN):
            raise ConfigurationError(
                "The server was either not specified or it's missing the domain name.",
                field="ServerName"
            )

        if _is_blank(model.database_name):
            raise ConfigurationError("The database name was not specified.", field="DatabaseName")

        if _is_blank(model.sql_server_admin):
            raise ConfigurationError("The SQL server admin login was not specified.", field="SqlServerAdmin")
        if _is_blank(model.sql_server_admin_password):
            raise ConfigurationError(
                "The SQL server admin password was not specified.",
                field="SqlServerAdminPassword"
            )

        for attribute, json_name, message in DIRECTION_FIELDS[action]:
            if _is_blank(getattr(model, attribute)):
                raise ConfigurationError(message, field=json_name)

        for attribute, json_name, _ in DIRECTION_FIELDS[_OTHER_DIRECTION[action]]:
            if not _is_blank(getattr(model, attribute)):
                raise ConfigurationError(
                    f"{json_name} is only valid for {_OTHER_DIRECTION[action].value} operations.",
                    field=json_name
                )

        logger.info(
            f"Parameters validated for {action.value}",
            extra={'custom_dimensions': model.to_log_dict()}
        )
        return model


__all__ = ['ParameterValidator', 'DIRECTION_FIELDS']
