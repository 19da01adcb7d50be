#!/usr/bin/env python3
"""
sqlpackage-batch CLI Entry Point.

Runs one SqlPackage export or import on Azure Batch, driven by a JSON
parameter file.

Usage:
    sqlpackage-batch <parameterFile> <maxWallClockTimeHours> <maxTaskRetryCount>

    parameterFile       The Import or Export json file
    maxWallClockTime    Hours the job is allowed to run for (default 12)
    maxTaskRetryCount   Retries a task is allowed on failure (default 3)

Environment Variables (Required):
    BATCH_ACCOUNT_URL, BATCH_ACCOUNT_NAME, BATCH_ACCOUNT_KEY
    STORAGE_ACCOUNT_NAME, STORAGE_ACCOUNT_KEY

Exit status is 0 when every task completed, 1 on any error. A JSON
report of the run is printed to stdout in both cases when available;
log lines go to stderr. DEBUG_MODE=true also logs the masked configuration.
"""

import json
import sys
from typing import List, Optional

from config import debug_config, get_config
from config.defaults import OperationDefaults
from config.env_validation import log_validation_results
from core.models import load_parameters_file
from exceptions import BusinessLogicError, ConfigurationError
from infrastructure import RepositoryFactory
from services import Orchestrator, ParameterValidator
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "batch_wrapper")

USAGE = """Usage: sqlpackage-batch fileName MaxWallClockTime MaxTaskRetryCount
fileName <string>: The Import or Export json file.
MaxWallClockTime <int>: The number of hours the job is allowed to run for. Defaults to 12.
MaxTaskRetryCount <int>: The number of retries a task is allowed to rerun in case of failures. Defaults to 3."""


def usage() -> None:
    print(USAGE, file=sys.stderr)


def parse_int(value: str, default: int) -> int:
    """
    int(value), or default when value is missing or unparseable.

    Parseable values pass through unchanged, including -1 (unlimited
    retries). Batch rejects out-of-range constraints on job creation.
    """
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        logger.warning(f"Could not parse '{value}' as an integer, using default {default}")
        return default


def _print_report(report) -> None:
    print(json.dumps(report.to_dict(), indent=2, default=str))


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI main.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])

    Returns:
        Process exit status
    """
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 3:
        usage()
        logger.error("Arguments are missing. Aborting")
        return 1

    parameter_file = args[0]
    max_wall_clock_time_hours = parse_int(args[1], OperationDefaults.MAX_WALL_CLOCK_TIME_HOURS)
    max_task_retry_count = parse_int(args[2], OperationDefaults.MAX_TASK_RETRY_COUNT)
    logger.info(
        f"File name = {parameter_file}",
        extra={'custom_dimensions': {
            'max_wall_clock_time_hours': max_wall_clock_time_hours,
            'max_task_retry_count': max_task_retry_count,
        }}
    )

    try:
        config = get_config()
        config.validate_accounts()
        if not log_validation_results(logger):
            raise ConfigurationError("Environment validation failed; see ENV VAR ERROR entries above")
        if config.debug_mode:
            logger.info("Effective configuration (masked)", extra={'custom_dimensions': debug_config()})

        raw_params = load_parameters_file(parameter_file)
        action = ParameterValidator.parse_action(raw_params.get("Action"))

        repos = RepositoryFactory.create_repositories(config)
        orchestrator = Orchestrator(config, repos['compute_repo'], repos['storage_repo'])
        report = orchestrator.run(action, raw_params, max_wall_clock_time_hours, max_task_retry_count)

    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}", extra={'custom_dimensions': {'field': e.field}})
        report = getattr(e, 'report', None)
        if report is not None:
            _print_report(report)
        return 1
    except BusinessLogicError as e:
        logger.error(f"❌ {type(e).__name__}: {e}")
        report = getattr(e, 'report', None)
        if report is not None:
            _print_report(report)
        return 1
    except Exception as e:
        logger.error(f"❌ Exception was thrown, message = {e}", exc_info=True)
        report = getattr(e, 'report', None)
        if report is not None:
            _print_report(report)
        return 1

    _print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
