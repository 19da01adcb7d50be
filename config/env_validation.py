"""
Environment Variable Validation Module.

Validates environment variables at startup using regex patterns to catch
configuration errors EARLY with clear, actionable error messages.

Design Philosophy:
    - FAIL FAST: Catch config errors at startup, not at the first Batch call
    - CLEAR ERRORS: Show exactly what's wrong and how to fix it
    - REGEX VALIDATION: Format validation, not just presence checks
    - ZERO DEPENDENCIES: Only standard library imports

Usage:
    from config.env_validation import validate_environment

    errors = validate_environment()
    for error in errors:
        print(f"{error.var_name}: {error.message}")

Example Validations:
    - BATCH_ACCOUNT_URL must be https://<account>.<region>.batch.azure.com
    - STORAGE_ACCOUNT_NAME must be lowercase alphanumeric (3-24 chars)
    - CLEANUP_POLICY must be retain, delete_job or delete_job_and_pool

Exports:
    ENV_VAR_RULES: Dict of all validation rules
    EnvVarError: Dataclass for validation errors
    EnvVarRule: Dataclass for a single rule
    validate_environment: Main validation function
    validate_single_var: Validate one variable
    log_validation_results: Log errors/warnings, return pass/fail
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Any


# ============================================================================
# VALIDATION ERROR
# ============================================================================

@dataclass
class EnvVarError:
    """Result of a failed environment variable validation."""
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"  # error, warning

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "var_name": self.var_name,
            "message": self.message,
            "current_value": self._mask_sensitive(self.current_value),
            "expected_pattern": self.expected_pattern,
            "fix_suggestion": self.fix_suggestion,
            "severity": self.severity,
        }

    def _mask_sensitive(self, value: Optional[str]) -> Optional[str]:
        """Mask potentially sensitive values."""
        if value is None:
            return None
        sensitive_keywords = ["password", "secret", "key", "token", "connection"]
        var_lower = self.var_name.lower()
        if any(kw in var_lower for kw in sensitive_keywords):
            return "***MASKED***"
        if len(value) > 30:
            return f"{value[:20]}...({len(value)} chars)"
        return value


# ============================================================================
# VALIDATION RULE DEFINITION
# ============================================================================

@dataclass
class EnvVarRule:
    """
    Validation rule for an environment variable.

    Attributes:
        pattern: Compiled regex pattern for validation
        pattern_description: Human-readable description of expected format
        required: Whether this variable must be set
        fix_suggestion: How to fix if validation fails
        example: Example valid value
        default_value: Default value used if not set (for warning messages)
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    default_value: Optional[str] = None


# ============================================================================
# VALIDATION RULES - Single source of truth for env var formats
# ============================================================================

_BATCH_ACCOUNT_URL = re.compile(r"^https://[a-z0-9]{3,24}\.[a-z0-9-]+\.batch\.azure\.com/?$", re.IGNORECASE)
_AZURE_ACCOUNT_NAME = re.compile(r"^[a-z0-9]{3,24}$")
_NON_EMPTY = re.compile(r"^\S+$")
_RESOURCE_ID = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")
_NON_NEGATIVE_INT = re.compile(r"^[0-9]+$")
_POSITIVE_NUMBER = re.compile(r"^(?=.*[1-9])[0-9]+(\.[0-9]+)?$")
_BOOLEAN = re.compile(r"^(true|false|1|0|yes|no)$", re.IGNORECASE)
_CLEANUP_POLICY = re.compile(r"^(retain|delete_job|delete_job_and_pool)$", re.IGNORECASE)
_LOG_LEVEL = re.compile(r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", re.IGNORECASE)


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    # =========================================================================
    # BATCH ACCOUNT (Critical - no defaults)
    # =========================================================================
    "BATCH_ACCOUNT_URL": EnvVarRule(
        pattern=_BATCH_ACCOUNT_URL,
        pattern_description="https URL ending in .batch.azure.com",
        required=True,
        fix_suggestion="Copy the account endpoint from the Batch account Keys blade",
        example="https://mybatch.westus2.batch.azure.com",
    ),
    "BATCH_ACCOUNT_NAME": EnvVarRule(
        pattern=_AZURE_ACCOUNT_NAME,
        pattern_description="Lowercase alphanumeric, 3-24 chars",
        required=True,
        fix_suggestion="Use the Batch account name (not the URL)",
        example="mybatch",
    ),
    "BATCH_ACCOUNT_KEY": EnvVarRule(
        pattern=_NON_EMPTY,
        pattern_description="Base64 shared key",
        required=True,
        fix_suggestion="Copy the primary access key from the Batch account",
        example="<base64 key>",
    ),

    # =========================================================================
    # STORAGE ACCOUNT (Critical - no defaults)
    # =========================================================================
    "STORAGE_ACCOUNT_NAME": EnvVarRule(
        pattern=_AZURE_ACCOUNT_NAME,
        pattern_description="Lowercase alphanumeric, 3-24 chars",
        required=True,
        fix_suggestion="Use an account without firewall rules and with hierarchical namespace disabled",
        example="mystorage",
    ),
    "STORAGE_ACCOUNT_KEY": EnvVarRule(
        pattern=_NON_EMPTY,
        pattern_description="Base64 shared key",
        required=True,
        fix_suggestion="Copy key1 from the storage account Access keys blade",
        example="<base64 key>",
    ),

    # =========================================================================
    # BATCH RESOURCES (Optional)
    # =========================================================================
    "BATCH_POOL_ID": EnvVarRule(
        pattern=_RESOURCE_ID,
        pattern_description="Letters, digits, hyphen, underscore (max 64)",
        required=False,
        fix_suggestion="Pick a stable pool id shared by all operators",
        example="sqlpackage-pool",
        default_value="sqlpackage-pool",
    ),
    "BATCH_JOB_ID": EnvVarRule(
        pattern=_RESOURCE_ID,
        pattern_description="Letters, digits, hyphen, underscore (max 64)",
        required=False,
        fix_suggestion="Pick a stable job id shared by all operators",
        example="importexport",
        default_value="importexport",
    ),
    "BATCH_POOL_NODE_COUNT": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer",
        required=False,
        fix_suggestion="Use 1 unless several exports run concurrently",
        example="1",
        default_value="1",
    ),
    "BATCH_REQUEST_RETRY_COUNT": EnvVarRule(
        pattern=_NON_NEGATIVE_INT,
        pattern_description="Non-negative integer",
        required=False,
        fix_suggestion="Set request-level retries for Batch SDK calls",
        example="3",
        default_value="3",
    ),

    # =========================================================================
    # MONITOR / SAS (Optional)
    # =========================================================================
    "TASK_MONITOR_TIMEOUT_MINUTES": EnvVarRule(
        pattern=_POSITIVE_NUMBER,
        pattern_description="Positive number of minutes",
        required=False,
        fix_suggestion="Raise for large databases; the task keeps running after a timeout",
        example="30",
        default_value="5",
    ),
    "TASK_MONITOR_POLL_SECONDS": EnvVarRule(
        pattern=_POSITIVE_NUMBER,
        pattern_description="Positive number of seconds",
        required=False,
        fix_suggestion="Seconds between task state queries",
        example="10",
        default_value="10",
    ),
    "SAS_EXPIRY_HOURS": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer, at most 168",
        required=False,
        fix_suggestion="Must cover the job's max wall clock time",
        example="24",
        default_value="24",
    ),
    "FAIL_ON_TASK_EXIT_CODE": EnvVarRule(
        pattern=_BOOLEAN,
        pattern_description="true/false",
        required=False,
        fix_suggestion="Set true to fail the run when sqlpackage exits non-zero",
        example="false",
        default_value="false",
    ),
    "CLEANUP_POLICY": EnvVarRule(
        pattern=_CLEANUP_POLICY,
        pattern_description="retain, delete_job or delete_job_and_pool",
        required=False,
        fix_suggestion="Keep 'retain' to reuse the pool across runs",
        example="retain",
        default_value="retain",
    ),
    "LOG_LEVEL": EnvVarRule(
        pattern=_LOG_LEVEL,
        pattern_description="DEBUG, INFO, WARNING, ERROR or CRITICAL",
        required=False,
        fix_suggestion="Use a standard logging level name",
        example="INFO",
        default_value="INFO",
    ),
}


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[EnvVarError]:
    """
    Validate a single environment variable against its rule.

    Returns:
        EnvVarError if validation fails or warning if using default, None if passes
    """
    value = os.environ.get(var_name)

    if rule.required and not value:
        return EnvVarError(
            var_name=var_name,
            message="Required environment variable not set",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    if not value:
        if include_warnings and rule.default_value is not None:
            return EnvVarError(
                var_name=var_name,
                message="Not set, using default value",
                current_value=None,
                expected_pattern=f"Default: {rule.default_value}",
                fix_suggestion=f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    if not rule.pattern.match(value):
        return EnvVarError(
            var_name=var_name,
            message="Invalid format",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    return None


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_warnings: bool = True
) -> List[EnvVarError]:
    """
    Validate all environment variables against their rules.

    Returns:
        List of EnvVarError objects (errors and optionally warnings)
    """
    if rules is None:
        rules = ENV_VAR_RULES

    results = []
    for var_name, rule in rules.items():
        result = validate_single_var(var_name, rule, include_warnings=include_warnings)
        if result:
            results.append(result)

    return results


def log_validation_results(logger) -> bool:
    """
    Log validation results at appropriate levels.

    Errors at ERROR, defaults in use at DEBUG (there are many and they are
    expected). Returns True if no errors.
    """
    all_results = validate_environment(include_warnings=True)

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    for error in errors:
        logger.error(
            f"ENV VAR ERROR: {error.var_name} - {error.message}",
            extra={'custom_dimensions': error.to_dict()}
        )

    for warning in warnings:
        logger.debug(f"ENV VAR DEFAULT: {warning.var_name} → {warning.expected_pattern}")

    if errors:
        logger.error(f"❌ Environment validation failed: {len(errors)} errors")
        return False

    logger.info(f"✅ Environment validation passed ({len(warnings)} vars using defaults)")
    return True


__all__ = [
    "ENV_VAR_RULES",
    "EnvVarRule",
    "EnvVarError",
    "validate_environment",
    "validate_single_var",
    "log_validation_results",
]
