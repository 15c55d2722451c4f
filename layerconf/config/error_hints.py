"""Error hints for configuration loading and validation errors.

Provides user-friendly hints with actionable remediation steps
for common configuration errors.
"""

from typing import Final


# Mapping of error types to user-friendly hints
ERROR_HINTS: Final[dict[str, str]] = {
    # Key errors
    "invalid_key": "Configuration keys must be non-empty, e.g. 'database.host'.",
    "undefined_key": (
        "Set the key in a config file, environment variable or --config-KEY option, "
        "pass a default, or use --permissive-config."
    ),
    "invalid_mapping": "Mappings need a kind (env, cli or short), a source and a target key.",
    # Type errors
    "type_conversion": "The value does not match the requested type.",
    "int_type": "This value must be an integer (whole number, optional leading '-').",
    "bool_type": "This value must be one of: true/false, yes/no, 1/0, on/off, enabled/disabled.",
    # Value errors
    "empty_value": "The key is defined but empty. Give it a value or remove it.",
    # File errors
    "file_unreadable": "The file does not exist or cannot be read. Check the file path and permissions.",
    "unsupported_format": "Install jq (JSON) or yq (YAML), or switch CONFIG_FLATTENER_BACKEND to 'python'.",
    "document_parse_error": "Invalid JSON/YAML syntax. Check quoting, brackets and indentation.",
}

# Hints selected by the requested type of a failed conversion
TYPE_HINTS: Final[dict[str, str]] = {
    "int": ERROR_HINTS["int_type"],
    "bool": ERROR_HINTS["bool_type"],
}


def get_error_hint(error_type: str, expected_type: str | None = None) -> str:
    """Get a user-friendly hint for a configuration error.

    Args:
        error_type: The error code (e.g., 'undefined_key', 'file_unreadable').
        expected_type: Requested type for conversion errors.

    Returns:
        A user-friendly hint string.
    """
    if error_type == "type_conversion" and expected_type in TYPE_HINTS:
        return TYPE_HINTS[expected_type]

    return ERROR_HINTS.get(
        error_type, "Check the configuration documentation for valid values."
    )


def format_config_error(
    location: str,
    message: str,
    error_type: str,
    *,
    expected_type: str | None = None,
    include_hint: bool = True,
) -> str:
    """Format a configuration error with optional hint.

    Args:
        location: The key or file path the error relates to.
        message: The original error message.
        error_type: The error code.
        expected_type: Requested type for conversion errors.
        include_hint: Whether to include a hint.

    Returns:
        Formatted error string.
    """
    base = f"{location}: {message}" if location else message
    if include_hint:
        hint = get_error_hint(error_type, expected_type)
        return f"{base}\n    Hint: {hint}"
    return base
