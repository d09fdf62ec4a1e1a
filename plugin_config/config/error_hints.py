"""Hints for configuration decode errors.

Provides user-friendly remediation hints for the pydantic error types
that show up when a configuration section is decoded into a typed target.
"""

from typing import Final


# Mapping of pydantic error types to user-friendly hints
ERROR_HINTS: Final[dict[str, str]] = {
    # Missing field errors
    "missing": "This field is required. Add it to the configuration file or set it via environment.",
    # Parsing errors (environment overrides always arrive as strings)
    "int_parsing": "This field must be an integer. Check environment overrides for stray characters.",
    "float_parsing": "This field must be a number. Check environment overrides for stray characters.",
    "bool_parsing": "This field must be true or false (also accepted: 1/0, yes/no, on/off).",
    "time_delta_parsing": "This field must be a duration in seconds or ISO 8601 form (e.g. 'PT30S').",
    # Type errors
    "int_type": "This field must be an integer (whole number).",
    "float_type": "This field must be a number.",
    "string_type": "This field must be a text string.",
    "bool_type": "This field must be true or false.",
    "list_type": "This field must be a list/array.",
    "dict_type": "This field must be an object/mapping.",
    "model_type": "This section must be an object/mapping.",
    "model_attributes_type": "This section must be an object/mapping.",
    "enum": "Check the allowed values in the documentation.",
    # Structural errors
    "extra_forbidden": "Unknown key. Check the spelling or remove it from the configuration.",
    "greater_than_equal": "The value is too small. Check the minimum allowed.",
    "less_than_equal": "The value is too large. Check the maximum allowed.",
}

DEFAULT_HINT: Final = "Check the configuration documentation for valid values."


def get_error_hint(error_type: str) -> str:
    """Get a user-friendly hint for a decode error.

    Args:
        error_type: The pydantic error type (e.g. 'missing', 'int_parsing').

    Returns:
        A user-friendly hint string.
    """
    return ERROR_HINTS.get(error_type, DEFAULT_HINT)


def format_validation_error(
    location: str,
    message: str,
    error_type: str,
    *,
    include_hint: bool = True,
) -> str:
    """Format a decode error with optional hint.

    Args:
        location: The error location (e.g. 'http.pool.num_workers').
        message: The original error message.
        error_type: The error type.
        include_hint: Whether to include a hint.

    Returns:
        Formatted error string.
    """
    base = f"{location}: {message}"
    if include_hint:
        return f"{base}\n    Hint: {get_error_hint(error_type)}"
    return base
