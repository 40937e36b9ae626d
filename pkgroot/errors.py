"""Error formatting utilities for consistent error messages.

This module provides helper functions for formatting error messages consistently
across the codebase. Audit-log lines produced by the installer use the same
helpers, so the ``Error: `` prefix doubles as the failure marker that callers
scan for after an install or uninstall.

Error Style Guide:
- User-facing errors and failed audit-log lines use the 'Error: ' prefix
- Non-fatal conditions use the 'Warning: ' prefix
- Field errors use structured format: '<entity> field '<field>' <issue>'
- Use present tense: 'must be', 'is required'
- Include actionable hints where helpful
"""

ERROR_MARKER = "Error"
WARNING_MARKER = "Warning"


class ConfigError(Exception):
    """Raised when config loading or parsing fails.

    Provides detailed error messages including line numbers,
    column positions, and caret indicators for syntax errors.
    """
    pass


class CatalogError(Exception):
    """Raised when a package archive cannot be found, opened or created."""
    pass


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Args:
        message: The error message to format

    Returns:
        Formatted error message with 'Error: ' prefix

    Examples:
        >>> format_error("file not found")
        'Error: file not found'

        >>> format_error("dependency package [lib, v1.0] not found")
        'Error: dependency package [lib, v1.0] not found'
    """
    return f"{ERROR_MARKER}: {message}"


def format_warning(message: str) -> str:
    """Format a warning message with consistent prefix.

    Examples:
        >>> format_warning("maximum orphan passes reached")
        'Warning: maximum orphan passes reached'
    """
    return f"{WARNING_MARKER}: {message}"


def is_error_message(message: str) -> bool:
    """Return True if an audit-log message carries the error marker.

    The check is case-insensitive so that lines written as ``error:`` or
    ``ERROR:`` by external tooling are also treated as failures.

    Examples:
        >>> is_error_message("Error: package too old")
        True
        >>> is_error_message("Adding files from package (lib, v1.0)")
        False
    """
    return message.lower().startswith(ERROR_MARKER.lower())


def format_field_error(entity: str, field: str, issue: str) -> str:
    """Format a field validation error with structured format.

    Args:
        entity: Name of the entity being validated (e.g., "Package 'lib'")
        field: Name of the field that failed validation
        issue: Description of the issue (e.g., "must be a non-empty string")

    Returns:
        Formatted field error message

    Examples:
        >>> format_field_error("Package 'lib'", "name", "must be a non-empty string")
        "Package 'lib' field 'name' must be a non-empty string"

        >>> format_field_error("Dependency 'core'", "minimum_version", "is required")
        "Dependency 'core' field 'minimum_version' is required"
    """
    return f"{entity} field '{field}' {issue}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Args:
        message: The error message
        suggestion: Helpful suggestion or hint for the user

    Returns:
        Formatted error with suggestion

    Examples:
        >>> format_suggestion("package 'foo' not found", "run 'pkgroot list --catalog' to see available packages")
        "Error: package 'foo' not found. Hint: run 'pkgroot list --catalog' to see available packages"
    """
    return f"{format_error(message)}. Hint: {suggestion}"


__all__ = [
    "ConfigError",
    "CatalogError",
    "ERROR_MARKER",
    "WARNING_MARKER",
    "format_error",
    "format_warning",
    "is_error_message",
    "format_field_error",
    "format_suggestion",
]
