"""User-friendly error messages for qtlearn.

This module provides human-readable error messages and recovery suggestions
for all error types, so the command line never shows raw tracebacks.
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Error Message Catalog
# =============================================================================

ERROR_MESSAGES: dict[str, str] = {
    # Configuration errors
    "CONFIGURATION_ERROR": "There's a configuration issue.",
    "INVALID_CONFIG": "The learner configuration is invalid.",
    "LEARNING_PROBLEM_UNSUPPORTED": "This kind of learning problem is not supported.",
    # External resource errors
    "EXTERNAL_RESOURCE_ERROR": "An external resource could not be read.",
    "GRAPH_LOAD_ERROR": "The knowledge graph could not be loaded.",
    # Generic
    "QTLEARN_ERROR": "An unexpected error occurred. Please try again.",
    "UNKNOWN_ERROR": "Something went wrong. Please try again.",
}


# =============================================================================
# Recovery Suggestions
# =============================================================================

RECOVERY_SUGGESTIONS: dict[str, str] = {
    # Configuration errors
    "CONFIGURATION_ERROR": "Check config: qtlearn learn show-config",
    "INVALID_CONFIG": "Fix the reported fields or delete the file to use defaults.",
    "LEARNING_PROBLEM_UNSUPPORTED": "Provide both positive and negative example sets.",
    # External resource errors
    "EXTERNAL_RESOURCE_ERROR": "Verify the resource exists and is readable.",
    "GRAPH_LOAD_ERROR": "The graph file must be a JSON list of subject/predicate/object triples.",
    # Generic
    "QTLEARN_ERROR": "If this persists, please report the issue.",
    "UNKNOWN_ERROR": "Run again with --verbose and report the issue if it continues.",
}


# =============================================================================
# Helper Functions
# =============================================================================


def _error_code(error: Any) -> str:
    if hasattr(error, "code"):
        return error.code
    if isinstance(error, str):
        return error
    return type(error).__name__.upper()


def get_user_message(error: Any) -> str:
    """Get user-friendly message for an error.

    Args:
        error: The error (can be Exception or error code string)

    Returns:
        User-friendly error message
    """
    return ERROR_MESSAGES.get(_error_code(error), ERROR_MESSAGES["UNKNOWN_ERROR"])


def get_recovery_suggestion(error: Any) -> str:
    """Get recovery suggestion for an error.

    Args:
        error: The error (can be Exception or error code string)

    Returns:
        Recovery suggestion
    """
    return RECOVERY_SUGGESTIONS.get(_error_code(error), RECOVERY_SUGGESTIONS["UNKNOWN_ERROR"])


def format_error_for_user(error: Any) -> str:
    """Format a complete user-friendly error message.

    Args:
        error: The error to format

    Returns:
        Complete error message with recovery suggestion
    """
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)

    return f"{message}\n\nSuggestion: {suggestion}"


def format_error_for_cli(error: Any) -> str:
    """Format error for CLI output.

    Args:
        error: The error to format

    Returns:
        CLI-formatted error message
    """
    code = getattr(error, "code", "ERROR")
    lines = [
        f"Error [{code}]: {get_user_message(error)}",
    ]

    detail = getattr(error, "message", None)
    if detail:
        lines.append(f"  {detail}")

    lines.append("")
    lines.append(f"Suggestion: {get_recovery_suggestion(error)}")

    if getattr(error, "details", None):
        lines.append("")
        lines.append("Details:")
        for key, value in error.details.items():
            lines.append(f"  {key}: {value}")

    return "\n".join(lines)


__all__ = [
    "ERROR_MESSAGES",
    "RECOVERY_SUGGESTIONS",
    "get_user_message",
    "get_recovery_suggestion",
    "format_error_for_user",
    "format_error_for_cli",
]
