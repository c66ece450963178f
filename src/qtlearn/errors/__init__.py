"""Centralized error definitions for qtlearn.

This module provides a unified error hierarchy for the query tree learner.
Only two families are ever raised: configuration problems, detected before any
search starts, and external resource problems such as an unreadable graph
file. A learning round that finds no acceptable tree is a normal outcome and
is logged by the learner instead of raised.

Usage:
    from qtlearn.errors import ConfigurationError, handle_error

    try:
        learner = QTL2Disjunctive(problem, cache, config)
    except QTLearnError as e:
        print(handle_error(e))
"""

from __future__ import annotations

from qtlearn.errors.user_messages import (
    get_user_message,
    get_recovery_suggestion,
    format_error_for_user,
)


# =============================================================================
# Base Error
# =============================================================================


class QTLearnError(Exception):
    """Base exception for all qtlearn errors.

    Attributes:
        code: Error code for categorization
        user_message: User-friendly message (optional override)
        recoverable: Whether the error is potentially recoverable
        details: Additional error details for debugging
    """

    code: str = "QTLEARN_ERROR"
    default_message: str = "An unexpected error occurred"
    recoverable: bool = True

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message or self.default_message
        self._user_message = user_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Get user-friendly message."""
        if self._user_message:
            return self._user_message
        return get_user_message(self)

    @property
    def recovery_suggestion(self) -> str:
        """Get recovery suggestion."""
        return get_recovery_suggestion(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "recoverable": self.recoverable,
            "details": self.details,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(QTLearnError):
    """Base error for configuration issues."""

    code = "CONFIGURATION_ERROR"
    default_message = "Configuration error"
    recoverable = False


class InvalidConfigError(ConfigurationError):
    """Configuration file failed validation."""

    code = "INVALID_CONFIG"
    default_message = "Invalid configuration"


class LearningProblemUnsupportedError(ConfigurationError):
    """The learner cannot handle the given kind of learning problem."""

    code = "LEARNING_PROBLEM_UNSUPPORTED"
    default_message = "Unsupported learning problem"

    def __init__(
        self,
        problem_kind: str,
        *,
        supported: tuple[str, ...] = (),
    ) -> None:
        super().__init__(
            f"Learning problem of kind '{problem_kind}' is not supported",
            details={"problem_kind": problem_kind, "supported": list(supported)},
        )
        self.problem_kind = problem_kind


# =============================================================================
# External Resource Errors
# =============================================================================


class ExternalResourceError(QTLearnError):
    """Base error for resources the learner reads but does not own."""

    code = "EXTERNAL_RESOURCE_ERROR"
    default_message = "External resource unavailable"


class GraphLoadError(ExternalResourceError):
    """The graph model could not be loaded."""

    code = "GRAPH_LOAD_ERROR"
    default_message = "Failed to load the graph model"


# =============================================================================
# Error Handler
# =============================================================================


def handle_error(error: Exception) -> str:
    """Handle an error and return a user-friendly message.

    Args:
        error: The exception to handle

    Returns:
        User-friendly error message with recovery suggestion
    """
    return format_error_for_user(error)


def is_recoverable(error: Exception) -> bool:
    """Check if an error is potentially recoverable.

    Args:
        error: The exception to check

    Returns:
        True if the error is recoverable
    """
    if isinstance(error, QTLearnError):
        return error.recoverable
    return False


__all__ = [
    # Base
    "QTLearnError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
    "LearningProblemUnsupportedError",
    # External resources
    "ExternalResourceError",
    "GraphLoadError",
    # Handlers
    "handle_error",
    "is_recoverable",
]
