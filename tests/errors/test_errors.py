"""Tests for the error hierarchy and user-facing messages."""

from qtlearn.errors import (
    ConfigurationError,
    ExternalResourceError,
    GraphLoadError,
    InvalidConfigError,
    LearningProblemUnsupportedError,
    QTLearnError,
    handle_error,
    is_recoverable,
)
from qtlearn.errors.user_messages import (
    ERROR_MESSAGES,
    RECOVERY_SUGGESTIONS,
    format_error_for_cli,
    get_recovery_suggestion,
    get_user_message,
)


class TestErrorHierarchy:
    """Error classes and their attributes."""

    def test_configuration_errors(self):
        assert issubclass(InvalidConfigError, ConfigurationError)
        assert issubclass(LearningProblemUnsupportedError, ConfigurationError)
        assert issubclass(ConfigurationError, QTLearnError)
        assert not is_recoverable(InvalidConfigError())

    def test_resource_errors(self):
        assert issubclass(GraphLoadError, ExternalResourceError)
        assert is_recoverable(GraphLoadError())

    def test_default_message(self):
        error = GraphLoadError()
        assert error.message == "Failed to load the graph model"
        assert str(error) == error.message

    def test_unsupported_problem_details(self):
        error = LearningProblemUnsupportedError("class", supported=("pos_neg",))
        assert error.problem_kind == "class"
        assert error.details == {"problem_kind": "class", "supported": ["pos_neg"]}
        assert "class" in error.message

    def test_to_dict(self):
        error = InvalidConfigError("bad beta", details={"field": "coverage_beta"})
        data = error.to_dict()
        assert data["code"] == "INVALID_CONFIG"
        assert data["message"] == "bad beta"
        assert data["user_message"] == ERROR_MESSAGES["INVALID_CONFIG"]
        assert data["recoverable"] is False
        assert data["details"] == {"field": "coverage_beta"}

    def test_user_message_override(self):
        assert GraphLoadError(user_message="custom").user_message == "custom"

    def test_plain_exceptions_are_not_recoverable(self):
        assert not is_recoverable(ValueError("x"))


class TestUserMessages:
    """Message catalogs and formatting."""

    def test_every_error_code_has_messages(self):
        for error_class in (
            QTLearnError,
            ConfigurationError,
            InvalidConfigError,
            ExternalResourceError,
            GraphLoadError,
        ):
            assert error_class.code in ERROR_MESSAGES
            assert error_class.code in RECOVERY_SUGGESTIONS
        assert LearningProblemUnsupportedError.code in ERROR_MESSAGES

    def test_lookup_by_code_string(self):
        assert get_user_message("GRAPH_LOAD_ERROR") == ERROR_MESSAGES["GRAPH_LOAD_ERROR"]
        assert get_recovery_suggestion("nonsense") == RECOVERY_SUGGESTIONS["UNKNOWN_ERROR"]

    def test_unknown_exception(self):
        assert get_user_message(ValueError("x")) == ERROR_MESSAGES["UNKNOWN_ERROR"]

    def test_handle_error(self):
        text = handle_error(GraphLoadError())
        assert ERROR_MESSAGES["GRAPH_LOAD_ERROR"] in text
        assert "Suggestion:" in text

    def test_format_for_cli(self):
        error = GraphLoadError("Cannot read graph.json", details={"path": "graph.json"})
        text = format_error_for_cli(error)
        assert text.startswith("Error [GRAPH_LOAD_ERROR]")
        assert "Cannot read graph.json" in text
        assert "path: graph.json" in text
