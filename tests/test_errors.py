"""
Tests for the errors module.

This test module validates:
- ToolError base class functionality
- ValidationError, NotFoundError, ProviderError and InternalError codes
- Error serialization (to_dict)
"""

from __future__ import annotations

import pytest

from mcp_github.errors import (
    FatalStartupError,
    InternalError,
    NotFoundError,
    ProviderError,
    ToolError,
    TransportError,
    ValidationError,
)

# =============================================================================
# Tests for ToolError Base Class
# =============================================================================


class TestToolError:
    """Tests for ToolError base class."""

    def test_init_with_all_args(self) -> None:
        error = ToolError(
            error_code="test_error",
            message="Test error message",
            details={"key": "value"},
        )

        assert error.error_code == "test_error"
        assert error.message == "Test error message"
        assert error.details == {"key": "value"}

    def test_init_with_minimal_args(self) -> None:
        error = ToolError(error_code="test_error", message="Test message")

        assert error.details == {}

    def test_str_representation(self) -> None:
        error = ToolError(error_code="test_error", message="Test error message")
        assert str(error) == "Test error message"

    def test_repr_representation(self) -> None:
        error = ToolError(error_code="x", message="msg", details={"a": 1})
        assert repr(error) == "ToolError(error_code='x', message='msg', details={'a': 1})"

    def test_to_dict(self) -> None:
        error = ToolError(error_code="x", message="msg", details={"a": 1})
        assert error.to_dict() == {
            "error_code": "x",
            "message": "msg",
            "details": {"a": 1},
        }

    def test_can_be_raised_and_caught(self) -> None:
        with pytest.raises(ToolError, match="boom"):
            raise ToolError(error_code="x", message="boom")


# =============================================================================
# Tests for Subclasses
# =============================================================================


class TestValidationError:
    """Tests for ValidationError."""

    def test_error_code_and_field(self) -> None:
        error = ValidationError(
            "Parameter 'owner' is required", field="owner", constraint="required"
        )

        assert isinstance(error, ToolError)
        assert error.error_code == "invalid_argument"
        assert error.field == "owner"
        assert error.constraint == "required"
        assert error.details == {"field": "owner", "constraint": "required"}

    def test_extra_details_are_merged(self) -> None:
        error = ValidationError(
            "too big", field="per_page", constraint="maximum", details={"maximum": 100}
        )

        assert error.details["maximum"] == 100
        assert error.details["field"] == "per_page"


class TestNotFoundError:
    """Tests for NotFoundError."""

    def test_unknown_operation(self) -> None:
        error = NotFoundError("delete_everything")

        assert error.error_code == "unknown_operation"
        assert "Unknown operation" in error.message
        assert "delete_everything" in error.message
        assert error.details == {"operation": "delete_everything"}


class TestProviderError:
    """Tests for ProviderError."""

    def test_status_code_in_details(self) -> None:
        error = ProviderError("not_found", "GitHub API error (404): Not Found", 404)

        assert error.error_code == "not_found"
        assert error.status_code == 404
        assert error.details["status_code"] == 404

    def test_without_status_code(self) -> None:
        error = ProviderError("unavailable", "connection refused")

        assert error.status_code is None


class TestInternalError:
    """Tests for InternalError."""

    def test_error_code(self) -> None:
        error = InternalError("oops")
        assert error.error_code == "internal"


class TestProcessFatalErrors:
    """Tests for errors that are not ToolErrors."""

    def test_transport_error_is_not_tool_error(self) -> None:
        assert not issubclass(TransportError, ToolError)

    def test_fatal_startup_error_keeps_multiline_message(self) -> None:
        error = FatalStartupError("line one\nline two")
        assert str(error).splitlines() == ["line one", "line two"]
