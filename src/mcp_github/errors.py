"""
Error types for the GitHub MCP Server.

This module defines the ToolError base class and subclasses for errors raised
while dispatching an operation. Domain errors should be expressed using
ToolError (or subclasses) instead of building JSON-RPC error objects directly.

Per-invocation errors (ToolError subclasses) are converted into protocol
responses at the dispatcher boundary. TransportError and FatalStartupError are
process-fatal and are only handled by the process lifecycle in main.py.
"""

from __future__ import annotations

from typing import Any


class ToolError(Exception):
    """
    Base exception class for MCP tool errors.

    ToolError instances are caught at the dispatcher boundary and mapped to
    JSON-RPC errors or error tool results.

    Attributes:
        error_code: Internal error code string (e.g., "invalid_argument",
            "unknown_operation", "not_found", "internal").
        message: Human-readable error message.
        details: Optional structured details (e.g., parameter values, context).

    Example:
        >>> raise ToolError(
        ...     error_code="invalid_argument",
        ...     message="Parameter 'per_page' must be <= 100",
        ...     details={"field": "per_page"},
        ... )
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize a ToolError.

        Args:
            error_code: Internal error code string identifying the error category.
            message: Human-readable error message.
            details: Optional dictionary with structured error details.
        """
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for serialization.

        Returns:
            Dictionary with error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ToolError):
    """
    Error raised when operation arguments fail schema validation.

    Detected before any remote call. The details always carry the offending
    ``field`` and the violated ``constraint`` (``required``, ``type``,
    ``minimum``, ``maximum`` or ``enum``).
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        constraint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize a ValidationError."""
        merged: dict[str, Any] = {"field": field, "constraint": constraint}
        merged.update(details or {})
        super().__init__(
            error_code="invalid_argument", message=message, details=merged
        )
        self.field = field
        self.constraint = constraint


class NotFoundError(ToolError):
    """
    Error raised when an invocation names an operation that is not registered.
    """

    def __init__(self, name: str) -> None:
        """Initialize a NotFoundError for the given operation name."""
        super().__init__(
            error_code="unknown_operation",
            message=f"Unknown operation: '{name}'",
            details={"operation": name},
        )
        self.name = name


class ProviderError(ToolError):
    """
    Error raised when the GitHub API rejects or fails a call.

    The error code is derived from the HTTP status (see
    ``mcp_github.provider.error_code_for_status``): ``unauthenticated``,
    ``permission_denied``, ``not_found``, ``resource_exhausted``,
    ``conflict``, ``invalid_argument``, ``unavailable`` or ``internal``.

    Attributes:
        status_code: HTTP status returned by GitHub, or None for
            connection-level failures.
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize a ProviderError."""
        merged: dict[str, Any] = {"status_code": status_code}
        merged.update(details or {})
        super().__init__(error_code=error_code, message=message, details=merged)
        self.status_code = status_code


class InternalError(ToolError):
    """
    Error raised for unexpected internal errors.

    This error maps to the "internal" error code and should be used for
    unexpected exceptions that should be logged with full stack traces.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InternalError."""
        super().__init__(error_code="internal", message=message, details=details)


class TransportError(Exception):
    """Raised when the stdio transport cannot be established or breaks."""


class FatalStartupError(Exception):
    """
    Raised when the process cannot start (missing credential, etc.).

    The message may span several lines; main() prints it verbatim to stderr
    and exits with status 1.
    """
