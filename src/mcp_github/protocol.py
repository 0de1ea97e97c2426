"""
JSON-RPC 2.0 framing for the GitHub MCP Server.

One request per stdin line is parsed into a JSONRPCRequest; every answer is
a JSONRPCResponse serialized back onto a single stdout line. Operation
failures (ToolError) are mapped onto JSON-RPC error codes here so the
dispatcher never builds error objects by hand.

Error codes used:
- -32700: the line is not JSON or not UTF-8
- -32600: the JSON is not a valid request object
- -32601: unknown MCP method or unknown operation
- -32602: malformed tools/call params or invalid operation arguments
- -32603: unexpected server failure
- -32000: any other ToolError code
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from mcp_github.errors import ToolError

# =============================================================================
# MCP Protocol Versions
# =============================================================================

# Newest first; the first entry is offered when the client asks for an
# unknown version
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]

# =============================================================================
# JSON-RPC Error Codes
# =============================================================================

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

ERROR_CODE_MAP: dict[str, int] = {
    "invalid_argument": INVALID_PARAMS,
    "unknown_operation": METHOD_NOT_FOUND,
    "internal": INTERNAL_ERROR,
}

DEFAULT_SERVER_ERROR = -32000


# =============================================================================
# Messages
# =============================================================================


class JSONRPCError(Exception):
    """
    A JSON-RPC error object that can be raised while handling a request.

    process_request catches it and answers with the matching error response.

    Attributes:
        code: JSON-RPC error code.
        message: Short description sent to the client.
        data: Optional structured payload (error_code, message, details).
    """

    def __init__(
        self,
        code: int,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form; ``data`` is omitted when unset."""
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        return result

    def __repr__(self) -> str:
        return (
            f"JSONRPCError(code={self.code}, "
            f"message={self.message!r}, "
            f"data={self.data!r})"
        )


@dataclass
class JSONRPCRequest:
    """
    A validated request line.

    Attributes:
        jsonrpc: Always "2.0".
        id: Request id, or None for notifications.
        method: MCP method name (e.g., "tools/call").
        params: Named params; an absent or null ``params`` becomes {}.
    """

    jsonrpc: str
    id: str | int | None
    method: str
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        """Notifications carry no id and never get a response."""
        return self.id is None


@dataclass
class JSONRPCResponse:
    """A response carrying either ``result`` or ``error``."""

    jsonrpc: str
    id: str | int | None
    result: Any | None = None
    error: JSONRPCError | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        response: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            response["error"] = self.error.to_dict()
        else:
            response["result"] = self.result
        return response

    def to_json(self) -> str:
        """
        Serialize to one compact line.

        Non-ASCII text is kept as-is so decoded file contents survive intact.
        """
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


# =============================================================================
# Request Parsing
# =============================================================================


def _invalid_request(reason: str) -> JSONRPCError:
    return JSONRPCError(code=INVALID_REQUEST, message=f"Invalid Request: {reason}")


def parse_request(request_json: str) -> JSONRPCRequest:
    """
    Parse and validate one request line.

    Raises:
        JSONRPCError: PARSE_ERROR for malformed JSON, INVALID_REQUEST for a
            bad envelope, INVALID_PARAMS for non-object params.
    """
    try:
        data = json.loads(request_json)
    except json.JSONDecodeError as e:
        raise JSONRPCError(
            code=PARSE_ERROR,
            message=f"Parse error: Invalid JSON - {e.msg}",
        ) from e

    if not isinstance(data, dict):
        raise _invalid_request("Request must be a JSON object")

    jsonrpc = data.get("jsonrpc")
    if jsonrpc is None:
        raise _invalid_request("Missing 'jsonrpc' field")
    if jsonrpc != "2.0":
        raise _invalid_request(f"jsonrpc must be '2.0', got '{jsonrpc}'")

    method = data.get("method")
    if method is None:
        raise _invalid_request("Missing 'method' field")
    if not isinstance(method, str) or not method:
        raise _invalid_request("'method' must be a non-empty string")

    # MCP methods only take named params
    params = data.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise JSONRPCError(
            code=INVALID_PARAMS,
            message="Invalid params: 'params' must be an object",
        )

    return JSONRPCRequest(jsonrpc="2.0", id=data.get("id"), method=method, params=params)


# =============================================================================
# Response Formatting
# =============================================================================


def format_success_response(request_id: str | int | None, result: Any) -> JSONRPCResponse:
    return JSONRPCResponse(jsonrpc="2.0", id=request_id, result=result)


def format_error_response(
    request_id: str | int | None,
    error: JSONRPCError,
) -> JSONRPCResponse:
    """Build an error response; ``request_id`` is None when it was never parsed."""
    return JSONRPCResponse(jsonrpc="2.0", id=request_id, error=error)


# =============================================================================
# Error Factories
# =============================================================================


def tool_error_to_jsonrpc_error(tool_error: ToolError) -> JSONRPCError:
    """
    Map a ToolError onto its JSON-RPC code, keeping the error as ``data``.

    Codes missing from ERROR_CODE_MAP fall back to DEFAULT_SERVER_ERROR.
    """
    jsonrpc_code = ERROR_CODE_MAP.get(tool_error.error_code, DEFAULT_SERVER_ERROR)
    return JSONRPCError(
        code=jsonrpc_code,
        message=tool_error.message,
        data=tool_error.to_dict(),
    )


def _error(
    code: int,
    error_code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONRPCError:
    return JSONRPCError(
        code=code,
        message=message,
        data={"error_code": error_code, "message": message, "details": details or {}},
    )


def create_method_not_found_error(method: str) -> JSONRPCError:
    """Error for an MCP method this server does not implement."""
    return JSONRPCError(
        code=METHOD_NOT_FOUND,
        message=f"Method not found: {method}",
        data={
            "error_code": "method_not_found",
            "message": f"MCP method '{method}' is not supported",
            "details": {"method": method},
        },
    )


def create_parse_error(message: str) -> JSONRPCError:
    """Error for a request line that cannot be decoded."""
    return _error(PARSE_ERROR, "parse_error", message)


def create_invalid_params_error(
    message: str, details: dict[str, Any] | None = None
) -> JSONRPCError:
    """Error for a tools/call request with malformed params."""
    return _error(INVALID_PARAMS, "invalid_argument", message, details)


def create_internal_error(
    message: str, details: dict[str, Any] | None = None
) -> JSONRPCError:
    """Error for an unexpected failure while handling a request."""
    return _error(INTERNAL_ERROR, "internal", message, details)
