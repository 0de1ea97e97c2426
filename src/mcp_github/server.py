"""
MCP Server implementation for the GitHub MCP Server.

This module implements the request dispatcher and the MCPServer class that
communicates via newline-delimited JSON-RPC 2.0 over stdio.

Per tool call the dispatcher runs one generic sequence: look up the
operation, validate its arguments, execute the handler, normalize the
result. Failures never end the connection:
- unknown operation / invalid arguments -> JSON-RPC error response
- provider or handler failure -> tool result with ``isError: true``
- anything unexpected -> JSON-RPC internal error
"""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING, Any, TextIO

from mcp_github.config import ServerConfig
from mcp_github.context import ToolContext
from mcp_github.errors import InternalError, ProviderError, ToolError, TransportError
from mcp_github.logging import get_logger
from mcp_github.normalize import error_response
from mcp_github.protocol import (
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    JSONRPCError,
    JSONRPCRequest,
    create_internal_error,
    create_invalid_params_error,
    create_method_not_found_error,
    create_parse_error,
    format_error_response,
    format_success_response,
    parse_request,
    tool_error_to_jsonrpc_error,
)

if TYPE_CHECKING:
    from mcp_github.provider import GitHubProvider
    from mcp_github.routing import OperationRegistry

logger = get_logger(__name__)


# =============================================================================
# MCP Method Handlers
# =============================================================================


def _initialize_result(
    params: dict[str, Any], server_config: ServerConfig
) -> dict[str, Any]:
    """Build the ``initialize`` result, negotiating the protocol version."""
    requested = params.get("protocolVersion")
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        version = requested
    else:
        version = LATEST_PROTOCOL_VERSION
    return {
        "protocolVersion": version,
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": {"name": server_config.name, "version": server_config.version},
    }


async def call_tool(
    request: JSONRPCRequest,
    registry: OperationRegistry,
    provider: GitHubProvider,
) -> dict[str, Any]:
    """
    Handle ``tools/call``.

    Returns:
        The response envelope, or an ``isError`` tool result when the
        provider or handler failed.

    Raises:
        JSONRPCError: If the request does not name a tool.
        ValidationError: If the arguments fail the operation's schema.
        NotFoundError: If the operation is not registered.
    """
    name = request.params.get("name")
    if not isinstance(name, str) or not name:
        raise create_invalid_params_error(
            "Invalid params: 'name' must be a non-empty string",
            details={"name": name},
        )
    arguments = request.params.get("arguments")
    if arguments is None:
        arguments = {}

    ctx = ToolContext(tool_name=name, provider=provider, request_id=request.id)
    try:
        return await registry.invoke(name, ctx, arguments)
    except ProviderError as e:
        logger.warning(
            "Operation failed at provider",
            extra={
                "operation": name,
                "request_id": request.id,
                "error_code": e.error_code,
                "status_code": e.status_code,
            },
        )
        return error_response(e.message)
    except InternalError as e:
        logger.error(
            "Operation failed unexpectedly",
            exc_info=e.__cause__ or e,
            extra={"operation": name, "request_id": request.id},
        )
        return error_response(e.message)


async def dispatch_method(
    request: JSONRPCRequest,
    registry: OperationRegistry,
    provider: GitHubProvider,
    server_config: ServerConfig,
) -> Any:
    """
    Route an MCP request to its method handler.

    Raises:
        JSONRPCError: If the method is not supported.
    """
    method = request.method
    if method == "initialize":
        return _initialize_result(request.params, server_config)
    if method == "ping":
        return {}
    if method == "tools/list":
        return {"tools": registry.describe()}
    if method == "tools/call":
        return await call_tool(request, registry, provider)
    raise create_method_not_found_error(method)


async def process_request(
    request_json: str,
    registry: OperationRegistry,
    provider: GitHubProvider,
    server_config: ServerConfig | None = None,
) -> str | None:
    """
    Process a single JSON-RPC request and return the response.

    This function handles the complete request lifecycle:
    1. Parse the JSON-RPC request
    2. Dispatch to the MCP method handler
    3. Format the response (success or error)

    Args:
        request_json: Raw JSON string containing the request.
        registry: OperationRegistry with the registered operations.
        provider: GitHub provider passed to operation handlers.
        server_config: Server identity for ``initialize``.

    Returns:
        JSON string containing the response, or None for notifications.
    """
    request_id: str | int | None = None
    server_config = server_config or ServerConfig()

    try:
        request = parse_request(request_json)
        request_id = request.id

        # Notifications (initialized, cancelled, ...) never get a response
        if request.is_notification:
            logger.debug("Received notification", extra={"method": request.method})
            return None

        result = await dispatch_method(request, registry, provider, server_config)
        return format_success_response(request_id, result).to_json()

    except JSONRPCError as e:
        return format_error_response(request_id, e).to_json()

    except ToolError as e:
        logger.info(
            "Tool call rejected",
            extra={"request_id": request_id, "error_code": e.error_code},
        )
        jsonrpc_error = tool_error_to_jsonrpc_error(e)
        return format_error_response(request_id, jsonrpc_error).to_json()

    except Exception as e:
        logger.exception(
            "Unexpected error processing request",
            extra={"request_id": request_id, "error": str(e)},
        )
        jsonrpc_error = create_internal_error(
            message=f"Internal server error: {type(e).__name__}",
            details={"exception": str(e)},
        )
        return format_error_response(request_id, jsonrpc_error).to_json()


# =============================================================================
# Server
# =============================================================================


class MCPServer:
    """
    MCP Server that communicates via JSON-RPC 2.0 over stdio.

    The server reads one request per line from stdin, handles each request in
    its own task so slow GitHub calls do not block other requests, and writes
    each response as one line to stdout.

    Example:
        >>> server = MCPServer(registry=create_registry(), provider=client)
        >>> await server.run()

    Attributes:
        registry: OperationRegistry with the registered operations.
        provider: GitHub provider handed to every invocation.
        running: Whether the server is currently running.
    """

    def __init__(
        self,
        registry: OperationRegistry,
        provider: GitHubProvider,
        server_config: ServerConfig | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.registry = registry
        self.provider = provider
        self.server_config = server_config or ServerConfig()
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.running = False
        self._pending: set[asyncio.Task[None]] = set()
        self._reader: asyncio.StreamReader | None = None
        self._write_error: OSError | ValueError | None = None

    async def handle_request(self, request_json: str) -> str | None:
        """
        Handle a single JSON-RPC request.

        Returns:
            JSON string containing the response, or None for notifications.
        """
        return await process_request(
            request_json, self.registry, self.provider, self.server_config
        )

    async def connect(self) -> asyncio.StreamReader:
        """
        Attach an asyncio reader to stdin.

        Raises:
            TransportError: If stdin cannot be read asynchronously.
        """
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        try:
            await loop.connect_read_pipe(lambda: protocol, self._stdin)
        except (OSError, ValueError) as e:
            raise TransportError(f"Cannot attach to stdin: {e}") from e
        self._reader = reader
        return reader

    async def _handle_line(self, line: bytes) -> None:
        """Decode one request line, process it and write the response."""
        try:
            request_json = line.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            logger.warning(
                "Invalid UTF-8 encoding in request",
                extra={"error": str(e)},
            )
            error = create_parse_error("Parse error: request is not valid UTF-8")
            self._write_response(format_error_response(None, error).to_json())
            return

        if not request_json:
            return

        try:
            response = await self.handle_request(request_json)
        except Exception as e:
            logger.exception("Error in request task", extra={"error": str(e)})
            error = create_internal_error(str(e))
            response = format_error_response(None, error).to_json()

        if response:
            self._write_response(response)

    def _schedule(self, line: bytes) -> None:
        task = asyncio.create_task(self._handle_line(line))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def run(self) -> None:
        """
        Attach to stdin and serve until EOF.

        Raises:
            TransportError: If stdin cannot be attached or stdout breaks.
        """
        reader = await self.connect()
        await self.serve(reader)

    async def serve(self, reader: asyncio.StreamReader) -> None:
        """
        Serve requests from an attached reader, writing to stdout.

        The server runs until the reader hits EOF or stop() is called.
        stop() ends a pending read at once. Lines already buffered when the
        server stops are not dispatched; in-flight requests are awaited
        before returning.

        Raises:
            TransportError: If stdout breaks.
        """
        self._reader = reader
        self.running = True
        logger.info("MCP Server starting", extra={"tools_count": len(self.registry)})

        try:
            while self.running:
                line = await reader.readline()
                if not line or not self.running:
                    # EOF reached or stop requested
                    break
                self._schedule(line)

            if self._pending:
                await asyncio.gather(*self._pending, return_exceptions=True)
        finally:
            self.running = False
            logger.info("MCP Server stopped")

        if self._write_error is not None:
            raise TransportError(
                f"Cannot write to stdout: {self._write_error}"
            ) from self._write_error

    def stop(self) -> None:
        """Stop reading new requests and wake a pending read."""
        self.running = False
        if self._reader is not None:
            self._reader.feed_eof()

    def _write_response(self, response_json: str) -> None:
        """Write a response line to stdout, stopping the server if it is gone."""
        if self._write_error is not None:
            return
        try:
            self._stdout.write(response_json + "\n")
            self._stdout.flush()
        except (OSError, ValueError) as e:
            # ValueError: write to a closed file object
            logger.error("Failed to write response", extra={"error": str(e)})
            self._write_error = e
            self.stop()
