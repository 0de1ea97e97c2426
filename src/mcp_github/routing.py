"""
Operation routing and registration for the GitHub MCP Server.

This module provides:
- OperationDescriptor: the immutable unit of registration (name, description,
  input schema, handler, renderer)
- OperationRegistry: name -> descriptor lookup, discovery listing, and the
  generic lookup-validate-invoke-normalize dispatch sequence

The registry is populated once at startup and only read afterwards, so
concurrent lookups need no synchronization.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mcp_github.errors import InternalError, NotFoundError, ToolError
from mcp_github.logging import get_logger
from mcp_github.normalize import text_response
from mcp_github.schema import InputSchema

if TYPE_CHECKING:
    from mcp_github.context import ToolContext

logger = get_logger(__name__)

# Handler receives the invocation context and validated params, returns the
# raw provider result
OperationHandler = Callable[["ToolContext", dict[str, Any]], Awaitable[Any]]

# Renderer turns a raw provider result into the response text
Renderer = Callable[[Any], str]


@dataclass(frozen=True)
class OperationDescriptor:
    """
    Immutable description of one MCP operation.

    Attributes:
        name: Unique operation name (e.g., "list_repos").
        description: Human-readable description shown during discovery.
        input_schema: Declarative schema for the operation's arguments.
        handler: Async callable delegating to the provider.
        render: Projection of the raw result into response text.
    """

    name: str
    description: str
    input_schema: InputSchema
    handler: OperationHandler
    render: Renderer

    def describe(self) -> dict[str, Any]:
        """Return the discovery entry (name, description, inputSchema)."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.to_json_schema(),
        }


class OperationRegistry:
    """
    Registry mapping operation names to descriptors.

    Registration order is preserved for discovery listing.

    Example:
        >>> registry = OperationRegistry()
        >>> registry.register(descriptor)
        >>> envelope = await registry.invoke("get_me", ctx, {})
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._operations: dict[str, OperationDescriptor] = {}

    def register(self, descriptor: OperationDescriptor) -> None:
        """
        Register an operation descriptor.

        Raises:
            ValueError: If an operation is already registered under the name.
        """
        if descriptor.name in self._operations:
            raise ValueError(f"Operation '{descriptor.name}' is already registered")
        self._operations[descriptor.name] = descriptor

    def lookup(self, name: str) -> OperationDescriptor:
        """
        Return the descriptor registered under ``name``.

        Raises:
            NotFoundError: If no such operation is registered.
        """
        descriptor = self._operations.get(name)
        if descriptor is None:
            raise NotFoundError(name)
        return descriptor

    def list_operations(self) -> list[OperationDescriptor]:
        """Return all descriptors in registration order."""
        return list(self._operations.values())

    def describe(self) -> list[dict[str, Any]]:
        """Return the discovery catalogue in registration order."""
        return [d.describe() for d in self._operations.values()]

    async def invoke(
        self,
        name: str,
        ctx: ToolContext,
        raw_params: Any,
    ) -> dict[str, Any]:
        """
        Look up, validate, execute and normalize one invocation.

        Args:
            name: Operation name to invoke.
            ctx: ToolContext for the request.
            raw_params: Raw tool-call arguments.

        Returns:
            Response envelope with exactly one text content block.

        Raises:
            NotFoundError: If the operation is not registered.
            ValidationError: If the arguments fail validation.
            ToolError: If the handler raises one (e.g., ProviderError).
            InternalError: If the handler or renderer fails unexpectedly.
        """
        descriptor = self.lookup(name)
        params = descriptor.input_schema.validate(raw_params)

        logger.debug(
            "Executing operation",
            extra={"operation": name, "request_id": ctx.request_id},
        )
        try:
            raw = await descriptor.handler(ctx, params)
            text = descriptor.render(raw)
        except ToolError:
            raise
        except Exception as e:
            raise InternalError(
                message=f"Internal error in operation '{name}': {e!s}",
                details={"operation": name, "exception_type": type(e).__name__},
            ) from e

        logger.debug(
            "Operation completed",
            extra={"operation": name, "request_id": ctx.request_id},
        )
        return text_response(text)

    def __contains__(self, name: object) -> bool:
        """Check if an operation is registered (for 'in' operator)."""
        return name in self._operations

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        """Return the number of registered operations."""
        return len(self._operations)
