"""
Tool context for the GitHub MCP Server.

This module defines the ToolContext dataclass that carries the context of a
single MCP tool call: the operation name, the JSON-RPC request ID, the receive
timestamp and the provider the handler delegates to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_github.provider import GitHubProvider


@dataclass
class ToolContext:
    """
    Encapsulates the context of a single MCP tool call.

    A new context is created per invocation and discarded once the response
    has been written; handlers must not keep state on it.

    Attributes:
        tool_name: Operation name (e.g., "list_repos").
        provider: GitHub provider used to perform the remote call.
        request_id: Request identifier from the JSON-RPC request.
        timestamp: When the request was received (UTC).
        metadata: Additional context for logging.
    """

    tool_name: str
    provider: GitHubProvider
    request_id: str | int | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert ToolContext to a dictionary for logging.

        Returns:
            Dictionary with context information (the provider is omitted).
        """
        return {
            "tool_name": self.tool_name,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }
