"""
Pytest configuration for the GitHub MCP Server tests.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from mcp_github.context import ToolContext
from mcp_github.provider import GitHubClient

# Configure pytest-asyncio mode
pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def provider() -> AsyncMock:
    """A provider double whose async methods are AsyncMocks."""
    return AsyncMock(spec=GitHubClient)


@pytest.fixture
def make_ctx(provider: AsyncMock):
    """Factory building a ToolContext bound to the provider double."""

    def _make(tool_name: str = "test_tool", request_id: str | int | None = "req-1"):
        return ToolContext(tool_name=tool_name, provider=provider, request_id=request_id)

    return _make
