"""
Tests for the ToolContext dataclass.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock

from mcp_github.context import ToolContext


class TestToolContext:
    """Tests for ToolContext."""

    def test_defaults(self, provider: AsyncMock) -> None:
        ctx = ToolContext(tool_name="get_me", provider=provider)

        assert ctx.request_id is None
        assert ctx.metadata == {}
        assert ctx.timestamp.tzinfo is UTC
        assert ctx.provider is provider

    def test_metadata_not_shared(self, provider: AsyncMock) -> None:
        first = ToolContext(tool_name="a", provider=provider)
        second = ToolContext(tool_name="b", provider=provider)

        first.metadata["k"] = "v"

        assert second.metadata == {}

    def test_to_dict_omits_provider(self, provider: AsyncMock) -> None:
        ctx = ToolContext(
            tool_name="list_repos",
            provider=provider,
            request_id=3,
            timestamp=datetime(2024, 1, 1, tzinfo=UTC),
            metadata={"client": "test"},
        )

        assert ctx.to_dict() == {
            "tool_name": "list_repos",
            "request_id": 3,
            "timestamp": "2024-01-01T00:00:00+00:00",
            "metadata": {"client": "test"},
        }
