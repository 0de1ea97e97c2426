"""
Search tools for the GitHub MCP Server.

This module implements:
- search_repos: Search for GitHub repositories
- search_code: Search for code across GitHub repositories

Both search endpoints wrap their hits in an ``items`` array; only the items
are projected.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from mcp_github.normalize import Projection, project_many, render_json
from mcp_github.routing import OperationDescriptor
from mcp_github.schema import FieldKind, FieldSpec, InputSchema
from mcp_github.tools.common import per_page_field

if TYPE_CHECKING:
    from mcp_github.context import ToolContext

SEARCH_REPO_PROJECTION = {
    "name": "name",
    "full_name": "full_name",
    "description": "description",
    "stars": "stargazers_count",
    "language": "language",
    "html_url": "html_url",
}

SEARCH_CODE_PROJECTION = {
    "name": "name",
    "path": "path",
    "repository": "repository.full_name",
    "html_url": "html_url",
}

DEFAULT_SEARCH_PER_PAGE = 10


def render_search_items(raw: Any, projection: Projection) -> str:
    items = raw.get("items") if isinstance(raw, Mapping) else None
    return render_json(project_many(items or [], projection))


async def handle_search_repos(ctx: ToolContext, params: dict[str, Any]) -> Any:
    return await ctx.provider.search_repos(
        query=params["query"], per_page=params["per_page"]
    )


async def handle_search_code(ctx: ToolContext, params: dict[str, Any]) -> Any:
    return await ctx.provider.search_code(
        query=params["query"], per_page=params["per_page"]
    )


SEARCH_REPOS = OperationDescriptor(
    name="search_repos",
    description="Search for GitHub repositories",
    input_schema=InputSchema(
        FieldSpec("query", FieldKind.STRING, "Search query"),
        per_page_field(default=DEFAULT_SEARCH_PER_PAGE),
    ),
    handler=handle_search_repos,
    render=lambda raw: render_search_items(raw, SEARCH_REPO_PROJECTION),
)

SEARCH_CODE = OperationDescriptor(
    name="search_code",
    description="Search for code across GitHub repositories",
    input_schema=InputSchema(
        FieldSpec(
            "query",
            FieldKind.STRING,
            "Search query (e.g. 'addClass in:file language:js')",
        ),
        per_page_field(default=DEFAULT_SEARCH_PER_PAGE),
    ),
    handler=handle_search_code,
    render=lambda raw: render_search_items(raw, SEARCH_CODE_PROJECTION),
)
