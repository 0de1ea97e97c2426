"""
Pull request tools for the GitHub MCP Server.

- list_pull_requests: List pull requests for a repository
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp_github.normalize import project_many, render_json
from mcp_github.routing import OperationDescriptor
from mcp_github.schema import InputSchema
from mcp_github.tools.common import owner_field, per_page_field, repo_field, state_field

if TYPE_CHECKING:
    from mcp_github.context import ToolContext

PULL_REQUEST_PROJECTION = {
    "number": "number",
    "title": "title",
    "state": "state",
    "user": "user.login",
    "head": "head.ref",
    "base": "base.ref",
    "created_at": "created_at",
    "html_url": "html_url",
}


async def handle_list_pull_requests(ctx: ToolContext, params: dict[str, Any]) -> Any:
    return await ctx.provider.list_pull_requests(
        owner=params["owner"],
        repo=params["repo"],
        state=params["state"],
        per_page=params["per_page"],
    )


LIST_PULL_REQUESTS = OperationDescriptor(
    name="list_pull_requests",
    description="List pull requests for a repository",
    input_schema=InputSchema(
        owner_field(),
        repo_field(),
        state_field("PR state filter"),
        per_page_field(default=30),
    ),
    handler=handle_list_pull_requests,
    render=lambda raw: render_json(project_many(raw, PULL_REQUEST_PROJECTION)),
)
