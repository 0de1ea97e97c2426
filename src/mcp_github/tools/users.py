"""
User tools for the GitHub MCP Server.

- get_me: Return the authenticated user's profile
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp_github.normalize import project, render_json
from mcp_github.routing import OperationDescriptor
from mcp_github.schema import InputSchema

if TYPE_CHECKING:
    from mcp_github.context import ToolContext

USER_PROJECTION = {
    "login": "login",
    "name": "name",
    "bio": "bio",
    "public_repos": "public_repos",
    "followers": "followers",
    "following": "following",
    "html_url": "html_url",
}


async def handle_get_me(ctx: ToolContext, _params: dict[str, Any]) -> Any:
    """Fetch the profile of the identity behind the token."""
    return await ctx.provider.get_authenticated_user()


def render_user(raw: Any) -> str:
    return render_json(project(raw, USER_PROJECTION))


GET_ME = OperationDescriptor(
    name="get_me",
    description="Get the authenticated GitHub user's profile info",
    input_schema=InputSchema(),
    handler=handle_get_me,
    render=render_user,
)
