"""
Repository tools for the GitHub MCP Server.

This module implements:
- list_repos: List repositories for the authenticated user
- get_repo: Get detailed information about a specific repository
- create_repo: Create a repository for the authenticated user
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp_github.normalize import project, project_many, render_json
from mcp_github.routing import OperationDescriptor
from mcp_github.schema import FieldKind, FieldSpec, InputSchema
from mcp_github.tools.common import (
    owner_field,
    page_field,
    per_page_field,
    repo_field,
)

if TYPE_CHECKING:
    from mcp_github.context import ToolContext

REPO_SORT_KEYS = ("created", "updated", "pushed", "full_name")

# =============================================================================
# Projections
# =============================================================================

REPO_SUMMARY_PROJECTION = {
    "name": "name",
    "full_name": "full_name",
    "description": "description",
    "private": "private",
    "language": "language",
    "stars": "stargazers_count",
    "forks": "forks_count",
    "html_url": "html_url",
    "updated_at": "updated_at",
}

REPO_DETAIL_PROJECTION = {
    "name": "name",
    "full_name": "full_name",
    "description": "description",
    "private": "private",
    "language": "language",
    "default_branch": "default_branch",
    "stars": "stargazers_count",
    "forks": "forks_count",
    "open_issues": "open_issues_count",
    "html_url": "html_url",
    "clone_url": "clone_url",
    "created_at": "created_at",
    "updated_at": "updated_at",
}

CREATED_REPO_PROJECTION = {
    "name": "name",
    "full_name": "full_name",
    "private": "private",
    "html_url": "html_url",
    "clone_url": "clone_url",
}

# =============================================================================
# Handlers
# =============================================================================


async def handle_list_repos(ctx: ToolContext, params: dict[str, Any]) -> Any:
    return await ctx.provider.list_repos_for_authenticated_user(
        sort=params["sort"],
        per_page=params["per_page"],
        page=params["page"],
    )


async def handle_get_repo(ctx: ToolContext, params: dict[str, Any]) -> Any:
    return await ctx.provider.get_repo(owner=params["owner"], repo=params["repo"])


async def handle_create_repo(ctx: ToolContext, params: dict[str, Any]) -> Any:
    """
    Create a repository owned by the authenticated user.

    ``description`` is forwarded as None when the caller omitted it; the
    provider leaves None-valued fields out of the request body.
    """
    return await ctx.provider.create_repo_for_authenticated_user(
        name=params["name"],
        description=params.get("description"),
        private=params["private"],
        auto_init=params["auto_init"],
    )


# =============================================================================
# Descriptors
# =============================================================================

LIST_REPOS = OperationDescriptor(
    name="list_repos",
    description="List repositories for the authenticated user",
    input_schema=InputSchema(
        FieldSpec(
            "sort",
            FieldKind.ENUM,
            "Sort by",
            default="updated",
            choices=REPO_SORT_KEYS,
        ),
        per_page_field(default=30),
        page_field(),
    ),
    handler=handle_list_repos,
    render=lambda raw: render_json(project_many(raw, REPO_SUMMARY_PROJECTION)),
)

GET_REPO = OperationDescriptor(
    name="get_repo",
    description="Get detailed information about a specific repository",
    input_schema=InputSchema(
        owner_field("Repository owner (username or org)"),
        repo_field(),
    ),
    handler=handle_get_repo,
    render=lambda raw: render_json(project(raw, REPO_DETAIL_PROJECTION)),
)

CREATE_REPO = OperationDescriptor(
    name="create_repo",
    description="Create a new GitHub repository",
    input_schema=InputSchema(
        FieldSpec("name", FieldKind.STRING, "Repository name"),
        FieldSpec(
            "description",
            FieldKind.STRING,
            "Repository description",
            required=False,
        ),
        FieldSpec(
            "private",
            FieldKind.BOOLEAN,
            "Whether the repo is private",
            default=False,
        ),
        FieldSpec(
            "auto_init",
            FieldKind.BOOLEAN,
            "Initialize with a README",
            default=True,
        ),
    ),
    handler=handle_create_repo,
    render=lambda raw: render_json(project(raw, CREATED_REPO_PROJECTION)),
)
