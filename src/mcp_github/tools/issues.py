"""
Issue tools for the GitHub MCP Server.

This module implements:
- list_issues: List issues for a repository
- create_issue: Create a new issue in a repository
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from mcp_github.normalize import project, project_many, render_json
from mcp_github.routing import OperationDescriptor
from mcp_github.schema import FieldKind, FieldSpec, InputSchema
from mcp_github.tools.common import (
    owner_field,
    page_field,
    per_page_field,
    repo_field,
    state_field,
)

if TYPE_CHECKING:
    from mcp_github.context import ToolContext


def label_names(issue: Mapping[str, Any]) -> list[Any]:
    """
    Flatten an issue's labels to their names.

    The issues API returns label objects, but plain strings are accepted too.
    """
    return [
        label if isinstance(label, str) else label.get("name")
        for label in issue.get("labels") or []
    ]


ISSUE_PROJECTION = {
    "number": "number",
    "title": "title",
    "state": "state",
    "user": "user.login",
    "labels": label_names,
    "created_at": "created_at",
    "html_url": "html_url",
}

CREATED_ISSUE_PROJECTION = {
    "number": "number",
    "title": "title",
    "state": "state",
    "html_url": "html_url",
}


async def handle_list_issues(ctx: ToolContext, params: dict[str, Any]) -> Any:
    return await ctx.provider.list_issues(
        owner=params["owner"],
        repo=params["repo"],
        state=params["state"],
        per_page=params["per_page"],
        page=params["page"],
    )


async def handle_create_issue(ctx: ToolContext, params: dict[str, Any]) -> Any:
    """
    Create an issue.

    Omitted ``body`` and ``labels`` reach the provider as None, never as an
    empty string or empty list, so GitHub sees them as not supplied.
    """
    return await ctx.provider.create_issue(
        owner=params["owner"],
        repo=params["repo"],
        title=params["title"],
        body=params.get("body"),
        labels=params.get("labels"),
    )


LIST_ISSUES = OperationDescriptor(
    name="list_issues",
    description="List issues for a repository",
    input_schema=InputSchema(
        owner_field(),
        repo_field(),
        state_field("Issue state filter"),
        per_page_field(default=30),
        page_field(),
    ),
    handler=handle_list_issues,
    render=lambda raw: render_json(project_many(raw, ISSUE_PROJECTION)),
)

CREATE_ISSUE = OperationDescriptor(
    name="create_issue",
    description="Create a new issue in a repository",
    input_schema=InputSchema(
        owner_field(),
        repo_field(),
        FieldSpec("title", FieldKind.STRING, "Issue title"),
        FieldSpec(
            "body", FieldKind.STRING, "Issue body/description", required=False
        ),
        FieldSpec(
            "labels", FieldKind.STRING_ARRAY, "Labels to assign", required=False
        ),
    ),
    handler=handle_create_issue,
    render=lambda raw: render_json(project(raw, CREATED_ISSUE_PROJECTION)),
)
