"""
Repository contents tools for the GitHub MCP Server.

- get_file_contents: Get a file or directory listing from a repository

Unlike every other operation, a single file is answered with its decoded
text rather than a JSON document:

- directory (JSON array): each entry projected to name, type, path, size
- file with base64 ``content``: the decoded UTF-8 text, returned raw
- anything else (symlink, submodule, ...): the whole payload as JSON
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from mcp_github.normalize import decode_base64_text, project_many, render_json
from mcp_github.routing import OperationDescriptor
from mcp_github.schema import FieldKind, FieldSpec, InputSchema
from mcp_github.tools.common import owner_field, repo_field

if TYPE_CHECKING:
    from mcp_github.context import ToolContext

DIRECTORY_ENTRY_PROJECTION = {
    "name": "name",
    "type": "type",
    "path": "path",
    "size": "size",
}


def _is_file(raw: Any) -> bool:
    return (
        isinstance(raw, Mapping)
        and raw.get("type") == "file"
        and isinstance(raw.get("content"), str)
    )


def render_contents(raw: Any) -> str:
    """
    Render a contents API payload.

    Raises:
        ValueError: If a file payload carries invalid base64.
    """
    if isinstance(raw, list):
        return render_json(project_many(raw, DIRECTORY_ENTRY_PROJECTION))
    if _is_file(raw):
        return decode_base64_text(raw["content"])
    return render_json(raw)


async def handle_get_file_contents(ctx: ToolContext, params: dict[str, Any]) -> Any:
    return await ctx.provider.get_content(
        owner=params["owner"],
        repo=params["repo"],
        path=params["path"],
        ref=params.get("ref"),
    )


GET_FILE_CONTENTS = OperationDescriptor(
    name="get_file_contents",
    description="Get the contents of a file from a repository",
    input_schema=InputSchema(
        owner_field(),
        repo_field(),
        FieldSpec("path", FieldKind.STRING, "File path in the repository"),
        FieldSpec(
            "ref", FieldKind.STRING, "Branch, tag, or commit SHA", required=False
        ),
    ),
    handler=handle_get_file_contents,
    render=render_contents,
)
