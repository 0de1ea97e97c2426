"""
Field declarations shared by several GitHub operations.
"""

from __future__ import annotations

from mcp_github.schema import FieldKind, FieldSpec

# GitHub caps page size at 100 for every list and search endpoint
MAX_PER_PAGE = 100

ISSUE_STATES = ("open", "closed", "all")


def owner_field(description: str = "Repository owner") -> FieldSpec:
    return FieldSpec("owner", FieldKind.STRING, description)


def repo_field() -> FieldSpec:
    return FieldSpec("repo", FieldKind.STRING, "Repository name")


def per_page_field(default: int, description: str = "Results per page") -> FieldSpec:
    return FieldSpec(
        "per_page",
        FieldKind.INTEGER,
        f"{description} (max {MAX_PER_PAGE})",
        default=default,
        minimum=1,
        maximum=MAX_PER_PAGE,
    )


def page_field() -> FieldSpec:
    return FieldSpec("page", FieldKind.INTEGER, "Page number", default=1, minimum=1)


def state_field(description: str) -> FieldSpec:
    return FieldSpec(
        "state", FieldKind.ENUM, description, default="open", choices=ISSUE_STATES
    )
