"""
MCP tools for the GitHub MCP Server.

This package contains the operation descriptors grouped by GitHub API area.

Modules:
- users: Authenticated user profile
- repos: Repository listing, lookup and creation
- issues: Issue listing and creation
- pulls: Pull request listing
- contents: File and directory contents
- search: Repository and code search
"""

from __future__ import annotations

from mcp_github.logging import get_logger
from mcp_github.routing import OperationDescriptor, OperationRegistry
from mcp_github.tools.contents import GET_FILE_CONTENTS
from mcp_github.tools.issues import CREATE_ISSUE, LIST_ISSUES
from mcp_github.tools.pulls import LIST_PULL_REQUESTS
from mcp_github.tools.repos import CREATE_REPO, GET_REPO, LIST_REPOS
from mcp_github.tools.search import SEARCH_CODE, SEARCH_REPOS
from mcp_github.tools.users import GET_ME

logger = get_logger(__name__)

# Discovery order of the catalogue
GITHUB_OPERATIONS: tuple[OperationDescriptor, ...] = (
    GET_ME,
    LIST_REPOS,
    GET_REPO,
    LIST_ISSUES,
    CREATE_ISSUE,
    CREATE_REPO,
    LIST_PULL_REQUESTS,
    GET_FILE_CONTENTS,
    SEARCH_REPOS,
    SEARCH_CODE,
)


def create_registry() -> OperationRegistry:
    """
    Build a registry holding every GitHub operation.

    Returns:
        A populated OperationRegistry.
    """
    registry = OperationRegistry()
    for descriptor in GITHUB_OPERATIONS:
        registry.register(descriptor)
    logger.debug("Registered GitHub tools", extra={"tools_count": len(registry)})
    return registry


__all__ = [
    "CREATE_ISSUE",
    "CREATE_REPO",
    "GET_FILE_CONTENTS",
    "GET_ME",
    "GET_REPO",
    "GITHUB_OPERATIONS",
    "LIST_ISSUES",
    "LIST_PULL_REQUESTS",
    "LIST_REPOS",
    "SEARCH_CODE",
    "SEARCH_REPOS",
    "create_registry",
]
