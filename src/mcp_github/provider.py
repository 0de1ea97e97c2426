"""
GitHub remote operations provider.

This module defines the GitHubProvider protocol, the exact set of remote
calls the operation handlers depend on, and GitHubClient, a thin
implementation over the GitHub REST API using ``httpx.AsyncClient``.

Each provider method performs exactly one HTTP request and returns the
decoded JSON payload unchanged. Failures are raised as ProviderError with an
error code derived from the HTTP status. Nothing is retried or cached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import quote

import httpx

from mcp_github.errors import ProviderError
from mcp_github.logging import get_logger

if TYPE_CHECKING:
    from mcp_github.config import GitHubConfig

logger = get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubProvider(Protocol):
    """Remote calls available to operation handlers."""

    async def get_authenticated_user(self) -> dict[str, Any]: ...

    async def list_repos_for_authenticated_user(
        self, sort: str, per_page: int, page: int
    ) -> list[dict[str, Any]]: ...

    async def get_repo(self, owner: str, repo: str) -> dict[str, Any]: ...

    async def list_issues(
        self, owner: str, repo: str, state: str, per_page: int, page: int
    ) -> list[dict[str, Any]]: ...

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str | None = None,
        labels: list[str] | None = None,
    ) -> dict[str, Any]: ...

    async def create_repo_for_authenticated_user(
        self,
        name: str,
        description: str | None = None,
        private: bool = False,
        auto_init: bool = True,
    ) -> dict[str, Any]: ...

    async def list_pull_requests(
        self, owner: str, repo: str, state: str, per_page: int
    ) -> list[dict[str, Any]]: ...

    async def get_content(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> Any: ...

    async def search_repos(self, query: str, per_page: int) -> dict[str, Any]: ...

    async def search_code(self, query: str, per_page: int) -> dict[str, Any]: ...


def error_code_for_status(status_code: int, headers: httpx.Headers | None = None) -> str:
    """
    Map a GitHub HTTP error status to a ProviderError code.

    A 403 with ``x-ratelimit-remaining: 0`` is a primary rate limit and maps
    to ``resource_exhausted`` like a 429.
    """
    if status_code == 401:
        return "unauthenticated"
    if status_code == 429:
        return "resource_exhausted"
    if status_code == 403:
        if headers is not None and headers.get("x-ratelimit-remaining") == "0":
            return "resource_exhausted"
        return "permission_denied"
    if status_code == 404:
        return "not_found"
    if status_code == 409:
        return "conflict"
    if status_code == 422:
        return "invalid_argument"
    if status_code >= 500:
        return "unavailable"
    return "internal"


def _error_message(response: httpx.Response) -> str:
    """Extract GitHub's ``message`` field from an error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.reason_phrase or "Unknown error"


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None so they are not sent at all."""
    return {k: v for k, v in values.items() if v is not None}


def _segment(value: str) -> str:
    """Percent-encode a single path segment (owner, repo)."""
    return quote(value, safe="")


class GitHubClient:
    """
    GitHubProvider implementation over the GitHub REST API.

    The client holds the credential for the lifetime of the process and
    shares one connection pool across concurrent invocations.

    Example:
        >>> client = GitHubClient(token="ghp_...")
        >>> me = await client.get_authenticated_user()
        >>> await client.aclose()
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = "https://api.github.com",
        timeout_seconds: float = 30.0,
        user_agent: str = "github-mcp-server",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: GitHub token sent as a bearer credential.
            api_url: REST API base URL.
            timeout_seconds: Per-request timeout.
            user_agent: User-Agent header value.
            transport: Optional httpx transport (used by tests).
        """
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": user_agent,
            },
        )

    @classmethod
    def from_config(
        cls,
        config: GitHubConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> GitHubClient:
        """
        Create a GitHubClient from configuration.

        Raises:
            ValueError: If the configuration carries no token.
        """
        if config.token is None:
            raise ValueError("GitHub token is not configured")
        return cls(
            token=config.token,
            api_url=config.api_url,
            timeout_seconds=config.timeout_seconds,
            user_agent=config.user_agent,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """
        Perform one API call and return the decoded JSON body.

        Raises:
            ProviderError: On transport failures or non-2xx responses.
        """
        try:
            response = await self._client.request(
                method,
                path,
                params=_drop_none(params) if params else None,
                json=_drop_none(json) if json is not None else None,
            )
        except httpx.HTTPError as e:
            logger.warning(
                "GitHub API request failed",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise ProviderError(
                "unavailable",
                f"GitHub API request failed: {e}",
                details={"method": method, "path": path},
            ) from e

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "GitHub API returned an error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "error": message,
                },
            )
            raise ProviderError(
                error_code_for_status(response.status_code, response.headers),
                f"GitHub API error ({response.status_code}): {message}",
                status_code=response.status_code,
                details={"method": method, "path": path},
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                "internal",
                f"GitHub API returned invalid JSON: {e}",
                status_code=response.status_code,
                details={"method": method, "path": path},
            ) from e

    async def get_authenticated_user(self) -> dict[str, Any]:
        return await self._request("GET", "/user")

    async def list_repos_for_authenticated_user(
        self, sort: str, per_page: int, page: int
    ) -> list[dict[str, Any]]:
        return await self._request(
            "GET",
            "/user/repos",
            params={"sort": sort, "per_page": per_page, "page": page},
        )

    async def get_repo(self, owner: str, repo: str) -> dict[str, Any]:
        return await self._request("GET", f"/repos/{_segment(owner)}/{_segment(repo)}")

    async def list_issues(
        self, owner: str, repo: str, state: str, per_page: int, page: int
    ) -> list[dict[str, Any]]:
        return await self._request(
            "GET",
            f"/repos/{_segment(owner)}/{_segment(repo)}/issues",
            params={"state": state, "per_page": per_page, "page": page},
        )

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str | None = None,
        labels: list[str] | None = None,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/repos/{_segment(owner)}/{_segment(repo)}/issues",
            json={"title": title, "body": body, "labels": labels},
        )

    async def create_repo_for_authenticated_user(
        self,
        name: str,
        description: str | None = None,
        private: bool = False,
        auto_init: bool = True,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/user/repos",
            json={
                "name": name,
                "description": description,
                "private": private,
                "auto_init": auto_init,
            },
        )

    async def list_pull_requests(
        self, owner: str, repo: str, state: str, per_page: int
    ) -> list[dict[str, Any]]:
        return await self._request(
            "GET",
            f"/repos/{_segment(owner)}/{_segment(repo)}/pulls",
            params={"state": state, "per_page": per_page},
        )

    async def get_content(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> Any:
        return await self._request(
            "GET",
            f"/repos/{_segment(owner)}/{_segment(repo)}/contents/{quote(path, safe='/')}",
            params={"ref": ref},
        )

    async def search_repos(self, query: str, per_page: int) -> dict[str, Any]:
        return await self._request(
            "GET", "/search/repositories", params={"q": query, "per_page": per_page}
        )

    async def search_code(self, query: str, per_page: int) -> dict[str, Any]:
        return await self._request(
            "GET", "/search/code", params={"q": query, "per_page": per_page}
        )
