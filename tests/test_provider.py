"""
Tests for the GitHub provider.

This test module validates GitHubClient against an httpx.MockTransport:
- request shape (method, path, query, body, headers)
- error status mapping to ProviderError codes
- transport failure handling
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from mcp_github.config import GitHubConfig
from mcp_github.errors import ProviderError
from mcp_github.provider import GitHubClient, error_code_for_status

# =============================================================================
# Fixtures
# =============================================================================


class Recorder:
    """Collects requests seen by a MockTransport and answers with a canned response."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _client(recorder: Recorder) -> GitHubClient:
    return GitHubClient(
        token="ghp_test",
        api_url="https://api.github.test",
        user_agent="tests/1.0",
        transport=httpx.MockTransport(recorder),
    )


def _ok(payload) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(200, json=payload)


# =============================================================================
# Tests for Status Mapping
# =============================================================================


class TestErrorCodeForStatus:
    """Tests for error_code_for_status."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (401, "unauthenticated"),
            (403, "permission_denied"),
            (404, "not_found"),
            (409, "conflict"),
            (422, "invalid_argument"),
            (429, "resource_exhausted"),
            (500, "unavailable"),
            (503, "unavailable"),
            (418, "internal"),
        ],
    )
    def test_mapping(self, status: int, expected: str) -> None:
        assert error_code_for_status(status) == expected

    def test_rate_limited_403(self) -> None:
        headers = httpx.Headers({"x-ratelimit-remaining": "0"})
        assert error_code_for_status(403, headers) == "resource_exhausted"

    def test_403_with_remaining_quota(self) -> None:
        headers = httpx.Headers({"x-ratelimit-remaining": "12"})
        assert error_code_for_status(403, headers) == "permission_denied"


# =============================================================================
# Tests for Requests
# =============================================================================


class TestRequests:
    """Tests for the shape of outgoing requests."""

    @pytest.mark.asyncio
    async def test_headers(self) -> None:
        recorder = Recorder(_ok({"login": "octocat"}))

        async with _client(recorder) as client:
            result = await client.get_authenticated_user()

        assert result == {"login": "octocat"}
        request = recorder.last
        assert request.method == "GET"
        assert request.url.path == "/user"
        assert request.headers["authorization"] == "Bearer ghp_test"
        assert request.headers["accept"] == "application/vnd.github+json"
        assert request.headers["x-github-api-version"] == "2022-11-28"
        assert request.headers["user-agent"] == "tests/1.0"

    @pytest.mark.asyncio
    async def test_list_repos_query(self) -> None:
        recorder = Recorder(_ok([]))

        async with _client(recorder) as client:
            await client.list_repos_for_authenticated_user(sort="updated", per_page=30, page=2)

        params = recorder.last.url.params
        assert recorder.last.url.path == "/user/repos"
        assert params["sort"] == "updated"
        assert params["per_page"] == "30"
        assert params["page"] == "2"

    @pytest.mark.asyncio
    async def test_list_issues_path(self) -> None:
        recorder = Recorder(_ok([]))

        async with _client(recorder) as client:
            await client.list_issues("octo cat", "hello", state="all", per_page=5, page=1)

        assert recorder.last.url.raw_path.startswith(b"/repos/octo%20cat/hello/issues")
        assert recorder.last.url.params["state"] == "all"

    @pytest.mark.asyncio
    async def test_create_issue_omits_none_fields(self) -> None:
        recorder = Recorder(lambda request: httpx.Response(201, json={"number": 1}))

        async with _client(recorder) as client:
            result = await client.create_issue("o", "r", title="Bug")

        assert result == {"number": 1}
        assert recorder.last.method == "POST"
        assert json.loads(recorder.last.content) == {"title": "Bug"}

    @pytest.mark.asyncio
    async def test_create_issue_with_body_and_labels(self) -> None:
        recorder = Recorder(lambda request: httpx.Response(201, json={"number": 1}))

        async with _client(recorder) as client:
            await client.create_issue("o", "r", title="Bug", body="", labels=[])

        assert json.loads(recorder.last.content) == {"title": "Bug", "body": "", "labels": []}

    @pytest.mark.asyncio
    async def test_create_repo_body(self) -> None:
        recorder = Recorder(lambda request: httpx.Response(201, json={"name": "new"}))

        async with _client(recorder) as client:
            await client.create_repo_for_authenticated_user("new")

        assert recorder.last.url.path == "/user/repos"
        assert json.loads(recorder.last.content) == {
            "name": "new",
            "private": False,
            "auto_init": True,
        }

    @pytest.mark.asyncio
    async def test_get_content_keeps_path_slashes(self) -> None:
        recorder = Recorder(_ok({"type": "file", "content": ""}))

        async with _client(recorder) as client:
            await client.get_content("o", "r", "docs/guide.md")

        assert recorder.last.url.path == "/repos/o/r/contents/docs/guide.md"
        assert "ref" not in recorder.last.url.params

    @pytest.mark.asyncio
    async def test_get_content_with_ref(self) -> None:
        recorder = Recorder(_ok([]))

        async with _client(recorder) as client:
            await client.get_content("o", "r", "", ref="dev")

        assert recorder.last.url.params["ref"] == "dev"

    @pytest.mark.asyncio
    async def test_search_query(self) -> None:
        recorder = Recorder(_ok({"items": []}))

        async with _client(recorder) as client:
            await client.search_code("addClass in:file", per_page=10)

        assert recorder.last.url.path == "/search/code"
        assert recorder.last.url.params["q"] == "addClass in:file"
        assert recorder.last.url.params["per_page"] == "10"

    @pytest.mark.asyncio
    async def test_pulls_and_search_repos_paths(self) -> None:
        recorder = Recorder(_ok([]))

        async with _client(recorder) as client:
            await client.list_pull_requests("o", "r", state="closed", per_page=3)
            await client.search_repos("mcp", per_page=2)
            await client.get_repo("o", "r")

        paths = [r.url.path for r in recorder.requests]
        assert paths == ["/repos/o/r/pulls", "/search/repositories", "/repos/o/r"]


# =============================================================================
# Tests for Failures
# =============================================================================


class TestFailures:
    """Tests for ProviderError raising."""

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        recorder = Recorder(
            lambda request: httpx.Response(404, json={"message": "Not Found"})
        )

        async with _client(recorder) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.get_repo("o", "missing")

        error = exc_info.value
        assert error.error_code == "not_found"
        assert error.status_code == 404
        assert error.message == "GitHub API error (404): Not Found"

    @pytest.mark.asyncio
    async def test_bad_credentials(self) -> None:
        recorder = Recorder(
            lambda request: httpx.Response(401, json={"message": "Bad credentials"})
        )

        async with _client(recorder) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.get_authenticated_user()

        assert exc_info.value.error_code == "unauthenticated"
        assert "Bad credentials" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        recorder = Recorder(
            lambda request: httpx.Response(
                403,
                headers={"x-ratelimit-remaining": "0"},
                json={"message": "API rate limit exceeded"},
            )
        )

        async with _client(recorder) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.search_repos("x", per_page=10)

        assert exc_info.value.error_code == "resource_exhausted"

    @pytest.mark.asyncio
    async def test_non_json_error_body(self) -> None:
        recorder = Recorder(lambda request: httpx.Response(502, text="<html>bad</html>"))

        async with _client(recorder) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.get_authenticated_user()

        assert exc_info.value.error_code == "unavailable"
        assert exc_info.value.message == "GitHub API error (502): Bad Gateway"

    @pytest.mark.asyncio
    async def test_invalid_json_success_body(self) -> None:
        recorder = Recorder(lambda request: httpx.Response(200, text="not json"))

        async with _client(recorder) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.get_authenticated_user()

        assert exc_info.value.error_code == "internal"

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(Recorder(fail)) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.get_authenticated_user()

        assert exc_info.value.error_code == "unavailable"
        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.message


# =============================================================================
# Tests for Construction
# =============================================================================


class TestFromConfig:
    """Tests for GitHubClient.from_config."""

    def test_requires_token(self) -> None:
        with pytest.raises(ValueError, match="token"):
            GitHubClient.from_config(GitHubConfig())

    @pytest.mark.asyncio
    async def test_uses_config_values(self) -> None:
        recorder = Recorder(_ok({}))
        config = GitHubConfig(
            token="abc", api_url="https://ghe.example.com/api/v3/", user_agent="ua"
        )

        async with GitHubClient.from_config(
            config, transport=httpx.MockTransport(recorder)
        ) as client:
            await client.get_authenticated_user()

        request = recorder.last
        assert str(request.url) == "https://ghe.example.com/api/v3/user"
        assert request.headers["authorization"] == "Bearer abc"
        assert request.headers["user-agent"] == "ua"
