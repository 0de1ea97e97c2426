"""
Tests for the process entry point.

This test module validates:
- Startup refuses to run without a GitHub token
- Exit status on success, interruption and transport failure
- The serve() wiring of provider, registry and server
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest

from mcp_github import main as main_module
from mcp_github.config import AppConfig, GitHubConfig
from mcp_github.errors import FatalStartupError, TransportError
from mcp_github.logging import ROOT_LOGGER_NAME
from mcp_github.server import MCPServer

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the host environment and .env files out of startup."""
    monkeypatch.setattr(main_module, "load_dotenv", lambda **kwargs: False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    for key in list(os.environ):
        if key.startswith("MCP_GITHUB_"):
            monkeypatch.delenv(key)
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def spies(monkeypatch: pytest.MonkeyPatch) -> dict[str, MagicMock]:
    """Replace the provider and registry constructors with spies."""
    client_cls = MagicMock()
    create_registry = MagicMock()
    monkeypatch.setattr(main_module, "GitHubClient", client_cls)
    monkeypatch.setattr(main_module, "create_registry", create_registry)
    return {"client": client_cls, "registry": create_registry}


# =============================================================================
# Tests for require_token
# =============================================================================


class TestRequireToken:
    """Tests for require_token."""

    def test_returns_token(self) -> None:
        config = AppConfig(github=GitHubConfig(token="ghp_x"))
        assert main_module.require_token(config) == "ghp_x"

    def test_missing_token(self) -> None:
        with pytest.raises(FatalStartupError) as exc_info:
            main_module.require_token(AppConfig())

        assert str(exc_info.value).splitlines() == [
            "GITHUB_TOKEN environment variable is required.",
            "Create a .env file with: GITHUB_TOKEN=your_token_here",
        ]


# =============================================================================
# Tests for main
# =============================================================================


class TestMain:
    """Tests for main."""

    def test_missing_token_exits_before_building_anything(
        self, capsys: pytest.CaptureFixture[str], spies: dict[str, MagicMock]
    ) -> None:
        status = main_module.main([])

        captured = capsys.readouterr()
        assert status == main_module.EXIT_FAILURE
        assert captured.err.splitlines() == [
            "GITHUB_TOKEN environment variable is required.",
            "Create a .env file with: GITHUB_TOKEN=your_token_here",
        ]
        assert captured.out == ""
        spies["client"].from_config.assert_not_called()
        spies["registry"].assert_not_called()

    def test_blank_token_treated_as_missing(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "  ")

        assert main_module.main([]) == main_module.EXIT_FAILURE
        assert "GITHUB_TOKEN environment variable is required." in capsys.readouterr().err

    def test_invalid_configuration(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
        monkeypatch.setenv("MCP_GITHUB_GITHUB__API_URL", "ftp://nope")

        assert main_module.main([]) == main_module.EXIT_FAILURE
        assert "Invalid configuration" in capsys.readouterr().err

    def test_graceful_shutdown(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
        serve = AsyncMock()
        monkeypatch.setattr(main_module, "serve", serve)

        assert main_module.main([]) == main_module.EXIT_OK

        (config,) = serve.await_args.args
        assert config.github.token == "ghp_x"

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
        monkeypatch.setattr(main_module, "serve", AsyncMock(side_effect=KeyboardInterrupt))

        assert main_module.main([]) == main_module.EXIT_OK

    def test_transport_failure(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
        monkeypatch.setattr(
            main_module,
            "serve",
            AsyncMock(side_effect=TransportError("Cannot attach to stdin: closed")),
        )

        assert main_module.main([]) == main_module.EXIT_FAILURE
        assert "Fatal error: Cannot attach to stdin: closed" in capsys.readouterr().err

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
    def test_sigterm_exits_cleanly(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")

        async def connect(self: MCPServer) -> asyncio.StreamReader:
            # stdin stays open; termination comes from the signal alone
            asyncio.get_running_loop().call_soon(os.kill, os.getpid(), signal.SIGTERM)
            return asyncio.StreamReader()

        monkeypatch.setattr(MCPServer, "connect", connect)

        assert main_module.main([]) == main_module.EXIT_OK


# =============================================================================
# Tests for serve
# =============================================================================


class TestServe:
    """Tests for serve."""

    @pytest.mark.asyncio
    async def test_wires_server_and_announces_readiness(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        server = MagicMock()
        server.connect = AsyncMock(return_value="reader")
        server.serve = AsyncMock()
        server_cls = MagicMock(return_value=server)
        monkeypatch.setattr(main_module, "MCPServer", server_cls)

        config = AppConfig(github=GitHubConfig(token="ghp_x"))
        await main_module.serve(config)

        kwargs = server_cls.call_args.kwargs
        assert len(kwargs["registry"]) == 10
        assert kwargs["server_config"] is config.server
        server.serve.assert_awaited_once_with("reader")
        assert "GitHub MCP Server running on stdio" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        server = MagicMock()
        server.connect = AsyncMock(side_effect=TransportError("no stdin"))
        monkeypatch.setattr(main_module, "MCPServer", MagicMock(return_value=server))

        with pytest.raises(TransportError):
            await main_module.serve(AppConfig(github=GitHubConfig(token="ghp_x")))

        assert "running on stdio" not in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_sigterm_handler_stops_server(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        handlers: dict[int, object] = {}
        loop = asyncio.get_running_loop()
        monkeypatch.setattr(
            loop, "add_signal_handler", lambda sig, callback: handlers.__setitem__(sig, callback)
        )
        monkeypatch.setattr(
            loop, "remove_signal_handler", lambda sig: handlers.pop(sig, None) is not None
        )
        monkeypatch.setattr(MCPServer, "connect", AsyncMock(return_value=asyncio.StreamReader()))

        task = asyncio.create_task(
            main_module.serve(AppConfig(github=GitHubConfig(token="ghp_x")))
        )
        for _ in range(50):
            if signal.SIGTERM in handlers:
                break
            await asyncio.sleep(0)
        on_sigterm = handlers[signal.SIGTERM]

        on_sigterm()
        await asyncio.wait_for(task, timeout=5)

        assert signal.SIGTERM not in handlers

    @pytest.mark.asyncio
    async def test_serves_without_signal_support(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        loop = asyncio.get_running_loop()

        def unsupported(*args: object) -> None:
            raise NotImplementedError

        monkeypatch.setattr(loop, "add_signal_handler", unsupported)
        remove = MagicMock()
        monkeypatch.setattr(loop, "remove_signal_handler", remove)
        reader = asyncio.StreamReader()
        reader.feed_eof()
        monkeypatch.setattr(MCPServer, "connect", AsyncMock(return_value=reader))

        await main_module.serve(AppConfig(github=GitHubConfig(token="ghp_x")))

        remove.assert_not_called()
