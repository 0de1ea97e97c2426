"""
Process lifecycle for the GitHub MCP Server.

Startup order:
1. Load ``.env`` into the environment (existing variables win)
2. Load configuration and require the GitHub token, before anything else
3. Configure logging, build the provider and the operation registry
4. Serve MCP over stdio until EOF, SIGINT or SIGTERM

Exit status is 0 on graceful shutdown and 1 on a missing credential or a
startup/connection failure.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError as ConfigValidationError

from mcp_github.config import TOKEN_ENV_VAR, AppConfig, load_config
from mcp_github.errors import FatalStartupError, TransportError
from mcp_github.logging import get_logger, setup_logging
from mcp_github.provider import GitHubClient
from mcp_github.server import MCPServer
from mcp_github.tools import create_registry

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def require_token(config: AppConfig) -> str:
    """
    Return the configured GitHub token.

    Raises:
        FatalStartupError: If no token is configured, with a two-line
            remediation hint as its message.
    """
    if config.github.token is None:
        raise FatalStartupError(
            f"{TOKEN_ENV_VAR} environment variable is required.\n"
            f"Create a .env file with: {TOKEN_ENV_VAR}=your_token_here"
        )
    return config.github.token


def _install_shutdown_handler(server: MCPServer) -> bool:
    """
    Stop the server on SIGTERM so shutdown runs the normal EOF path.

    Returns:
        False where the event loop does not support signal handlers.
    """

    def _on_sigterm() -> None:
        logger.info("Received SIGTERM, shutting down")
        server.stop()

    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, _on_sigterm)
    except (NotImplementedError, RuntimeError):
        # Windows event loops, or not running in the main thread
        return False
    return True


async def serve(config: AppConfig) -> None:
    """
    Build the provider, registry and server, then serve until EOF or SIGTERM.

    Raises:
        TransportError: If the stdio transport cannot be established.
    """
    async with GitHubClient.from_config(config.github) as provider:
        registry = create_registry()
        server = MCPServer(
            registry=registry,
            provider=provider,
            server_config=config.server,
        )
        reader = await server.connect()
        installed = _install_shutdown_handler(server)
        print("GitHub MCP Server running on stdio", file=sys.stderr, flush=True)
        try:
            await server.serve(reader)
        finally:
            if installed:
                asyncio.get_running_loop().remove_signal_handler(signal.SIGTERM)


def main(argv: list[str] | None = None) -> int:
    """
    Run the server process.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Process exit status.
    """
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    try:
        config = load_config(cli_args=argv)
    except ConfigValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        require_token(config)
    except FatalStartupError as e:
        print(str(e), file=sys.stderr)
        return EXIT_FAILURE

    setup_logging(config.logging)
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except TransportError as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())
