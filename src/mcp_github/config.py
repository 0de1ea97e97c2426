"""
Configuration management for the GitHub MCP Server.

This module implements the AppConfig Pydantic model and configuration loading.

Configuration is loaded from multiple sources with layered precedence:
1. Built-in defaults (Pydantic model defaults)
2. Environment variables (MCP_GITHUB_* prefix, __ for nesting)
3. The GITHUB_TOKEN environment variable (credential)
4. Command-line arguments (highest precedence)

There is no configuration file format; a ``.env`` file, when present, is
loaded into the environment by main() before this module reads it.
"""

from __future__ import annotations

import argparse
import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

from mcp_github import __version__

# Environment variable holding the GitHub credential
TOKEN_ENV_VAR = "GITHUB_TOKEN"

# Prefix for all other settings
ENV_PREFIX = "MCP_GITHUB_"

_VALID_LOG_LEVELS = {"debug", "info", "warn", "warning", "error", "critical"}


def _normalize_log_level(v: str) -> str:
    v_lower = v.lower()
    if v_lower not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {v}. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    # Normalize 'warn' to 'warning'
    if v_lower == "warn":
        return "warning"
    return v_lower


# =============================================================================
# Server Configuration
# =============================================================================


class ServerConfig(BaseModel):
    """Server identity advertised during the MCP handshake.

    Attributes:
        name: Server name reported in serverInfo.
        version: Server version reported in serverInfo.
    """

    name: str = Field(
        default="github-mcp-server",
        description="Server name reported to MCP clients",
    )
    version: str = Field(
        default=__version__,
        description="Server version reported to MCP clients",
    )


# =============================================================================
# GitHub Configuration
# =============================================================================


class GitHubConfig(BaseModel):
    """GitHub API access configuration.

    Attributes:
        token: Personal access token passed through as a bearer credential.
        api_url: Base URL of the GitHub REST API.
        timeout_seconds: HTTP timeout applied to each API call.
        user_agent: User-Agent header sent with every request.
    """

    token: str | None = Field(
        default=None,
        description="GitHub personal access token",
        repr=False,
    )
    api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds for each GitHub API call",
    )
    user_agent: str = Field(
        default=f"github-mcp-server/{__version__}",
        description="User-Agent header for GitHub API requests",
    )

    @field_validator("token", mode="before")
    @classmethod
    def validate_token(cls, v: Any) -> str | None:
        """Treat blank tokens as absent and keep numeric-looking tokens as text."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Require an http(s) URL and strip the trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level.
        json_format: Whether to emit JSON log records.
    """

    level: str = Field(
        default="info",
        description="Log level: debug, info, warn, error",
    )
    json_format: bool = Field(
        default=True,
        description="Emit JSON-formatted log records on stderr",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        return _normalize_log_level(v)


# =============================================================================
# Main Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """
    Main application configuration model.

    Attributes:
        server: Server identity.
        github: GitHub API access settings.
        logging: Logging configuration.
    """

    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Server identity",
    )
    github: GitHubConfig = Field(
        default_factory=GitHubConfig,
        description="GitHub API access settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )

    @property
    def has_token(self) -> bool:
        """Check whether a GitHub credential is configured."""
        return self.github.token is not None


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: The base dictionary.
        override: The dictionary with values to override.

    Returns:
        A new dictionary with merged values.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to appropriate Python type.

    Args:
        value: String value from environment variable.

    Returns:
        Parsed value (bool, int, float, or string).
    """
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def _load_env_config(
    prefix: str = ENV_PREFIX,
    environ: dict[str, str] | None = None,
) -> dict[str, Any]:
    """
    Load configuration from environment variables.

    Environment variables are parsed with the following rules:
    - Prefix: MCP_GITHUB_ (configurable)
    - Nested keys: Double underscore (__) separator
    - Example: MCP_GITHUB_GITHUB__API_URL=https://github.example.com/api/v3
    - GITHUB_TOKEN sets github.token and wins over MCP_GITHUB_GITHUB__TOKEN

    Args:
        prefix: Environment variable prefix.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Dictionary with configuration values.
    """
    env = os.environ if environ is None else environ
    result: dict[str, Any] = {}

    for key, value in env.items():
        if not key.startswith(prefix):
            continue

        parts = key[len(prefix) :].lower().split("__")

        current = result
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = _parse_env_value(value)

    token = env.get(TOKEN_ENV_VAR)
    if token is not None:
        result.setdefault("github", {})["token"] = token

    return result


def _parse_cli_args(args: list[str] | None = None) -> dict[str, Any]:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Dictionary with parsed arguments, shaped like AppConfig.
    """
    parser = argparse.ArgumentParser(
        prog="mcp-github",
        description="GitHub MCP Server (stdio)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        help="Override log level",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--api-url",
        type=str,
        help="GitHub REST API base URL",
    )

    parsed = parser.parse_args(args)

    result: dict[str, Any] = {}

    if parsed.log_level:
        result["logging"] = {"level": parsed.log_level}

    if parsed.debug:
        result.setdefault("logging", {})["level"] = "debug"

    if parsed.api_url:
        result["github"] = {"api_url": parsed.api_url}

    return result


def load_config(
    cli_args: list[str] | None = None,
    env_prefix: str = ENV_PREFIX,
    environ: dict[str, str] | None = None,
) -> AppConfig:
    """
    Load configuration from all sources with layered precedence.

    Later sources override earlier ones: defaults, environment, CLI.

    Args:
        cli_args: Command-line arguments. If None, uses sys.argv.
        env_prefix: Prefix for environment variables.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Fully configured AppConfig instance.

    Raises:
        pydantic.ValidationError: If configuration is invalid.

    Example:
        >>> config = load_config(cli_args=[])
        >>> config.github.api_url
        'https://api.github.com'
    """
    config_dict: dict[str, Any] = {}
    config_dict = _deep_merge(config_dict, _load_env_config(env_prefix, environ))
    config_dict = _deep_merge(config_dict, _parse_cli_args(cli_args))
    return AppConfig(**config_dict)
