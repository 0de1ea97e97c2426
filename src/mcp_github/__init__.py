"""
GitHub MCP Server.

This package exposes a fixed catalogue of GitHub REST API operations as MCP
tools served over stdio (JSON-RPC 2.0), validates parameters, delegates to
the GitHub provider, and normalizes results into text content blocks.
"""

__version__ = "1.0.0"
