"""Allow ``python -m mcp_github``."""

from mcp_github.main import cli

if __name__ == "__main__":
    cli()
