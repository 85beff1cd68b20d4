"""MCP starter server: tools, resources and prompts over the MCP Python SDK."""

__version__ = "1.0.0"

SERVER_NAME = "mcp-python-starter"
