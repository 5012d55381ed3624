"""MCP server exposing the knowledge base tools."""

from musakb.server.mcp_server import create_mcp_server

__all__ = ["create_mcp_server"]
