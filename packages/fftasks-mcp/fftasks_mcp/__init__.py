"""
fftasks MCP server package.
"""

from fftasks_mcp.server import create_server, main

__all__ = ["create_server", "main"]
