"""
MCP Server Package

The stdio tool server the claude CLI spawns during a tool-enabled run:

- jsonrpc: newline-delimited JSON-RPC transport (read, decode, write)
- server: initialize / tools/list / tools/call dispatch over the tool registry
- main: the ``pilot-mcp`` entry point
"""

from .jsonrpc import JSONRPCError, JSONRPCRequest, JSONRPCServer
from .server import MCPServer

__all__ = [
    'JSONRPCError',
    'JSONRPCRequest',
    'JSONRPCServer',
    'MCPServer',
]
