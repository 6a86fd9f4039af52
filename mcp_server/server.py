"""MCP method dispatch for the Pilot tool server.

Answers ``initialize``, ``tools/list`` and ``tools/call`` against a fixed
tool registry. A tool that fails still produces a normal result with
``isError: true``; protocol errors are reserved for bad requests.
"""

import logging
from typing import Any, Dict, Optional

from agent.execution_log import ExecutionLogSink
from mcp_server.jsonrpc import (
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    NO_RESPONSE,
    JSONRPCError,
    JSONRPCRequest,
)
from model_tools import get_tool_definitions, handle_function_call
from pilot_cli import __version__
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "pilot-mcp"


class MCPServer:
    def __init__(self, registry: ToolRegistry, sink: Optional[ExecutionLogSink] = None):
        self.registry = registry
        self.sink = sink or ExecutionLogSink()
        self._handlers = {
            "initialize": self._initialize,
            "notifications/initialized": self._initialized,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    async def handle(self, request: JSONRPCRequest) -> Any:
        handler = self._handlers.get(request.method)
        if handler is None:
            raise JSONRPCError(METHOD_NOT_FOUND, f"Method not found: {request.method}")
        return await handler(request.params)

    async def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        client = params.get("clientInfo") or {}
        if isinstance(client, dict) and client.get("name"):
            logger.info("Initialized by %s %s", client.get("name"), client.get("version", ""))
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    async def _initialized(self, params: Dict[str, Any]) -> Any:
        return NO_RESPONSE

    async def _list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": get_tool_definitions(self.registry)}

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise JSONRPCError(INVALID_PARAMS, "Missing tool name")

        tool = self.registry.tool(name)
        if tool is None:
            raise JSONRPCError(INVALID_PARAMS, f"Unknown tool: {name}")

        result, record = await handle_function_call(tool, params.get("arguments"))
        try:
            self.sink.record(record)
        except Exception as e:
            logger.warning("Execution log sink failed for %s: %s", name, e)

        return {
            "content": [{"type": "text", "text": result.content}],
            "isError": result.is_error,
        }
