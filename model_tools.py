#!/usr/bin/env python3
"""
Model Tools Module

Bridges the tool registry and the MCP wire format. It renders every
registered tool as an MCP tool definition, converts untyped JSON arguments
into typed ``JSONValue`` mappings, and runs a tool call while timing it for
the execution log.

Usage:
    from model_tools import get_tool_definitions, handle_function_call

    # Tool definitions for a tools/list response
    tools = get_tool_definitions(registry)

    # Run one call and get the result plus its execution record
    result, record = await handle_function_call(tool, {"command": "ls"})
"""

import json
import logging
import time
from typing import Any, Dict, List, Tuple

from agent.execution_log import ToolExecutionRecord
from tools.base import Arguments, JSONValue, Tool, ToolResult
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def tool_definition(tool: Tool) -> Dict[str, Any]:
    """
    Render one tool as an MCP tool definition.

    Args:
        tool (Tool): The tool to describe

    Returns:
        Dict: ``{"name", "description", "inputSchema"}`` where the schema is a
        JSON Schema object with one property per parameter and a ``required`` list
    """
    properties = {}
    required = []
    for param in tool.parameters:
        prop = {
            "type": param.type.value,
            "description": param.description,
        }
        if param.enum_values:
            prop["enum"] = list(param.enum_values)
        properties[param.name] = prop
        if param.required:
            required.append(param.name)

    return {
        "name": tool.name,
        "description": tool.description,
        "inputSchema": {
            "type": "object",
            "properties": properties,
            "required": required,
        },
    }


def get_tool_definitions(registry: ToolRegistry) -> List[Dict[str, Any]]:
    """
    Get tool definitions for every registered tool, in registration order.

    Args:
        registry (ToolRegistry): The registry to render

    Returns:
        List[Dict]: One MCP tool definition per tool
    """
    return [tool_definition(tool) for tool in registry.all_tools]


def convert_argument(raw: Any) -> JSONValue:
    # Arrays and objects have no JSONValue kind; pass them on as compact JSON text
    if isinstance(raw, (list, dict)):
        return JSONValue.string(json.dumps(raw, separators=(",", ":"), ensure_ascii=False))
    return JSONValue.from_json(raw)


def convert_arguments(raw: Any) -> Arguments:
    """
    Convert the ``arguments`` object of a tools/call request into typed values.

    Anything that is not an object (including a missing value) yields an
    empty mapping; the tool then reports whichever parameter it is missing.
    """
    if not isinstance(raw, dict):
        return {}
    return {str(key): convert_argument(value) for key, value in raw.items()}


def encode_arguments(arguments: Arguments) -> str:
    """JSON text of a typed argument mapping, as stored in the execution log."""
    return json.dumps(
        {key: value.to_json() for key, value in arguments.items()},
        ensure_ascii=False,
        sort_keys=True,
    )


async def handle_function_call(tool: Tool, raw_arguments: Any) -> Tuple[ToolResult, ToolExecutionRecord]:
    """
    Run a tool call and time it.

    Tools are expected to report failures as ``ToolResult.failure``; an
    exception escaping one is logged and turned into a failure result here,
    so the caller always gets a result and a record.

    Args:
        tool (Tool): The tool to run
        raw_arguments: The untyped ``arguments`` value from the request

    Returns:
        Tuple[ToolResult, ToolExecutionRecord]: The result and its log record
    """
    arguments = convert_arguments(raw_arguments)
    started = time.monotonic()
    try:
        result = await tool.execute(arguments)
    except Exception as e:
        logger.exception("Tool %s raised instead of returning a result", tool.name)
        result = ToolResult.failure(f"Tool execution failed: {e}")
    duration_ms = int((time.monotonic() - started) * 1000)

    logger.debug("Tool %s finished in %dms (error=%s)", tool.name, duration_ms, result.is_error)
    record = ToolExecutionRecord(
        tool_name=tool.name,
        arguments=encode_arguments(arguments),
        result_content=result.content,
        is_error=result.is_error,
        duration_ms=duration_ms,
    )
    return result, record
