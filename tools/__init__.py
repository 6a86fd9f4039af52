#!/usr/bin/env python3
"""
Tools Package

The local capabilities the claude CLI can call through the Pilot MCP server:

- clipboard_tool: Read or write the clipboard text
- notification_tool: Post a desktop notification
- shell_tool: Run a command through the user's login shell
- web_tool: Fetch an http(s) URL as text

base.py holds the shared contract (JSONValue, ToolParameter, ToolResult,
Tool) and registry.py the fixed name -> tool lookup the server uses.
"""

from .base import (
    JSONValue,
    ParameterType,
    Tool,
    ToolParameter,
    ToolResult,
    ValueKind,
)

from .registry import ToolRegistry, build_default_registry

from .clipboard_tool import ClipboardTool
from .notification_tool import NotificationTool
from .shell_tool import ShellTool
from .web_tool import WebTool

__all__ = [
    # Contract
    'JSONValue',
    'ParameterType',
    'Tool',
    'ToolParameter',
    'ToolResult',
    'ValueKind',
    # Registry
    'ToolRegistry',
    'build_default_registry',
    # Built-in tools
    'ClipboardTool',
    'NotificationTool',
    'ShellTool',
    'WebTool',
]
