"""Clipboard tool -- read or replace the clipboard text.

Actions:
- ``read``: returns the current clipboard text
- ``write``: sets the clipboard to ``content``
"""

import asyncio
import logging

from tools.base import Arguments, Tool, ToolParameter, ToolResult
from tools.capabilities import CapabilityError, Clipboard

logger = logging.getLogger(__name__)

EMPTY_CLIPBOARD_MESSAGE = "Clipboard is empty."


class ClipboardTool(Tool):
    name = "clipboard"
    description = "Read or write the system clipboard."
    parameters = (
        ToolParameter(
            name="action",
            description="The action to perform: 'read' to get clipboard contents, 'write' to set them.",
            enum_values=("read", "write"),
        ),
        ToolParameter(
            name="content",
            description="The text to write to the clipboard. Required when action is 'write'.",
            required=False,
        ),
    )

    def __init__(self, clipboard: Clipboard):
        self.clipboard = clipboard

    async def execute(self, arguments: Arguments) -> ToolResult:
        action_value = arguments.get("action")
        action = action_value.string_value if action_value else None
        if action is None:
            return ToolResult.failure("Missing required parameter: action")

        if action == "read":
            return await self._read()
        if action == "write":
            content_value = arguments.get("content")
            content = content_value.string_value if content_value else None
            if content is None:
                return ToolResult.failure("Missing required parameter: content (needed for write action)")
            return await self._write(content)
        return ToolResult.failure(f"Unknown action: {action}. Use 'read' or 'write'.")

    async def _read(self) -> ToolResult:
        try:
            text = await asyncio.to_thread(self.clipboard.read_text)
        except CapabilityError as e:
            logger.warning("Clipboard read failed: %s", e)
            return ToolResult.failure(str(e))
        if not text:
            return ToolResult.success(EMPTY_CLIPBOARD_MESSAGE)
        return ToolResult.success(text)

    async def _write(self, content: str) -> ToolResult:
        try:
            await asyncio.to_thread(self.clipboard.write_text, content)
        except CapabilityError as e:
            logger.warning("Clipboard write failed: %s", e)
            return ToolResult.failure(str(e))
        return ToolResult.success("Clipboard updated.")
