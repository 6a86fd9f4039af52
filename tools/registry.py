"""Name -> tool lookup, fixed for the life of the process."""

import logging
from types import MappingProxyType
from typing import Iterable, List, Optional

from tools.base import Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Immutable registry built once at startup."""

    def __init__(self, tools: Iterable[Tool]):
        lookup = {}
        for tool in tools:
            if tool.name in lookup:
                logger.warning("Duplicate tool name %r, keeping the last one", tool.name)
            lookup[tool.name] = tool
        self._tools = MappingProxyType(lookup)

    def tool(self, name: str) -> Optional[Tool]:
        """The tool registered as ``name``, or None."""
        return self._tools.get(name)

    @property
    def all_tools(self) -> List[Tool]:
        return list(self._tools.values())

    @property
    def names(self) -> List[str]:
        return list(self._tools.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def build_default_registry(config=None, clipboard=None, notifier=None) -> ToolRegistry:
    """The four built-in tools, wired to the given (or system) capabilities.

    Args:
        config: Loaded Pilot config dict; only the ``shell`` and
            ``notifications`` sections are read.
        clipboard: Clipboard backend; defaults to the system clipboard.
        notifier: Notification backend; defaults to the system notifier.
    """
    from tools.capabilities import SystemClipboard, SystemNotifier
    from tools.clipboard_tool import ClipboardTool
    from tools.notification_tool import NotificationTool
    from tools.shell_tool import ShellTool
    from tools.web_tool import WebTool

    config = config or {}
    shell_config = config.get("shell", {}) or {}
    notify_config = config.get("notifications", {}) or {}

    if notifier is None:
        notifier = SystemNotifier(enabled=notify_config.get("enabled", True))

    return ToolRegistry([
        ClipboardTool(clipboard or SystemClipboard()),
        NotificationTool(notifier),
        WebTool(),
        ShellTool(
            shell=shell_config.get("shell") or None,
            default_timeout=shell_config.get("timeout") or None,
        ),
    ])
