"""Notification tool -- post a desktop notification."""

import asyncio
import logging

from tools.base import Arguments, Tool, ToolParameter, ToolResult
from tools.capabilities import CapabilityError, Notifier

logger = logging.getLogger(__name__)

SENT_MESSAGE = "Notification sent."

# A denial is the user's choice, not a fault, so it is reported as a success.
DENIED_MESSAGE = (
    "Notification permission denied. To allow Pilot notifications, run "
    "'pilot config set notifications.enabled true' and check that "
    "notifications are enabled for your terminal in the system settings."
)


class NotificationTool(Tool):
    name = "notification"
    description = "Send a desktop notification with a title and body."
    parameters = (
        ToolParameter(name="title", description="The notification title."),
        ToolParameter(name="body", description="The notification body text."),
    )

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    async def execute(self, arguments: Arguments) -> ToolResult:
        title = arguments["title"].string_value if "title" in arguments else None
        if title is None:
            return ToolResult.failure("Missing required parameter: title")

        body = arguments["body"].string_value if "body" in arguments else None
        if body is None:
            return ToolResult.failure("Missing required parameter: body")

        try:
            delivered = await asyncio.to_thread(self.notifier.send, title, body)
        except CapabilityError as e:
            logger.warning("Notification failed: %s", e)
            return ToolResult.failure(f"Failed to send notification: {e}")

        return ToolResult.success(SENT_MESSAGE if delivered else DENIED_MESSAGE)
