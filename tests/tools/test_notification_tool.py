"""Tests for the notification tool."""

from unittest.mock import MagicMock

import pytest

from tools.base import JSONValue
from tools.capabilities import CapabilityError, SystemNotifier
from tools.notification_tool import DENIED_MESSAGE, SENT_MESSAGE, NotificationTool


def _args(**kwargs):
    return {key: JSONValue.from_json(value) for key, value in kwargs.items()}


class TestNotificationTool:

    @pytest.mark.asyncio
    async def test_sent(self):
        notifier = MagicMock()
        notifier.send.return_value = True
        result = await NotificationTool(notifier).execute(_args(title="Build", body="Done"))
        assert not result.is_error
        assert result.content == SENT_MESSAGE
        notifier.send.assert_called_once_with("Build", "Done")

    @pytest.mark.asyncio
    async def test_denied_is_not_an_error(self):
        notifier = MagicMock()
        notifier.send.return_value = False
        result = await NotificationTool(notifier).execute(_args(title="Build", body="Done"))
        assert not result.is_error
        assert result.content == DENIED_MESSAGE

    @pytest.mark.asyncio
    async def test_disabled_system_notifier_denies_without_running_anything(self, monkeypatch):
        def no_subprocess(*args, **kwargs):
            raise AssertionError("should not run a command")

        monkeypatch.setattr("tools.capabilities.subprocess.run", no_subprocess)
        result = await NotificationTool(SystemNotifier(enabled=False)).execute(_args(title="t", body="b"))
        assert result.content == DENIED_MESSAGE

    @pytest.mark.asyncio
    async def test_backend_failure(self):
        notifier = MagicMock()
        notifier.send.side_effect = CapabilityError("notify-send exited with code 1")
        result = await NotificationTool(notifier).execute(_args(title="t", body="b"))
        assert result.is_error
        assert result.content.startswith("Failed to send notification:")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments,missing", [
        ({"body": "b"}, "title"),
        ({"title": "t"}, "body"),
        ({"title": 5, "body": "b"}, "title"),
    ])
    async def test_missing_parameters(self, arguments, missing):
        notifier = MagicMock()
        result = await NotificationTool(notifier).execute(_args(**arguments))
        assert result.is_error
        assert missing in result.content
        notifier.send.assert_not_called()
