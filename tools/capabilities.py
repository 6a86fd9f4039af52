"""Clipboard and desktop-notification backends.

The clipboard and notification tools only see two small interfaces:

- ``Clipboard.read_text() -> str | None`` / ``Clipboard.write_text(text)``
- ``Notifier.send(title, body) -> bool`` (False means the user said no)

The system implementations shell out to the platform utilities:
pbcopy/pbpaste and osascript on macOS; wl-clipboard, xclip or xsel and
notify-send on Linux. Calls block, so async callers should use
``asyncio.to_thread``.
"""

import logging
import os
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT = 5


class CapabilityError(Exception):
    """A clipboard/notification backend failed."""


class CapabilityUnavailable(CapabilityError):
    """No backend exists for this platform/session."""


# =============================================================================
# Clipboard
# =============================================================================

class Clipboard(ABC):
    @abstractmethod
    def read_text(self) -> Optional[str]:
        """Current clipboard text, or None when it holds no text."""

    @abstractmethod
    def write_text(self, text: str) -> None:
        pass


class MemoryClipboard(Clipboard):
    """Process-local clipboard, used for headless runs and tests."""

    def __init__(self, text: Optional[str] = None):
        self._text = text

    def read_text(self) -> Optional[str]:
        return self._text

    def write_text(self, text: str) -> None:
        self._text = text


def _clipboard_commands() -> Tuple[List[str], List[str]]:
    """(read command, write command) for the current desktop session."""
    if sys.platform == "darwin":
        return ["pbpaste"], ["pbcopy"]
    if os.getenv("WAYLAND_DISPLAY") and shutil.which("wl-paste") and shutil.which("wl-copy"):
        return ["wl-paste", "--no-newline"], ["wl-copy"]
    if shutil.which("xclip"):
        return ["xclip", "-selection", "clipboard", "-o"], ["xclip", "-selection", "clipboard"]
    if shutil.which("xsel"):
        return ["xsel", "--clipboard", "--output"], ["xsel", "--clipboard", "--input"]
    raise CapabilityUnavailable(
        "No clipboard utility found. Install wl-clipboard, xclip or xsel."
    )


class SystemClipboard(Clipboard):
    """The desktop clipboard via platform command-line utilities."""

    def read_text(self) -> Optional[str]:
        read_cmd, _ = _clipboard_commands()
        try:
            result = subprocess.run(
                read_cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=COMMAND_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CapabilityError(f"Failed to read clipboard: {e}") from e

        if result.returncode != 0:
            # xclip/xsel exit non-zero when there is no text selection
            logger.debug("%s exited %d: %s", read_cmd[0], result.returncode,
                         result.stderr.decode("utf-8", errors="replace").strip())
            return None

        text = result.stdout.decode("utf-8", errors="replace")
        return text or None

    def write_text(self, text: str) -> None:
        _, write_cmd = _clipboard_commands()
        try:
            # xclip keeps running to own the selection, so its output pipes
            # must not be captured or run() would wait on them
            result = subprocess.run(
                write_cmd,
                input=text.encode("utf-8"),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=COMMAND_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CapabilityError(f"Failed to write clipboard: {e}") from e

        if result.returncode != 0:
            raise CapabilityError(f"{write_cmd[0]} exited with code {result.returncode}")


# =============================================================================
# Notifications
# =============================================================================

class Notifier(ABC):
    @abstractmethod
    def send(self, title: str, body: str) -> bool:
        """Post a notification; False when the user has refused them."""


def _applescript_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SystemNotifier(Notifier):
    """Desktop notifications via osascript (macOS) or notify-send (Linux).

    ``enabled=False`` is the user's standing refusal: every send reports a
    denial without touching the desktop.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def _command(self, title: str, body: str) -> List[str]:
        if sys.platform == "darwin":
            script = f"display notification {_applescript_string(body)} with title {_applescript_string(title)}"
            return ["osascript", "-e", script]
        if shutil.which("notify-send"):
            return ["notify-send", "--app-name=Pilot", title, body]
        raise CapabilityUnavailable("No notification utility found. Install libnotify (notify-send).")

    def send(self, title: str, body: str) -> bool:
        if not self.enabled:
            return False

        command = self._command(title, body)
        try:
            result = subprocess.run(
                command,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=COMMAND_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CapabilityError(f"Failed to send notification: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise CapabilityError(f"{command[0]} exited with code {result.returncode}: {stderr}")
        return True


def clipboard_backend() -> Optional[str]:
    """Name of the clipboard utility that would be used, or None."""
    try:
        read_cmd, _ = _clipboard_commands()
    except CapabilityUnavailable:
        return None
    return read_cmd[0]


def notification_backend() -> Optional[str]:
    if sys.platform == "darwin":
        return "osascript"
    return "notify-send" if shutil.which("notify-send") else None
