"""Errors raised while driving the claude CLI.

Every failure of an invocation maps to exactly one of these. They are never
retried internally; ``str(err)`` is the message shown to the user.
"""

from typing import Optional


class ClaudeCLIError(Exception):
    """Base class for all claude CLI invocation failures."""


class ExecutableNotFound(ClaudeCLIError):
    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        message = "Claude CLI executable not found. Install it from https://claude.ai/download"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ProcessExitedWithError(ClaudeCLIError):
    def __init__(self, code: int, stderr: str):
        self.code = code
        self.stderr = stderr
        super().__init__(f"Claude CLI exited with code {code}: {stderr.strip()}")


class NoOutputData(ClaudeCLIError):
    def __init__(self):
        super().__init__("Claude CLI produced no output")


class JSONDecodingFailed(ClaudeCLIError):
    def __init__(self, underlying: Exception):
        self.underlying = underlying
        super().__init__(f"Failed to decode Claude CLI response: {underlying}")


class NoResultMessage(ClaudeCLIError):
    def __init__(self):
        super().__init__("Claude CLI response contained no result message")


class NoSessionID(ClaudeCLIError):
    def __init__(self):
        super().__init__("Claude CLI response contained no session ID")
