#!/usr/bin/env python3
"""
Shell Tool Module

Runs a command through the user's login shell on the local machine and
returns its annotated output.

Features:
- Login shell (``$SHELL -l -c``) with the inherited environment, so tools
  installed in the user's profile (git, gh, brew, pyenv shims) are on PATH
- stdout and stderr captured separately
- Hard wall-clock timeout: the process group gets SIGTERM, pipes get a short
  grace period to drain, and whatever was captured is still returned
- Output capped at 50,000 characters

Output format:
    <stdout>

    [stderr]
    <stderr>

    [timed out after 30s]

    [exit code: 0]

Usage:
    from tools.shell_tool import ShellTool

    tool = ShellTool()
    result = await tool.execute({"command": JSONValue.string("ls -la")})
"""

import asyncio
import logging
import os
import signal
from typing import List, Optional

from tools.base import Arguments, ParameterType, Tool, ToolParameter, ToolResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
MAX_OUTPUT_CHARS = 50_000

# Seconds allowed for pipes to drain after the process group is terminated.
TERMINATE_GRACE_SECONDS = 0.1

READ_CHUNK_SIZE = 65536

SHELL_TOOL_DESCRIPTION = (
    "Execute a shell command on the user's machine and return its output. "
    "Runs in the user's login shell, so pipes, redirects and installed tools work. "
    "Do not start interactive programs (vim, less, a REPL); they will hang until the timeout."
)


def default_shell() -> str:
    return os.getenv("SHELL") or "/bin/sh"


def format_output(
    stdout: str,
    stderr: str,
    exit_code: int,
    timed_out: bool = False,
    timeout: int = DEFAULT_TIMEOUT,
) -> str:
    """Join the captured streams and status markers into one string.

    Truncation is applied to the formatted text, after the markers are added.
    """
    parts: List[str] = []

    trimmed_out = stdout.strip()
    if trimmed_out:
        parts.append(trimmed_out)

    trimmed_err = stderr.strip()
    if trimmed_err:
        parts.append(f"[stderr]\n{trimmed_err}")

    if not parts:
        parts.append("(no output)")

    if timed_out:
        parts.append(f"[timed out after {timeout}s]")

    parts.append(f"[exit code: {exit_code}]")

    output = "\n\n".join(parts)
    if len(output) > MAX_OUTPUT_CHARS:
        output = output[:MAX_OUTPUT_CHARS] + f"\n\n[Truncated: output exceeded {MAX_OUTPUT_CHARS} characters]"
    return output


async def _drain(stream: asyncio.StreamReader, chunks: List[bytes]) -> None:
    """Read a pipe to EOF, keeping every chunk so a cancelled read loses nothing."""
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            return
        chunks.append(chunk)


def _signal_group(proc: asyncio.subprocess.Process, sig: int) -> None:
    try:
        os.killpg(proc.pid, sig)
    except (ProcessLookupError, PermissionError):
        try:
            proc.send_signal(sig)
        except ProcessLookupError:
            pass


def _exit_code(returncode: Optional[int]) -> int:
    if returncode is None:
        return 128 + signal.SIGKILL
    if returncode < 0:
        # killed by a signal; report it the way a shell would
        return 128 - returncode
    return returncode


class ShellTool(Tool):
    name = "shell"
    description = SHELL_TOOL_DESCRIPTION
    parameters = (
        ToolParameter(
            name="command",
            description="The shell command to execute. Supports pipes, redirects, and shell features.",
        ),
        ToolParameter(
            name="timeout",
            description=f"Maximum execution time in seconds. Defaults to {DEFAULT_TIMEOUT}.",
            type=ParameterType.INTEGER,
            required=False,
        ),
    )

    def __init__(self, shell: Optional[str] = None, default_timeout: Optional[int] = None):
        self.shell = shell or default_shell()
        self.default_timeout = default_timeout or DEFAULT_TIMEOUT

    def _parse_timeout(self, arguments: Arguments) -> Optional[int]:
        """The requested timeout, the default when absent, or None if invalid."""
        value = arguments.get("timeout")
        if value is None or value.is_null:
            return self.default_timeout

        timeout = value.int_value
        if timeout is None and value.number_value is not None and value.number_value.is_integer():
            timeout = int(value.number_value)
        if timeout is None or timeout <= 0:
            return None
        return timeout

    async def execute(self, arguments: Arguments) -> ToolResult:
        command_value = arguments.get("command")
        command = command_value.string_value if command_value else None
        if command is None:
            return ToolResult.failure("Missing required parameter: command")

        command = command.strip()
        if not command:
            return ToolResult.failure("Command cannot be empty.")

        timeout = self._parse_timeout(arguments)
        if timeout is None:
            return ToolResult.failure("Timeout must be a positive integer.")

        try:
            proc = await asyncio.create_subprocess_exec(
                self.shell, "-l", "-c", command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=dict(os.environ),
                start_new_session=True,
            )
        except OSError as e:
            return ToolResult.failure(f"Failed to launch process: {e}")

        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []
        waiter = asyncio.gather(
            proc.wait(),
            _drain(proc.stdout, stdout_chunks),
            _drain(proc.stderr, stderr_chunks),
        )

        done, _ = await asyncio.wait({waiter}, timeout=timeout)
        timed_out = False
        if not done:
            # A background child can hold the pipes open after the shell
            # exits; that is not a timeout of the command itself.
            timed_out = proc.returncode is None
            if timed_out:
                logger.info("Shell command timed out after %ds: %s", timeout, command[:200])
            _signal_group(proc, signal.SIGTERM)
            await asyncio.wait({waiter}, timeout=TERMINATE_GRACE_SECONDS)
            if not waiter.done():
                waiter.cancel()
                _signal_group(proc, signal.SIGKILL)
                try:
                    await asyncio.wait_for(proc.wait(), TERMINATE_GRACE_SECONDS)
                except asyncio.TimeoutError:
                    pass

        stdout = b"".join(stdout_chunks).decode("utf-8", errors="replace")
        stderr = b"".join(stderr_chunks).decode("utf-8", errors="replace")
        exit_code = _exit_code(proc.returncode)

        return ToolResult.success(format_output(
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
            timed_out=timed_out,
            timeout=timeout,
        ))
