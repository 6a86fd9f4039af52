"""Claude CLI driver.

Runs ``claude -p ... --output-format json`` as a subprocess and turns its
output into answers. One subprocess per call; nothing is retried.

Usage:
    from agent.claude_cli import ClaudeCLI

    cli = ClaudeCLI()
    answer = cli.ask("What is the capital of France?")

    answer, session_id = cli.start_session("Let's plan a trip")
    answer = cli.continue_session("Make it three days", session_id)
"""

import logging
import os
import subprocess
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from agent.cli_output import parse_result, parse_session_result
from agent.errors import ExecutableNotFound, NoOutputData, ProcessExitedWithError
from agent.execution_log import ExecutionLogSink, import_execution_log
from agent.executable import ExecutableResolver
from agent.mcp_config import MCPRunFiles, write_config_file
from agent.prompt_builder import (
    DEFAULT_ASK_TURNS,
    DEFAULT_MODEL,
    DEFAULT_SESSION_TURNS,
    DEFAULT_TOOLS_TURNS,
    build_arguments,
    build_resume_arguments,
    build_session_arguments,
)

logger = logging.getLogger(__name__)

# Set by claude inside its own sessions; a child claude refuses to start when it sees it.
NESTED_SESSION_ENV_VAR = "CLAUDECODE"

DEFAULT_TURN_LIMITS = {
    "ask": DEFAULT_ASK_TURNS,
    "tools": DEFAULT_TOOLS_TURNS,
    "session": DEFAULT_SESSION_TURNS,
}


def child_environment(base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """The caller's environment without the nested-session marker."""
    env = dict(os.environ if base is None else base)
    env.pop(NESTED_SESSION_ENV_VAR, None)
    return env


def invoke(executable: str, arguments: Sequence[str]) -> Tuple[str, str]:
    """Run the CLI once and return ``(stdout, stderr)``.

    Raises:
        ExecutableNotFound: the binary could not be started.
        ProcessExitedWithError: it ran but exited non-zero.
    """
    started = time.monotonic()
    try:
        proc = subprocess.run(
            [executable, *arguments],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=child_environment(),
        )
    except OSError as e:
        raise ExecutableNotFound(str(e)) from e

    stdout = proc.stdout.decode("utf-8", errors="replace")
    stderr = proc.stderr.decode("utf-8", errors="replace")
    logger.debug(
        "claude exited with %d after %.2fs (%d args)",
        proc.returncode, time.monotonic() - started, len(arguments),
    )

    if proc.returncode != 0:
        raise ProcessExitedWithError(proc.returncode, stderr)
    return stdout, stderr


class ClaudeCLI:
    """Service object for asking the claude CLI things.

    Construct one per process and pass it around; the only state it keeps
    is the resolver's cached executable path.
    """

    def __init__(
        self,
        resolver: Optional[ExecutableResolver] = None,
        model: str = DEFAULT_MODEL,
        turn_limits: Optional[Dict[str, int]] = None,
        history: Optional[ExecutionLogSink] = None,
        companion_command: Optional[List[str]] = None,
        temp_dir: Optional[str] = None,
        runner: Callable[[str, Sequence[str]], Tuple[str, str]] = invoke,
    ):
        self.resolver = resolver or ExecutableResolver()
        self.model = model
        self.turn_limits = {**DEFAULT_TURN_LIMITS, **(turn_limits or {})}
        self.history = history
        self.companion_command = companion_command
        self.temp_dir = temp_dir
        self._runner = runner

    # =========================================================================
    # Public API
    # =========================================================================

    def ask(self, prompt: str, model: Optional[str] = None, max_turns: Optional[int] = None) -> str:
        """Single-turn prompt with tools disabled."""
        args = build_arguments(
            prompt,
            model=model or self.model,
            max_turns=self._turn_limit(max_turns, "ask"),
        )
        return parse_result(self._run(args))

    def ask_with_tools(self, prompt: str, model: Optional[str] = None, max_turns: Optional[int] = None) -> str:
        """Single-turn prompt with the Pilot MCP tools available."""
        with self._mcp_files() as files:
            args = build_arguments(
                prompt,
                model=model or self.model,
                max_turns=self._turn_limit(max_turns, "tools"),
                mcp_config_path=files.config_path,
            )
            return parse_result(self._run(args))

    def start_session(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_turns: Optional[int] = None,
        with_tools: bool = False,
    ) -> Tuple[str, str]:
        """Start a persistent session; returns ``(answer, session_id)``."""
        def build(config_path: Optional[str]) -> List[str]:
            return build_session_arguments(
                prompt,
                model=model or self.model,
                max_turns=self._turn_limit(max_turns, "session"),
                mcp_config_path=config_path,
            )

        return parse_session_result(self._run_maybe_with_tools(build, with_tools))

    def continue_session(
        self,
        prompt: str,
        session_id: str,
        model: Optional[str] = None,
        max_turns: Optional[int] = None,
        with_tools: bool = False,
    ) -> str:
        """Send a follow-up message to an existing session."""
        def build(config_path: Optional[str]) -> List[str]:
            return build_resume_arguments(
                prompt,
                session_id,
                model=model or self.model,
                max_turns=self._turn_limit(max_turns, "session"),
                mcp_config_path=config_path,
            )

        return parse_result(self._run_maybe_with_tools(build, with_tools))

    # =========================================================================
    # Internals
    # =========================================================================

    def _turn_limit(self, max_turns: Optional[int], kind: str) -> int:
        return self.turn_limits[kind] if max_turns is None else max_turns

    def _run(self, args: List[str]) -> str:
        executable = self.resolver.resolve()
        stdout, _ = self._runner(executable, args)
        if not stdout.strip():
            raise NoOutputData()
        return stdout

    def _run_maybe_with_tools(self, build: Callable[[Optional[str]], List[str]], with_tools: bool) -> str:
        if not with_tools:
            return self._run(build(None))
        with self._mcp_files() as files:
            return self._run(build(files.config_path))

    @contextmanager
    def _mcp_files(self) -> Iterator[MCPRunFiles]:
        """Write the MCP config; afterwards import the tool log and clean up."""
        files = write_config_file(self.temp_dir, self.companion_command)
        try:
            yield files
        finally:
            try:
                import_execution_log(files.log_path, self.history)
            finally:
                files.cleanup()
