"""Locating the claude executable.

Resolution checks an explicit override, then a few well-known install paths,
then asks ``which``. The first hit is cached for the life of the resolver;
a changed install location needs a restart.
"""

import logging
import os
import subprocess
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from agent.errors import ExecutableNotFound

logger = logging.getLogger(__name__)

EXECUTABLE_NAME = "claude"

WHICH_PATH = "/usr/bin/which"


def default_search_paths() -> List[str]:
    return [
        str(Path.home() / ".local" / "bin" / EXECUTABLE_NAME),
        f"/usr/local/bin/{EXECUTABLE_NAME}",
        f"/opt/homebrew/bin/{EXECUTABLE_NAME}",
    ]


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


class ExecutableResolver:
    """Finds the claude binary once and remembers it.

    Safe to share between threads: the first caller does the lookup while
    holding the lock, everyone else gets the cached path.
    """

    def __init__(
        self,
        override: Optional[str] = None,
        search_paths: Optional[Sequence[str]] = None,
        which_command: Optional[Sequence[str]] = None,
    ):
        self._override = override or os.getenv("PILOT_CLAUDE_PATH") or None
        self._search_paths = list(search_paths) if search_paths is not None else default_search_paths()
        self._which_command = list(which_command) if which_command is not None else [WHICH_PATH, EXECUTABLE_NAME]
        self._cached: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def cached_path(self) -> Optional[str]:
        return self._cached

    def resolve(self) -> str:
        """Return the executable path, raising ExecutableNotFound."""
        cached = self._cached
        if cached is not None:
            return cached

        with self._lock:
            if self._cached is None:
                path = self._lookup()
                if path is None:
                    raise ExecutableNotFound()
                logger.info("Resolved claude executable: %s", path)
                self._cached = path
            return self._cached

    def _lookup(self) -> Optional[str]:
        if self._override:
            if _is_executable(self._override):
                return self._override
            logger.warning("Configured claude path is not executable: %s", self._override)

        for path in self._search_paths:
            if _is_executable(path):
                return path

        return self._run_which()

    def _run_which(self) -> Optional[str]:
        """Ask ``which`` for the binary on PATH."""
        try:
            result = subprocess.run(
                self._which_command,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                timeout=10,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("which lookup failed: %s", e)
            return None

        if result.returncode != 0:
            return None
        path = result.stdout.strip()
        return path or None
