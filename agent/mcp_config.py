"""MCP config files that tell the claude CLI how to spawn the Pilot tool server.

One config is written per tool-enabled run, next to a fresh execution-log
path, and both are removed when the run is over.
"""

import json
import logging
import os
import shutil
import sys
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from agent.prompt_builder import MCP_SERVER_NAME

logger = logging.getLogger(__name__)

COMPANION_SCRIPT = "pilot-mcp"
COMPANION_MODULE = "mcp_server.main"


def companion_command() -> List[str]:
    """Command prefix that starts the companion server.

    Prefers the installed ``pilot-mcp`` script; falls back to running the
    module with the current interpreter.
    """
    script = shutil.which(COMPANION_SCRIPT)
    if script:
        return [script]
    return [sys.executable, "-m", COMPANION_MODULE]


def build_config(log_file: str, command: Optional[List[str]] = None) -> Dict[str, Any]:
    """The MCP config document for one run."""
    command = list(command) if command else companion_command()
    return {
        "mcpServers": {
            MCP_SERVER_NAME: {
                "type": "stdio",
                "command": command[0],
                "args": command[1:] + ["--log-file", log_file],
            }
        }
    }


@dataclass
class MCPRunFiles:
    """Temporary files backing one tool-enabled run."""
    config_path: str
    log_path: str

    def cleanup(self) -> None:
        for path in (self.config_path, self.log_path):
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.debug("Could not remove %s: %s", path, e)


def _temp_path(prefix: str, suffix: str, directory: Optional[str]) -> str:
    fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=directory)
    os.close(fd)
    return path


def write_config_file(
    directory: Optional[str] = None,
    command: Optional[List[str]] = None,
) -> MCPRunFiles:
    """Write a config file and reserve an (empty) execution-log path."""
    log_path = _temp_path("pilot-tools-", ".jsonl", directory)
    config_path = _temp_path("pilot-mcp-config-", ".json", directory)

    config = build_config(log_path, command)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)

    logger.debug("Wrote MCP config %s (log file %s)", config_path, log_path)
    return MCPRunFiles(config_path=config_path, log_path=log_path)
