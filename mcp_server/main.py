#!/usr/bin/env python3
"""
Pilot MCP server - stdio entry point.

Usage:
    pilot-mcp [--log-file PATH]
    python -m mcp_server.main [--log-file PATH]

stdout carries the protocol, so logging goes to stderr only, at the level
named by PILOT_LOG_LEVEL (default WARNING). With --log-file, one JSON line
per tool call is appended to PATH for the parent process to import.
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from agent.execution_log import ExecutionLogSink, JsonlExecutionLog
from mcp_server.jsonrpc import JSONRPCServer
from mcp_server.server import MCPServer
from pilot_cli.config import load_config
from tools.registry import build_default_registry

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = os.getenv("PILOT_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def serve(log_file: Optional[str] = None) -> None:
    sink = JsonlExecutionLog(log_file) if log_file else ExecutionLogSink()
    registry = build_default_registry(load_config())
    server = MCPServer(registry, sink)
    logger.info("Serving %d tools on stdio: %s", len(registry), ", ".join(registry.names))
    await JSONRPCServer(server.handle).run()


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        prog="pilot-mcp",
        description="Pilot tool server (MCP over stdio)",
    )
    parser.add_argument(
        "--log-file",
        help="Append a JSON line per tool call to this file",
    )
    args = parser.parse_args(argv)

    configure_logging()
    try:
        asyncio.run(serve(args.log_file))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
