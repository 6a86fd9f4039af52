#!/usr/bin/env python3
"""
Pilot CLI - Main entry point.

Usage:
    pilot ask "question"                  # One-shot question, no tools
    pilot ask --tools "question"          # One-shot question with local tools
    pilot session start "question"        # Start a resumable session
    pilot session continue "follow-up"    # Continue the most recent session
    pilot session list                    # List saved sessions
    pilot session delete ID               # Forget a session
    pilot summarize-clipboard             # Summarize the clipboard text
    pilot summarize-file PATH             # Summarize a text file
    pilot transform -i "instruction" TEXT # Rewrite text (or stdin)
    pilot notify TITLE BODY               # Post a desktop notification
    pilot history                         # Recent tool executions
    pilot config                          # View configuration
    pilot doctor                          # Check setup
    pilot mcp                             # Run the MCP tool server on stdio
    pilot version                         # Show version
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from pilot_cli import __version__
from pilot_cli.config import (
    Colors,
    color,
    get_env_path,
    get_history_path,
    get_sessions_path,
    load_config,
)

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """A command failed in a way the user should be told about."""


# =============================================================================
# Service construction
# =============================================================================

def build_cli(config):
    """The ClaudeCLI service configured from the loaded config."""
    from agent.claude_cli import ClaudeCLI
    from agent.executable import ExecutableResolver
    from pilot_cli.history import ExecutionHistory

    override = os.getenv("PILOT_CLAUDE_PATH") or config.get("agent", {}).get("executable") or None
    history = ExecutionHistory(get_history_path()) if config.get("history", {}).get("enabled", True) else None

    return ClaudeCLI(
        resolver=ExecutableResolver(override=override),
        model=config.get("model") or "sonnet",
        turn_limits=config.get("max_turns") or None,
        history=history,
    )


def build_session_store():
    from pilot_cli.sessions import SessionStore
    return SessionStore(get_sessions_path())


def _read_text_argument(text: Optional[str]) -> str:
    if text is not None:
        return text
    if sys.stdin.isatty():
        raise CommandError("No text given. Pass it as an argument or pipe it on stdin.")
    return sys.stdin.read()


# =============================================================================
# Commands
# =============================================================================

def cmd_ask(args):
    """Ask a one-shot question."""
    cli = build_cli(load_config())
    if args.tools:
        answer = cli.ask_with_tools(args.prompt, model=args.model, max_turns=args.max_turns)
    else:
        answer = cli.ask(args.prompt, model=args.model, max_turns=args.max_turns)
    print(answer)


def cmd_session(args):
    """Session management."""
    from pilot_cli.sessions import display_name_for

    subcmd = getattr(args, 'session_command', None)
    store = build_session_store()

    if subcmd == "start":
        config = load_config()
        cli = build_cli(config)
        model = args.model or cli.model
        answer, external_id = cli.start_session(args.prompt, model=model, with_tools=args.tools)
        session = store.create(external_id, display_name_for(args.prompt), model)
        print(color(f"Session {session.id[:8]}", Colors.DIM), file=sys.stderr)
        print(answer)

    elif subcmd == "continue":
        session = store.resolve(args.id)
        cli = build_cli(load_config())
        answer = cli.continue_session(
            args.message,
            session.external_session_id,
            model=session.model or None,
            with_tools=args.tools,
        )
        store.touch(session.id)
        print(answer)

    elif subcmd == "list":
        sessions = store.all()
        if not sessions:
            print(color("No sessions yet. Start one with: pilot session start \"...\"", Colors.DIM))
            return
        for session in sessions:
            used = session.last_used_at.astimezone().strftime("%Y-%m-%d %H:%M")
            print(f"  {color(session.id[:8], Colors.CYAN)}  {used}  {session.model:<8} {session.display_name}")

    elif subcmd == "delete":
        session = store.delete(args.id)
        print(f"✓ Deleted session {session.id[:8]} ({session.display_name})")

    else:
        raise CommandError("Usage: pilot session {start,continue,list,delete}")


def cmd_summarize_clipboard(args):
    """Summarize the clipboard text."""
    from agent.prompt_builder import summarize_text_prompt
    from tools.capabilities import SystemClipboard

    text = SystemClipboard().read_text()
    if not text or not text.strip():
        print("The clipboard is empty or contains no text.")
        return
    print(build_cli(load_config()).ask(summarize_text_prompt(text)))


def cmd_summarize_file(args):
    """Summarize a text file."""
    from agent.prompt_builder import prepare_file_content, summarize_file_prompt

    path = Path(args.path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise CommandError(f"Could not read {path}: {e.strerror or e}") from e

    content = prepare_file_content(data)
    if content is None:
        print("The file is empty or contains no readable text.")
        return
    print(build_cli(load_config()).ask(summarize_file_prompt(path.name, content)))


def cmd_transform(args):
    """Rewrite text following an instruction."""
    from agent.prompt_builder import transform_prompt

    text = _read_text_argument(args.text)
    print(build_cli(load_config()).ask(transform_prompt(text, args.instruction)))


def cmd_notify(args):
    """Post a desktop notification."""
    from tools.capabilities import SystemNotifier
    from tools.notification_tool import DENIED_MESSAGE, SENT_MESSAGE

    config = load_config()
    notifier = SystemNotifier(enabled=config.get("notifications", {}).get("enabled", True))
    print(SENT_MESSAGE if notifier.send(args.title, args.body) else DENIED_MESSAGE)


def cmd_history(args):
    """Show recent tool executions."""
    from pilot_cli.history import ExecutionHistory, format_record

    records = ExecutionHistory(get_history_path()).recent(args.limit)
    if not records:
        print(color("No tool executions recorded yet.", Colors.DIM))
        return
    for entry in records:
        print(format_record(entry))


def cmd_config(args):
    """Configuration management."""
    from pilot_cli.config import config_command
    config_command(args)


def cmd_doctor(args):
    """Check configuration and dependencies."""
    from pilot_cli.doctor import run_doctor
    if run_doctor(args):
        sys.exit(1)


def cmd_mcp(args):
    """Run the MCP tool server on stdio."""
    from mcp_server.main import main as mcp_main
    mcp_main(["--log-file", args.log_file] if args.log_file else [])


def cmd_version(args):
    """Show version."""
    print(f"Pilot v{__version__}")
    print(f"Python: {sys.version.split()[0]}")


# =============================================================================
# Parser
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pilot",
        description="Pilot - drive the claude CLI from your terminal, with local tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    pilot ask "What's the capital of France?"
    pilot ask --tools "What's on my clipboard?"
    pilot session start "Let's plan a trip"
    pilot session continue "Make it three days"
    cat notes.md | pilot transform -i "Turn this into a checklist"
    pilot config set notifications.enabled false

For more help on a command:
    pilot <command> --help
"""
    )

    parser.add_argument(
        "--version", "-V",
        action="store_true",
        help="Show version and exit"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # =========================================================================
    # ask command
    # =========================================================================
    ask_parser = subparsers.add_parser("ask", help="Ask a one-shot question")
    ask_parser.add_argument("prompt", help="The question")
    ask_parser.add_argument("-m", "--model", help="Model to use (default from config)")
    ask_parser.add_argument("--tools", action="store_true", help="Let claude use the local tools")
    ask_parser.add_argument("--max-turns", type=int, help="Override the turn limit")
    ask_parser.set_defaults(func=cmd_ask)

    # =========================================================================
    # session command
    # =========================================================================
    session_parser = subparsers.add_parser("session", help="Manage resumable sessions")
    session_subparsers = session_parser.add_subparsers(dest="session_command")

    session_start = session_subparsers.add_parser("start", help="Start a new session")
    session_start.add_argument("prompt", help="Opening message")
    session_start.add_argument("-m", "--model", help="Model to use (default from config)")
    session_start.add_argument("--tools", action="store_true", help="Let claude use the local tools")

    session_continue = session_subparsers.add_parser("continue", help="Continue a session")
    session_continue.add_argument("message", help="Follow-up message")
    session_continue.add_argument("--id", help="Session id (default: most recently used)")
    session_continue.add_argument("--tools", action="store_true", help="Let claude use the local tools")

    session_subparsers.add_parser("list", help="List sessions")

    session_delete = session_subparsers.add_parser("delete", help="Delete a session")
    session_delete.add_argument("id", help="Session id (a unique prefix is enough)")

    session_parser.set_defaults(func=cmd_session)

    # =========================================================================
    # text commands
    # =========================================================================
    clip_parser = subparsers.add_parser("summarize-clipboard", help="Summarize the clipboard text")
    clip_parser.set_defaults(func=cmd_summarize_clipboard)

    file_parser = subparsers.add_parser("summarize-file", help="Summarize a text file")
    file_parser.add_argument("path", help="File to summarize")
    file_parser.set_defaults(func=cmd_summarize_file)

    transform_parser = subparsers.add_parser("transform", help="Rewrite text following an instruction")
    transform_parser.add_argument("-i", "--instruction", required=True, help="How to transform the text")
    transform_parser.add_argument("text", nargs="?", help="Text to transform (default: stdin)")
    transform_parser.set_defaults(func=cmd_transform)

    notify_parser = subparsers.add_parser("notify", help="Post a desktop notification")
    notify_parser.add_argument("title", help="Notification title")
    notify_parser.add_argument("body", help="Notification body")
    notify_parser.set_defaults(func=cmd_notify)

    # =========================================================================
    # history command
    # =========================================================================
    history_parser = subparsers.add_parser("history", help="Show recent tool executions")
    history_parser.add_argument("-n", "--limit", type=int, default=20, help="How many entries to show")
    history_parser.set_defaults(func=cmd_history)

    # =========================================================================
    # config command
    # =========================================================================
    config_parser = subparsers.add_parser("config", help="View or change configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_subparsers.add_parser("show", help="Show current configuration")

    config_set = config_subparsers.add_parser("set", help="Set a configuration value")
    config_set.add_argument("key", nargs="?", help="Configuration key (e.g., model, shell.timeout)")
    config_set.add_argument("value", nargs="?", help="Value to set")

    config_subparsers.add_parser("path", help="Print config file path")

    config_parser.set_defaults(func=cmd_config)

    # =========================================================================
    # doctor / mcp / version
    # =========================================================================
    doctor_parser = subparsers.add_parser("doctor", help="Check configuration and dependencies")
    doctor_parser.set_defaults(func=cmd_doctor)

    mcp_parser = subparsers.add_parser("mcp", help="Run the MCP tool server on stdio")
    mcp_parser.add_argument("--log-file", help="Append a JSON line per tool call to this file")
    mcp_parser.set_defaults(func=cmd_mcp)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point for pilot CLI."""
    from agent.errors import ClaudeCLIError
    from pilot_cli.sessions import NoSessions, SessionNotFound
    from tools.capabilities import CapabilityError

    env_path = get_env_path()
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        cmd_version(args)
        return

    # The mcp command logs on its own terms; stdout is the protocol there
    if args.command != "mcp":
        logging.basicConfig(
            stream=sys.stderr,
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if not hasattr(args, 'func'):
        parser.print_help()
        return

    try:
        args.func(args)
    except (ClaudeCLIError, SessionNotFound, NoSessions, CapabilityError, CommandError) as e:
        print(color(f"✗ {e}", Colors.RED), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
