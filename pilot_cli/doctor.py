"""
Doctor command for pilot CLI.

Diagnoses issues with the Pilot setup: the claude executable, the companion
MCP server, and the local clipboard/notification utilities.
"""

import shutil
import subprocess
import sys

from pilot_cli.config import Colors, color, get_config_path, get_env_path, load_config


def check_ok(text: str, detail: str = ""):
    print(f"  {color('✓', Colors.GREEN)} {text}" + (f" {color(detail, Colors.DIM)}" if detail else ""))

def check_warn(text: str, detail: str = ""):
    print(f"  {color('⚠', Colors.YELLOW)} {text}" + (f" {color(detail, Colors.DIM)}" if detail else ""))

def check_fail(text: str, detail: str = ""):
    print(f"  {color('✗', Colors.RED)} {text}" + (f" {color(detail, Colors.DIM)}" if detail else ""))


def _claude_version(path: str) -> str:
    try:
        result = subprocess.run(
            [path, "--version"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=15,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        return f"(failed to run: {e})"
    return result.stdout.strip() or result.stderr.strip()


def run_doctor(args, resolver=None):
    """Run diagnostic checks. Returns the number of issues found."""
    from agent.errors import ExecutableNotFound
    from agent.executable import ExecutableResolver
    from agent.mcp_config import COMPANION_SCRIPT, companion_command
    from tools.capabilities import clipboard_backend, notification_backend

    issues = []
    config = load_config()

    # =========================================================================
    # Check: Python version
    # =========================================================================
    print()
    print(color("◆ Python Environment", Colors.CYAN, Colors.BOLD))

    py_version = sys.version_info
    if py_version >= (3, 9):
        check_ok(f"Python {py_version.major}.{py_version.minor}.{py_version.micro}")
    else:
        check_fail(f"Python {py_version.major}.{py_version.minor}.{py_version.micro}", "(3.9+ required)")
        issues.append("Upgrade Python to 3.9+")

    # =========================================================================
    # Check: Required packages
    # =========================================================================
    print()
    print(color("◆ Required Packages", Colors.CYAN, Colors.BOLD))

    required_packages = [
        ("aiohttp", "aiohttp"),
        ("yaml", "PyYAML"),
        ("dotenv", "python-dotenv"),
    ]

    for module, name in required_packages:
        try:
            __import__(module)
            check_ok(name)
        except ImportError:
            check_fail(name, "(missing)")
            issues.append(f"Install {name}: pip install {name}")

    # =========================================================================
    # Check: Configuration files
    # =========================================================================
    print()
    print(color("◆ Configuration Files", Colors.CYAN, Colors.BOLD))

    if get_config_path().exists():
        check_ok(str(get_config_path()))
    else:
        check_warn(str(get_config_path()), "(not created yet, using defaults)")
    if get_env_path().exists():
        check_ok(str(get_env_path()))

    # =========================================================================
    # Check: claude CLI
    # =========================================================================
    print()
    print(color("◆ Claude CLI", Colors.CYAN, Colors.BOLD))

    if resolver is None:
        resolver = ExecutableResolver(override=config.get("agent", {}).get("executable") or None)
    try:
        path = resolver.resolve()
        check_ok(path, _claude_version(path))
    except ExecutableNotFound as e:
        check_fail("claude not found", f"({e})")
        issues.append("Install the claude CLI or set PILOT_CLAUDE_PATH")

    command = companion_command()
    if command[0] != sys.executable:
        check_ok(f"{COMPANION_SCRIPT} on PATH", command[0])
    else:
        check_warn(f"{COMPANION_SCRIPT} not on PATH", "(falling back to python -m mcp_server.main)")

    # =========================================================================
    # Check: Local capabilities
    # =========================================================================
    print()
    print(color("◆ Local Capabilities", Colors.CYAN, Colors.BOLD))

    backend = clipboard_backend()
    if backend:
        check_ok("Clipboard", f"({backend})")
    else:
        check_warn("Clipboard", "(no utility found: install wl-clipboard, xclip or xsel)")

    if not config.get("notifications", {}).get("enabled", True):
        check_warn("Notifications", "(disabled in config)")
    elif notification_backend():
        check_ok("Notifications", f"({notification_backend()})")
    else:
        check_warn("Notifications", "(notify-send not found)")

    shell = config.get("shell", {}).get("shell")
    if shell and not shutil.which(shell):
        check_fail(f"Shell {shell}", "(not found)")
        issues.append(f"Fix shell.shell in {get_config_path()}")

    # =========================================================================
    # Summary
    # =========================================================================
    print()
    if issues:
        print(color("─" * 60, Colors.YELLOW))
        print(color(f"  Found {len(issues)} issue(s) to address:", Colors.YELLOW, Colors.BOLD))
        print()
        for i, issue in enumerate(issues, 1):
            print(f"  {i}. {issue}")
    else:
        print(color("─" * 60, Colors.GREEN))
        print(color("  All checks passed!", Colors.GREEN, Colors.BOLD))

    print()
    return len(issues)
