"""
Configuration management for Pilot.

Config files are stored in ~/.pilot/ (or $PILOT_HOME):
- ~/.pilot/config.yaml      - Settings (model, turn limits, shell, notifications)
- ~/.pilot/.env             - Environment overrides (PILOT_CLAUDE_PATH, PILOT_LOG_LEVEL)
- ~/.pilot/sessions.json    - Saved sessions
- ~/.pilot/history.jsonl    - Tool execution history

This module provides:
- pilot config          - Show current configuration
- pilot config set      - Set a specific value
- pilot config path     - Print the config file path
"""

import copy
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import dotenv_values, set_key

logger = logging.getLogger(__name__)


# ANSI colors
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"


def color(text: str, *codes) -> str:
    if not sys.stdout.isatty():
        return text
    return "".join(codes) + text + Colors.RESET


# =============================================================================
# Config paths
# =============================================================================

def get_pilot_home() -> Path:
    """Get the Pilot home directory (~/.pilot)."""
    return Path(os.getenv("PILOT_HOME", Path.home() / ".pilot"))

def get_config_path() -> Path:
    """Get the main config file path."""
    return get_pilot_home() / "config.yaml"

def get_env_path() -> Path:
    """Get the .env file path."""
    return get_pilot_home() / ".env"

def get_sessions_path() -> Path:
    return get_pilot_home() / "sessions.json"

def get_history_path() -> Path:
    return get_pilot_home() / "history.jsonl"

def ensure_pilot_home():
    """Ensure ~/.pilot exists."""
    get_pilot_home().mkdir(parents=True, exist_ok=True)


# =============================================================================
# Config loading/saving
# =============================================================================

DEFAULT_CONFIG = {
    "model": "sonnet",

    "max_turns": {
        "ask": 1,
        "tools": 5,
        "session": 3,
    },

    "agent": {
        "executable": "",  # Empty = search the usual install locations
    },

    "shell": {
        "shell": "",  # Empty = $SHELL, then /bin/sh
        "timeout": 30,
    },

    "notifications": {
        "enabled": True,
    },

    "history": {
        "enabled": True,
    },
}

# Keys that `pilot config set` writes to .env instead of config.yaml
ENV_KEYS = ("PILOT_CLAUDE_PATH", "PILOT_LOG_LEVEL")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config() -> Dict[str, Any]:
    """Load configuration from ~/.pilot/config.yaml over the defaults."""
    config_path = get_config_path()

    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                user_config = yaml.safe_load(f) or {}
            if not isinstance(user_config, dict):
                raise ValueError("top level must be a mapping")
            _merge(config, user_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("Failed to load config %s: %s", config_path, e)

    return config


def save_config(config: Dict[str, Any]):
    """Save configuration to ~/.pilot/config.yaml."""
    ensure_pilot_home()
    config_path = get_config_path()

    with open(config_path, 'w', encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def load_env() -> Dict[str, str]:
    """Values from ~/.pilot/.env (without applying them)."""
    env_path = get_env_path()
    if not env_path.exists():
        return {}
    return {k: v for k, v in dotenv_values(env_path).items() if v is not None}


def save_env_value(key: str, value: str):
    """Save or update a value in ~/.pilot/.env."""
    ensure_pilot_home()
    env_path = get_env_path()
    env_path.touch(exist_ok=True)
    set_key(str(env_path), key, value)


def parse_value(value: str) -> Any:
    """Convert a command-line string to bool/int/float where it looks like one."""
    if value.lower() in ('true', 'yes', 'on'):
        return True
    if value.lower() in ('false', 'no', 'off'):
        return False
    if value.isdigit():
        return int(value)
    if value.replace('.', '', 1).isdigit():
        return float(value)
    return value


def set_config_value(key: str, value: str):
    """Set a configuration value."""
    if key.upper() in ENV_KEYS:
        save_env_value(key.upper(), value)
        print(f"✓ Set {key.upper()} in {get_env_path()}")
        return

    config = load_config()

    # Nested keys, e.g. "shell.timeout"
    parts = key.split('.')
    current = config

    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]

    parsed = parse_value(value)
    current[parts[-1]] = parsed
    save_config(config)
    print(f"✓ Set {key} = {parsed} in {get_config_path()}")


# =============================================================================
# Config display
# =============================================================================

def show_config():
    """Display current configuration."""
    config = load_config()
    env_vars = load_env()

    print()
    print(color("◆ Paths", Colors.CYAN, Colors.BOLD))
    print(f"  Config:       {get_config_path()}")
    print(f"  Environment:  {get_env_path()}")
    print(f"  Sessions:     {get_sessions_path()}")
    print(f"  History:      {get_history_path()}")

    print()
    print(color("◆ Agent", Colors.CYAN, Colors.BOLD))
    print(f"  Model:        {config.get('model')}")
    turns = config.get('max_turns', {})
    print(f"  Max turns:    ask={turns.get('ask')} tools={turns.get('tools')} session={turns.get('session')}")
    executable = (
        os.getenv("PILOT_CLAUDE_PATH")
        or env_vars.get("PILOT_CLAUDE_PATH")
        or config.get('agent', {}).get('executable')
    )
    print(f"  Executable:   {executable or color('(auto-detect)', Colors.DIM)}")

    print()
    print(color("◆ Shell Tool", Colors.CYAN, Colors.BOLD))
    shell = config.get('shell', {})
    print(f"  Shell:        {shell.get('shell') or color('$SHELL', Colors.DIM)}")
    print(f"  Timeout:      {shell.get('timeout')}s")

    print()
    print(color("◆ Notifications & History", Colors.CYAN, Colors.BOLD))
    notifications = config.get('notifications', {}).get('enabled', True)
    history = config.get('history', {}).get('enabled', True)
    print(f"  Notifications: {'enabled' if notifications else 'disabled'}")
    print(f"  History:       {'enabled' if history else 'disabled'}")

    print()
    print(color("─" * 60, Colors.DIM))
    print(color("  pilot config set KEY VALUE", Colors.DIM))
    print(color("  pilot config set shell.timeout 60", Colors.DIM))
    print()


# =============================================================================
# Command handler
# =============================================================================

def config_command(args):
    """Handle config subcommands."""
    subcmd = getattr(args, 'config_command', None)

    if subcmd is None or subcmd == "show":
        show_config()

    elif subcmd == "set":
        key = getattr(args, 'key', None)
        value = getattr(args, 'value', None)
        if not key or value is None:
            print("Usage: pilot config set KEY VALUE")
            print()
            print("Examples:")
            print("  pilot config set model opus")
            print("  pilot config set notifications.enabled false")
            print("  pilot config set PILOT_CLAUDE_PATH /opt/claude/bin/claude")
            sys.exit(1)
        set_config_value(key, value)

    elif subcmd == "path":
        print(get_config_path())

    else:
        print(f"Unknown config command: {subcmd}")
        sys.exit(1)
