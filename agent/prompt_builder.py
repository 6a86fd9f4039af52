"""Argument vectors and prompt templates for claude CLI invocations.

All functions are stateless. ClaudeCLI calls ``build_*_arguments`` to get the
argv for one subprocess; the ``*_prompt`` helpers turn user input (clipboard
text, a file, a transform instruction) into the prompt string.
"""

import logging
from typing import List, Optional

logger = logging.getLogger(__name__)

# =========================================================================
# Constants
# =========================================================================

DEFAULT_MODEL = "sonnet"

DEFAULT_ASK_TURNS = 1
DEFAULT_TOOLS_TURNS = 5
DEFAULT_SESSION_TURNS = 3

SYSTEM_PROMPT = (
    "You are Pilot, a personal AI assistant running on the user's desktop. "
    "Keep responses concise and actionable. Do not use markdown formatting unless "
    "explicitly requested. Respond in plain text."
)

MCP_SERVER_NAME = "pilot"

BUILTIN_TOOL_NAMES = ("clipboard", "notification", "shell", "web")

ALLOWED_TOOLS = " ".join(f"mcp__{MCP_SERVER_NAME}__{name}" for name in BUILTIN_TOOL_NAMES)

NO_PERSISTENCE_FLAG = "--no-session-persistence"

FILE_CONTENT_MAX_CHARS = 100_000


# =========================================================================
# Argument vectors
# =========================================================================

def _base_arguments(prompt: str, model: str, max_turns: int) -> List[str]:
    return [
        "-p", prompt,
        "--output-format", "json",
        "--model", model,
        "--max-turns", str(max_turns),
    ]


def _tool_arguments(mcp_config_path: Optional[str]) -> List[str]:
    """Either point the CLI at our MCP server or switch its tools off entirely."""
    if mcp_config_path:
        return ["--mcp-config", mcp_config_path, "--allowedTools", ALLOWED_TOOLS]
    return ["--tools", ""]


def build_arguments(
    prompt: str,
    model: str = DEFAULT_MODEL,
    max_turns: Optional[int] = None,
    mcp_config_path: Optional[str] = None,
) -> List[str]:
    """Arguments for a single-turn prompt that leaves no session behind.

    Args:
        prompt: The user's question or instruction.
        model: Model alias passed to ``--model``.
        max_turns: Agentic turn budget. Defaults to 1, or 5 when tools are
            enabled so the model has room for tool round-trips.
        mcp_config_path: Path to an MCP config file. When given, the CLI may
            use exactly the built-in Pilot tools; otherwise all tools are off.
    """
    if max_turns is None:
        max_turns = DEFAULT_TOOLS_TURNS if mcp_config_path else DEFAULT_ASK_TURNS

    args = _base_arguments(prompt, model, max_turns)
    args.append(NO_PERSISTENCE_FLAG)
    args += ["--append-system-prompt", SYSTEM_PROMPT]
    args += _tool_arguments(mcp_config_path)
    return args


def build_session_arguments(
    prompt: str,
    model: str = DEFAULT_MODEL,
    max_turns: int = DEFAULT_SESSION_TURNS,
    mcp_config_path: Optional[str] = None,
) -> List[str]:
    """Arguments that start a new persistent session.

    Same as ``build_arguments`` without ``--no-session-persistence``, so the
    CLI keeps the conversation and reports a ``session_id``.
    """
    args = _base_arguments(prompt, model, max_turns)
    args += ["--append-system-prompt", SYSTEM_PROMPT]
    args += _tool_arguments(mcp_config_path)
    return args


def build_resume_arguments(
    prompt: str,
    session_id: str,
    model: str = DEFAULT_MODEL,
    max_turns: int = DEFAULT_SESSION_TURNS,
    mcp_config_path: Optional[str] = None,
) -> List[str]:
    """Arguments that continue the session ``session_id`` with a follow-up."""
    args = _base_arguments(prompt, model, max_turns)
    args += ["--resume", session_id]
    args += ["--append-system-prompt", SYSTEM_PROMPT]
    args += _tool_arguments(mcp_config_path)
    return args


# =========================================================================
# Task prompts
# =========================================================================

def summarize_text_prompt(text: str) -> str:
    return f"Summarize the following text concisely:\n\n{text}"


def transform_prompt(text: str, instruction: str) -> str:
    return (
        "Transform the following text according to the instruction.\n\n"
        f"Instruction: {instruction}\n\n"
        f"Text:\n{text}"
    )


def summarize_file_prompt(filename: Optional[str], content: str) -> str:
    return (
        "Summarize the following file concisely in bullet points.\n\n"
        f"Filename: {filename or 'unknown'}\n\n"
        f"{content}"
    )


def prepare_file_content(data: bytes, max_chars: int = FILE_CONTENT_MAX_CHARS) -> Optional[str]:
    """Decode file bytes for a summary prompt.

    Returns None when the data is not UTF-8 text or is only whitespace.
    Content longer than ``max_chars`` is cut with a marker appended.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("File content is not valid UTF-8 (%d bytes)", len(data))
        return None

    if not text.strip():
        return None

    if len(text) > max_chars:
        return text[:max_chars] + f"\n\n[Truncated: file exceeds {max_chars} characters]"
    return text
