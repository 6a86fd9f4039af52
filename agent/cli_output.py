"""Parsing of the JSON document printed by ``claude --output-format json``.

The CLI prints one object at exit. Only ``type == "result"`` carries an
answer; ``session_id`` is present when the run persisted a session.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from agent.errors import JSONDecodingFailed, NoResultMessage, NoSessionID


@dataclass(frozen=True)
class CLIMessage:
    """The decoded output payload."""
    type: str
    subtype: Optional[str] = None
    result: Optional[str] = None
    session_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CLIMessage":
        msg_type = data.get("type")
        if not isinstance(msg_type, str):
            raise ValueError("missing string field 'type'")
        return cls(
            type=msg_type,
            subtype=_optional_str(data, "subtype"),
            result=_optional_str(data, "result"),
            session_id=_optional_str(data, "session_id"),
        )


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string or null")
    return value


def decode_message(data: Union[bytes, str]) -> CLIMessage:
    """Decode raw stdout into a CLIMessage, raising JSONDecodingFailed."""
    try:
        payload = json.loads(data)
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        return CLIMessage.from_dict(payload)
    except (ValueError, TypeError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise JSONDecodingFailed(e) from e


def parse_result(data: Union[bytes, str]) -> str:
    """Extract the answer text from CLI output."""
    message = decode_message(data)
    if message.type != "result" or message.result is None:
        raise NoResultMessage()
    return message.result


def parse_session_result(data: Union[bytes, str]) -> Tuple[str, str]:
    """Extract ``(answer, session_id)`` from the output of a session-creating run.

    The result text is checked first, so output with neither field raises
    NoResultMessage rather than NoSessionID.
    """
    message = decode_message(data)
    if message.type != "result" or message.result is None:
        raise NoResultMessage()
    if message.session_id is None:
        raise NoSessionID()
    return message.result, message.session_id
