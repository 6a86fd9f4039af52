"""Tool execution records and the sinks that receive them.

The MCP companion process appends one JSON line per tool call to the file
named by ``--log-file``. After the claude run finishes, the parent process
imports that file (``import_execution_log``) and deletes it.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ToolExecutionRecord:
    """One tool invocation, success or failure."""
    tool_name: str
    arguments: str  # JSON-encoded arguments object
    result_content: str
    is_error: bool
    duration_ms: int
    executed_at: datetime = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "toolName": self.tool_name,
            "arguments": self.arguments,
            "resultContent": self.result_content,
            "isError": self.is_error,
            "executedAt": self.executed_at.isoformat(),
            "durationMs": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolExecutionRecord":
        """Build a record from its wire form, raising ValueError if malformed."""
        tool_name = data.get("toolName")
        arguments = data.get("arguments")
        result_content = data.get("resultContent")
        is_error = data.get("isError")
        duration_ms = data.get("durationMs")

        if not isinstance(tool_name, str) or not isinstance(arguments, str):
            raise ValueError("toolName and arguments must be strings")
        if not isinstance(result_content, str) or not isinstance(is_error, bool):
            raise ValueError("resultContent must be a string and isError a boolean")
        if not isinstance(duration_ms, int) or isinstance(duration_ms, bool):
            raise ValueError("durationMs must be an integer")

        executed_at = _now()
        raw_date = data.get("executedAt")
        if isinstance(raw_date, str):
            try:
                executed_at = datetime.fromisoformat(raw_date.replace("Z", "+00:00"))
            except ValueError:
                logger.debug("Unparseable executedAt %r, using import time", raw_date)

        return cls(
            tool_name=tool_name,
            arguments=arguments,
            result_content=result_content,
            is_error=is_error,
            duration_ms=duration_ms,
            executed_at=executed_at,
        )


class ExecutionLogSink:
    """Receives one record per tool call. The default sink drops them."""

    def record(self, entry: ToolExecutionRecord) -> None:
        pass


class MemoryExecutionLog(ExecutionLogSink):
    """Keeps records in a list (same-process use and tests)."""

    def __init__(self):
        self.records: List[ToolExecutionRecord] = []

    def record(self, entry: ToolExecutionRecord) -> None:
        self.records.append(entry)


class JsonlExecutionLog(ExecutionLogSink):
    """Appends records to a JSONL file for another process to import."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def record(self, entry: ToolExecutionRecord) -> None:
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry.to_dict()) + "\n")
        except OSError as e:
            logger.warning("Failed to write tool execution log to %s: %s", self.path, e)


def read_execution_log(path: Union[str, Path]) -> List[ToolExecutionRecord]:
    """Parse a JSONL execution log, skipping lines that don't decode."""
    path = Path(path)
    records = []
    with open(path, encoding="utf-8", errors="replace") as f:
        for line_number, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
                if not isinstance(data, dict):
                    raise ValueError("not an object")
                records.append(ToolExecutionRecord.from_dict(data))
            except ValueError as e:
                logger.debug("Skipping malformed log line %d in %s: %s", line_number, path, e)
    return records


def import_execution_log(
    path: Union[str, Path],
    sink: Optional[ExecutionLogSink] = None,
) -> List[ToolExecutionRecord]:
    """Read the log at ``path`` into ``sink`` and delete the file.

    A missing file means no tool ran; an empty list is returned.
    """
    path = Path(path)
    if not path.exists():
        return []

    try:
        records = read_execution_log(path)
    except OSError as e:
        logger.warning("Failed to read tool execution log %s: %s", path, e)
        records = []
    finally:
        try:
            os.remove(path)
        except OSError as e:
            logger.debug("Could not remove %s: %s", path, e)

    if sink is not None:
        for entry in records:
            sink.record(entry)
    logger.info("Imported %d tool execution record(s) from %s", len(records), path)
    return records
