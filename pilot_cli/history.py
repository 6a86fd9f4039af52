"""Tool execution history kept in ~/.pilot/history.jsonl."""

import logging
from typing import List

from agent.execution_log import JsonlExecutionLog, ToolExecutionRecord, read_execution_log

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80


class ExecutionHistory(JsonlExecutionLog):
    """Append-only history of every imported tool call."""

    def record(self, entry: ToolExecutionRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        super().record(entry)

    def all(self) -> List[ToolExecutionRecord]:
        if not self.path.exists():
            return []
        try:
            return read_execution_log(self.path)
        except OSError as e:
            logger.warning("Failed to read history %s: %s", self.path, e)
            return []

    def recent(self, limit: int = 20) -> List[ToolExecutionRecord]:
        """The last ``limit`` records, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.all()[-limit:]))


def format_record(entry: ToolExecutionRecord) -> str:
    """One-line summary for ``pilot history``."""
    status = "✗" if entry.is_error else "✓"
    preview = " ".join(entry.result_content.split())
    if len(preview) > PREVIEW_LENGTH:
        preview = preview[:PREVIEW_LENGTH - 3] + "..."
    stamp = entry.executed_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return f"{status} {stamp}  {entry.tool_name:<12} {entry.duration_ms:>6}ms  {preview}"
