"""Tests for the tool execution history."""

from datetime import datetime, timezone

from agent.execution_log import ToolExecutionRecord
from pilot_cli.history import ExecutionHistory, format_record


def _record(name, is_error=False, content="ok"):
    return ToolExecutionRecord(
        tool_name=name,
        arguments="{}",
        result_content=content,
        is_error=is_error,
        duration_ms=5,
        executed_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


class TestExecutionHistory:

    def test_empty(self, tmp_path):
        assert ExecutionHistory(tmp_path / "history.jsonl").recent() == []

    def test_creates_parent_directory(self, tmp_path):
        history = ExecutionHistory(tmp_path / "nested" / "history.jsonl")
        history.record(_record("web"))
        assert history.all() == [_record("web")]

    def test_recent_newest_first(self, tmp_path):
        history = ExecutionHistory(tmp_path / "history.jsonl")
        for name in ("clipboard", "shell", "web"):
            history.record(_record(name))
        assert [r.tool_name for r in history.recent(2)] == ["web", "shell"]
        assert history.recent(0) == []

    def test_format_record(self):
        line = format_record(_record("shell", is_error=True, content="line one\nline two " + "z" * 200))
        assert line.startswith("✗ ")
        assert "shell" in line
        assert "line one line two" in line
        assert line.endswith("...")
        assert "\n" not in line
