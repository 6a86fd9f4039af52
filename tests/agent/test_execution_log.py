"""Tests for tool execution records and the JSONL hand-off file."""

import json
from datetime import datetime, timezone

import pytest

from agent.execution_log import (
    JsonlExecutionLog,
    MemoryExecutionLog,
    ToolExecutionRecord,
    import_execution_log,
    read_execution_log,
)
from agent.mcp_config import build_config, write_config_file


def _record(**overrides):
    fields = dict(
        tool_name="web",
        arguments='{"url": "https://example.com"}',
        result_content="<html>",
        is_error=False,
        duration_ms=250,
        executed_at=datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return ToolExecutionRecord(**fields)


class TestRecordWireForm:

    def test_to_dict_field_names(self):
        data = _record().to_dict()
        assert data == {
            "toolName": "web",
            "arguments": '{"url": "https://example.com"}',
            "resultContent": "<html>",
            "isError": False,
            "executedAt": "2026-03-01T12:30:00+00:00",
            "durationMs": 250,
        }

    def test_from_dict_accepts_z_suffix(self):
        data = _record().to_dict()
        data["executedAt"] = "2026-03-01T12:30:00Z"
        assert ToolExecutionRecord.from_dict(data) == _record()

    def test_missing_date_uses_import_time(self):
        data = _record().to_dict()
        del data["executedAt"]
        before = datetime.now(timezone.utc)
        record = ToolExecutionRecord.from_dict(data)
        assert record.executed_at >= before

    @pytest.mark.parametrize("field,value", [
        ("toolName", None),
        ("arguments", {"url": "x"}),
        ("isError", "false"),
        ("durationMs", "12"),
        ("durationMs", True),
    ])
    def test_malformed_fields(self, field, value):
        data = _record().to_dict()
        data[field] = value
        with pytest.raises(ValueError):
            ToolExecutionRecord.from_dict(data)


class TestJsonlHandOff:

    def test_written_records_read_back_equal(self, tmp_path):
        path = tmp_path / "tools.jsonl"
        log = JsonlExecutionLog(path)
        records = [_record(), _record(tool_name="shell", is_error=True, result_content="[exit code: 1]")]
        for entry in records:
            log.record(entry)
        assert read_execution_log(path) == records

    def test_malformed_lines_skipped(self, tmp_path):
        path = tmp_path / "tools.jsonl"
        path.write_text(
            "not json\n"
            "\n"
            "[1, 2]\n"
            + json.dumps({"toolName": "web"}) + "\n"
            + json.dumps(_record().to_dict()) + "\n"
        )
        assert read_execution_log(path) == [_record()]

    def test_import_feeds_sink_and_deletes_file(self, tmp_path):
        path = tmp_path / "tools.jsonl"
        JsonlExecutionLog(path).record(_record())

        sink = MemoryExecutionLog()
        imported = import_execution_log(path, sink)
        assert imported == [_record()]
        assert sink.records == [_record()]
        assert not path.exists()

    def test_import_missing_file(self, tmp_path):
        assert import_execution_log(tmp_path / "missing.jsonl") == []

    def test_unwritable_log_does_not_raise(self, tmp_path):
        log = JsonlExecutionLog(tmp_path / "no-such-dir" / "tools.jsonl")
        log.record(_record())

    def test_lone_surrogate_written_escaped(self, tmp_path):
        path = tmp_path / "tools.jsonl"
        entry = _record(result_content="Unknown tool: \ud800")
        JsonlExecutionLog(path).record(entry)
        assert "\\ud800" in path.read_text()
        assert read_execution_log(path) == [entry]


class TestMCPConfig:

    def test_build_config_appends_log_file(self):
        config = build_config("/tmp/log.jsonl", ["/usr/bin/python3", "-m", "mcp_server.main"])
        assert config == {
            "mcpServers": {
                "pilot": {
                    "type": "stdio",
                    "command": "/usr/bin/python3",
                    "args": ["-m", "mcp_server.main", "--log-file", "/tmp/log.jsonl"],
                }
            }
        }

    def test_write_and_cleanup(self, tmp_path):
        files = write_config_file(str(tmp_path), ["pilot-mcp"])
        with open(files.config_path) as f:
            config = json.load(f)
        assert config["mcpServers"]["pilot"]["args"] == ["--log-file", files.log_path]
        assert files.config_path != files.log_path

        files.cleanup()
        files.cleanup()
        assert list(tmp_path.iterdir()) == []
