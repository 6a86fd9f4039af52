"""Tests for JSONValue decoding and the tool registry."""

import pytest

from tools.base import JSONValue, Tool, ToolResult, ValueKind
from tools.capabilities import MemoryClipboard
from tools.registry import ToolRegistry, build_default_registry


class FakeNotifier:
    def send(self, title, body):
        return True


# ── JSONValue Tests ───────────────────────────────────────────────────────

class TestJSONValue:
    """Decoding priority: boolean, integer, number, string, then null."""

    def test_boolean_is_never_an_integer(self):
        value = JSONValue.from_json(True)
        assert value.kind is ValueKind.BOOLEAN
        assert value.bool_value is True
        assert value.int_value is None
        assert value.string_value is None

    def test_false(self):
        assert JSONValue.from_json(False) == JSONValue.boolean(False)

    def test_integer(self):
        value = JSONValue.from_json(3)
        assert value.kind is ValueKind.INTEGER
        assert value.int_value == 3
        assert value.number_value is None

    def test_number(self):
        value = JSONValue.from_json(2.5)
        assert value.kind is ValueKind.NUMBER
        assert value.number_value == 2.5

    def test_string(self):
        value = JSONValue.from_json("true")
        assert value.kind is ValueKind.STRING
        assert value.string_value == "true"
        assert value.bool_value is None

    @pytest.mark.parametrize("raw", [None, [1], {"a": 1}])
    def test_other_shapes_are_null(self, raw):
        assert JSONValue.from_json(raw).is_null

    def test_str(self):
        assert str(JSONValue.boolean(True)) == "true"
        assert str(JSONValue.null()) == "null"
        assert str(JSONValue.integer(7)) == "7"

    def test_to_json(self):
        assert JSONValue.string("x").to_json() == "x"
        assert JSONValue.null().to_json() is None


# ── Registry Tests ────────────────────────────────────────────────────────

class EchoTool(Tool):
    name = "echo"
    description = "Echo"

    async def execute(self, arguments):
        return ToolResult.success("echo")


class TestToolRegistry:

    def test_default_registry_has_four_tools(self):
        registry = build_default_registry(clipboard=MemoryClipboard(), notifier=FakeNotifier())
        assert registry.names == ["clipboard", "notification", "web", "shell"]
        assert len(registry) == 4

    def test_lookup_by_declared_name(self):
        registry = build_default_registry(clipboard=MemoryClipboard(), notifier=FakeNotifier())
        for name in registry.names:
            tool = registry.tool(name)
            assert tool is not None
            assert tool.name == name
            assert name in registry

    @pytest.mark.parametrize("name", ["", "Shell", "browser", "mcp__pilot__shell"])
    def test_unknown_name(self, name):
        registry = build_default_registry(clipboard=MemoryClipboard(), notifier=FakeNotifier())
        assert registry.tool(name) is None
        assert name not in registry

    def test_registry_is_read_only(self):
        registry = ToolRegistry([EchoTool()])
        with pytest.raises(TypeError):
            registry._tools["other"] = EchoTool()

    def test_shell_settings_from_config(self):
        config = {"shell": {"shell": "/bin/bash", "timeout": 90}}
        registry = build_default_registry(config, clipboard=MemoryClipboard(), notifier=FakeNotifier())
        shell = registry.tool("shell")
        assert shell.shell == "/bin/bash"
        assert shell.default_timeout == 90

    def test_notifications_disabled_in_config(self):
        registry = build_default_registry({"notifications": {"enabled": False}}, clipboard=MemoryClipboard())
        assert registry.tool("notification").notifier.enabled is False
