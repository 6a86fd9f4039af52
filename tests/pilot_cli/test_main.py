"""Tests for the pilot command line."""

from unittest.mock import MagicMock

import pytest

from agent.errors import ProcessExitedWithError
from pilot_cli import main as pilot_main
from pilot_cli.sessions import SessionStore
from pilot_cli.config import get_sessions_path


@pytest.fixture
def fake_cli(monkeypatch, pilot_home):
    cli = MagicMock()
    cli.model = "sonnet"
    monkeypatch.setattr(pilot_main, "build_cli", lambda config: cli)
    return cli


def _run(argv):
    pilot_main.main(argv)


class TestAsk:

    def test_ask(self, fake_cli, capsys):
        fake_cli.ask.return_value = "Paris"
        _run(["ask", "Capital of France?"])
        assert capsys.readouterr().out == "Paris\n"
        fake_cli.ask.assert_called_once_with("Capital of France?", model=None, max_turns=None)

    def test_ask_with_tools(self, fake_cli, capsys):
        fake_cli.ask_with_tools.return_value = "Copied."
        _run(["ask", "--tools", "-m", "opus", "--max-turns", "8", "copy hi"])
        fake_cli.ask_with_tools.assert_called_once_with("copy hi", model="opus", max_turns=8)
        fake_cli.ask.assert_not_called()

    def test_error_exits_1(self, fake_cli, capsys):
        fake_cli.ask.side_effect = ProcessExitedWithError(1, "rate limited")
        with pytest.raises(SystemExit) as exc_info:
            _run(["ask", "q"])
        assert exc_info.value.code == 1
        assert "rate limited" in capsys.readouterr().err


class TestSessionCommands:

    def test_start_then_continue_most_recent(self, fake_cli, capsys):
        fake_cli.start_session.return_value = ("Let's plan.", "ext-42")
        _run(["session", "start", "Plan a trip to Lisbon"])
        out = capsys.readouterr()
        assert out.out == "Let's plan.\n"

        store = SessionStore(get_sessions_path())
        session = store.most_recent()
        assert session.external_session_id == "ext-42"
        assert session.display_name == "Plan a trip to Lisbon"
        assert session.id[:8] in out.err

        fake_cli.continue_session.return_value = "Three days it is."
        _run(["session", "continue", "Make it three days"])
        assert capsys.readouterr().out == "Three days it is.\n"
        fake_cli.continue_session.assert_called_once_with(
            "Make it three days", "ext-42", model="sonnet", with_tools=False,
        )
        assert store.get(session.id).last_used_at > session.last_used_at

    def test_continue_without_sessions(self, fake_cli, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(["session", "continue", "hello?"])
        assert exc_info.value.code == 1
        assert "No sessions" in capsys.readouterr().err
        fake_cli.continue_session.assert_not_called()

    def test_continue_unknown_id(self, fake_cli, capsys):
        with pytest.raises(SystemExit):
            _run(["session", "continue", "--id", "missing", "hello?"])
        assert "could not be found" in capsys.readouterr().err

    def test_list_and_delete(self, fake_cli, capsys):
        store = SessionStore(get_sessions_path())
        session = store.create("ext-1", "Groceries", "sonnet")
        _run(["session", "list"])
        assert "Groceries" in capsys.readouterr().out

        _run(["session", "delete", session.id[:8]])
        assert store.all() == []


class TestTextCommands:

    def test_summarize_file(self, fake_cli, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("remember the milk")
        fake_cli.ask.return_value = "- milk"
        _run(["summarize-file", str(path)])
        prompt = fake_cli.ask.call_args[0][0]
        assert "Filename: notes.txt" in prompt
        assert "remember the milk" in prompt
        assert capsys.readouterr().out == "- milk\n"

    def test_summarize_binary_file(self, fake_cli, tmp_path, capsys):
        path = tmp_path / "image.bin"
        path.write_bytes(b"\xff\xd8\xff\x00")
        _run(["summarize-file", str(path)])
        assert "no readable text" in capsys.readouterr().out
        fake_cli.ask.assert_not_called()

    def test_summarize_missing_file(self, fake_cli, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            _run(["summarize-file", str(tmp_path / "missing.txt")])
        assert exc_info.value.code == 1

    def test_transform(self, fake_cli, capsys):
        fake_cli.ask.return_value = "HELLO"
        _run(["transform", "-i", "uppercase it", "hello"])
        prompt = fake_cli.ask.call_args[0][0]
        assert "Instruction: uppercase it" in prompt
        assert prompt.endswith("Text:\nhello")
        assert capsys.readouterr().out == "HELLO\n"


class TestMisc:

    def test_version(self, capsys):
        _run(["--version"])
        assert "Pilot v" in capsys.readouterr().out

    def test_notify_disabled(self, pilot_home, capsys):
        pilot_home.mkdir(parents=True)
        (pilot_home / "config.yaml").write_text("notifications:\n  enabled: false\n")
        _run(["notify", "Title", "Body"])
        assert "permission denied" in capsys.readouterr().out.lower()

    def test_history_empty(self, pilot_home, capsys):
        _run(["history"])
        assert "No tool executions" in capsys.readouterr().out
