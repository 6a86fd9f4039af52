"""Tests for locating the claude executable."""

import os
import threading
import time

import pytest

from agent.errors import ExecutableNotFound
from agent.executable import ExecutableResolver


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv("PILOT_CLAUDE_PATH", raising=False)


def _make_executable(path, mode=0o755):
    path.write_text("#!/bin/sh\nexit 0\n")
    os.chmod(path, mode)
    return str(path)


NOT_FOUND_WHICH = ["/bin/sh", "-c", "exit 1"]


class TestResolutionOrder:

    def test_override_wins(self, tmp_path):
        override = _make_executable(tmp_path / "custom-claude")
        listed = _make_executable(tmp_path / "listed-claude")
        resolver = ExecutableResolver(override=override, search_paths=[listed], which_command=NOT_FOUND_WHICH)
        assert resolver.resolve() == override

    def test_env_override(self, tmp_path, monkeypatch):
        override = _make_executable(tmp_path / "env-claude")
        monkeypatch.setenv("PILOT_CLAUDE_PATH", override)
        resolver = ExecutableResolver(search_paths=[], which_command=NOT_FOUND_WHICH)
        assert resolver.resolve() == override

    def test_non_executable_override_falls_through(self, tmp_path):
        override = _make_executable(tmp_path / "not-exec", mode=0o644)
        listed = _make_executable(tmp_path / "listed-claude")
        resolver = ExecutableResolver(override=override, search_paths=[listed], which_command=NOT_FOUND_WHICH)
        assert resolver.resolve() == listed

    def test_first_executable_search_path(self, tmp_path):
        missing = str(tmp_path / "missing")
        not_exec = _make_executable(tmp_path / "plain", mode=0o644)
        first = _make_executable(tmp_path / "first")
        second = _make_executable(tmp_path / "second")
        resolver = ExecutableResolver(search_paths=[missing, not_exec, first, second], which_command=NOT_FOUND_WHICH)
        assert resolver.resolve() == first

    def test_which_fallback(self, tmp_path):
        resolver = ExecutableResolver(
            search_paths=[str(tmp_path / "missing")],
            which_command=["/bin/sh", "-c", "echo '  /opt/tools/claude  '"],
        )
        assert resolver.resolve() == "/opt/tools/claude"

    def test_which_empty_output_is_not_found(self):
        resolver = ExecutableResolver(search_paths=[], which_command=["/bin/sh", "-c", "true"])
        with pytest.raises(ExecutableNotFound):
            resolver.resolve()

    def test_which_nonzero_is_not_found(self):
        resolver = ExecutableResolver(search_paths=[], which_command=NOT_FOUND_WHICH)
        with pytest.raises(ExecutableNotFound):
            resolver.resolve()

    def test_which_missing_binary_is_not_found(self, tmp_path):
        resolver = ExecutableResolver(search_paths=[], which_command=[str(tmp_path / "no-which"), "claude"])
        with pytest.raises(ExecutableNotFound):
            resolver.resolve()


class TestCaching:

    def test_path_cached_after_first_resolve(self, tmp_path):
        path = _make_executable(tmp_path / "claude")
        resolver = ExecutableResolver(search_paths=[path], which_command=NOT_FOUND_WHICH)
        assert resolver.cached_path is None
        assert resolver.resolve() == path

        os.remove(path)
        assert resolver.resolve() == path
        assert resolver.cached_path == path

    def test_failure_not_cached(self, tmp_path):
        path = tmp_path / "claude"
        resolver = ExecutableResolver(search_paths=[str(path)], which_command=NOT_FOUND_WHICH)
        with pytest.raises(ExecutableNotFound):
            resolver.resolve()

        _make_executable(path)
        assert resolver.resolve() == str(path)

    def test_concurrent_first_use_looks_up_once(self, monkeypatch):
        resolver = ExecutableResolver(search_paths=[], which_command=NOT_FOUND_WHICH)
        calls = []

        def slow_lookup():
            calls.append(1)
            time.sleep(0.05)
            return "/opt/claude"

        monkeypatch.setattr(resolver, "_lookup", slow_lookup)

        results = []
        threads = [threading.Thread(target=lambda: results.append(resolver.resolve())) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == ["/opt/claude"] * 8
        assert len(calls) == 1
