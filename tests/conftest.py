"""Shared fixtures for the Pilot test suite."""

import sys
from pathlib import Path

import pytest

# Ensure project root is importable when the package isn't installed
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def pilot_home(tmp_path, monkeypatch):
    """Point PILOT_HOME at a fresh temporary directory."""
    home = tmp_path / "pilot-home"
    monkeypatch.setenv("PILOT_HOME", str(home))
    return home
