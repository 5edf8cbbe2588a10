# tests/conftest.py
from __future__ import annotations

import pytest

from fizzprime.runtime import reset
from fizzprime.workspace import ensure_workspace_seeded


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    """Isolated, seeded workspace and a fresh runtime for every test."""
    monkeypatch.setenv("FIZZPRIME_HOME", str(tmp_path / "ws"))
    reset()
    root, _, _ = ensure_workspace_seeded()
    yield root
    reset()
