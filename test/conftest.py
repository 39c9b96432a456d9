"""
Shared pytest fixtures for todomgr tests.
"""

from __future__ import annotations

from datetime import date

import pytest

from todomgr.projects import ProjectManager
from todomgr.registry import CommandRegistry

TODAY = date(2024, 5, 15)


@pytest.fixture(autouse=True)
def isolate_state_file(tmp_path, monkeypatch) -> None:
    """
    Ensure tests do not read/write the real state file.

    Parameters
    ----------
    tmp_path : pathlib.Path
        Temporary path provided by pytest.
    monkeypatch : pytest.MonkeyPatch
        Monkeypatch fixture for environment updates.
    """
    monkeypatch.setenv("TODOMGR_DATA_PATH", str(tmp_path / "projects.json"))


@pytest.fixture
def registry() -> CommandRegistry:
    """
    Provide a registry over fresh projects with a fixed reference date.

    Returns
    -------
    CommandRegistry
        Registry pinned to ``TODAY``.
    """
    return CommandRegistry(ProjectManager(), today=TODAY)
