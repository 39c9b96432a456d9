"""
Tests for the todomgr command line entry points.
"""

import io
import json

import pytest
from typer.testing import CliRunner

import todomgr
from todomgr.output import BufferSink
from todomgr.session import StreamLineSource


@pytest.fixture
def app():
    """
    Provide a freshly built Typer app.

    Returns
    -------
    typer.Typer
        CLI application.
    """
    return todomgr.build_app()


@pytest.mark.unit
def test_exec_runs_one_command_and_saves(app, tmp_path):
    """
    Ensure ``exec`` dispatches a single line and writes state.

    Parameters
    ----------
    app : typer.Typer
        CLI application.
    tmp_path : pathlib.Path
        Temporary directory.

    Returns
    -------
    None
        This test asserts one-shot execution.
    """
    data = tmp_path / "state.json"

    result = CliRunner().invoke(app, ["--data", str(data), "exec", "add", "Buy", "milk"])

    assert result.exit_code == 0
    assert "Task added with ID 1: 'Buy milk'" in result.output
    stored = json.loads(data.read_text(encoding="utf-8"))
    assert stored["projects"][0]["tasks"][0]["description"] == "Buy milk"


@pytest.mark.unit
def test_exec_failure_sets_exit_code(app, tmp_path):
    """
    Ensure unknown verbs exit with status 1.

    Parameters
    ----------
    app : typer.Typer
        CLI application.
    tmp_path : pathlib.Path
        Temporary directory.

    Returns
    -------
    None
        This test asserts exit codes.
    """
    result = CliRunner().invoke(app, ["--data", str(tmp_path / "s.json"), "exec", "fly"])
    assert result.exit_code == 1


@pytest.mark.unit
def test_no_save_leaves_disk_untouched(app, tmp_path):
    """
    Ensure ``--no-save`` never writes the state file.

    Parameters
    ----------
    app : typer.Typer
        CLI application.
    tmp_path : pathlib.Path
        Temporary directory.

    Returns
    -------
    None
        This test asserts the no-save option.
    """
    data = tmp_path / "state.json"

    result = CliRunner().invoke(app, ["--data", str(data), "--no-save", "exec", "add", "x"])

    assert result.exit_code == 0
    assert not data.exists()


@pytest.mark.unit
def test_interactive_loop_reads_stdin(app, tmp_path):
    """
    Ensure running without a subcommand starts the read loop.

    Parameters
    ----------
    app : typer.Typer
        CLI application.
    tmp_path : pathlib.Path
        Temporary directory.

    Returns
    -------
    None
        This test asserts the interactive default.
    """
    data = tmp_path / "state.json"

    result = CliRunner().invoke(app, ["--data", str(data)], input="add Water plants\nquit\n")

    assert result.exit_code == 0
    assert "Welcome to todomgr" in result.output
    assert "Goodbye! Stay organized." in result.output
    assert data.exists()


@pytest.mark.unit
def test_open_session_restores_saved_state(tmp_path):
    """
    Ensure a second session sees tasks saved by the first.

    Parameters
    ----------
    tmp_path : pathlib.Path
        Temporary directory.

    Returns
    -------
    None
        This test asserts state round trips through sessions.
    """
    data = tmp_path / "state.json"
    first = todomgr.open_session(
        data, sink=BufferSink(), source=StreamLineSource(io.StringIO("add Persist\n"))
    )
    first.run()

    sink = BufferSink()
    second = todomgr.open_session(
        data, sink=sink, source=StreamLineSource(io.StringIO("list\n"))
    )
    second.run()

    assert "[1] [ ] Persist" in sink.texts("info")
