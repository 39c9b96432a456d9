"""
Tests for the interactive run loop.
"""

import io

import pytest

from todomgr.errors import StorageError
from todomgr.output import BufferSink
from todomgr.projects import ProjectManager
from todomgr.session import WELCOME, Session, StreamLineSource, make_line_source


class ListSource:
    """
    Line source backed by a list; None once exhausted.
    """

    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []

    def read_line(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            return None
        return self.lines.pop(0)


def make_session(registry, lines, save=None):
    sink = BufferSink()
    return Session(registry, sink, ListSource(lines), save=save), sink


@pytest.mark.unit
def test_run_until_quit_saves_after_mutations(registry):
    """
    Ensure mutations save and quit stops the loop.

    Parameters
    ----------
    registry : CommandRegistry
        Registry fixture.

    Returns
    -------
    None
        This test asserts the main loop.
    """
    saves = []
    session, sink = make_session(
        registry,
        ["add Buy milk", "list", "quit", "add never"],
        save=lambda projects: saves.append(len(projects.active)),
    )

    session.run()

    assert sink.texts()[0] == WELCOME
    assert "Task added with ID 1: 'Buy milk'" in sink.texts("success")
    assert saves == [1, 1]
    assert len(registry.projects.active) == 1
    assert session.source.lines == ["add never"]


@pytest.mark.unit
def test_errors_are_reported_and_loop_continues(registry):
    """
    Ensure parse errors and unknown verbs print and keep prompting.

    Parameters
    ----------
    registry : CommandRegistry
        Registry fixture.

    Returns
    -------
    None
        This test asserts error rendering.
    """
    session, sink = make_session(registry, ["", "fly", "complete 9", "add ok"])

    session.run()

    assert sink.texts("error") == [
        "Unknown command: 'fly'. Type 'help' for available commands.",
        "Task 9 not found.",
    ]
    assert session.errors == 2
    assert len(registry.projects.active) == 1


@pytest.mark.unit
def test_prompt_shows_project_and_debug(registry):
    """
    Ensure the prompt reflects the active project and debug mode.

    Parameters
    ----------
    registry : CommandRegistry
        Registry fixture.

    Returns
    -------
    None
        This test asserts prompt text.
    """
    session, _ = make_session(registry, ["project new Work", "project switch Work", "debug"])

    session.run()

    assert session.source.prompts == [
        "[default]> ",
        "[default]> ",
        "[Work]> ",
        "[Work debug]> ",
    ]


@pytest.mark.unit
def test_save_failure_is_reported(registry):
    """
    Ensure storage errors surface as messages instead of crashing.

    Parameters
    ----------
    registry : CommandRegistry
        Registry fixture.

    Returns
    -------
    None
        This test asserts save error handling.
    """

    def failing_save(projects: ProjectManager):
        raise StorageError("Unable to save tasks to /nowhere: denied")

    session, sink = make_session(registry, [], save=failing_save)

    assert session.handle_line("add x") is True
    assert sink.texts("error") == ["Unable to save tasks to /nowhere: denied"]


class PlainSink:
    """
    Sink with only the three write channels.
    """

    def __init__(self):
        self.written = []

    def write_line(self, text):
        self.written.append(text)

    def write_success(self, text):
        self.written.append(text)

    def write_error(self, text):
        self.written.append(text)


@pytest.mark.unit
def test_prompt_goes_to_line_source_not_sink(registry):
    """
    Ensure a sink needs no prompt channel; prompts reach the line source.

    Parameters
    ----------
    registry : CommandRegistry
        Registry fixture.

    Returns
    -------
    None
        This test asserts where prompt text is delivered.
    """
    sink = PlainSink()
    source = ListSource(["add Call mom", "fly"])
    session = Session(registry, sink, source)

    session.run()

    assert sink.written == [
        WELCOME,
        "Task added with ID 1: 'Call mom'",
        "Unknown command: 'fly'. Type 'help' for available commands.",
    ]
    assert source.prompts == ["[default]> "] * 3
    assert not any(text.endswith("> ") for text in sink.written)


@pytest.mark.unit
def test_stream_source_reads_until_eof():
    """
    Ensure the stream source strips newlines and ends with None.

    Returns
    -------
    None
        This test asserts stream reading.
    """
    source = StreamLineSource(io.StringIO("add a\nlist\n"))
    assert source.read_line("> ") == "add a"
    assert source.read_line("> ") == "list"
    assert source.read_line("> ") is None


@pytest.mark.unit
def test_make_line_source_uses_stream_when_not_a_tty():
    """
    Ensure non-terminal input does not start prompt_toolkit.

    Returns
    -------
    None
        This test asserts line source selection.
    """
    source = make_line_source(lambda: ["add"], io.StringIO(""))
    assert isinstance(source, StreamLineSource)
