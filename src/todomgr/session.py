"""
Interactive run loop: read a line, dispatch it, render the outcome.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, List, Optional, Protocol, TextIO

from .commands import Action, split_command
from .errors import StorageError, TodoError, UnknownCommandError
from .output import LineSink, write_outcome
from .projects import ProjectManager
from .registry import CommandRegistry

logger = logging.getLogger(__name__)

WELCOME = "Welcome to todomgr. Type 'help' for available commands."


class LineSource(Protocol):
    def read_line(self, prompt: str) -> Optional[str]: ...


class StreamLineSource:
    """
    Read lines from a text stream; None signals end of input.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def read_line(self, prompt: str) -> Optional[str]:
        line = self.stream.readline()
        if not line:
            return None
        return line.rstrip("\n")


class PromptLineSource:
    """
    Read lines with prompt_toolkit, completing known verbs and keeping history.

    Parameters
    ----------
    verbs : Callable[[], List[str]]
        Returns the verbs to offer for completion; called on every keystroke
        so debug verbs appear once debug mode is on.
    """

    def __init__(self, verbs: Callable[[], List[str]]) -> None:
        from prompt_toolkit import PromptSession
        from prompt_toolkit.completion import WordCompleter

        completer = WordCompleter(verbs, ignore_case=True, sentence=True)
        self.session = PromptSession(completer=completer)

    def read_line(self, prompt: str) -> Optional[str]:
        try:
            return self.session.prompt(prompt)
        except EOFError:
            return None
        except KeyboardInterrupt:
            return ""


def make_line_source(
    verbs: Callable[[], List[str]], stream: Optional[TextIO] = None
) -> LineSource:
    """
    Choose prompt_toolkit for terminals and plain reads otherwise.
    """
    stream = stream or sys.stdin
    if stream is sys.stdin and stream.isatty():
        return PromptLineSource(verbs)
    return StreamLineSource(stream)


class Session:
    """
    Drive the registry from a line source until quit or end of input.

    Parameters
    ----------
    registry : CommandRegistry
        Dispatcher holding the project state.
    sink : LineSink
        Where messages are written.
    source : LineSource
        Where input lines come from.
    save : Optional[Callable[[ProjectManager], object]], optional
        Called with the project manager whenever a command requests a save;
        None disables saving.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        sink: LineSink,
        source: LineSource,
        save: Optional[Callable[[ProjectManager], object]] = None,
    ) -> None:
        self.registry = registry
        self.sink = sink
        self.source = source
        self.save = save
        self.errors = 0

    @property
    def prompt(self) -> str:
        suffix = " debug" if self.registry.debug_active else ""
        return f"[{self.registry.projects.active_name}{suffix}]> "

    def handle_line(self, line: str) -> bool:
        """
        Dispatch one line and render its outcome.

        Returns
        -------
        bool
            False when the loop should stop.
        """
        if not line.strip():
            return True
        try:
            outcome = self.registry.try_execute(line)
        except TodoError as exc:
            self.sink.write_error(str(exc))
            self.errors += 1
            return True
        if outcome is None:
            verb, _ = split_command(line)
            self.sink.write_error(str(UnknownCommandError(verb)))
            self.errors += 1
            return True

        write_outcome(self.sink, outcome)
        if outcome.has(Action.SAVE_STATE) and self.save is not None:
            try:
                self.save(self.registry.projects)
            except StorageError as exc:
                logger.debug("save failed", exc_info=True)
                self.sink.write_error(str(exc))
                self.errors += 1
        return not outcome.has(Action.EXIT_MAIN_LOOP)

    def run(self) -> None:
        self.sink.write_line(WELCOME)
        while True:
            line = self.source.read_line(self.prompt)
            if line is None:
                break
            if not self.handle_line(line):
                break
