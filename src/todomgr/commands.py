"""
Shared types for command controllers: parsed commands, outcomes, and the
controller base class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .projects import ProjectManager


class Action(Enum):
    """Post-command actions interpreted by the run loop."""

    EXIT_MAIN_LOOP = "exit"
    ENABLE_DEBUG_MODE = "enable-debug"
    DISABLE_DEBUG_MODE = "disable-debug"
    SAVE_STATE = "save"


class MessageKind(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    text: str


def info(text: str) -> Message:
    return Message(MessageKind.INFO, text)


def success(text: str) -> Message:
    return Message(MessageKind.SUCCESS, text)


def error(text: str) -> Message:
    return Message(MessageKind.ERROR, text)


@dataclass(frozen=True)
class DispatchOutcome:
    """
    Result of a handled command.

    Attributes
    ----------
    actions : FrozenSet[Action]
        Actions for the run loop to apply.
    messages : Tuple[Message, ...]
        Output lines in display order.
    """

    actions: FrozenSet[Action] = frozenset()
    messages: Tuple[Message, ...] = ()

    @classmethod
    def build(
        cls,
        messages: Iterable[Message] = (),
        actions: Iterable[Action] = (),
    ) -> "DispatchOutcome":
        return cls(actions=frozenset(actions), messages=tuple(messages))

    @classmethod
    def saved(cls, messages: Iterable[Message] = ()) -> "DispatchOutcome":
        return cls.build(messages, (Action.SAVE_STATE,))

    def has(self, action: Action) -> bool:
        return action in self.actions

    @property
    def texts(self) -> List[str]:
        return [message.text for message in self.messages]


@dataclass
class DispatchContext:
    """
    Mutable state handed to a controller for one command.

    Attributes
    ----------
    projects : ProjectManager
        Project manager owning every repository.
    debug_active : bool
        Whether debug mode is currently on.
    today : Optional[date]
        Reference date for overdue checks and recurrence (default: today).
    """

    projects: ProjectManager
    debug_active: bool = False
    today: Optional[date] = None

    @property
    def repository(self):
        return self.projects.active

    def current_date(self) -> date:
        return self.today or date.today()


@dataclass(frozen=True)
class Command:
    """
    A parsed command: canonical verb plus typed arguments.
    """

    name: str
    args: Tuple[Any, ...] = field(default_factory=tuple)


def split_command(line: str) -> Tuple[str, List[str]]:
    """
    Split an input line into a lowercase verb and its arguments.

    Examples
    --------
    >>> split_command("  ADD  Buy   milk ")
    ('add', ['Buy', 'milk'])
    >>> split_command("")
    ('', [])
    """
    parts = line.split()
    if not parts:
        return "", []
    return parts[0].lower(), parts[1:]


Parser = Callable[[Sequence[str]], Tuple[Any, ...]]
Handler = Callable[..., DispatchOutcome]


class CommandController:
    """
    Base class for a controller owning a closed set of verbs.

    Subclasses fill ``aliases`` (verb -> canonical name), ``parsers``
    (canonical name -> argument parser) and ``handlers`` (canonical name ->
    handler taking the context followed by the parsed arguments).
    """

    name = "base"
    requires_debug = False

    def __init__(self) -> None:
        self.aliases: Dict[str, str] = {}
        self.parsers: Dict[str, Parser] = {}
        self.handlers: Dict[str, Handler] = {}

    def register(
        self,
        name: str,
        handler: Handler,
        parser: Optional[Parser] = None,
        aliases: Sequence[str] = (),
    ) -> None:
        for verb in (name, *aliases):
            self.aliases[verb] = name
        self.handlers[name] = handler
        if parser is not None:
            self.parsers[name] = parser

    @property
    def verbs(self) -> List[str]:
        return sorted(self.aliases)

    def parse(self, verb: str, args: Sequence[str]) -> Optional[Command]:
        """
        Parse arguments for a verb this controller owns.

        Returns
        -------
        Optional[Command]
            Parsed command, or None when the verb belongs elsewhere.

        Raises
        ------
        ParseError
            If the verb is known but its arguments are invalid.
        """
        name = self.aliases.get(verb)
        if name is None:
            return None
        parser = self.parsers.get(name)
        return Command(name, parser(args) if parser else ())

    def execute(self, command: Command, context: DispatchContext) -> DispatchOutcome:
        return self.handlers[command.name](context, *command.args)

    def try_execute(self, line: str, context: DispatchContext) -> Optional[DispatchOutcome]:
        verb, args = split_command(line)
        command = self.parse(verb, args)
        if command is None:
            return None
        return self.execute(command, context)
