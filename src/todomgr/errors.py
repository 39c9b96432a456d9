"""
Error taxonomy for command parsing and task domain operations.
"""

from __future__ import annotations

from typing import Optional


class TodoError(Exception):
    """
    Base class for every error the engine reports back to the run loop.

    ``str(exc)`` is the user-facing message.
    """


class ParseError(TodoError):
    """Raised when a recognized command carries invalid arguments."""


class MissingArgumentsError(ParseError):
    """
    Raised when a command is missing required arguments.

    Examples
    --------
    >>> str(MissingArgumentsError("add", "add <task description>"))
    'Usage: add <task description>'
    """

    def __init__(self, command: str, usage: str) -> None:
        self.command = command
        self.usage = usage
        super().__init__(f"Usage: {usage}")


class InvalidIdError(ParseError):
    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(text)


class InvalidFormatError(ParseError):
    """
    Raised when an argument does not follow the expected format.

    Examples
    --------
    >>> str(InvalidFormatError("date", "DD.MM.YYYY", "tomorrow"))
    'Invalid date format. Expected: DD.MM.YYYY, got: tomorrow'
    """

    def __init__(self, field: str, expected: str, actual: str) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid {field} format. Expected: {expected}, got: {actual}")


class EmptyInputError(ParseError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} cannot be empty.")


class InvalidValueError(ParseError):
    """
    Raised when an argument is not one of the allowed values.

    Examples
    --------
    >>> str(InvalidValueError("priority level", "urgent", "high, medium, low"))
    "Invalid priority level 'urgent'. Allowed values: high, medium, low"
    """

    def __init__(self, field: str, value: str, allowed: str) -> None:
        self.field = field
        self.value = value
        self.allowed = allowed
        super().__init__(f"Invalid {field} '{value}'. Allowed values: {allowed}")


class OutOfRangeError(ParseError):
    def __init__(self, field: str, value: str, constraint: str) -> None:
        self.field = field
        self.value = value
        self.constraint = constraint
        super().__init__(f"{field} '{value}' is out of range. {constraint}")


class InvalidDateError(ParseError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class EmptyCommandError(ParseError):
    def __init__(self) -> None:
        super().__init__("Please enter a command.")


class UnknownCommandError(ParseError):
    """
    Raised by the run loop when no controller recognized the verb.

    Examples
    --------
    >>> str(UnknownCommandError("fly"))
    "Unknown command: 'fly'. Type 'help' for available commands."
    """

    def __init__(self, verb: str) -> None:
        self.verb = verb
        super().__init__(f"Unknown command: '{verb}'. Type 'help' for available commands.")


class NotFoundError(TodoError):
    """
    Raised when a task or project does not exist.

    Examples
    --------
    >>> str(NotFoundError("task", 7))
    'Task 7 not found.'
    >>> str(NotFoundError("project", "work"))
    "Project 'work' not found."
    """

    def __init__(self, kind: str, key: object) -> None:
        self.kind = kind
        self.key = key
        if isinstance(key, str):
            message = f"{kind.capitalize()} '{key}' not found."
        else:
            message = f"{kind.capitalize()} {key} not found."
        super().__init__(message)


class AlreadyExistsError(TodoError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Project '{name}' already exists.")


class CannotDeleteActiveError(TodoError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Cannot delete the active project '{name}'. Switch to another project first."
        )


class DependencyError(TodoError):
    """Base class for rejected dependency edges."""


class SelfDependencyError(DependencyError):
    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} cannot depend on itself.")


class CycleDetectedError(DependencyError):
    """
    Raised when a new dependency edge would close a cycle.

    Examples
    --------
    >>> str(CycleDetectedError(1, 2))
    'Cannot make task 1 depend on task 2: task 2 already depends on task 1.'
    """

    def __init__(self, task_id: int, depends_on_id: int) -> None:
        self.task_id = task_id
        self.depends_on_id = depends_on_id
        super().__init__(
            f"Cannot make task {task_id} depend on task {depends_on_id}: "
            f"task {depends_on_id} already depends on task {task_id}."
        )


class StorageError(TodoError):
    def __init__(self, detail: str, path: Optional[object] = None) -> None:
        self.detail = detail
        self.path = path
        super().__init__(detail)
