"""
Id expressions and the single/multiple/all selection used by bulk commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Tuple, TypeVar, Union

from .errors import InvalidIdError, MissingArgumentsError

R = TypeVar("R")
V = TypeVar("V")


def _parse_positive(text: str, context: str) -> int:
    value = text.strip()
    if not value.isdecimal():
        raise InvalidIdError(f"Invalid {context}: '{text.strip()}'")
    number = int(value)
    if number < 1:
        raise InvalidIdError(f"Invalid {context}: '{text.strip()}'. Task IDs start at 1")
    return number


def parse_ids(text: str) -> List[int]:
    """
    Parse an id expression such as ``1-3,7,9-11``.

    Parameters
    ----------
    text : str
        Comma-separated ids and inclusive ``start-end`` ranges.

    Returns
    -------
    List[int]
        Sorted ids without duplicates.

    Raises
    ------
    InvalidIdError
        If a segment is malformed, a range is reversed, or no id is given.

    Examples
    --------
    >>> parse_ids("1-3,7,9-11")
    [1, 2, 3, 7, 9, 10, 11]
    >>> parse_ids(" 3 , 1-2 ,, 2 ")
    [1, 2, 3]
    >>> parse_ids("5-3")
    Traceback (most recent call last):
    ...
    todomgr.errors.InvalidIdError: Invalid range: 5-3. Start must be less than or equal to end
    """
    ids = set()
    for raw_segment in text.split(","):
        segment = raw_segment.strip()
        if not segment:
            continue
        if "-" in segment:
            parts = segment.split("-")
            if len(parts) != 2:
                raise InvalidIdError(
                    f"Invalid range format: '{segment}'. Expected format: 'start-end'"
                )
            start = _parse_positive(parts[0], "number in range")
            end = _parse_positive(parts[1], "number in range")
            if start > end:
                raise InvalidIdError(
                    f"Invalid range: {start}-{end}. Start must be less than or equal to end"
                )
            ids.update(range(start, end + 1))
        else:
            ids.add(_parse_positive(segment, "task ID"))
    if not ids:
        raise InvalidIdError("No task IDs provided")
    return sorted(ids)


def format_ids(ids: List[int]) -> str:
    """
    Render ids back into a comma-separated expression.

    Examples
    --------
    >>> format_ids([1, 2, 3])
    '1,2,3'
    """
    return ",".join(str(task_id) for task_id in ids)


@dataclass(frozen=True)
class Single:
    task_id: int


@dataclass(frozen=True)
class Multiple:
    task_ids: Tuple[int, ...]


@dataclass(frozen=True)
class SelectAll:
    pass


ALL = SelectAll()

TaskSelection = Union[Single, Multiple, SelectAll]


def parse_selection(token: str, command: str) -> TaskSelection:
    """
    Interpret the selection argument of a bulk command.

    Parameters
    ----------
    token : str
        ``all``, a single id, or an id expression.
    command : str
        Command name, used in error messages.

    Returns
    -------
    TaskSelection
        Parsed selection.

    Examples
    --------
    >>> parse_selection("ALL", "remove")
    SelectAll()
    >>> parse_selection("4", "remove")
    Single(task_id=4)
    >>> parse_selection("4,2", "remove")
    Multiple(task_ids=(2, 4))
    >>> parse_selection("7-7", "remove")
    Multiple(task_ids=(7,))
    """
    value = token.strip()
    if not value:
        raise MissingArgumentsError(command, f"{command} <task id|range|all>")
    if value.lower() == "all":
        return ALL
    if "-" in value or "," in value:
        return Multiple(tuple(parse_ids(value)))
    if value.isdecimal() and int(value) > 0:
        return Single(int(value))
    raise InvalidIdError(
        "Invalid task ID. Please provide a number, range (e.g., 1-5), "
        "list (e.g., 1,3,5), or 'all'."
    )


def dispatch(
    selection: TaskSelection,
    on_single: Callable[[int], R],
    on_multiple: Callable[[List[int]], R],
    on_all: Callable[[], R],
) -> R:
    """
    Call exactly one handler matching the selection variant.

    ``on_multiple`` receives the full id list even when it holds one id.

    Examples
    --------
    >>> dispatch(Multiple((3,)), str, lambda ids: ids, lambda: "all")
    [3]
    """
    if isinstance(selection, Single):
        return on_single(selection.task_id)
    if isinstance(selection, Multiple):
        return on_multiple(list(selection.task_ids))
    if isinstance(selection, SelectAll):
        return on_all()
    raise TypeError(f"unsupported selection: {selection!r}")


def dispatch_with(
    selection: TaskSelection,
    value: V,
    on_single: Callable[[int, V], R],
    on_multiple: Callable[[List[int], V], R],
    on_all: Callable[[V], R],
) -> R:
    """
    Like :func:`dispatch`, threading one extra value to the chosen handler.

    Examples
    --------
    >>> dispatch_with(ALL, "work", None, None, lambda value: value.upper())
    'WORK'
    """
    return dispatch(
        selection,
        lambda task_id: on_single(task_id, value),
        lambda task_ids: on_multiple(task_ids, value),
        lambda: on_all(value),
    )
