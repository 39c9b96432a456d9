"""
Task rendering and the line sink the run loop writes through.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol

from .commands import DispatchOutcome, MessageKind
from .dependencies import build_tree_prefix
from .models import Task

DATE_FORMAT = "%d.%m.%Y"


def format_date(value: date) -> str:
    """
    Format a date the way users type it.

    Examples
    --------
    >>> format_date(date(2024, 12, 31))
    '31.12.2024'
    """
    return value.strftime(DATE_FORMAT)


def format_task(task: Task, today: Optional[date] = None) -> str:
    """
    Render one task as a single display line.

    Parameters
    ----------
    task : Task
        Task to render.
    today : Optional[date], optional
        Reference date for the overdue marker (default: today).

    Returns
    -------
    str
        Display line.

    Examples
    --------
    >>> from todomgr.models import Priority
    >>> task = Task(3, "Pay rent", priority=Priority.HIGH, due_date=date(2024, 5, 1))
    >>> format_task(task, today=date(2024, 5, 2))
    '[3] [ ] Pay rent (High) due: 01.05.2024 OVERDUE'
    >>> format_task(Task(4, "Read", completed=True, dependency_ids={2, 1}))
    '[4] [x] Read depends on: 1, 2'
    """
    marker = "x" if task.completed else " "
    parts = [f"[{task.id}] [{marker}] {task.description}"]
    if task.priority is not None:
        parts.append(f"({task.priority.label})")
    if task.due_date is not None:
        parts.append(f"due: {format_date(task.due_date)}")
        if task.is_overdue(today):
            parts.append("OVERDUE")
    if task.category:
        parts.append(f"category: {task.category}")
    if task.recurrence is not None:
        parts.append(f"recurring: {task.recurrence.label}")
    if task.dependency_ids:
        deps = ", ".join(str(dep) for dep in sorted(task.dependency_ids))
        parts.append(f"depends on: {deps}")
    return " ".join(parts)


def format_task_list(tasks: Iterable[Task], today: Optional[date] = None) -> List[str]:
    return [format_task(task, today) for task in tasks]


def format_task_hierarchy(tasks: Iterable[Task], today: Optional[date] = None) -> List[str]:
    """
    Render tasks with subtasks indented under their parents.

    Tasks whose parent is not in ``tasks`` are shown at the top level.

    Examples
    --------
    >>> tasks = [Task(1, "Trip"), Task(2, "Book hotel", parent_id=1, completed=True)]
    >>> for line in format_task_hierarchy(tasks):
    ...     print(line)
    [1] [ ] Trip (1/1 subtasks)
    +- [2] [x] Book hotel
    """
    ordered = sorted(tasks, key=lambda task: task.id)
    known = {task.id for task in ordered}
    children: Dict[int, List[Task]] = {}
    roots: List[Task] = []
    for task in ordered:
        if task.parent_id is not None and task.parent_id in known:
            children.setdefault(task.parent_id, []).append(task)
        else:
            roots.append(task)

    lines: List[str] = []

    def label(task: Task) -> str:
        text = format_task(task, today)
        subtasks = children.get(task.id)
        if subtasks:
            done = sum(1 for subtask in subtasks if subtask.completed)
            text = f"{text} ({done}/{len(subtasks)} subtasks)"
        return text

    def walk(task: Task, ancestor_has_more: List[bool], visited: set) -> None:
        kids = [kid for kid in children.get(task.id, []) if kid.id not in visited]
        for index, kid in enumerate(kids):
            has_more = index < len(kids) - 1
            lines.append(f"{build_tree_prefix(ancestor_has_more)}{label(kid)}")
            walk(kid, [*ancestor_has_more, has_more], visited | {kid.id})

    for root in roots:
        lines.append(label(root))
        walk(root, [], {root.id})
    return lines


class LineSink(Protocol):
    def write_line(self, text: str) -> None: ...

    def write_success(self, text: str) -> None: ...

    def write_error(self, text: str) -> None: ...


class ConsoleSink:
    """
    Write to the terminal with typer: success in green, errors in red on
    stderr.
    """

    def __init__(self, color: Optional[bool] = None) -> None:
        self.color = color

    def write_line(self, text: str) -> None:
        import typer

        typer.secho(text, color=self.color)

    def write_success(self, text: str) -> None:
        import typer

        typer.secho(text, fg=typer.colors.GREEN, color=self.color)

    def write_error(self, text: str) -> None:
        import typer

        typer.secho(text, fg=typer.colors.RED, err=True, color=self.color)


class BufferSink:
    """
    Collect written lines in memory, tagged by channel.

    Examples
    --------
    >>> sink = BufferSink()
    >>> sink.write_error("boom")
    >>> sink.lines
    [('error', 'boom')]
    """

    def __init__(self) -> None:
        self.lines: List[tuple] = []

    def write_line(self, text: str) -> None:
        self.lines.append(("info", text))

    def write_success(self, text: str) -> None:
        self.lines.append(("success", text))

    def write_error(self, text: str) -> None:
        self.lines.append(("error", text))

    def texts(self, channel: Optional[str] = None) -> List[str]:
        return [text for kind, text in self.lines if channel is None or kind == channel]


def write_outcome(sink: LineSink, outcome: DispatchOutcome) -> None:
    for message in outcome.messages:
        if message.kind is MessageKind.SUCCESS:
            sink.write_success(message.text)
        elif message.kind is MessageKind.ERROR:
            sink.write_error(message.text)
        else:
            sink.write_line(message.text)
