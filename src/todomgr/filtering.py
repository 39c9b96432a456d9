"""
Task filtering, sorting, and the ``list`` argument grammar.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .errors import EmptyInputError, InvalidFormatError
from .models import (
    OverdueFilter,
    Priority,
    SortBy,
    SortOrder,
    Task,
    TaskFilter,
    TaskStatus,
)

LIST_FILTER_HELP = (
    "done, todo, high, medium, low, overdue, not-overdue, category:name, "
    "sort:id|priority|due|category|status, asc, desc"
)


def matches_overdue(task: Task, mode: OverdueFilter, today: Optional[date] = None) -> bool:
    """
    Check the overdue part of a filter.

    Examples
    --------
    >>> task = Task(1, "File taxes", due_date=date(2024, 4, 14))
    >>> matches_overdue(task, OverdueFilter.ONLY_OVERDUE, date(2024, 4, 15))
    True
    >>> matches_overdue(task, OverdueFilter.ONLY_NOT_OVERDUE, date(2024, 4, 14))
    True
    """
    if mode is OverdueFilter.ALL:
        return True
    overdue = task.is_overdue(today)
    if mode is OverdueFilter.ONLY_OVERDUE:
        return overdue
    return not overdue


def matches(task: Task, task_filter: TaskFilter, today: Optional[date] = None) -> bool:
    """
    Return True when a task satisfies every set field of the filter.

    Parameters
    ----------
    task : Task
        Task to test.
    task_filter : TaskFilter
        Filter; unset fields always match.
    today : Optional[date], optional
        Reference date for overdue checks (default: ``date.today()``).

    Returns
    -------
    bool
        True when status, priority, category and overdue checks all pass.
    """
    if task_filter.status is not None and task.status is not task_filter.status:
        return False
    if task_filter.priority is not None and task.priority is not task_filter.priority:
        return False
    if task_filter.category is not None and task.category != task_filter.category:
        return False
    return matches_overdue(task, task_filter.overdue, today)


def filter_tasks(
    tasks: Iterable[Task],
    task_filter: TaskFilter,
    today: Optional[date] = None,
) -> List[Task]:
    return [task for task in tasks if matches(task, task_filter, today)]


def _sort_value(task: Task, by: SortBy):
    if by is SortBy.ID:
        return task.id
    if by is SortBy.PRIORITY:
        return int(task.priority) if task.priority is not None else None
    if by is SortBy.DUE_DATE:
        return task.due_date
    if by is SortBy.CATEGORY:
        return task.category
    return 1 if task.completed else 0


def sort_tasks(
    tasks: Iterable[Task],
    by: SortBy = SortBy.ID,
    order: SortOrder = SortOrder.ASCENDING,
) -> List[Task]:
    """
    Order tasks by one key.

    Tasks missing the key (no priority, due date, or category) always come
    last; a descending order only reverses the tasks that have a value. Ties
    keep their input order.

    Parameters
    ----------
    tasks : Iterable[Task]
        Tasks to order.
    by : SortBy, optional
        Sort key (default: id).
    order : SortOrder, optional
        Direction (default: ascending).

    Returns
    -------
    List[Task]
        Sorted tasks.

    Examples
    --------
    >>> tasks = [
    ...     Task(1, "a", priority=Priority.LOW),
    ...     Task(2, "b"),
    ...     Task(3, "c", priority=Priority.HIGH),
    ... ]
    >>> [task.id for task in sort_tasks(tasks, SortBy.PRIORITY)]
    [3, 1, 2]
    >>> [task.id for task in sort_tasks(tasks, SortBy.PRIORITY, SortOrder.DESCENDING)]
    [1, 3, 2]
    """
    present = []
    missing = []
    for task in tasks:
        if _sort_value(task, by) is None:
            missing.append(task)
        else:
            present.append(task)
    present.sort(
        key=lambda task: _sort_value(task, by),
        reverse=order is SortOrder.DESCENDING,
    )
    return present + missing


@dataclass(frozen=True)
class ListQuery:
    """
    Parsed arguments of the ``list`` command.

    Attributes
    ----------
    task_filter : Optional[TaskFilter]
        Filter to apply, or None for no filtering.
    sort_by : SortBy
        Sort key.
    sort_order : SortOrder
        Sort direction.
    """

    task_filter: Optional[TaskFilter] = None
    sort_by: SortBy = SortBy.ID
    sort_order: SortOrder = SortOrder.ASCENDING

    @property
    def is_default(self) -> bool:
        return (
            self.task_filter is None
            and self.sort_by is SortBy.ID
            and self.sort_order is SortOrder.ASCENDING
        )


def _filter_error(actual: str) -> InvalidFormatError:
    return InvalidFormatError("filter", LIST_FILTER_HELP, actual)


def parse_list_arguments(args: Sequence[str]) -> ListQuery:
    """
    Parse ``list`` arguments into a filter and sort order.

    Parameters
    ----------
    args : Sequence[str]
        Whitespace-separated tokens after the verb.

    Returns
    -------
    ListQuery
        Parsed query.

    Raises
    ------
    InvalidFormatError
        For unknown tokens or repeated filters of the same kind.
    EmptyInputError
        For an empty ``category:`` value.

    Examples
    --------
    >>> query = parse_list_arguments(["todo", "high", "sort:due", "desc"])
    >>> query.task_filter.status, query.task_filter.priority
    (<TaskStatus.PENDING: 'pending'>, <Priority.HIGH: 1>)
    >>> query.sort_by, query.sort_order
    (<SortBy.DUE_DATE: 'due'>, <SortOrder.DESCENDING: 'desc'>)
    >>> parse_list_arguments([]).is_default
    True
    """
    task_filter = TaskFilter()
    status_set = priority_set = category_set = overdue_set = False
    sort_by = SortBy.ID
    sort_order = SortOrder.ASCENDING

    for arg in args:
        lower = arg.lower()
        if lower.startswith("category:") or lower.startswith("cat:"):
            if category_set:
                raise _filter_error(f"multiple category filters ('{arg}')")
            category = arg.split(":", 1)[1].strip()
            if not category:
                raise EmptyInputError("Category name")
            task_filter = replace(task_filter, category=category)
            category_set = True
            continue
        if lower.startswith("sort:"):
            parsed = SortBy.parse(lower[len("sort:"):])
            if parsed is None:
                raise InvalidFormatError(
                    "sort key", "id, priority, due, category, status", arg
                )
            sort_by = parsed
            continue
        if lower in ("asc", "ascending"):
            sort_order = SortOrder.ASCENDING
            continue
        if lower in ("desc", "descending"):
            sort_order = SortOrder.DESCENDING
            continue
        if lower in ("done", "completed", "todo", "pending"):
            if status_set:
                raise _filter_error(f"multiple status filters ('{arg}')")
            status = TaskStatus.COMPLETED if lower in ("done", "completed") else TaskStatus.PENDING
            task_filter = replace(task_filter, status=status)
            status_set = True
            continue
        if lower in ("overdue", "not-overdue"):
            if overdue_set:
                raise _filter_error(f"multiple overdue filters ('{arg}')")
            mode = OverdueFilter.ONLY_OVERDUE if lower == "overdue" else OverdueFilter.ONLY_NOT_OVERDUE
            task_filter = replace(task_filter, overdue=mode)
            overdue_set = True
            continue
        priority = Priority.parse(lower)
        if priority is not None:
            if priority_set:
                raise _filter_error(f"multiple priority filters ('{arg}')")
            task_filter = replace(task_filter, priority=priority)
            priority_set = True
            continue
        raise _filter_error(arg)

    return ListQuery(
        task_filter=None if task_filter.is_empty() else task_filter,
        sort_by=sort_by,
        sort_order=sort_order,
    )


def run_query(
    tasks: Iterable[Task],
    query: ListQuery,
    today: Optional[date] = None,
) -> List[Task]:
    selected = list(tasks)
    if query.task_filter is not None:
        selected = filter_tasks(selected, query.task_filter, today)
    return sort_tasks(selected, query.sort_by, query.sort_order)
