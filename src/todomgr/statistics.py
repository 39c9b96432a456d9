"""
Aggregate counts over a task set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from .models import Priority, Task


@dataclass(frozen=True)
class TaskStatistics:
    total: int
    completed: int
    pending: int
    completion_percentage: float
    high_priority: int
    medium_priority: int
    low_priority: int


def compute_statistics(tasks: Iterable[Task]) -> TaskStatistics:
    """
    Compute statistics from the current task set.

    Parameters
    ----------
    tasks : Iterable[Task]
        Tasks to aggregate.

    Returns
    -------
    TaskStatistics
        Fresh counts; tasks without a priority are not counted per priority.

    Examples
    --------
    >>> compute_statistics([]).completion_percentage
    0.0
    >>> stats = compute_statistics([Task(1, "a", completed=True), Task(2, "b")])
    >>> stats.completed, stats.pending, stats.completion_percentage
    (1, 1, 50.0)
    """
    total = completed = high = medium = low = 0
    for task in tasks:
        total += 1
        if task.completed:
            completed += 1
        if task.priority is Priority.HIGH:
            high += 1
        elif task.priority is Priority.MEDIUM:
            medium += 1
        elif task.priority is Priority.LOW:
            low += 1
    percentage = 100.0 * completed / total if total > 0 else 0.0
    return TaskStatistics(
        total=total,
        completed=completed,
        pending=total - completed,
        completion_percentage=percentage,
        high_priority=high,
        medium_priority=medium,
        low_priority=low,
    )


def format_statistics(stats: TaskStatistics) -> List[str]:
    """
    Render statistics as display lines.

    Examples
    --------
    >>> format_statistics(compute_statistics([]))[0]
    'Total tasks: 0'
    """
    return [
        f"Total tasks: {stats.total}",
        f"Completed: {stats.completed}",
        f"Pending: {stats.pending}",
        f"Completion: {stats.completion_percentage:.1f}%",
        f"High priority: {stats.high_priority}",
        f"Medium priority: {stats.medium_priority}",
        f"Low priority: {stats.low_priority}",
    ]
