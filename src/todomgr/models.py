"""
Task data model and the small enumerations used by filters and sorting.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Set


class Priority(IntEnum):
    """
    Task priority; lower values are more urgent.
    """

    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: str) -> Optional["Priority"]:
        """
        Parse a priority word or abbreviation.

        Parameters
        ----------
        value : str
            Raw user input.

        Returns
        -------
        Optional[Priority]
            Matching priority, or None when the input is not a priority.

        Examples
        --------
        >>> Priority.parse("H")
        <Priority.HIGH: 1>
        >>> Priority.parse("med")
        <Priority.MEDIUM: 2>
        >>> Priority.parse("urgent") is None
        True
        """
        return PRIORITY_ALIASES.get(value.strip().lower())


PRIORITY_ALIASES = {
    "high": Priority.HIGH,
    "h": Priority.HIGH,
    "medium": Priority.MEDIUM,
    "med": Priority.MEDIUM,
    "m": Priority.MEDIUM,
    "low": Priority.LOW,
    "l": Priority.LOW,
}


def add_months(value: date, months: int) -> date:
    """
    Add calendar months, clamping the day to the end of the target month.

    Examples
    --------
    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    >>> add_months(date(2024, 12, 15), 1)
    datetime.date(2025, 1, 15)
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class Recurrence(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: str) -> Optional["Recurrence"]:
        """
        Parse a recurrence pattern.

        Examples
        --------
        >>> Recurrence.parse("W")
        <Recurrence.WEEKLY: 'weekly'>
        >>> Recurrence.parse("yearly") is None
        True
        """
        return RECURRENCE_ALIASES.get(value.strip().lower())

    def next_due_date(self, base: date) -> date:
        """
        Return the due date of the next occurrence.

        Examples
        --------
        >>> Recurrence.DAILY.next_due_date(date(2024, 2, 28))
        datetime.date(2024, 2, 29)
        >>> Recurrence.WEEKLY.next_due_date(date(2024, 2, 28))
        datetime.date(2024, 3, 6)
        >>> Recurrence.MONTHLY.next_due_date(date(2024, 3, 31))
        datetime.date(2024, 4, 30)
        """
        if self is Recurrence.DAILY:
            return base + timedelta(days=1)
        if self is Recurrence.WEEKLY:
            return base + timedelta(days=7)
        return add_months(base, 1)


RECURRENCE_ALIASES = {
    "daily": Recurrence.DAILY,
    "d": Recurrence.DAILY,
    "weekly": Recurrence.WEEKLY,
    "w": Recurrence.WEEKLY,
    "monthly": Recurrence.MONTHLY,
    "m": Recurrence.MONTHLY,
}


class TaskStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class OverdueFilter(Enum):
    ALL = "all"
    ONLY_OVERDUE = "overdue"
    ONLY_NOT_OVERDUE = "not-overdue"


class SortBy(Enum):
    ID = "id"
    PRIORITY = "priority"
    DUE_DATE = "due"
    CATEGORY = "category"
    STATUS = "status"

    @classmethod
    def parse(cls, value: str) -> Optional["SortBy"]:
        """
        Parse a sort key.

        Examples
        --------
        >>> SortBy.parse("pri")
        <SortBy.PRIORITY: 'priority'>
        >>> SortBy.parse("due-date")
        <SortBy.DUE_DATE: 'due'>
        """
        return SORT_BY_ALIASES.get(value.strip().lower())


SORT_BY_ALIASES = {
    "id": SortBy.ID,
    "priority": SortBy.PRIORITY,
    "pri": SortBy.PRIORITY,
    "due": SortBy.DUE_DATE,
    "due-date": SortBy.DUE_DATE,
    "duedate": SortBy.DUE_DATE,
    "category": SortBy.CATEGORY,
    "cat": SortBy.CATEGORY,
    "status": SortBy.STATUS,
}


class SortOrder(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


@dataclass
class Task:
    """
    A single trackable unit of work.

    Attributes
    ----------
    id : int
        Identifier, unique within one repository and never reused.
    description : str
        Non-empty description.
    completed : bool
        Completion state.
    priority : Optional[Priority]
        Priority, if set.
    due_date : Optional[date]
        Due date, if set.
    category : Optional[str]
        Category label, if set.
    recurrence : Optional[Recurrence]
        Recurrence pattern, if set.
    parent_id : Optional[int]
        Parent task id for subtasks.
    dependency_ids : Set[int]
        Ids of tasks this task depends on.
    """

    id: int
    description: str
    completed: bool = False
    priority: Optional[Priority] = None
    due_date: Optional[date] = None
    category: Optional[str] = None
    recurrence: Optional[Recurrence] = None
    parent_id: Optional[int] = None
    dependency_ids: Set[int] = field(default_factory=set)

    @property
    def status(self) -> TaskStatus:
        return TaskStatus.COMPLETED if self.completed else TaskStatus.PENDING

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    @property
    def is_subtask(self) -> bool:
        return self.parent_id is not None

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """
        Return True when the task is pending and its due date has passed.

        A task due today is not overdue.

        Examples
        --------
        >>> task = Task(1, "Pay rent", due_date=date(2024, 5, 1))
        >>> task.is_overdue(date(2024, 5, 2))
        True
        >>> task.is_overdue(date(2024, 5, 1))
        False
        >>> task.completed = True
        >>> task.is_overdue(date(2024, 5, 2))
        False
        """
        if self.completed or self.due_date is None:
            return False
        return self.due_date < (today or date.today())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.name.lower() if self.priority else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "category": self.category,
            "recurrence": self.recurrence.value if self.recurrence else None,
            "parent_id": self.parent_id,
            "dependency_ids": sorted(self.dependency_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """
        Build a task from its stored representation.

        Raises
        ------
        ValueError
            If required fields are missing or malformed.
        """
        try:
            task_id = int(data["id"])
            description = str(data["description"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"invalid task payload: {data!r}") from exc

        priority = data.get("priority")
        due_date = data.get("due_date")
        recurrence = data.get("recurrence")
        parent_id = data.get("parent_id")
        return cls(
            id=task_id,
            description=description,
            completed=bool(data.get("completed", False)),
            priority=Priority.parse(str(priority)) if priority else None,
            due_date=date.fromisoformat(due_date) if due_date else None,
            category=data.get("category") or None,
            recurrence=Recurrence.parse(str(recurrence)) if recurrence else None,
            parent_id=int(parent_id) if parent_id is not None else None,
            dependency_ids={int(dep) for dep in data.get("dependency_ids") or []},
        )


@dataclass(frozen=True)
class TaskFilter:
    """
    Conjunctive filter over tasks; unset fields match everything.
    """

    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    overdue: OverdueFilter = OverdueFilter.ALL
    category: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.status is None
            and self.priority is None
            and self.overdue is OverdueFilter.ALL
            and self.category is None
        )
