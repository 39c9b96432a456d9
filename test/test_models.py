"""
Tests for the task model and its enumerations.
"""

import doctest
from datetime import date

import pytest

import todomgr.models as models
from todomgr.models import Priority, Recurrence, SortBy, Task, TaskFilter, TaskStatus


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("high", Priority.HIGH),
        ("H", Priority.HIGH),
        (" med ", Priority.MEDIUM),
        ("m", Priority.MEDIUM),
        ("low", Priority.LOW),
        ("l", Priority.LOW),
        ("urgent", None),
        ("", None),
    ],
)
@pytest.mark.unit
def test_priority_parse(raw, expected):
    """
    Verify priority words and abbreviations parse.

    Parameters
    ----------
    raw : str
        User input.
    expected : Priority | None
        Expected priority.

    Returns
    -------
    None
        This test asserts priority parsing.
    """
    assert Priority.parse(raw) is expected


@pytest.mark.unit
def test_priority_orders_high_first():
    """
    Ensure the priority enum sorts by urgency.

    Returns
    -------
    None
        This test asserts priority ordering.
    """
    assert sorted([Priority.LOW, Priority.HIGH, Priority.MEDIUM]) == [
        Priority.HIGH,
        Priority.MEDIUM,
        Priority.LOW,
    ]
    assert Priority.MEDIUM.label == "Medium"


@pytest.mark.parametrize(
    ("pattern", "base", "expected"),
    [
        (Recurrence.DAILY, date(2024, 12, 31), date(2025, 1, 1)),
        (Recurrence.WEEKLY, date(2024, 2, 26), date(2024, 3, 4)),
        (Recurrence.MONTHLY, date(2024, 1, 31), date(2024, 2, 29)),
        (Recurrence.MONTHLY, date(2023, 1, 31), date(2023, 2, 28)),
        (Recurrence.MONTHLY, date(2024, 12, 10), date(2025, 1, 10)),
    ],
)
@pytest.mark.unit
def test_recurrence_next_due_date(pattern, base, expected):
    """
    Verify next occurrence dates, including month-end clamping.

    Parameters
    ----------
    pattern : Recurrence
        Recurrence pattern.
    base : date
        Current due date.
    expected : date
        Expected next due date.

    Returns
    -------
    None
        This test asserts recurrence arithmetic.
    """
    assert pattern.next_due_date(base) == expected


@pytest.mark.unit
def test_task_overdue_excludes_today_and_completed():
    """
    Ensure only pending tasks due strictly before today are overdue.

    Returns
    -------
    None
        This test asserts overdue detection.
    """
    today = date(2024, 5, 15)
    assert Task(1, "a", due_date=date(2024, 5, 14)).is_overdue(today)
    assert not Task(2, "b", due_date=today).is_overdue(today)
    assert not Task(3, "c").is_overdue(today)
    assert not Task(4, "d", completed=True, due_date=date(2024, 1, 1)).is_overdue(today)


@pytest.mark.unit
def test_task_dict_round_trip_keeps_fields():
    """
    Ensure stored tasks restore every field.

    Returns
    -------
    None
        This test asserts task serialization.
    """
    task = Task(
        7,
        "Renew passport",
        completed=True,
        priority=Priority.LOW,
        due_date=date(2024, 6, 1),
        category="admin",
        recurrence=Recurrence.MONTHLY,
        parent_id=3,
        dependency_ids={2, 5},
    )

    data = task.to_dict()

    assert data["priority"] == "low"
    assert data["due_date"] == "2024-06-01"
    assert data["dependency_ids"] == [2, 5]
    assert Task.from_dict(data) == task


@pytest.mark.unit
def test_task_from_dict_rejects_missing_fields():
    """
    Ensure malformed task payloads raise ValueError.

    Returns
    -------
    None
        This test asserts payload validation.
    """
    with pytest.raises(ValueError):
        Task.from_dict({"description": "no id"})
    with pytest.raises(ValueError):
        Task.from_dict({"id": 1, "description": "bad date", "due_date": "someday"})


@pytest.mark.unit
def test_task_properties():
    """
    Verify derived status and flags.

    Returns
    -------
    None
        This test asserts task properties.
    """
    task = Task(2, "Sub", parent_id=1, recurrence=Recurrence.DAILY)
    assert task.status is TaskStatus.PENDING
    assert task.is_subtask
    assert task.is_recurring
    task.completed = True
    assert task.status is TaskStatus.COMPLETED


@pytest.mark.unit
def test_task_filter_is_empty():
    """
    Ensure only the default filter reports empty.

    Returns
    -------
    None
        This test asserts filter emptiness.
    """
    assert TaskFilter().is_empty()
    assert not TaskFilter(category="work").is_empty()


@pytest.mark.unit
def test_sort_by_aliases():
    """
    Ensure sort key aliases resolve.

    Returns
    -------
    None
        This test asserts sort key parsing.
    """
    assert SortBy.parse("Due") is SortBy.DUE_DATE
    assert SortBy.parse("cat") is SortBy.CATEGORY
    assert SortBy.parse("size") is None


@pytest.mark.unit
def test_models_doctest_examples():
    """
    Run doctest examples embedded in model helpers.

    Returns
    -------
    None
        This test asserts doctest coverage for models.
    """
    results = doctest.testmod(models)
    assert results.failed == 0
